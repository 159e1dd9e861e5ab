"""Errors raised by the curve alignment core."""


class InsufficientInputError(ValueError):
    """A curve has too few raw points to be aligned.

    The run is rejected before any sampling takes place, so no partial
    state history exists.
    """

    def __init__(self, role: str, n_points: int, minimum: int = 2):
        self.role = role
        self.n_points = n_points
        self.minimum = minimum
        super().__init__(
            f"{role} curve needs at least {minimum} points to align, got {n_points}"
        )


class DegenerateError(ArithmeticError):
    """The error metric produced a non-finite value during a run.

    The driver always pairs each source point with exactly one target, so
    this signals an internal inconsistency rather than bad input.
    """
