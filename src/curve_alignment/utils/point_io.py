"""
Plain-text import/export of point lists.

The format is the one used for clipboard exchange by the drawing tool: an
``x<TAB>y`` header followed by one tab-separated point per line. Parsing is
lenient and also accepts comma-separated values.
"""

from __future__ import annotations

import math
import re
from pathlib import Path
from typing import List, Union

from .geometry import Point, PointsLike, as_points_array
from .logging import setup_logger

logger = setup_logger(__name__)

HEADER = "x\ty"

_HEADER_RE = re.compile(r"^\s*(x\s*\t\s*y|x\s*,\s*y)", re.IGNORECASE)
_FIELD_SPLIT_RE = re.compile(r"\s*[\t,]\s*")


def format_points(points: PointsLike) -> str:
    """Serialize points as a header line followed by ``x<TAB>y`` rows."""
    rows = [f"{x!r}\t{y!r}" for x, y in as_points_array(points).tolist()]
    return "\n".join([HEADER, *rows])


def parse_points(text: str) -> List[Point]:
    """
    Parse tab- or comma-separated point rows.

    Header lines and rows whose first two fields are not numbers are skipped.

    Args:
        text: Text as produced by ``format_points`` or a spreadsheet copy.

    Returns:
        List of parsed points, possibly empty.
    """
    points: List[Point] = []
    skipped = 0
    for line in text.strip().splitlines():
        if not line.strip() or _HEADER_RE.match(line):
            continue
        fields = _FIELD_SPLIT_RE.split(line.strip())
        if len(fields) < 2:
            skipped += 1
            continue
        try:
            x, y = float(fields[0]), float(fields[1])
        except ValueError:
            skipped += 1
            continue
        if not (math.isfinite(x) and math.isfinite(y)):
            skipped += 1
            continue
        points.append(Point(x, y))

    if skipped:
        logger.debug("Skipped %d unparsable point rows.", skipped)
    return points


def read_points_file(path: Union[str, Path]) -> List[Point]:
    """Read a point list written by ``write_points_file`` (or any compatible TSV/CSV)."""
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Point file not found: {file_path}")
    points = parse_points(file_path.read_text(encoding="utf-8"))
    logger.info("Loaded %d points from %s", len(points), file_path.name)
    return points


def write_points_file(path: Union[str, Path], points: PointsLike) -> Path:
    """Write points in the tab-separated format; parent directories are created."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(format_points(points) + "\n", encoding="utf-8")
    return file_path
