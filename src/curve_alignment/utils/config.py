"""
Configuration management for curve-alignment.

Provides a typed pydantic model and YAML loader with sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Literal, Any, Dict

from pydantic import BaseModel, Field, ValidationError
import yaml


# -----------------------
# Typed config structures
# -----------------------


class SamplingConfig(BaseModel):
    source_spacing: float = Field(default=10.0, gt=0, description="Arc-length spacing of source samples")
    target_spacing: float = Field(default=10.0, gt=0, description="Arc-length spacing of target samples")


class AlignmentConfig(BaseModel):
    max_iterations: int = Field(
        default=20,
        ge=0,
        description="Number of ICP updates per run (no early exit)",
    )


class PlaybackConfig(BaseModel):
    frame_delay_ms: Optional[int] = Field(
        default=None,
        gt=0,
        description="Fixed delay between animation frames; null uses the error-adaptive delay",
    )
    default_delay_ms: int = Field(default=300, gt=0, description="Delay used when no error change is available")
    base_delay_ms: int = Field(default=800, gt=0, description="Upper bound of the error-adaptive delay")
    min_delay_ms: int = Field(default=100, gt=0, description="Lower bound of the error-adaptive delay")


class VisualizationConfig(BaseModel):
    show_correspondences: bool = Field(default=False)
    source_color: str = Field(default="#3b82f6")
    target_color: str = Field(default="#ef4444")


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    file: Optional[str] = Field(default=None)


class AppConfig(BaseModel):
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    alignment: AlignmentConfig = Field(default_factory=AlignmentConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    visualization: VisualizationConfig = Field(default_factory=VisualizationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# -----------------------
# Loader
# -----------------------


def _project_root() -> Path:
    """
    Resolve the repository root directory.

    File is at: repo_root/src/curve_alignment/utils/config.py
    parents sequence:
      0 -> .../src/curve_alignment/utils
      1 -> .../src/curve_alignment
      2 -> .../src
      3 -> repo_root
    """
    return Path(__file__).resolve().parents[3]


def load_config(path: Optional[str | Path] = None, *, allow_missing: bool = True) -> AppConfig:
    """
    Load configuration from YAML into a typed AppConfig.

    Search order when path is None:
    1) repo_root/config/default.yaml
    2) if missing and allow_missing=True: return default AppConfig()

    Args:
        path: Explicit YAML file path.
        allow_missing: If True, returns defaults when file missing; otherwise raises.

    Returns:
        AppConfig instance
    """
    cfg_path: Path
    if path is None:
        cfg_path = _project_root() / "config" / "default.yaml"
    else:
        cfg_path = Path(path)

    if not cfg_path.exists():
        if allow_missing:
            return AppConfig()
        raise FileNotFoundError(f"Config file not found: {cfg_path}")

    with cfg_path.open("r", encoding="utf-8") as f:
        raw: Dict[str, Any] = yaml.safe_load(f) or {}

    try:
        return AppConfig.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {cfg_path}: {e}") from e
