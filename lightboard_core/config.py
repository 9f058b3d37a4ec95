from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import tomllib
from typing import Any


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LightboardConfig:
    canvas_width: int = 640
    canvas_height: int = 360
    background: str = "#ffffff"
    resource_root: Path | None = None
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError("canvas width/height must be > 0")
        if not self.background.strip():
            raise ValueError("background must be non-empty")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(_LOG_LEVELS)}")

    def configure_logging(self) -> None:
        logging.basicConfig(
            level=getattr(logging, self.log_level),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def load_config(path: str | Path) -> LightboardConfig:
    """Load `lightboard.toml`; relative resource roots resolve against its folder."""

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config not found: {config_path}")
    with config_path.open("rb") as f:
        raw = tomllib.load(f)
    canvas = _coerce_table(raw.get("canvas", {}), "canvas")
    resources = _coerce_table(raw.get("resources", {}), "resources")
    logging_table = _coerce_table(raw.get("logging", {}), "logging")

    resource_root = _coerce_optional_str(resources.get("root"), "resources.root")
    root_path: Path | None = None
    if resource_root is not None:
        root_path = Path(resource_root)
        if not root_path.is_absolute():
            root_path = (config_path.parent / root_path).resolve()

    return LightboardConfig(
        canvas_width=_coerce_int(canvas.get("width", 640), "canvas.width"),
        canvas_height=_coerce_int(canvas.get("height", 360), "canvas.height"),
        background=str(canvas.get("background", "#ffffff")),
        resource_root=root_path,
        log_level=str(logging_table.get("level", "WARNING")).upper(),
    )


def _coerce_table(value: Any, field_name: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"`{field_name}` must be a table")
    return value


def _coerce_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"`{field_name}` must be an integer")
    return value


def _coerce_optional_str(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"`{field_name}` must be a non-empty string")
    return value
