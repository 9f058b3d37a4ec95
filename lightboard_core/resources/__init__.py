from importlib import resources
from pathlib import Path

__all__ = ["default_resource_root"]


def default_resource_root() -> Path:
    """Return the directory holding the bundled SVG assets."""
    return Path(str(resources.files("lightboard_core.resources")))
