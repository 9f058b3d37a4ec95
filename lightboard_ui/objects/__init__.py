"""Canvas object types and their serialization contracts."""

from .group import Group
from .light import (
    DEFAULT_LIGHT_SVG_PATH,
    LIGHT_TYPE,
    OFF_FILL,
    ON_FILL,
    LightNode,
    LightOption,
    register_light,
)
from .registry import ObjectRegistry
from .serialization import to_object

__all__ = [
    "DEFAULT_LIGHT_SVG_PATH",
    "Group",
    "LIGHT_TYPE",
    "LightNode",
    "LightOption",
    "OFF_FILL",
    "ON_FILL",
    "ObjectRegistry",
    "register_light",
    "to_object",
]
