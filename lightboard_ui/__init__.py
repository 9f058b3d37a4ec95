"""First-party canvas object contracts for Lightboard."""

from .component_schema import STANDARD_FIELDS, BoundingBox, VectorObject
from .objects import (
    DEFAULT_LIGHT_SVG_PATH,
    LIGHT_TYPE,
    OFF_FILL,
    ON_FILL,
    Group,
    LightNode,
    LightOption,
    ObjectRegistry,
    register_light,
    to_object,
)

__all__ = [
    "BoundingBox",
    "DEFAULT_LIGHT_SVG_PATH",
    "Group",
    "LIGHT_TYPE",
    "LightNode",
    "LightOption",
    "OFF_FILL",
    "ON_FILL",
    "ObjectRegistry",
    "STANDARD_FIELDS",
    "VectorObject",
    "register_light",
    "to_object",
]
