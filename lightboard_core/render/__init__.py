"""SVG primitives, parsing and torch rasterization."""

from .rasterizer import CanvasRasterizer, save_png
from .svg import (
    SvgCircle,
    SvgEllipse,
    SvgGroup,
    SvgLine,
    SvgParseError,
    SvgPath,
    SvgPolygon,
    SvgPolyline,
    SvgRect,
    SvgShape,
    group_svg_elements,
    load_svg_from_string,
    load_svg_from_url,
    parse_color,
    parse_svg_markup,
)

__all__ = [
    "CanvasRasterizer",
    "SvgCircle",
    "SvgEllipse",
    "SvgGroup",
    "SvgLine",
    "SvgParseError",
    "SvgPath",
    "SvgPolygon",
    "SvgPolyline",
    "SvgRect",
    "SvgShape",
    "group_svg_elements",
    "load_svg_from_string",
    "load_svg_from_url",
    "parse_color",
    "parse_svg_markup",
    "save_png",
]
