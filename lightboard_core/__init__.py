"""Canvas host, SVG parsing and rasterization for Lightboard."""

from .canvas import CANVAS_FORMAT_VERSION, Canvas
from .config import LightboardConfig, load_config
from .render.rasterizer import CanvasRasterizer, save_png
from .render.svg import SvgParseError, group_svg_elements, load_svg_from_string, load_svg_from_url, parse_svg_markup

__all__ = [
    "CANVAS_FORMAT_VERSION",
    "Canvas",
    "CanvasRasterizer",
    "LightboardConfig",
    "SvgParseError",
    "group_svg_elements",
    "load_config",
    "load_svg_from_string",
    "load_svg_from_url",
    "parse_svg_markup",
    "save_png",
]
