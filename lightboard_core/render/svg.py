from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from dataclasses import asdict, dataclass, field
import logging
from pathlib import Path
import re
from typing import Any, ClassVar, Literal, Mapping, Optional
from urllib.parse import urlparse
from urllib.request import Request, urlopen
import xml.etree.ElementTree as ET

from PIL import ImageColor
from svgpathtools import Line, parse_path
from svgpathtools import Path as SegmentPath


LOGGER = logging.getLogger(__name__)

Color = tuple[int, int, int, int]
Point = tuple[float, float]
Bounds = tuple[float, float, float, float]
OriginX = Literal["left", "center", "right"]
OriginY = Literal["top", "center", "bottom"]
ParseOptions = dict[str, Any]

CURVE_SEGMENTS = 12
RESOURCE_FETCH_TIMEOUT_S = 10.0


class SvgParseError(ValueError):
    """Raised when SVG markup cannot be turned into drawable primitives."""


@dataclass
class SvgShape(ABC):
    """Mutable drawable primitive produced by the parser.

    Geometry stays in SVG user units; the owning group maps it onto the canvas.
    """

    type: ClassVar[str] = "shape"

    fill: Optional[str] = "black"
    stroke: Optional[str] = None
    stroke_width: float = 1.0
    opacity: float = 1.0
    origin_x: OriginX = "left"
    origin_y: OriginY = "top"

    def set(self, key: str | Mapping[str, Any], value: Any = None) -> "SvgShape":
        updates = dict(key) if isinstance(key, Mapping) else {key: value}
        for name, item in updates.items():
            if name == "type" or name.startswith("_") or not hasattr(self, name):
                continue
            setattr(self, name, item)
        return self

    @abstractmethod
    def bounds(self) -> Bounds:
        ...

    def center(self) -> Point:
        min_x, min_y, max_x, max_y = self.bounds()
        return ((min_x + max_x) / 2.0, (min_y + max_y) / 2.0)

    def to_object(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type
        return data


@dataclass
class SvgRect(SvgShape):
    type: ClassVar[str] = "rect"

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def bounds(self) -> Bounds:
        return (self.x, self.y, self.x + self.width, self.y + self.height)


@dataclass
class SvgCircle(SvgShape):
    type: ClassVar[str] = "circle"

    cx: float = 0.0
    cy: float = 0.0
    r: float = 0.0

    def bounds(self) -> Bounds:
        return (self.cx - self.r, self.cy - self.r, self.cx + self.r, self.cy + self.r)


@dataclass
class SvgEllipse(SvgShape):
    type: ClassVar[str] = "ellipse"

    cx: float = 0.0
    cy: float = 0.0
    rx: float = 0.0
    ry: float = 0.0

    def bounds(self) -> Bounds:
        return (self.cx - self.rx, self.cy - self.ry, self.cx + self.rx, self.cy + self.ry)


@dataclass
class SvgLine(SvgShape):
    type: ClassVar[str] = "line"

    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0

    def bounds(self) -> Bounds:
        return (min(self.x1, self.x2), min(self.y1, self.y2), max(self.x1, self.x2), max(self.y1, self.y2))


@dataclass
class SvgPolygon(SvgShape):
    type: ClassVar[str] = "polygon"

    points: list[Point] = field(default_factory=list)

    def bounds(self) -> Bounds:
        return _points_bounds(self.points)


@dataclass
class SvgPolyline(SvgPolygon):
    type: ClassVar[str] = "polyline"


@dataclass
class SvgPath(SvgShape):
    """Path with curves and arcs sampled into polylines, one entry per subpath.

    Bounds come from the exact segment geometry of `d` when it is set.
    """

    type: ClassVar[str] = "path"

    d: str = ""
    subpaths: list[tuple[list[Point], bool]] = field(default_factory=list)

    def bounds(self) -> Bounds:
        if self.d.strip():
            geometry = _parse_path_geometry(self.d)
            if len(geometry) > 0:
                min_x, max_x, min_y, max_y = geometry.bbox()
                return (min_x, min_y, max_x, max_y)
        return _points_bounds([pt for points, _ in self.subpaths for pt in points])


@dataclass
class SvgGroup:
    """Multi-primitive parse result; exposes its members through `get_objects`."""

    objects: list[SvgShape] = field(default_factory=list)
    options: ParseOptions = field(default_factory=dict)

    def get_objects(self) -> list[SvgShape]:
        return list(self.objects)


def parse_svg_markup(markup: Optional[str]) -> tuple[list[SvgShape], ParseOptions]:
    """Parse SVG text into top-level drawable primitives plus root options."""

    if not markup or not markup.strip():
        raise SvgParseError("svg markup must be non-empty")
    try:
        root = ET.fromstring(markup)
    except ET.ParseError as exc:
        raise SvgParseError(f"malformed svg markup: {exc}") from exc
    root_tag = _strip_namespace(root.tag)
    if root_tag != "svg":
        raise SvgParseError(f"expected <svg> root element, got <{root_tag}>")
    shapes: list[SvgShape] = []
    _collect_shapes(root, _element_style(root, {}), shapes)
    return shapes, _parse_root_options(root)


async def load_svg_from_string(markup: Optional[str]) -> tuple[list[SvgShape], ParseOptions]:
    return parse_svg_markup(markup)


async def load_svg_from_url(
    url: str,
    *,
    resource_root: str | Path | None = None,
) -> tuple[list[SvgShape], ParseOptions]:
    """Fetch an SVG resource (http(s)/file URL or filesystem path) and parse it.

    Relative paths resolve against `resource_root`, defaulting to the working
    directory. The blocking read runs in a worker thread.
    """

    root = Path(resource_root) if resource_root is not None else None
    markup = await asyncio.to_thread(_read_resource, url, root)
    LOGGER.debug("fetched svg resource %s (%d bytes)", url, len(markup))
    return parse_svg_markup(markup)


def group_svg_elements(elements: list[SvgShape], options: ParseOptions | None = None) -> SvgGroup | SvgShape:
    if len(elements) == 1:
        return elements[0]
    return SvgGroup(objects=list(elements), options=dict(options or {}))


def parse_color(value: Any) -> Optional[Color]:
    """Resolve hex, rgb()/hsl() and named colors; unknown values yield None."""

    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value.lower() in ("none", "transparent"):
        return None
    try:
        rgb = ImageColor.getrgb(value)
    except ValueError:
        LOGGER.debug("unresolvable color %r", value)
        return None
    if len(rgb) == 3:
        return (rgb[0], rgb[1], rgb[2], 255)
    return (rgb[0], rgb[1], rgb[2], rgb[3])


def _read_resource(url: str, resource_root: Optional[Path]) -> str:
    if urlparse(url).scheme in ("http", "https", "file"):
        request = Request(url, headers={"User-Agent": "lightboard"})
        with urlopen(request, timeout=RESOURCE_FETCH_TIMEOUT_S) as response:
            return response.read().decode("utf-8")
    path = Path(url)
    if not path.is_absolute():
        path = (resource_root or Path.cwd()) / path
    path = path.resolve()
    if not path.exists():
        raise FileNotFoundError(f"svg resource not found: {path}")
    return path.read_text(encoding="utf-8")


_INHERITED_STYLE = ("fill", "stroke", "stroke-width")
_SKIPPED_TAGS = {"defs", "clipPath", "mask", "symbol", "title", "desc", "style", "metadata", "marker", "pattern"}
_CONTAINER_TAGS = {"g", "a", "switch"}


def _collect_shapes(parent: ET.Element, inherited: dict[str, str], out: list[SvgShape]) -> None:
    for elem in parent:
        if not isinstance(elem.tag, str):
            continue
        tag = _strip_namespace(elem.tag)
        if tag in _SKIPPED_TAGS:
            continue
        style = _element_style(elem, inherited)
        if tag in _CONTAINER_TAGS:
            _collect_shapes(elem, style, out)
            continue
        builder = _SHAPE_BUILDERS.get(tag)
        if builder is None:
            continue
        shape = builder(elem)
        if shape is None:
            continue
        _apply_style(shape, style)
        out.append(shape)


def _element_style(elem: ET.Element, inherited: dict[str, str]) -> dict[str, str]:
    style = {name: value for name, value in inherited.items() if name in _INHERITED_STYLE}
    for name in (*_INHERITED_STYLE, "opacity"):
        if name in elem.attrib:
            style[name] = elem.attrib[name].strip()
    for decl in elem.attrib.get("style", "").split(";"):
        if ":" not in decl:
            continue
        name, value = decl.split(":", 1)
        name = name.strip()
        if name in _INHERITED_STYLE or name == "opacity":
            style[name] = value.strip()
    return style


def _apply_style(shape: SvgShape, style: dict[str, str]) -> None:
    fill = style.get("fill", "black")
    shape.fill = None if fill == "none" else fill
    stroke = style.get("stroke")
    shape.stroke = None if stroke in (None, "none") else stroke
    stroke_width = _parse_length(style.get("stroke-width"))
    shape.stroke_width = 1.0 if stroke_width is None else stroke_width
    opacity = _parse_length(style.get("opacity"))
    shape.opacity = 1.0 if opacity is None else max(0.0, min(1.0, opacity))
    if isinstance(shape, (SvgLine, SvgPolyline)) and "fill" not in style:
        shape.fill = None


def _parse_root_options(root: ET.Element) -> ParseOptions:
    width = _parse_length(root.attrib.get("width"))
    height = _parse_length(root.attrib.get("height"))
    viewbox = _parse_viewbox(root.attrib.get("viewBox"))
    if viewbox is None:
        vb = (0.0, 0.0, width or 100.0, height or 100.0)
    else:
        vb = viewbox
    if width is None:
        width = vb[2]
    if height is None:
        height = vb[3]
    return {"width": width, "height": height, "viewbox": vb}


def _strip_namespace(tag: str) -> str:
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _parse_length(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    value = value.strip()
    if value.endswith("px"):
        value = value[:-2]
    try:
        return float(value)
    except ValueError:
        return None


def _parse_viewbox(value: Optional[str]) -> Optional[tuple[float, float, float, float]]:
    if not value:
        return None
    parts = value.replace(",", " ").split()
    if len(parts) != 4:
        return None
    try:
        return tuple(float(p) for p in parts)  # type: ignore[return-value]
    except ValueError:
        return None


def _parse_rect(elem: ET.Element) -> SvgRect:
    return SvgRect(
        x=_parse_length(elem.attrib.get("x")) or 0.0,
        y=_parse_length(elem.attrib.get("y")) or 0.0,
        width=_parse_length(elem.attrib.get("width")) or 0.0,
        height=_parse_length(elem.attrib.get("height")) or 0.0,
    )


def _parse_circle(elem: ET.Element) -> SvgCircle:
    return SvgCircle(
        cx=_parse_length(elem.attrib.get("cx")) or 0.0,
        cy=_parse_length(elem.attrib.get("cy")) or 0.0,
        r=_parse_length(elem.attrib.get("r")) or 0.0,
    )


def _parse_ellipse(elem: ET.Element) -> SvgEllipse:
    return SvgEllipse(
        cx=_parse_length(elem.attrib.get("cx")) or 0.0,
        cy=_parse_length(elem.attrib.get("cy")) or 0.0,
        rx=_parse_length(elem.attrib.get("rx")) or 0.0,
        ry=_parse_length(elem.attrib.get("ry")) or 0.0,
    )


def _parse_line(elem: ET.Element) -> Optional[SvgLine]:
    x1 = _parse_length(elem.attrib.get("x1"))
    y1 = _parse_length(elem.attrib.get("y1"))
    x2 = _parse_length(elem.attrib.get("x2"))
    y2 = _parse_length(elem.attrib.get("y2"))
    if x1 is None or y1 is None or x2 is None or y2 is None:
        return None
    return SvgLine(x1=x1, y1=y1, x2=x2, y2=y2)


def _parse_polygon(elem: ET.Element) -> Optional[SvgPolygon]:
    points = _parse_points(elem.attrib.get("points"))
    if not points:
        return None
    return SvgPolygon(points=points)


def _parse_polyline(elem: ET.Element) -> Optional[SvgPolyline]:
    points = _parse_points(elem.attrib.get("points"))
    if len(points) < 2:
        return None
    return SvgPolyline(points=points)


def _parse_path(elem: ET.Element) -> Optional[SvgPath]:
    d = elem.attrib.get("d", "")
    if not d.strip():
        return None
    subpaths = _flatten_path(_parse_path_geometry(d))
    if not subpaths:
        return None
    return SvgPath(d=d, subpaths=subpaths)


_SHAPE_BUILDERS = {
    "rect": _parse_rect,
    "circle": _parse_circle,
    "ellipse": _parse_ellipse,
    "line": _parse_line,
    "polygon": _parse_polygon,
    "polyline": _parse_polyline,
    "path": _parse_path,
}


def _parse_points(value: Optional[str]) -> list[Point]:
    if not value:
        return []
    parts = value.replace(",", " ").split()
    points: list[Point] = []
    it = iter(parts)
    for x_str, y_str in zip(it, it):
        try:
            points.append((float(x_str), float(y_str)))
        except ValueError:
            continue
    return points


_PATH_COMMAND = re.compile(r"([MmZzLlHhVvCcSsQqTtAa])")
_PATH_NUMBER = re.compile(r"[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?")
_ARC_FLAG = re.compile(r"[01]")
_ARGUMENT_SEPARATOR = re.compile(r"[\s,]*")


def _parse_path_geometry(d: str) -> SegmentPath:
    try:
        return parse_path(_separate_arc_flags(d))
    except (ValueError, IndexError) as exc:
        raise SvgParseError(f"malformed path data {d!r}: {exc}") from exc


def _separate_arc_flags(d: str) -> str:
    """Space out arc flags so `a10 10 0 0120 0` reads as flags 0, 1 then 20."""

    parts = _PATH_COMMAND.split(d)
    for index in range(1, len(parts) - 1, 2):
        if parts[index] in ("A", "a"):
            parts[index + 1] = " " + _split_arc_arguments(parts[index + 1]) + " "
    return "".join(parts)


def _split_arc_arguments(chunk: str) -> str:
    tokens: list[str] = []
    pos = 0
    slot = 0
    while True:
        pos = _ARGUMENT_SEPARATOR.match(chunk, pos).end()  # type: ignore[union-attr]
        if pos >= len(chunk):
            break
        pattern = _ARC_FLAG if slot in (3, 4) else _PATH_NUMBER
        match = pattern.match(chunk, pos)
        if match is None:
            raise SvgParseError(f"malformed arc arguments: {chunk!r}")
        tokens.append(match.group(0))
        pos = match.end()
        slot = (slot + 1) % 7
    return " ".join(tokens)


def _flatten_path(path: SegmentPath) -> list[tuple[list[Point], bool]]:
    """Sample each continuous subpath into a polyline; closed ones drop the repeated start."""

    subpaths: list[tuple[list[Point], bool]] = []
    for sub in path.continuous_subpaths():
        if len(sub) == 0:
            continue
        points: list[Point] = [(sub.start.real, sub.start.imag)]
        for seg in sub:
            if not isinstance(seg, Line):
                for step in range(1, CURVE_SEGMENTS):
                    pt = seg.point(step / CURVE_SEGMENTS)
                    points.append((pt.real, pt.imag))
            points.append((seg.end.real, seg.end.imag))
        closed = sub.isclosed()
        if closed and len(points) > 1:
            points.pop()
        subpaths.append((points, closed))
    return subpaths


def _points_bounds(points: list[Point]) -> Bounds:
    if not points:
        return (0.0, 0.0, 0.0, 0.0)
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return (min(xs), min(ys), max(xs), max(ys))
