from __future__ import annotations

from dataclasses import dataclass
import math
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol

import numpy as np
import torch
from PIL import Image, ImageDraw

from .svg import (
    Color,
    Point,
    SvgCircle,
    SvgEllipse,
    SvgLine,
    SvgPath,
    SvgPolygon,
    SvgPolyline,
    SvgRect,
    SvgShape,
    parse_color,
)


DEFAULT_BACKGROUND: Color = (255, 255, 255, 255)


class Drawable(Protocol):
    visible: bool
    opacity: float

    def get_objects(self) -> list[SvgShape]:
        ...

    def view_scale(self) -> tuple[float, float]:
        ...

    def to_canvas_point(self, x: float, y: float) -> Point:
        ...


@dataclass
class CanvasRasterizer:
    """Torch-first primitive-to-frame renderer for canvas objects."""

    _frame: torch.Tensor | None = None
    _grid_x: torch.Tensor | None = None
    _grid_y: torch.Tensor | None = None

    def render(
        self,
        width: int,
        height: int,
        background: str | None,
        objects: Iterable[Drawable],
    ) -> torch.Tensor:
        self.begin_frame(width, height, parse_color(background) or DEFAULT_BACKGROUND)
        for obj in objects:
            if obj.visible:
                self.draw_object(obj)
        return self.end_frame()

    def begin_frame(self, width: int, height: int, clear_color: Color) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("frame dimensions must be > 0")
        self._frame = torch.zeros((height, width, 4), dtype=torch.uint8)
        self._frame[:, :, 0] = clear_color[0]
        self._frame[:, :, 1] = clear_color[1]
        self._frame[:, :, 2] = clear_color[2]
        self._frame[:, :, 3] = clear_color[3]
        self._grid_x = torch.arange(width, dtype=torch.float32).unsqueeze(0).expand(height, width)
        self._grid_y = torch.arange(height, dtype=torch.float32).unsqueeze(1).expand(height, width)

    def end_frame(self) -> torch.Tensor:
        if self._frame is None:
            raise RuntimeError("begin_frame must be called before end_frame")
        out = self._frame.clone()
        self._frame = None
        self._grid_x = None
        self._grid_y = None
        return out

    def draw_object(self, obj: Drawable) -> None:
        if self._frame is None:
            raise RuntimeError("begin_frame must be called before draw_object")
        sx, sy = obj.view_scale()
        unit = (abs(sx) + abs(sy)) * 0.5
        for shape in obj.get_objects():
            opacity = float(obj.opacity) * float(shape.opacity)
            fill = _apply_opacity_u8(parse_color(shape.fill), opacity)
            stroke = _apply_opacity_u8(parse_color(shape.stroke), opacity)
            stroke_px = max(1, int(round(shape.stroke_width * unit))) if shape.stroke_width > 0 else 0
            if stroke_px == 0:
                stroke = None
            if isinstance(shape, SvgRect):
                self._draw_rect(obj, shape, fill, stroke, stroke_px)
            elif isinstance(shape, SvgCircle):
                self._draw_circle(obj, shape, unit, fill, stroke, stroke_px)
            elif isinstance(shape, SvgEllipse):
                self._draw_ellipse(obj, shape, fill, stroke, stroke_px)
            elif isinstance(shape, SvgLine):
                points = [obj.to_canvas_point(shape.x1, shape.y1), obj.to_canvas_point(shape.x2, shape.y2)]
                self._draw_polyline(points, None, stroke, stroke_px, closed=False)
            elif isinstance(shape, SvgPolyline):
                points = [obj.to_canvas_point(x, y) for x, y in shape.points]
                self._draw_polyline(points, fill, stroke, stroke_px, closed=False)
            elif isinstance(shape, SvgPolygon):
                points = [obj.to_canvas_point(x, y) for x, y in shape.points]
                self._draw_polyline(points, fill, stroke, stroke_px, closed=True)
            elif isinstance(shape, SvgPath):
                for sub_points, closed in shape.subpaths:
                    points = [obj.to_canvas_point(x, y) for x, y in sub_points]
                    self._draw_polyline(points, fill, stroke, stroke_px, closed=closed)

    def _draw_rect(
        self,
        obj: Drawable,
        rect: SvgRect,
        fill: Optional[Color],
        stroke: Optional[Color],
        stroke_px: int,
    ) -> None:
        x0f, y0f = obj.to_canvas_point(rect.x, rect.y)
        x1f, y1f = obj.to_canvas_point(rect.x + rect.width, rect.y + rect.height)
        x0 = int(round(min(x0f, x1f)))
        y0 = int(round(min(y0f, y1f)))
        w = max(0, int(round(abs(x1f - x0f))))
        h = max(0, int(round(abs(y1f - y0f))))
        if fill is not None:
            self._blend_rect(x0, y0, w, h, fill)
        if stroke is not None:
            sw = stroke_px
            self._blend_rect(x0, y0, w, sw, stroke)
            self._blend_rect(x0, y0 + h - sw, w, sw, stroke)
            self._blend_rect(x0, y0, sw, h, stroke)
            self._blend_rect(x0 + w - sw, y0, sw, h, stroke)

    def _draw_circle(
        self,
        obj: Drawable,
        circle: SvgCircle,
        unit: float,
        fill: Optional[Color],
        stroke: Optional[Color],
        stroke_px: int,
    ) -> None:
        if self._frame is None or self._grid_x is None or self._grid_y is None:
            return
        if fill is None and stroke is None:
            return
        cx, cy = obj.to_canvas_point(circle.cx, circle.cy)
        r = max(0.0, float(circle.r) * unit)
        if r <= 0:
            return
        x0 = int(max(0, int(cx - r - 1)))
        y0 = int(max(0, int(cy - r - 1)))
        x1 = int(min(self._frame.shape[1], int(cx + r + 2)))
        y1 = int(min(self._frame.shape[0], int(cy + r + 2)))
        if x1 <= x0 or y1 <= y0:
            return
        gx = self._grid_x[y0:y1, x0:x1]
        gy = self._grid_y[y0:y1, x0:x1]
        dist_sq = (gx - cx) ** 2 + (gy - cy) ** 2
        if fill is not None:
            self._blend_mask(dist_sq <= (r * r), x=x0, y=y0, color=fill)
        if stroke is not None:
            inner = max(0.0, r - float(stroke_px))
            mask = (dist_sq <= (r * r)) & (dist_sq >= (inner * inner))
            self._blend_mask(mask, x=x0, y=y0, color=stroke)

    def _draw_ellipse(
        self,
        obj: Drawable,
        ellipse: SvgEllipse,
        fill: Optional[Color],
        stroke: Optional[Color],
        stroke_px: int,
    ) -> None:
        ax, ay = obj.to_canvas_point(ellipse.cx - ellipse.rx, ellipse.cy - ellipse.ry)
        bx, by = obj.to_canvas_point(ellipse.cx + ellipse.rx, ellipse.cy + ellipse.ry)
        box = (min(ax, bx), min(ay, by), max(ax, bx), max(ay, by))
        if fill is not None:
            self._paint(box, fill, lambda draw, shift: draw.ellipse(_shift_box(box, shift), fill=255))
        if stroke is not None:
            self._paint(
                box,
                stroke,
                lambda draw, shift: draw.ellipse(_shift_box(box, shift), outline=255, width=stroke_px),
            )

    def _draw_polyline(
        self,
        points: list[Point],
        fill: Optional[Color],
        stroke: Optional[Color],
        stroke_px: int,
        *,
        closed: bool,
    ) -> None:
        if len(points) < 2:
            return
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        pad = float(stroke_px)
        box = (min(xs) - pad, min(ys) - pad, max(xs) + pad, max(ys) + pad)
        if fill is not None and len(points) >= 3:
            self._paint(box, fill, lambda draw, shift: draw.polygon([shift(p) for p in points], fill=255))
        if stroke is not None:
            path = points + [points[0]] if closed else points
            self._paint(
                box,
                stroke,
                lambda draw, shift: draw.line([shift(p) for p in path], fill=255, width=stroke_px),
            )

    def _paint(
        self,
        box: tuple[float, float, float, float],
        color: Color,
        painter: Callable[[ImageDraw.ImageDraw, Callable[[Point], Point]], None],
    ) -> None:
        """Rasterize a coverage mask with Pillow inside `box` and blend it."""

        if self._frame is None:
            return
        x0 = max(0, int(math.floor(box[0])) - 1)
        y0 = max(0, int(math.floor(box[1])) - 1)
        x1 = min(self._frame.shape[1], int(math.ceil(box[2])) + 2)
        y1 = min(self._frame.shape[0], int(math.ceil(box[3])) + 2)
        if x1 <= x0 or y1 <= y0:
            return
        image = Image.new("L", (x1 - x0, y1 - y0), 0)
        painter(ImageDraw.Draw(image), lambda p: (p[0] - x0, p[1] - y0))
        mask = torch.from_numpy(np.asarray(image, dtype=np.uint8) > 0)
        self._blend_mask(mask, x=x0, y=y0, color=color)

    def _blend_rect(self, x: int, y: int, w: int, h: int, color: Color) -> None:
        if w <= 0 or h <= 0:
            return
        self._blend_mask(torch.ones((h, w), dtype=torch.bool), x=x, y=y, color=color)

    def _blend_mask(self, mask: torch.Tensor, *, x: int, y: int, color: Color) -> None:
        """Blend `color` wherever `mask` is set; `mask` is placed at (x, y) and clipped to the frame."""

        if self._frame is None or color[3] <= 0:
            return
        frame_h, frame_w = self._frame.shape[:2]
        mask_h, mask_w = mask.shape
        left, top = max(0, x), max(0, y)
        right, bottom = min(frame_w, x + mask_w), min(frame_h, y + mask_h)
        if right <= left or bottom <= top:
            return
        covered = mask[top - y : bottom - y, left - x : right - x]
        if not bool(covered.any()):
            return
        region = self._frame[top:bottom, left:right]
        alpha = color[3] / 255.0
        src = torch.tensor(color[:3], dtype=torch.float32)
        mixed = src * alpha + region[covered, :3].to(torch.float32) * (1.0 - alpha)
        region[covered, :3] = torch.clamp(mixed, 0, 255).to(torch.uint8)
        region[covered, 3] = 255


def save_png(frame: torch.Tensor, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(frame.cpu().numpy()).save(out, format="PNG")
    return out


def _apply_opacity_u8(color: Optional[Color], opacity: float) -> Optional[Color]:
    if color is None:
        return None
    r, g, b, a = color
    alpha = int(max(0.0, min(1.0, (a / 255.0) * opacity)) * 255.0)
    return (r, g, b, alpha)


def _shift_box(
    box: tuple[float, float, float, float],
    shift: Callable[[Point], Point],
) -> tuple[float, float, float, float]:
    x0, y0 = shift((box[0], box[1]))
    x1, y1 = shift((box[2], box[3]))
    return (x0, y0, x1, y1)
