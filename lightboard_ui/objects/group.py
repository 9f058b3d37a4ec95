from __future__ import annotations

from dataclasses import dataclass, field

from lightboard_core.render.svg import SvgShape
from lightboard_ui.component_schema import BoundingBox, VectorObject


Point = tuple[float, float]
ViewBox = tuple[float, float, float, float]


@dataclass
class Group(VectorObject):
    """Container holding a flat, ordered list of primitives.

    Children keep their SVG user-unit geometry; `viewbox` maps those units onto
    the group's scaled width/height on the canvas.
    """

    type: str = "group"
    viewbox: ViewBox | None = None
    _objects: list[SvgShape] = field(default_factory=list, init=False, repr=False)
    _bounding_box: BoundingBox | None = field(default=None, init=False, repr=False)

    def add(self, *objects: SvgShape) -> "Group":
        self._objects.extend(objects)
        return self

    def remove(self, *objects: SvgShape) -> "Group":
        # Primitives compare by value, so removal goes by identity.
        for obj in objects:
            for index, existing in enumerate(self._objects):
                if existing is obj:
                    del self._objects[index]
                    break
        return self

    def get_objects(self) -> list[SvgShape]:
        return list(self._objects)

    def size(self) -> int:
        return len(self._objects)

    @property
    def bounding_box(self) -> BoundingBox:
        if self._bounding_box is None:
            self._bounding_box = self._measure()
        return self._bounding_box

    def set_coords(self) -> "Group":
        """Recompute canvas-space bounds from the current children."""

        self._bounding_box = self._measure()
        return self

    def _measure(self) -> BoundingBox:
        if not self._objects:
            x, y = self.top_left()
            w, h = self.scaled_size()
            return BoundingBox(x=x, y=y, width=abs(w), height=abs(h))
        xs: list[float] = []
        ys: list[float] = []
        for obj in self._objects:
            min_x, min_y, max_x, max_y = obj.bounds()
            for px, py in (self.to_canvas_point(min_x, min_y), self.to_canvas_point(max_x, max_y)):
                xs.append(px)
                ys.append(py)
        return BoundingBox.from_corners(min(xs), min(ys), max(xs), max(ys))

    def resolved_viewbox(self) -> ViewBox:
        if self.viewbox is not None:
            vb_x, vb_y, vb_w, vb_h = self.viewbox
            return (float(vb_x), float(vb_y), float(vb_w), float(vb_h))
        return (0.0, 0.0, float(self.width), float(self.height))

    def view_scale(self) -> tuple[float, float]:
        _, _, vb_w, vb_h = self.resolved_viewbox()
        w, h = self.scaled_size()
        sx = w / vb_w if vb_w > 0 else self.scale_x
        sy = h / vb_h if vb_h > 0 else self.scale_y
        return (sx, sy)

    def to_canvas_point(self, x: float, y: float) -> Point:
        vb_x, vb_y, _, _ = self.resolved_viewbox()
        sx, sy = self.view_scale()
        ox, oy = self.top_left()
        return (ox + (x - vb_x) * sx, oy + (y - vb_y) * sy)

    def request_redraw(self) -> None:
        if self.canvas is not None:
            self.canvas.request_render_all()
