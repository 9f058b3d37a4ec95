from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Literal, Mapping, Protocol


OriginX = Literal["left", "center", "right"]
OriginY = Literal["top", "center", "bottom"]

STANDARD_FIELDS = (
    "type",
    "id",
    "name",
    "left",
    "top",
    "width",
    "height",
    "scale_x",
    "scale_y",
    "origin_x",
    "origin_y",
    "fill",
    "stroke",
    "stroke_width",
    "opacity",
    "visible",
)


class CanvasLike(Protocol):
    def request_render_all(self) -> None:
        ...


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("BoundingBox width/height must be >= 0")

    @classmethod
    def from_corners(cls, min_x: float, min_y: float, max_x: float, max_y: float) -> "BoundingBox":
        return cls(x=min_x, y=min_y, width=max(0.0, max_x - min_x), height=max(0.0, max_y - min_y))

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height


@dataclass
class VectorObject:
    """Shared schema for canvas objects.

    Position is the object's origin point on the canvas; `width`/`height` are
    intrinsic units scaled by `scale_x`/`scale_y`.
    """

    type: str = "object"
    id: str | None = None
    name: str | None = None
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    origin_x: OriginX = "left"
    origin_y: OriginY = "top"
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float = 1.0
    opacity: float = 1.0
    visible: bool = True
    canvas: CanvasLike | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.opacity < 0.0 or self.opacity > 1.0:
            raise ValueError("object opacity must be in [0, 1]")

    def set(self, key: str | Mapping[str, Any], value: Any = None) -> "VectorObject":
        """Assign known fields; unknown keys are ignored."""

        updates = dict(key) if isinstance(key, Mapping) else {key: value}
        settable = _settable_fields(type(self))
        for name, item in updates.items():
            if name in settable:
                setattr(self, name, item)
        return self

    def get(self, key: str) -> Any:
        return getattr(self, key, None)

    def scaled_size(self) -> tuple[float, float]:
        return (self.width * self.scale_x, self.height * self.scale_y)

    def top_left(self) -> tuple[float, float]:
        w, h = self.scaled_size()
        dx = {"left": 0.0, "center": w / 2.0, "right": w}.get(self.origin_x, 0.0)
        dy = {"top": 0.0, "center": h / 2.0, "bottom": h}.get(self.origin_y, 0.0)
        return (self.left - dx, self.top - dy)


def _settable_fields(cls: type) -> set[str]:
    return {f.name for f in fields(cls) if f.init and f.name != "type" and not f.name.startswith("_")}
