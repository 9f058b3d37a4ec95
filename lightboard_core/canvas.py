from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping, Protocol

import torch

from .render.rasterizer import CanvasRasterizer, Drawable


LOGGER = logging.getLogger(__name__)
CANVAS_FORMAT_VERSION = "1.0"


class CanvasObject(Drawable, Protocol):
    canvas: Any

    def to_object(self, properties_to_include: list[str] | None = None) -> dict[str, Any]:
        ...


class ObjectEnliver(Protocol):
    def enliven_objects(self, records: Iterable[Mapping[str, Any]]) -> list[Any]:
        ...


class Canvas:
    """Host canvas: owns the top-level object list and coalesces redraws."""

    def __init__(
        self,
        width: int,
        height: int,
        *,
        background: str = "#ffffff",
        rasterizer: CanvasRasterizer | None = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("canvas width and height must be > 0")
        self.width = width
        self.height = height
        self.background = background
        self._rasterizer = rasterizer or CanvasRasterizer()
        self._objects: list[CanvasObject] = []
        self._render_pending = False
        self.render_count = 0
        self.last_frame: torch.Tensor | None = None

    def add(self, *objects: CanvasObject) -> "Canvas":
        for obj in objects:
            owner = obj.canvas
            if owner is not None and owner is not self:
                owner.remove(obj)
            self._objects.append(obj)
            obj.canvas = self
        self.request_render_all()
        return self

    def remove(self, *objects: CanvasObject) -> "Canvas":
        for obj in objects:
            for index, existing in enumerate(self._objects):
                if existing is obj:
                    del self._objects[index]
                    obj.canvas = None
                    break
        self.request_render_all()
        return self

    def clear(self) -> "Canvas":
        for obj in self._objects:
            obj.canvas = None
        self._objects = []
        self.request_render_all()
        return self

    def get_objects(self) -> list[CanvasObject]:
        return list(self._objects)

    def request_render_all(self) -> None:
        """Schedule one render on the running loop, or render now without one."""

        if self._render_pending:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.render_all()
            return
        self._render_pending = True
        loop.call_soon(self._flush_render)

    def _flush_render(self) -> None:
        self._render_pending = False
        self.render_all()

    def render_all(self) -> torch.Tensor:
        frame = self._rasterizer.render(self.width, self.height, self.background, self._objects)
        self.last_frame = frame
        self.render_count += 1
        LOGGER.debug("rendered %d object(s), frame #%d", len(self._objects), self.render_count)
        return frame

    def to_dict(self, properties_to_include: list[str] | None = None) -> dict[str, Any]:
        return {
            "version": CANVAS_FORMAT_VERSION,
            "width": self.width,
            "height": self.height,
            "background": self.background,
            "objects": [obj.to_object(properties_to_include) for obj in self._objects],
        }

    def load_from_dict(self, data: Mapping[str, Any], registry: ObjectEnliver) -> list[Any]:
        """Replace the object list with objects rebuilt from a `to_dict` record.

        Rebuilt objects may still be loading their content when this returns.
        """

        version = data.get("version")
        if version is not None and version != CANVAS_FORMAT_VERSION:
            LOGGER.warning("loading canvas record with version %s (expected %s)", version, CANVAS_FORMAT_VERSION)
        background = data.get("background")
        if isinstance(background, str):
            self.background = background
        objects = registry.enliven_objects(data.get("objects") or [])
        self.clear()
        self.add(*objects)
        return objects
