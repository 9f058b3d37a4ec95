from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from functools import partial
import logging
from pathlib import Path
from typing import Any, Callable, Literal, Mapping

from lightboard_core.render.svg import (
    ParseOptions,
    SvgShape,
    group_svg_elements,
    load_svg_from_string,
    load_svg_from_url,
)
from lightboard_core.resources import default_resource_root
from lightboard_ui.component_schema import BoundingBox, CanvasLike

from . import serialization
from .group import Group, Point
from .registry import ObjectRegistry


LOGGER = logging.getLogger(__name__)

LoadType = Literal["file", "svg"]

LIGHT_TYPE = "light"
DEFAULT_LIGHT_SVG_PATH = "./svg/light-bulb.svg"
ON_FILL = "orange"
OFF_FILL = "black"

_NODE_KEYS = ("type", "svg", "load_type", "is_on")


@dataclass(frozen=True)
class LightOption:
    """Construction config for a light node.

    Anything other than the load and style keys is forwarded to the group as
    standard object fields (position, scale, opacity, ...).
    """

    svg: str | None = None
    load_type: LoadType = "file"
    fill: str | None = None
    stroke: str | None = None
    base_fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "LightOption":
        data = dict(raw or {})
        svg = data.pop("svg", None)
        load_type = "svg" if data.pop("load_type", None) == "svg" else "file"
        fill = data.pop("fill", None)
        stroke = data.pop("stroke", None)
        for key in _NODE_KEYS:
            data.pop(key, None)
        return cls(
            svg=svg if isinstance(svg, str) else None,
            load_type=load_type,
            fill=fill,
            stroke=stroke,
            base_fields=data,
        )


def _coerce_option(option: LightOption | Mapping[str, Any] | None) -> LightOption:
    if isinstance(option, LightOption):
        return option
    return LightOption.from_mapping(option)


class LightNode:
    """Light-fixture node: an SVG-backed group with a fixed on/off fill state.

    The node owns a `Group` and exposes its capabilities by delegation. Content
    loads asynchronously; `wait_loaded()` resolves once children are in place.
    """

    type = LIGHT_TYPE

    def __init__(
        self,
        option: LightOption | Mapping[str, Any] | None = None,
        *,
        resource_root: str | Path | None = None,
    ) -> None:
        opt = _coerce_option(option)
        self.svg = opt.svg
        self.load_type: LoadType = opt.load_type
        self.is_on = True
        self._resource_root = Path(resource_root) if resource_root is not None else default_resource_root()
        self._group = Group(type=LIGHT_TYPE)
        self._group.set(opt.base_fields)
        self._group.set({"fill": opt.fill, "stroke": opt.stroke})
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise RuntimeError("LightNode must be constructed inside a running event loop") from exc
        self._loaded: asyncio.Task[LightNode] = loop.create_task(self.load_svg(opt))
        self._loaded.add_done_callback(self._on_load_done)

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #
    @property
    def loaded(self) -> "asyncio.Task[LightNode]":
        return self._loaded

    @property
    def is_loaded(self) -> bool:
        task = self._loaded
        return task.done() and not task.cancelled() and task.exception() is None

    async def wait_loaded(self) -> "LightNode":
        return await self._loaded

    async def load_svg(self, option: LightOption | Mapping[str, Any] | None = None) -> "LightNode":
        opt = _coerce_option(option)
        if opt.load_type == "svg":
            objects, options = await load_svg_from_string(opt.svg)
            source = opt.svg
        else:
            # Always the bundled fixture asset; identifiers in the config are not consulted.
            objects, options = await load_svg_from_url(DEFAULT_LIGHT_SVG_PATH, resource_root=self._resource_root)
            source = DEFAULT_LIGHT_SVG_PATH
        return self.add_svg_elements(objects, {**options, "fill": opt.fill, "stroke": opt.stroke}, source)

    def add_svg_elements(
        self,
        objects: list[SvgShape],
        options: ParseOptions,
        source: str | None = None,
    ) -> "LightNode":
        """Normalize a parse result into this node's flat child list."""

        created = group_svg_elements(objects, options)
        fill = options.get("fill")
        stroke = options.get("stroke")
        self._group.set(options)
        get_objects: Callable[[], list[SvgShape]] | None = getattr(created, "get_objects", None)
        if get_objects is not None:
            for obj in get_objects():
                self._group.add(obj)
                if fill:
                    obj.set("fill", fill)
                if stroke:
                    obj.set("stroke", stroke)
        else:
            created.set({"origin_x": "center", "origin_y": "center"})
            if fill:
                created.set("fill", fill)
            if stroke:
                created.set("stroke", stroke)
            existing = self._group.get_objects()
            if existing:
                self._group.remove(*existing)
            self._group.add(created)
        self._group.set({"fill": fill, "stroke": stroke})
        self._group.set_coords()
        self._group.request_redraw()
        LOGGER.debug(
            "light node loaded %d primitive(s) from %s source",
            self._group.size(),
            "inline" if self.load_type == "svg" else source,
        )
        return self

    def _on_load_done(self, task: "asyncio.Task[LightNode]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.warning("light node failed to load %s content: %s", self.load_type, exc)

    # ------------------------------------------------------------------ #
    # Style and state
    # ------------------------------------------------------------------ #
    def set_fill(self, value: Any) -> "LightNode":
        for obj in self._group.get_objects():
            obj.set("fill", value)
        self._group.fill = value
        return self

    def set_stroke(self, value: Any) -> "LightNode":
        for obj in self._group.get_objects():
            obj.set("stroke", value)
        self._group.stroke = value
        return self

    def toggle(self) -> "LightNode":
        """Flip on/off and paint the fixed color for the new state."""

        self.is_on = not self.is_on
        self.set_fill(ON_FILL if self.is_on else OFF_FILL)
        return self

    # ------------------------------------------------------------------ #
    # Serialization
    # ------------------------------------------------------------------ #
    def to_object(self, properties_to_include: list[str] | None = None) -> dict[str, Any]:
        return serialization.to_object(
            self,
            properties_to_include,
            {"svg": self.svg, "load_type": self.load_type},
        )

    @classmethod
    def from_object(
        cls,
        option: Mapping[str, Any],
        callback: Callable[["LightNode"], Any],
        *,
        resource_root: str | Path | None = None,
    ) -> Any:
        """Build a node and hand it to `callback` without waiting for its load."""

        return callback(cls(option, resource_root=resource_root))

    # ------------------------------------------------------------------ #
    # Group delegation
    # ------------------------------------------------------------------ #
    @property
    def group(self) -> Group:
        return self._group

    @property
    def canvas(self) -> CanvasLike | None:
        return self._group.canvas

    @canvas.setter
    def canvas(self, value: CanvasLike | None) -> None:
        self._group.canvas = value

    @property
    def fill(self) -> str | None:
        return self._group.fill

    @property
    def stroke(self) -> str | None:
        return self._group.stroke

    @property
    def visible(self) -> bool:
        return self._group.visible

    @property
    def opacity(self) -> float:
        return self._group.opacity

    @property
    def bounding_box(self) -> BoundingBox:
        return self._group.bounding_box

    def get(self, key: str) -> Any:
        if key in _NODE_KEYS:
            return getattr(self, key)
        return self._group.get(key)

    def set(self, key: str | Mapping[str, Any], value: Any = None) -> "LightNode":
        updates = dict(key) if isinstance(key, Mapping) else {key: value}
        updates.pop("type", None)
        if "is_on" in updates:
            self.is_on = bool(updates.pop("is_on"))
        if "svg" in updates:
            self.svg = updates.pop("svg")
        if "load_type" in updates:
            self.load_type = "svg" if updates.pop("load_type") == "svg" else "file"
        self._group.set(updates)
        return self

    def add(self, *objects: SvgShape) -> "LightNode":
        self._group.add(*objects)
        return self

    def remove(self, *objects: SvgShape) -> "LightNode":
        self._group.remove(*objects)
        return self

    def get_objects(self) -> list[SvgShape]:
        return self._group.get_objects()

    def set_coords(self) -> "LightNode":
        self._group.set_coords()
        return self

    def view_scale(self) -> tuple[float, float]:
        return self._group.view_scale()

    def to_canvas_point(self, x: float, y: float) -> Point:
        return self._group.to_canvas_point(x, y)


def register_light(registry: ObjectRegistry, *, resource_root: str | Path | None = None) -> None:
    """Register the light type tag; call once while wiring up the editor."""

    registry.register(LIGHT_TYPE, partial(LightNode.from_object, resource_root=resource_root))
