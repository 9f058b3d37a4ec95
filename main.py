from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys

from lightboard_core import Canvas, LightboardConfig, load_config, save_png
from lightboard_ui import LIGHT_TYPE, ObjectRegistry, register_light


LOGGER = logging.getLogger("lightboard")


def build_registry(config: LightboardConfig) -> ObjectRegistry:
    registry = ObjectRegistry()
    register_light(registry, resource_root=config.resource_root)
    return registry


async def render_light(args: argparse.Namespace, config: LightboardConfig) -> Path:
    registry = build_registry(config)
    canvas = Canvas(config.canvas_width, config.canvas_height, background=config.background)
    record: dict[str, object] = {
        "type": LIGHT_TYPE,
        "left": args.left,
        "top": args.top,
        "scale_x": args.scale,
        "scale_y": args.scale,
        "fill": args.fill,
        "stroke": args.stroke,
    }
    if args.svg is not None:
        if not args.svg.exists():
            raise FileNotFoundError(f"SVG file not found: {args.svg}")
        record["load_type"] = "svg"
        record["svg"] = args.svg.read_text(encoding="utf-8")
    node = registry.from_object(record)
    canvas.add(node)
    await node.wait_loaded()
    if args.off:
        node.toggle()
    frame = canvas.render_all()
    out = save_png(frame, args.output)
    if args.json is not None:
        args.json.write_text(json.dumps(canvas.to_dict(), indent=2), encoding="utf-8")
    LOGGER.info("light node rendered with %d primitive(s)", len(node.get_objects()))
    return out


async def replay_canvas(args: argparse.Namespace, config: LightboardConfig) -> Path:
    if not args.input.exists():
        raise FileNotFoundError(f"Canvas JSON not found: {args.input}")
    data = json.loads(args.input.read_text(encoding="utf-8"))
    canvas = Canvas(
        int(data.get("width", config.canvas_width)),
        int(data.get("height", config.canvas_height)),
        background=config.background,
    )
    objects = canvas.load_from_dict(data, build_registry(config))
    await asyncio.gather(*(obj.wait_loaded() for obj in objects if hasattr(obj, "wait_loaded")))
    frame = canvas.render_all()
    return save_png(frame, args.output)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="lightboard")
    parser.add_argument("--config", type=Path, default=None, help="Path to lightboard.toml.")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a light fixture node to PNG.")
    render.add_argument(
        "--svg",
        type=Path,
        default=None,
        help="Inline SVG source file. Default: the bundled light-bulb fixture.",
    )
    render.add_argument("--fill", default=None)
    render.add_argument("--stroke", default=None)
    render.add_argument("--off", action="store_true", help="Toggle the light off before rendering.")
    render.add_argument("--left", type=float, default=0.0)
    render.add_argument("--top", type=float, default=0.0)
    render.add_argument("--scale", type=float, default=1.0)
    render.add_argument("-o", "--output", type=Path, default=Path("light.png"))
    render.add_argument("--json", type=Path, default=None, help="Also write the serialized canvas.")

    replay = sub.add_parser("replay", help="Rebuild a serialized canvas and render it to PNG.")
    replay.add_argument("input", type=Path)
    replay.add_argument("-o", "--output", type=Path, default=Path("canvas.png"))

    args = parser.parse_args(argv)
    config = load_config(args.config) if args.config is not None else LightboardConfig()
    config.configure_logging()

    if args.command == "render":
        out = asyncio.run(render_light(args, config))
    else:
        out = asyncio.run(replay_canvas(args, config))
    print(f"Rendered: {out}")


if __name__ == "__main__":
    main(sys.argv[1:])
