from __future__ import annotations

import contextlib
import io
import json
from pathlib import Path
import tempfile
import unittest

from PIL import Image

import main as cli_main


class CliMainTests(unittest.TestCase):
    def _run(self, argv: list[str]) -> str:
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            cli_main.main(argv)
        return buffer.getvalue()

    def test_render_bundled_light_then_replay(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            png = root / "out" / "light.png"
            record = root / "canvas.json"

            output = self._run(["render", "-o", str(png), "--json", str(record), "--left", "8", "--top", "4"])

            self.assertIn(f"Rendered: {png}", output)
            with Image.open(png) as image:
                self.assertEqual(image.size, (640, 360))
            data = json.loads(record.read_text(encoding="utf-8"))
            self.assertEqual(len(data["objects"]), 1)
            light = data["objects"][0]
            self.assertEqual((light["type"], light["load_type"], light["left"]), ("light", "file", 8.0))

            replayed = root / "replay.png"
            output = self._run(["replay", str(record), "-o", str(replayed)])

            self.assertIn(f"Rendered: {replayed}", output)
            with Image.open(png) as first, Image.open(replayed) as second:
                self.assertEqual(first.tobytes(), second.tobytes())

    def test_render_inline_svg_switched_off_with_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            svg = root / "square.svg"
            svg.write_text('<svg width="16" height="16"><rect width="16" height="16" fill="#ff0000"/></svg>', encoding="utf-8")
            config = root / "lightboard.toml"
            config.write_text('[canvas]\nwidth = 32\nheight = 16\nbackground = "#ffffff"\n', encoding="utf-8")
            png = root / "off.png"
            record = root / "off.json"

            self._run(
                ["--config", str(config), "render", "--svg", str(svg), "--off", "-o", str(png), "--json", str(record)]
            )

            with Image.open(png) as image:
                rgba = image.convert("RGBA")
                self.assertEqual(rgba.size, (32, 16))
                self.assertEqual(rgba.getpixel((8, 8)), (0, 0, 0, 255))
                self.assertEqual(rgba.getpixel((24, 8)), (255, 255, 255, 255))
            light = json.loads(record.read_text(encoding="utf-8"))["objects"][0]
            self.assertEqual((light["load_type"], light["fill"]), ("svg", "black"))
            self.assertIn("<rect", light["svg"])

    def test_missing_inputs_raise(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            with self.assertRaises(FileNotFoundError):
                self._run(["render", "--svg", str(root / "missing.svg"), "-o", str(root / "x.png")])
            with self.assertRaises(FileNotFoundError):
                self._run(["replay", str(root / "missing.json")])


if __name__ == "__main__":
    unittest.main()
