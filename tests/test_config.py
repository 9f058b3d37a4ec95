from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from lightboard_core.config import LightboardConfig, load_config


class ConfigTests(unittest.TestCase):
    def _write(self, root: Path, text: str) -> Path:
        path = root / "lightboard.toml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_load_config_reads_all_tables(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            path = self._write(
                root,
                """
[canvas]
width = 320
height = 200
background = "#000000"

[resources]
root = "assets"

[logging]
level = "debug"
""".strip(),
            )
            config = load_config(path)

            self.assertEqual((config.canvas_width, config.canvas_height), (320, 200))
            self.assertEqual(config.background, "#000000")
            self.assertEqual(config.resource_root, (root / "assets").resolve())
            self.assertEqual(config.log_level, "DEBUG")

    def test_empty_file_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = load_config(self._write(Path(tmp), ""))
        self.assertEqual(config, LightboardConfig())
        self.assertIsNone(config.resource_root)

    def test_absolute_resource_root_is_kept(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            config = load_config(self._write(root, f'[resources]\nroot = "{root.as_posix()}"\n'))
        self.assertEqual(config.resource_root, root)

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                load_config(Path(tmp) / "nope.toml")

    def test_invalid_values_are_rejected(self) -> None:
        cases = {
            "string width": '[canvas]\nwidth = "wide"\n',
            "bool height": "[canvas]\nheight = true\n",
            "zero width": "[canvas]\nwidth = 0\n",
            "canvas not a table": "canvas = 3\n",
            "empty root": '[resources]\nroot = ""\n',
            "unknown level": '[logging]\nlevel = "loud"\n',
        }
        for label, text in cases.items():
            with self.subTest(case=label):
                with tempfile.TemporaryDirectory() as tmp:
                    with self.assertRaises(ValueError):
                        load_config(self._write(Path(tmp), text))


if __name__ == "__main__":
    unittest.main()
