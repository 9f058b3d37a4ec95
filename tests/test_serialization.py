from __future__ import annotations

import json
import unittest

from lightboard_ui.component_schema import STANDARD_FIELDS
from lightboard_ui.objects import serialization
from lightboard_ui.objects.group import Group
from lightboard_ui.objects.light import LIGHT_TYPE, LightNode, register_light
from lightboard_ui.objects.registry import ObjectRegistry


STYLED_SHAPES = (
    '<svg width="20" height="10">'
    '<rect width="4" height="4" fill="#111111"/>'
    '<circle cx="10" cy="5" r="2"/>'
    '<rect x="12" width="4" height="4"/>'
    "</svg>"
)


class LightSerializationTests(unittest.IsolatedAsyncioTestCase):
    async def test_to_object_adds_light_fields_to_standard_set(self) -> None:
        node = LightNode({"load_type": "svg", "svg": STYLED_SHAPES, "fill": "red", "left": 4, "name": "hall"})
        await node.wait_loaded()

        record = node.to_object()

        self.assertEqual(set(record), set(STANDARD_FIELDS) | {"svg", "load_type"})
        self.assertEqual(record["type"], LIGHT_TYPE)
        self.assertEqual(record["svg"], STYLED_SHAPES)
        self.assertEqual(record["load_type"], "svg")
        self.assertEqual(record["fill"], "red")
        self.assertEqual(record["left"], 4)
        self.assertEqual(record["name"], "hall")
        json.dumps(record)

    async def test_file_mode_record_keeps_identifier_even_when_absent(self) -> None:
        node = LightNode()
        await node.wait_loaded()

        record = node.to_object()

        self.assertIsNone(record["svg"])
        self.assertEqual(record["load_type"], "file")

    async def test_properties_to_include_are_passed_through(self) -> None:
        node = LightNode({"load_type": "svg", "svg": STYLED_SHAPES})
        await node.wait_loaded()
        node.toggle()

        record = node.to_object(["is_on", "viewbox"])

        self.assertIs(record["is_on"], False)
        self.assertEqual(record["viewbox"], [0.0, 0.0, 20.0, 10.0])
        self.assertEqual(record["fill"], "black")

    async def test_registry_round_trip_rebuilds_equivalent_node(self) -> None:
        registry = ObjectRegistry()
        register_light(registry)
        node = LightNode({"load_type": "svg", "svg": STYLED_SHAPES, "fill": "red", "left": 4, "scale_x": 2.0})
        await node.wait_loaded()

        clone = registry.from_object(json.loads(json.dumps(node.to_object())))
        self.assertIsInstance(clone, LightNode)
        await clone.wait_loaded()

        self.assertEqual(len(clone.get_objects()), len(node.get_objects()))
        self.assertEqual((clone.svg, clone.load_type, clone.fill), (node.svg, node.load_type, node.fill))
        self.assertEqual({child.fill for child in clone.get_objects()}, {"red"})
        self.assertEqual((clone.get("left"), clone.get("scale_x")), (4, 2.0))
        self.assertEqual(clone.bounding_box, node.bounding_box)

    async def test_from_object_hands_over_node_before_load(self) -> None:
        seen: list[bool] = []

        def callback(built: LightNode) -> str:
            seen.append(built.is_loaded)
            return "accepted"

        result = LightNode.from_object({"type": LIGHT_TYPE, "load_type": "svg", "svg": STYLED_SHAPES}, callback)

        self.assertEqual(result, "accepted")
        self.assertEqual(seen, [False])

    async def test_enliven_objects_builds_each_record(self) -> None:
        registry = ObjectRegistry()
        register_light(registry)
        records = [
            {"type": LIGHT_TYPE, "load_type": "svg", "svg": STYLED_SHAPES},
            {"type": LIGHT_TYPE, "load_type": "svg", "svg": "<svg><rect/></svg>"},
        ]

        nodes = registry.enliven_objects(records)
        for node in nodes:
            await node.wait_loaded()

        self.assertEqual([len(node.get_objects()) for node in nodes], [3, 1])

    async def test_set_and_get_route_node_and_group_keys(self) -> None:
        node = LightNode({"load_type": "svg", "svg": STYLED_SHAPES})
        await node.wait_loaded()

        node.set({"is_on": False, "left": 9, "type": "circle", "bogus": 1})

        self.assertFalse(node.get("is_on"))
        self.assertEqual(node.get("left"), 9)
        self.assertEqual(node.get("type"), LIGHT_TYPE)
        self.assertIsNone(node.get("bogus"))


class ObjectRegistryTests(unittest.TestCase):
    def test_duplicate_registration_is_rejected(self) -> None:
        registry = ObjectRegistry()
        register_light(registry)
        with self.assertRaisesRegex(ValueError, "already registered"):
            register_light(registry)
        self.assertEqual(registry.list_types(), [LIGHT_TYPE])

    def test_unknown_type_and_missing_tag(self) -> None:
        registry = ObjectRegistry()
        with self.assertRaisesRegex(KeyError, "unknown object type"):
            registry.from_object({"type": LIGHT_TYPE})
        with self.assertRaisesRegex(ValueError, "missing a `type` tag"):
            registry.from_object({"svg": "<svg/>"})
        with self.assertRaises(ValueError):
            registry.register("", lambda record, callback: callback(record))

    def test_unregister_frees_the_tag(self) -> None:
        registry = ObjectRegistry()
        register_light(registry)
        registry.unregister(LIGHT_TYPE)
        registry.unregister(LIGHT_TYPE)
        self.assertEqual(registry.list_types(), [])
        register_light(registry)
        self.assertEqual(registry.list_types(), [LIGHT_TYPE])

    def test_custom_factory_receives_record_copy_and_callback(self) -> None:
        registry = ObjectRegistry()
        registry.register("marker", lambda record, callback: callback(("built", record["name"])))
        record = {"type": "marker", "name": "a"}

        self.assertEqual(registry.from_object(record), ("built", "a"))
        self.assertEqual(registry.from_object(record, lambda obj: obj[1].upper()), "A")


class GenericSerializationTests(unittest.TestCase):
    def test_group_fields_are_json_friendly(self) -> None:
        group = Group(left=1, top=2, width=10, height=10, viewbox=(0, 0, 5, 5))

        record = serialization.to_object(group, ["viewbox"], {"extra": ("a", "b")})

        self.assertEqual(record["type"], "group")
        self.assertEqual(record["viewbox"], [0, 0, 5, 5])
        self.assertEqual(record["extra"], ["a", "b"])
        self.assertEqual(record["origin_x"], "left")
        self.assertNotIn("canvas", record)

    def test_extra_fields_win_over_standard_fields(self) -> None:
        group = Group(fill="red")
        record = serialization.to_object(group, None, {"fill": "blue"})
        self.assertEqual(record["fill"], "blue")


if __name__ == "__main__":
    unittest.main()
