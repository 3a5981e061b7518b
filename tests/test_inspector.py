"""
Tests for inspector property classification and lookup

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import pytest

from stateviz_core.errors import DescriptorError
from stateviz_core.inspector import (
    PropertyKind,
    PropertyStore,
    classify,
    describe_property,
    render_properties_html,
)


class TestClassify:
    @pytest.mark.parametrize("value,kind", [
        (True, PropertyKind.BOOLEAN),
        (0, PropertyKind.NUMBER),
        (2.5, PropertyKind.NUMBER),
        ("run", PropertyKind.STRING),
        ([1, 2], PropertyKind.ARRAY),
        ({"x": 1}, PropertyKind.OBJECT),
        (None, PropertyKind.UNKNOWN),
    ])
    def test_kinds(self, value, kind):
        assert classify(value) == kind


class TestDescribeProperty:
    def test_boolean(self):
        view = describe_property("canJump", False)
        assert view.display == "false"

    def test_number_two_decimals(self):
        assert describe_property("speed", 1.5).display == "1.50"
        assert describe_property("count", 3).display == "3.00"

    def test_string(self):
        assert describe_property("anim", "idle_loop").display == "idle_loop"

    def test_array_items(self):
        view = describe_property("steps", ["left", 2])
        assert view.kind == PropertyKind.ARRAY
        assert [item.name for item in view.items] == ["steps[0]", "steps[1]"]
        assert view.items[1].display == "2.00"
        assert len(view.to_dict()["items"]) == 2

    def test_object_pretty_json(self):
        view = describe_property("impulse", {"x": 0})
        assert view.display == '{\n  "x": 0\n}'

    def test_unknown(self):
        assert describe_property("ghost", None).display == "Unknown type"


class TestRenderHtml:
    def test_empty(self):
        assert render_properties_html("Idle", {}) == "<p>No properties to display</p>"
        assert render_properties_html("Idle", None) == "<p>No properties to display</p>"

    def test_escapes(self):
        html = render_properties_html("Idle", {"label": "<b>bold</b>"})
        assert "<b>bold</b>" not in html
        assert "&lt;b&gt;" in html

    def test_checkbox(self):
        html = render_properties_html("Idle", {"canJump": True})
        assert "checked" in html
        assert "<h3>Idle</h3>" in html


class TestPropertyStore:
    def test_lookup(self, properties_data):
        store = PropertyStore(properties_data)
        assert store.lookup("Player", "Walk")["speed"] == 1.5
        assert store.lookup("Player", "Fall") is None
        assert store.lookup("Player", None) is None
        assert store.lookup("Other", "Walk") is None

    def test_alias(self, properties_data):
        store = PropertyStore(properties_data, {"ScenesFastForward": "ScenesFoastFoward"})
        assert store.lookup("ScenesFastForward", "Playing") == {"rate": 1.0, "skippable": True}
        assert store.resolve_machine("Player") == "Player"

    def test_machine_states(self, properties_data):
        store = PropertyStore(properties_data)
        assert set(store.machine_states("Player")) == {"Idle", "Walk", "Jump"}
        assert store.machine_states("Nope") == {}

    def test_from_file(self, properties_file):
        store = PropertyStore.from_file(properties_file)
        assert len(store) == 2

    def test_from_missing_file(self, temp_dir):
        with pytest.raises(DescriptorError):
            PropertyStore.from_file(temp_dir / "missing.json")

    def test_from_invalid_file(self, temp_dir):
        path = temp_dir / "props.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(DescriptorError):
            PropertyStore.from_file(path)
