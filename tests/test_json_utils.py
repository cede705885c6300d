"""Tests for defensive JSON rendering (core/json_utils.py)."""

import json
import math

from core.json_utils import CIRCULAR_MARKER, FUNCTION_MARKER, safe_stringify, to_json_safe


class TestSafeStringify:
    def test_matches_json_dumps_for_plain_data(self):
        data = {"oid": "123", "title": "T", "widgets": [1, 2.5, None, True], "nested": {"a": []}}
        assert safe_stringify(data, indent=2) == json.dumps(data, indent=2)

    def test_primitives(self):
        assert safe_stringify("text") == '"text"'
        assert safe_stringify(42) == "42"
        assert safe_stringify(None) == "null"

    def test_self_reference(self):
        data = {"name": "loop"}
        data["me"] = data
        assert json.loads(safe_stringify(data)) == {"name": "loop", "me": CIRCULAR_MARKER}

    def test_list_cycle(self):
        items = [1]
        items.append(items)
        assert json.loads(safe_stringify(items)) == [1, CIRCULAR_MARKER]

    def test_shared_reference_is_not_circular(self):
        shared = {"x": 1}
        assert json.loads(safe_stringify({"a": shared, "b": shared})) == {"a": {"x": 1}, "b": {"x": 1}}

    def test_functions(self):
        assert json.loads(safe_stringify({"fn": lambda: None})) == {"fn": FUNCTION_MARKER}
        assert safe_stringify(len) == json.dumps(FUNCTION_MARKER)

    def test_non_finite_floats_become_null(self):
        assert json.loads(safe_stringify([math.nan, math.inf, -math.inf])) == [None, None, None]

    def test_other_containers_and_keys(self):
        assert to_json_safe({1: (1, 2), "s": frozenset()}) == {"1": [1, 2], "s": []}

    def test_exotic_objects_get_a_marker(self):
        class Widget:
            pass

        assert to_json_safe({"w": Widget()}) == {"w": "[Widget]"}

    def test_deep_nesting_degrades(self):
        data = current = []
        for _ in range(5000):
            nxt = []
            current.append(nxt)
            current = nxt
        assert safe_stringify(data).startswith("[Error stringifying data:")
