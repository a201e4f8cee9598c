"""
Structural audit tests: tagged tree conversion, path convention, and the
one hard error (spaces in field names).
"""

import pytest

from schema import ErrorKind
from structural_auditor import (
    JsonArray,
    JsonBool,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    StructuralAuditor,
    to_node,
)


class TestToNode:
    def test_scalars(self):
        assert to_node(None) == JsonNull()
        assert to_node(True) == JsonBool(True)
        assert to_node(3) == JsonNumber(3)
        assert to_node(2.5) == JsonNumber(2.5)
        assert to_node("x") == JsonString("x")

    def test_bool_is_not_a_number(self):
        assert isinstance(to_node(False), JsonBool)

    def test_containers_keep_order(self):
        node = to_node({"b": [1, None], "a": {}})
        assert node == JsonObject((
            ("b", JsonArray((JsonNumber(1), JsonNull()))),
            ("a", JsonObject(())),
        ))

    def test_rejects_non_json(self):
        with pytest.raises(TypeError):
            to_node({1, 2})


class TestStructuralAuditor:
    def test_clean_object(self):
        report = StructuralAuditor().audit({"name": "Alice", "tags": ["a"], "active": True})
        assert report.errors == []
        assert report.warnings == []

    def test_null_and_empty_array_are_warnings(self):
        report = StructuralAuditor().audit({"a": None, "b": [], "c": [None, {"d": []}]})

        assert report.errors == []
        assert [(w.field, w.message) for w in report.warnings] == [
            ("a", "Null value found"),
            ("b", "Empty array"),
            ("c[0]", "Null value found"),
            ("c[1].d", "Empty array"),
        ]

    def test_empty_root_object(self):
        report = StructuralAuditor().audit({})
        assert [(w.field, w.message) for w in report.warnings] == [("root", "Empty JSON object")]

    def test_nested_empty_object_is_fine(self):
        assert StructuralAuditor().audit({"a": {}}).warnings == []

    def test_root_null(self):
        report = StructuralAuditor().audit(None)
        assert [(w.field, w.message) for w in report.warnings] == [("", "Null value found")]

    def test_root_array_paths(self):
        report = StructuralAuditor().audit([{"x": None}])
        assert [w.field for w in report.warnings] == ["[0].x"]

    def test_space_in_field_name_at_depth(self):
        report = StructuralAuditor().audit({"outer": {"items": [{"field name": 1}]}, "ok": None})

        assert len(report.errors) == 1
        error = report.errors[0]
        assert error.field == "outer.items[0].field name"
        assert error.message == "Field name contains spaces"
        assert error.value == "field name"
        assert error.constraint == "no_spaces_in_field_names"
        assert error.kind is ErrorKind.STRUCTURAL
        assert [w.field for w in report.warnings] == ["ok"]

    def test_walk_continues_below_bad_key(self):
        report = StructuralAuditor().audit({"bad key": {"also bad": None}})

        assert [e.field for e in report.errors] == ["bad key", "bad key.also bad"]
        assert [w.field for w in report.warnings] == ["bad key.also bad"]
