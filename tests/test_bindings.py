"""Tests for binding flattening."""

from decimal import Decimal

import pytest

from native_shell import BindingError, flatten_bindings, flatten_value, to_binding_value
from native_shell.bindings import MappingValue, NullValue, ScalarValue, SequenceValue


class TestScalars:
    """Scalars flatten to one entry under their own name."""

    def test_string(self):
        assert flatten_bindings({"string": "aString"}) == {"string": "aString"}

    def test_integer(self):
        assert flatten_bindings({"integer": 42}) == {"integer": "42"}

    def test_float_keeps_trailing_zero(self):
        assert flatten_bindings({"float": 42.0}) == {"float": "42.0"}

    def test_float_with_fraction(self):
        assert flatten_value("f", 1.25) == {"f": "1.25"}

    def test_float_python_spelling(self):
        assert flatten_value("f", 1e20) == {"f": "1e+20"}
        assert flatten_value("f", float("nan")) == {"f": "nan"}
        assert flatten_value("f", float("-inf")) == {"f": "-inf"}

    def test_bool_is_lowercase(self):
        assert flatten_bindings({"yes": True, "no": False}) == {"yes": "true", "no": "false"}

    def test_decimal(self):
        assert flatten_value("d", Decimal("1.50")) == {"d": "1.50"}

    def test_bytes_are_decoded(self):
        assert flatten_value("b", b"raw") == {"b": "raw"}

    def test_none_is_empty_string(self):
        """None flattens to an empty string, never to the text 'None'."""
        assert flatten_bindings({"var": None}) == {"var": ""}


class TestSequences:
    """Sequences flatten to name_<index> entries in source order."""

    def test_list(self):
        env = flatten_bindings({"list": ["oneString", "anotherString", "thenAString"]})
        assert env == {
            "list_0": "oneString",
            "list_1": "anotherString",
            "list_2": "thenAString",
        }

    def test_tuple(self):
        assert flatten_value("array", ("one", "two")) == {"array_0": "one", "array_1": "two"}

    def test_order_preserved_past_ten(self):
        env = flatten_value("long_array", "a a a a a a a a a a b".split(" "))
        assert env["long_array_10"] == "b"
        assert list(env) == [f"long_array_{i}" for i in range(11)]

    def test_none_elements(self):
        assert flatten_value("nulls", [None, None]) == {"nulls_0": "", "nulls_1": ""}

    def test_empty_sequence_has_only_sentinel(self):
        env = flatten_value("array_empty", [])
        assert env == {"array_empty_empty": ""}
        assert "array_empty_0" not in env

    def test_mixed_scalars(self):
        assert flatten_value("mixed", [1, 2.0, True]) == {
            "mixed_0": "1",
            "mixed_1": "2.0",
            "mixed_2": "true",
        }


class TestMappings:
    """Mappings flatten to name_<key> entries."""

    def test_map(self):
        assert flatten_bindings({"map": {"key": "value"}}) == {"map_key": "value"}

    def test_none_value(self):
        assert flatten_value("map_nulls", {"key": None}) == {"map_nulls_key": ""}

    def test_empty_map_has_only_sentinel(self):
        assert flatten_value("map_empty", {}) == {"map_empty_empty": ""}

    def test_non_string_keys(self):
        assert flatten_value("m", {1: "one", 2.5: "x"}) == {"m_1": "one", "m_2.5": "x"}


class TestNesting:
    """Nested composites extend the generated key."""

    def test_list_of_lists(self):
        assert flatten_value("matrix", [["a", "b"], ["c"]]) == {
            "matrix_0_0": "a",
            "matrix_0_1": "b",
            "matrix_1_0": "c",
        }

    def test_map_of_list(self):
        assert flatten_value("cfg", {"hosts": ["h1", "h2"], "opts": {}}) == {
            "cfg_hosts_0": "h1",
            "cfg_hosts_1": "h2",
            "cfg_opts_empty": "",
        }


class TestBindingValue:
    """Raw values are classified into a tagged variant."""

    def test_variants(self):
        assert isinstance(to_binding_value(None), NullValue)
        assert to_binding_value(42) == ScalarValue("42")
        assert to_binding_value(["x"]) == SequenceValue((ScalarValue("x"),))
        assert to_binding_value({"k": None}) == MappingValue((("k", NullValue()),))

    def test_string_is_not_a_sequence(self):
        assert to_binding_value("abc") == ScalarValue("abc")

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            to_binding_value(object())


class TestErrors:
    """Unsupported shapes fail the whole flattening."""

    def test_unsupported_value_names_binding(self):
        with pytest.raises(BindingError) as exc_info:
            flatten_bindings({"ok": "fine", "bad": object()})
        assert exc_info.value.name == "bad"
        assert "bad" in str(exc_info.value)

    def test_set_is_unsupported(self):
        with pytest.raises(BindingError):
            flatten_bindings({"unordered": {"a", "b"}})

    def test_nested_unsupported(self):
        with pytest.raises(BindingError) as exc_info:
            flatten_bindings({"outer": [1, object()]})
        assert exc_info.value.name == "outer"

    def test_self_referencing_list(self):
        loop: list = []
        loop.append(loop)
        with pytest.raises(BindingError):
            flatten_bindings({"loop": loop})


class TestDeterminism:
    """Flattening is pure and repeatable."""

    def test_same_input_same_output(self):
        bindings = {"a": [1, {"k": "v"}], "b": None, "c": 3.0}
        assert flatten_bindings(bindings) == flatten_bindings(bindings)

    def test_input_not_modified(self):
        bindings = {"a": [1, 2]}
        flatten_bindings(bindings)
        assert bindings == {"a": [1, 2]}
