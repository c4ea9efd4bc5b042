"""Tests for DynamoDB attribute value conversion."""

from zae_docstore.serialization import deserialize_map, deserialize_value, serialize_map


class TestSerialization:
    """Tests for serialize_map and deserialize_map."""

    def test_serialize_types(self) -> None:
        assert serialize_map(
            {"s": "x", "b": True, "i": 3, "f": 1.5, "n": None, "l": ["a", 1], "m": {"k": "v"}}
        ) == {
            "s": {"S": "x"},
            "b": {"BOOL": True},
            "i": {"N": "3"},
            "f": {"N": "1.5"},
            "n": {"NULL": True},
            "l": {"L": [{"S": "a"}, {"N": "1"}]},
            "m": {"M": {"k": {"S": "v"}}},
        }

    def test_numbers(self) -> None:
        assert deserialize_value({"N": "42"}) == 42
        assert deserialize_value({"N": "4.5"}) == 4.5
        assert deserialize_value({"N": "1E+3"}) == 1000.0

    def test_nested(self) -> None:
        item = {"tags": {"L": [{"S": "a"}]}, "meta": {"M": {"ok": {"BOOL": False}}}}
        assert deserialize_map(item) == {"tags": ["a"], "meta": {"ok": False}}
