"""Tests for id-membership filters."""

import pytest

from zae_docstore import IdFilter, ValidationError, build_id_filter


class TestBuildIdFilter:
    """Tests for build_id_filter."""

    @pytest.mark.parametrize("ids", [[], None])
    def test_no_ids_is_unrestricted(self, ids) -> None:
        id_filter = build_id_filter(ids)
        assert id_filter == IdFilter()
        assert id_filter.unrestricted
        assert id_filter.as_kwargs() == {}

    def test_single_id_uses_equality(self) -> None:
        id_filter = build_id_filter(["a"])
        assert id_filter.expression == "#id = :item_0"
        assert id_filter.names == {"#id": "_doc_id"}
        assert id_filter.values == {":item_0": {"S": "a"}}

    def test_many_ids_use_membership(self) -> None:
        id_filter = build_id_filter(["a", "b", "c"])
        assert id_filter.expression == "#id IN (:item_0, :item_1, :item_2)"
        assert id_filter.values == {
            ":item_0": {"S": "a"},
            ":item_1": {"S": "b"},
            ":item_2": {"S": "c"},
        }

    def test_values_are_never_spliced(self) -> None:
        hostile = "x') OR attribute_exists(id"
        id_filter = build_id_filter([hostile, "b"])
        assert hostile not in id_filter.expression
        assert id_filter.values[":item_0"] == {"S": hostile}

    @pytest.mark.parametrize("ids", [["a"], ["a", "b"]])
    def test_filter_avoids_key_attributes(self, ids) -> None:
        # DynamoDB rejects Query filters on the partition or sort key
        assert "id" not in build_id_filter(ids).names.values()

    def test_limit(self) -> None:
        assert build_id_filter([str(i) for i in range(100)]).expression is not None
        with pytest.raises(ValidationError):
            build_id_filter([str(i) for i in range(101)])

    def test_as_kwargs(self) -> None:
        kwargs = build_id_filter(["a"]).as_kwargs()
        assert kwargs == {
            "FilterExpression": "#id = :item_0",
            "ExpressionAttributeNames": {"#id": "_doc_id"},
            "ExpressionAttributeValues": {":item_0": {"S": "a"}},
        }
