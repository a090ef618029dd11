"""Unit tests for JSON path extraction."""

import pytest

from data_oracle.src.fetchers.json_path import JsonPathError, extract_value, resolve
from data_oracle.src.OracleTypes import ValueType

TREE = {
    "data": {"price": 101.5, "text_price": "99.25", "bad": "n/a", "live": True},
    "blocks": [{"author_account_id": "alice.near"}, {"author_account_id": "bob"}],
    "0": "key-not-index",
}


class TestResolve:
    """Test path walking."""

    def test_nested_keys(self) -> None:
        assert resolve(TREE, "data.price") == 101.5

    def test_array_index(self) -> None:
        assert resolve(TREE, "blocks.1.author_account_id") == "bob"

    def test_key_wins_over_index(self) -> None:
        """A numeric segment matches an object key before an index."""
        assert resolve(TREE, "0") == "key-not-index"

    def test_missing_key(self) -> None:
        with pytest.raises(JsonPathError, match="JSON path 'data.volume' not found at 'volume'"):
            resolve(TREE, "data.volume")

    def test_index_out_of_bounds(self) -> None:
        with pytest.raises(JsonPathError, match="array index '5' out of bounds"):
            resolve(TREE, "blocks.5.author_account_id")


class TestExtractValue:
    """Test value coercion."""

    def test_number(self) -> None:
        assert extract_value(TREE, "data.price", ValueType.NUMBER) == 101.5

    def test_number_from_string(self) -> None:
        assert extract_value(TREE, "data.text_price", ValueType.NUMBER) == 99.25

    def test_unparseable_number(self) -> None:
        with pytest.raises(JsonPathError, match="Failed to parse 'n/a' as number"):
            extract_value(TREE, "data.bad", ValueType.NUMBER)

    def test_boolean_is_not_number(self) -> None:
        with pytest.raises(JsonPathError, match="is not a number"):
            extract_value(TREE, "data.live", ValueType.NUMBER)

    def test_string(self) -> None:
        assert extract_value(TREE, "blocks.0.author_account_id", ValueType.STRING) == "alice.near"

    def test_string_from_non_string(self) -> None:
        """Non-string nodes are rendered as compact JSON."""
        assert extract_value(TREE, "blocks.1", ValueType.STRING) == '{"author_account_id":"bob"}'
        assert extract_value(TREE, "data.price", ValueType.STRING) == "101.5"

    def test_boolean(self) -> None:
        assert extract_value(TREE, "data.live", ValueType.BOOLEAN) is True

    def test_not_boolean(self) -> None:
        with pytest.raises(JsonPathError, match="Value at 'data.price' is not a boolean"):
            extract_value(TREE, "data.price", ValueType.BOOLEAN)

    @pytest.mark.parametrize("raw", ["NaN", "inf", "-Infinity", float("nan")])
    def test_non_finite_number(self, raw) -> None:
        """NaN and infinities are rejected rather than aggregated."""
        with pytest.raises(JsonPathError, match="Value at 'p' is not a finite number"):
            extract_value({"p": raw}, "p", ValueType.NUMBER)
