"""
Tests for cart models and normalization
"""

import json
from decimal import Decimal

import pytest

from storefront.cart.models import (
    Cart,
    CartLine,
    decode_cart,
    encode_cart,
    normalize_id,
    normalize_lines,
    normalize_price,
    normalize_quantity,
    to_number,
)


class TestCoercion:
    """Tests for field coercion helpers."""

    @pytest.mark.parametrize("value,expected", [
        (3, 3.0),
        ("19.99", 19.99),
        (" 2 ", 2.0),
        (Decimal("1.5"), 1.5),
        (None, 0.0),
        ("", 0.0),
        ("abc", 0.0),
        ("nan", 0.0),
        (float("inf"), 0.0),
        ([1], 0.0),
    ])
    def test_to_number(self, value, expected):
        """Numeric-like input converts, anything else falls back to 0."""
        assert to_number(value) == expected

    def test_normalize_id(self):
        """Ids are strings; integral floats lose the fraction."""
        assert normalize_id(7) == "7"
        assert normalize_id(7.0) == "7"
        assert normalize_id("abc") == "abc"
        assert normalize_id(None) == ""

    def test_negative_price_is_zero(self):
        assert normalize_price(-5) == 0.0
        assert normalize_price("12.5") == 12.5

    def test_quantity_truncates(self):
        assert normalize_quantity("2") == 2
        assert normalize_quantity(2.9) == 2
        assert normalize_quantity("x") == 0
        assert isinstance(normalize_quantity("3"), int)


class TestCartLine:
    """Tests for CartLine normalization."""

    def test_from_raw_mapping(self):
        """Test normalizing a raw mapping."""
        line = CartLine.from_raw({"id": 7, "price": "19.99", "quantity": "2"})

        assert line == CartLine(id="7", name="", price=19.99, quantity=2, image="")

    def test_from_raw_object(self):
        """Attribute-style objects are accepted too."""
        class Product:
            id = 5
            name = "Hat"
            price = 10
            quantity = 1
            image = "/hat.png"

        line = CartLine.from_raw(Product())
        assert line.id == "5"
        assert line.name == "Hat"
        assert line.image == "/hat.png"

    def test_from_raw_none(self):
        """Garbage lines become fully defaulted lines."""
        assert CartLine.from_raw(None) == CartLine(id="")

    def test_to_dict_shape(self):
        line = CartLine(id="1", name="Shoe", price=50.0, quantity=2, image="")
        assert line.to_dict() == {"id": "1", "name": "Shoe", "price": 50.0, "quantity": 2, "image": ""}
        assert line.line_total == 100.0


class TestNormalizeLines:
    """Tests for whole-cart normalization."""

    def test_drops_non_positive_quantities(self):
        lines = normalize_lines([
            {"id": 1, "quantity": 0},
            {"id": 2, "quantity": -3},
            {"id": 3, "quantity": 1},
        ])
        assert [line.id for line in lines] == ["3"]

    def test_merges_duplicate_ids(self):
        """Duplicates fold into the first line, keeping its fields."""
        lines = normalize_lines([
            {"id": 1, "name": "First", "quantity": 2},
            {"id": "2", "quantity": 1},
            {"id": "1", "name": "Second", "quantity": 3},
        ])
        assert [(line.id, line.name, line.quantity) for line in lines] == [("1", "First", 5), ("2", "", 1)]

    @pytest.mark.parametrize("raw", [None, "not a list", {"id": 1}, 42])
    def test_non_sequences_are_empty(self, raw):
        assert normalize_lines(raw) == []

    def test_idempotent(self):
        raw = [{"id": 1, "price": "3.5", "quantity": "4"}, {"id": 1, "quantity": 1}, None]
        once = normalize_lines(raw)
        assert normalize_lines([line.to_dict() for line in once]) == once


class TestCart:
    """Tests for Cart dataclass."""

    def test_create_empty_cart(self):
        cart = Cart()
        assert cart.is_empty
        assert cart.count == 0
        assert cart.subtotal == 0

    def test_count_and_lookup(self):
        cart = Cart.from_list([
            {"id": 1, "price": 10, "quantity": 2},
            {"id": 2, "price": 5, "quantity": 3},
        ])
        assert cart.count == 5
        assert cart.subtotal == 35
        assert cart.get(2).quantity == 3
        assert cart.get("missing") is None

    def test_copy_is_independent(self):
        cart = Cart.from_list([{"id": 1, "quantity": 1}])
        clone = cart.copy()
        clone.lines[0].quantity = 9
        assert cart.lines[0].quantity == 1

    def test_encode_decode(self):
        """Encoded cart is a plain JSON array of lines."""
        cart = Cart.from_list([{"id": 7, "name": "Shoe", "price": "19.99", "quantity": "2"}])
        blob = encode_cart(cart)

        assert json.loads(blob) == [{"id": "7", "name": "Shoe", "price": 19.99, "quantity": 2, "image": ""}]
        assert decode_cart(blob) == cart

    def test_decode_missing_blob(self):
        assert decode_cart(None) == Cart()
        assert decode_cart("") == Cart()

    def test_decode_malformed_blob_raises(self):
        with pytest.raises(ValueError):
            decode_cart("{not json")
