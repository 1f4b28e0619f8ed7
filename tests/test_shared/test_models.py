"""
Tests for domain models.

These tests verify defaults and validation on the records the store and
the events share.
"""

import pytest
from pydantic import ValidationError

from shared.models import ListDetail, Member, Product, ShoppingList


class TestProduct:

    def test_defaults(self):
        product = Product(id="p1", list_id="list-7", name="Milk")

        assert product.quantity == 1
        assert product.checked is False
        assert product.created_at is None

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            Product(id="p1", list_id="list-7", name="Milk", quantity=0)

    def test_parses_iso_timestamp(self):
        product = Product(
            id="p1", list_id="list-7", name="Milk", created_at="2024-05-01T09:00:00Z"
        )

        assert product.created_at.year == 2024
        assert product.created_at.tzinfo is not None

    def test_naive_timestamp_is_utc(self):
        product = Product(
            id="p1", list_id="list-7", name="Milk", created_at="2024-05-01T09:00:00"
        )

        assert product.created_at.utcoffset().total_seconds() == 0


class TestMember:

    def test_optional_display_fields(self):
        member = Member(list_id="list-7", user_id="u9")

        assert member.name is None
        assert member.email is None


class TestListDetail:

    def test_extends_shopping_list(self):
        detail = ListDetail(id="list-7", name="Groceries", owner_id="u1")

        assert isinstance(detail, ShoppingList)
        assert detail.products == []
        assert detail.members == []
