"""
Tests for the cart core: pricing, mutators and totals.
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from portal.cart import (
    Cart,
    CartItem,
    add_item,
    clamp_guest_count,
    price,
    remove_item,
    total_amount,
    total_guests,
    update_quantity,
)


class TestPricing:
    """Tests for line item pricing."""

    def test_price_is_unit_times_guests(self):
        assert price(Decimal("100"), 2) == Decimal("200")
        assert price(Decimal("49.99"), 3) == Decimal("149.97")

    def test_price_single_guest_is_unit_price(self):
        assert price(Decimal("75.50"), 1) == Decimal("75.50")

    def test_price_is_linear(self):
        for guests in range(1, 21):
            assert price(Decimal("12.5"), guests) == Decimal("12.5") * guests

    def test_price_is_monotonic_in_guest_count(self):
        prices = [price(Decimal("30"), g) for g in range(1, 21)]
        assert prices == sorted(prices)

    def test_price_accepts_float_without_binary_noise(self):
        assert price(0.1, 3) == Decimal("0.3")

    @pytest.mark.parametrize("requested,expected", [(0, 1), (-5, 1), (1, 1), (12, 12), (20, 20), (25, 20)])
    def test_clamp_guest_count(self, requested, expected):
        assert clamp_guest_count(requested) == expected


class TestCartItem:
    """Tests for CartItem dataclass."""

    def test_total_price_tracks_guest_count(self, upsell_a):
        item = CartItem(upsell=upsell_a, guest_count=3)
        assert item.total_price == Decimal("300")
        assert item.upsell_id == 1

    def test_to_dict(self, upsell_a):
        item = CartItem(
            upsell=upsell_a,
            guest_count=2,
            selected_date=datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc),
            special_notes="Flight QZ123",
        )

        data = item.to_dict()
        assert data["upsell"]["id"] == 1
        assert data["guest_count"] == 2
        assert data["selected_date"] == "2025-03-01T09:00:00+00:00"
        assert data["total_price"] == "200"

    def test_from_dict_recomputes_total(self, upsell_a):
        data = CartItem(upsell=upsell_a, guest_count=2).to_dict()
        data["total_price"] = "1"

        item = CartItem.from_dict(data)
        assert item.total_price == Decimal("200")

    def test_from_dict_rejects_out_of_range_guests(self, upsell_a):
        data = CartItem(upsell=upsell_a, guest_count=2).to_dict()
        data["guest_count"] = 0

        with pytest.raises(ValueError):
            CartItem.from_dict(data)

    def test_from_dict_parses_zulu_dates(self, upsell_a):
        data = CartItem(upsell=upsell_a, guest_count=1).to_dict()
        data["selected_date"] = "2025-03-01T09:00:00.000Z"

        item = CartItem.from_dict(data)
        assert item.selected_date == datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


class TestMutators:
    """Tests for add_item / remove_item / update_quantity."""

    def test_add_item_appends(self, upsell_a, upsell_b):
        cart = add_item(Cart(), upsell_a, 2)
        cart = add_item(cart, upsell_b, 1)

        assert [item.upsell_id for item in cart.items] == [1, 2]

    def test_add_item_does_not_mutate_input(self, upsell_a):
        original = Cart()
        add_item(original, upsell_a, 1)
        assert original.is_empty

    def test_add_same_upsell_twice_creates_two_items(self, upsell_a):
        cart = add_item(Cart(), upsell_a, 1, special_notes="morning")
        cart = add_item(cart, upsell_a, 2, special_notes="evening")

        assert len(cart.items) == 2
        assert total_amount(cart) == Decimal("300")

    def test_remove_item(self, upsell_a, upsell_b):
        cart = add_item(add_item(Cart(), upsell_a, 2), upsell_b, 1)
        cart = remove_item(cart, 1)

        assert [item.upsell_id for item in cart.items] == [2]

    def test_remove_absent_id_leaves_cart_unchanged(self, upsell_a):
        cart = add_item(Cart(), upsell_a, 2)
        assert remove_item(cart, 999) == cart

    def test_update_quantity_keeps_position(self, upsell_a, upsell_b):
        cart = add_item(add_item(Cart(), upsell_a, 2), upsell_b, 1)
        cart = update_quantity(cart, 1, 5)

        assert [item.upsell_id for item in cart.items] == [1, 2]
        assert cart.items[0].guest_count == 5
        assert cart.items[0].total_price == Decimal("500")

    def test_update_quantity_clamps(self, upsell_a):
        cart = add_item(Cart(), upsell_a, 2)

        assert update_quantity(cart, 1, 0).items[0].guest_count == 1
        assert update_quantity(cart, 1, 25).items[0].guest_count == 20

    def test_update_quantity_absent_id_is_noop(self, upsell_a):
        cart = add_item(Cart(), upsell_a, 2)
        assert update_quantity(cart, 42, 5) == cart


class TestTotals:
    """Tests for cart aggregation."""

    def test_empty_cart_totals_are_zero(self):
        assert total_amount(Cart()) == Decimal("0")
        assert total_guests(Cart()) == 0

    def test_booking_scenario(self, upsell_a, upsell_b):
        """Two bookings, a removal and a guest count change."""
        cart = add_item(Cart(), upsell_a, 2)
        assert total_amount(cart) == Decimal("200")
        assert total_guests(cart) == 2

        cart = add_item(cart, upsell_b, 1)
        assert total_amount(cart) == Decimal("250")
        assert total_guests(cart) == 3

        cart = remove_item(cart, upsell_a.id)
        assert total_amount(cart) == Decimal("50")
        assert total_guests(cart) == 1

        cart = update_quantity(cart, upsell_b.id, 4)
        assert total_amount(cart) == Decimal("200")
        assert total_guests(cart) == 4

    def test_total_is_sum_of_line_items(self, upsell_a, upsell_b):
        cart = add_item(add_item(Cart(), upsell_a, 3), upsell_b, 7)
        assert total_amount(cart) == sum(item.total_price for item in cart.items)
