"""
Cart and catalog behaviour
"""

from decimal import Decimal

from pos_dashboard.cart import Cart, discounted_price
from pos_dashboard.models import FoodItem


class TestCart:
    def test_discounted_line_subtotal(self, cart):
        food = FoodItem(id=9, name="Soup", price=Decimal("10"), discount_percentage=Decimal("10"))
        line = cart.add_line(food)
        cart.update_quantity(line.line_id, 2)

        assert line.quantity == 3
        assert cart.subtotal() == Decimal("27.00")

    def test_same_tags_merge_regardless_of_order(self, cart, foods):
        burger = foods[1]
        first = cart.add_line(burger, ["Extra Sauce", "Extra Patty"])
        second = cart.add_line(burger, ["Extra Patty", "Extra Sauce"])

        assert first is second
        assert len(cart.lines) == 1
        assert first.quantity == 2

    def test_different_tags_make_separate_lines(self, cart, foods):
        burger = foods[1]
        cart.add_line(burger, ["Extra Patty"])
        cart.add_line(burger)

        assert len(cart.lines) == 2
        assert cart.item_count == 2

    def test_quantity_to_zero_removes_line(self, cart, foods):
        line = cart.add_line(foods[2])
        cart.update_quantity(line.line_id, -5)

        assert cart.is_empty
        assert cart.subtotal() == Decimal("0")

    def test_stale_line_ids_are_ignored(self, cart, foods):
        line = cart.add_line(foods[2])
        cart.remove_line(line.line_id)

        cart.update_quantity(line.line_id, 1)
        cart.update_notes(line.line_id, "no croutons")
        cart.remove_line(line.line_id)

        assert cart.is_empty

    def test_line_ids_not_reused_after_clear(self, cart, foods):
        old = cart.add_line(foods[2])
        cart.clear()
        new = cart.add_line(foods[2])

        assert new.line_id != old.line_id
        cart.update_quantity(old.line_id, 3)
        assert new.quantity == 1

    def test_subtotal_tracks_every_mutation(self, cart, foods):
        salad = cart.add_line(foods[2])
        lemonade = cart.add_line(foods[3])
        assert cart.subtotal() == Decimal("9.00")

        cart.update_quantity(salad.line_id, 1)
        assert cart.subtotal() == Decimal("15.00")

        cart.remove_line(lemonade.line_id)
        assert cart.subtotal() == Decimal("12.00")

    def test_notes_update(self, cart, foods):
        line = cart.add_line(foods[2])
        cart.update_notes(line.line_id, "dressing on the side")

        assert cart.get(line.line_id).notes == "dressing on the side"

    def test_discounted_price(self, foods):
        assert discounted_price(foods[3]) == Decimal("3.00")
        assert discounted_price(foods[0]) == Decimal("12.00")

    def test_unit_price_captured_at_add_time(self, catalog):
        cart = Cart()
        line = cart.add_line(catalog.lookup(4))
        catalog.apply_discounts([{"id": 4, "discountPercentage": 50}])

        assert line.unit_price == Decimal("3.00")


class TestCatalogCache:
    def test_lookup_hides_unavailable_items(self, catalog):
        assert catalog.lookup(5) is None
        assert catalog.lookup(999) is None
        assert catalog.lookup(1).name == "Margherita Pizza"

    def test_search_by_keyword_and_category(self, catalog):
        assert [f.id for f in catalog.search("PIZZA")] == [1]
        assert [f.id for f in catalog.search("", 20)] == [3, 5]
        assert [f.id for f in catalog.search("soup", 20)] == [5]

    def test_apply_discounts_skips_unknown_and_malformed(self, catalog):
        applied = catalog.apply_discounts(
            [
                {"id": 1, "discountPercentage": 15},
                {"id": 999, "discountPercentage": 5},
                {"discountPercentage": 5},
                {"id": 2, "discountPercentage": "abc"},
            ]
        )

        assert applied == 1
        assert catalog.discount_for(1) == Decimal("15")
        assert catalog.discount_for(2) == Decimal("0")

    def test_reload_keeps_categories(self, catalog, foods):
        catalog.load(foods[:2])

        assert len(catalog.foods) == 2
        assert catalog.category_name(30) == "Drinks"
