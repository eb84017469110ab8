"""
Customization, add-to-cart and order payload tests
"""

import pytest

from pos_dashboard.customization import CustomizationResolver, PendingCustomization, format_line_notes
from pos_dashboard.data import MULTIPLE, SINGLE, customization_spec_for_name
from pos_dashboard.errors import OrderValidationError, SelectionRequiredError
from pos_dashboard.models import CartLine, CustomizationSpec, OrderDetails
from pos_dashboard.ordering import add_food_to_cart, add_resolved_to_cart, build_order_payload, prepare_order


class TestCustomization:
    def test_pizza_defaults_to_first_size(self, resolver, foods):
        pending = resolver.begin(foods[0])

        assert pending.is_single
        assert pending.selected == ["9 Inch"]
        assert pending.confirm().tags == ("9 Inch",)

    def test_single_choice_switches_and_deselects(self, resolver, foods):
        pending = resolver.begin(foods[0])
        pending.toggle("16 Inch")
        assert pending.selected == ["16 Inch"]

        pending.toggle("16 Inch")
        assert pending.selected == []
        with pytest.raises(SelectionRequiredError) as exc_info:
            pending.confirm()
        assert "Margherita Pizza" in exc_info.value.message

    def test_burger_accepts_any_subset(self, resolver, foods):
        pending = resolver.begin(foods[1])
        assert not pending.is_single
        assert pending.confirm().tags == ()

        pending.toggle("Extra Spicy")
        pending.toggle("Extra Patty")
        pending.toggle("Not An Option")
        assert pending.confirm(notes="well done").tags == ("Extra Spicy", "Extra Patty")

    def test_plain_items_need_no_choice(self, resolver, foods):
        assert resolver.begin(foods[2]) is None

    def test_first_matching_pattern_wins(self):
        table = [
            ("burger", CustomizationSpec(MULTIPLE, ("Cheese",))),
            ("pizza", CustomizationSpec(SINGLE, ("Small", "Large"))),
        ]
        spec = customization_spec_for_name("Pizza Burger", table)

        assert spec.mode == MULTIPLE
        assert CustomizationResolver(table).spec_for("Pizza Burger") == spec

    def test_pattern_match_is_case_insensitive(self):
        table = [("BBQ", CustomizationSpec(SINGLE, ("Mild", "Hot")))]

        assert customization_spec_for_name("Smoky bbq wings", table).options == ("Mild", "Hot")
        assert customization_spec_for_name("Salad", table) is None

    def test_format_line_notes(self):
        assert format_line_notes(("12 Inch",), "no olives") == "Options: 12 Inch | no olives"
        assert format_line_notes((), "  extra napkins ") == "extra napkins"
        assert format_line_notes(("Extra Patty", "Extra Sauce")) == "Options: Extra Patty, Extra Sauce"
        assert format_line_notes(()) == ""


class TestAddToCart:
    def test_plain_item_goes_straight_in(self, catalog, resolver, cart):
        outcome = add_food_to_cart(catalog, resolver, cart, 3)

        assert isinstance(outcome, CartLine)
        assert cart.item_count == 1

    def test_special_item_waits_for_selection(self, catalog, resolver, cart):
        outcome = add_food_to_cart(catalog, resolver, cart, 1)

        assert isinstance(outcome, PendingCustomization)
        assert cart.is_empty

        add_resolved_to_cart(cart, outcome.confirm("thin crust"))
        line = cart.lines[0]
        assert line.customizations == ("9 Inch",)
        assert line.notes == "thin crust"

    def test_unavailable_or_unknown_item_is_ignored(self, catalog, resolver, cart):
        assert add_food_to_cart(catalog, resolver, cart, 5) is None
        assert add_food_to_cart(catalog, resolver, cart, 404) is None
        assert cart.is_empty


class TestOrderPayload:
    def test_dine_in_payload(self, catalog, resolver, cart):
        pending = add_food_to_cart(catalog, resolver, cart, 1)
        pending.toggle("12 Inch")
        add_resolved_to_cart(cart, pending.confirm("no olives"))
        salad = add_food_to_cart(catalog, resolver, cart, 3)
        cart.update_quantity(salad.line_id, 1)

        payload = build_order_payload(cart, OrderDetails(order_type="DineIn", table_number="7"))

        assert payload == {
            "type": "DineIn",
            "tableNumber": "7",
            "items": [
                {"foodId": 1, "quantity": 1, "notes": "Options: 12 Inch | no olives"},
                {"foodId": 3, "quantity": 2, "notes": ""},
            ],
        }

    def test_takeaway_payload_has_customer_fields(self, catalog, resolver, cart):
        add_food_to_cart(catalog, resolver, cart, 4)
        details = OrderDetails(order_type="Takeaway", customer_name=" Kim ", customer_phone="555-0101")

        payload = build_order_payload(cart, details)

        assert payload["customerName"] == "Kim"
        assert payload["customerPhone"] == "555-0101"
        assert "tableNumber" not in payload

    def test_empty_cart_is_rejected(self, cart, tables):
        with pytest.raises(OrderValidationError) as exc_info:
            prepare_order(cart, OrderDetails(table_number="7"), tables, [], [])

        assert exc_info.value.error_code == "EMPTY_CART"

    def test_prepare_order_validates_before_building(self, catalog, resolver, cart, tables):
        add_food_to_cart(catalog, resolver, cart, 3)

        with pytest.raises(OrderValidationError):
            prepare_order(cart, OrderDetails(table_number="404"), tables, [], [])

        payload = prepare_order(cart, OrderDetails(table_number="7"), tables, [], [])
        assert payload["tableNumber"] == "7"
        assert cart.item_count == 1
