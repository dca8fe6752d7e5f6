"""Tests for weight estimation and product families."""

import pytest

from barfer.analytics.products import product_family, product_subcategory
from barfer.analytics.weight import (
    estimate_weight_kg,
    line_item_weight_kg,
    option_quantity,
    order_weight_kg,
)


class TestEstimateWeight:
    """Tests for estimate_weight_kg."""

    def test_big_dog_is_fixed(self):
        """Big Dog products weigh 15 kg whatever the option says."""
        assert estimate_weight_kg("BIG DOG POLLO 15KG", "anything") == 15

    def test_big_dog_case_insensitive(self):
        assert estimate_weight_kg("Big Dog (15kg)", "VACA") == 15

    def test_complemento_has_no_weight(self):
        assert estimate_weight_kg("Complemento Vitaminico", "250G") is None

    def test_complemento_ignores_kg_token(self):
        assert estimate_weight_kg("Complemento Omega", "1KG") is None

    def test_kg_token(self):
        assert estimate_weight_kg("Pollo", "5KG") == 5

    def test_decimal_kg_token_with_space(self):
        assert estimate_weight_kg("Vaca", "2.5 kg") == 2.5

    def test_first_token_wins(self):
        assert estimate_weight_kg("Cerdo", "10KG (2 x 5KG)") == 10

    def test_no_token(self):
        assert estimate_weight_kg("Pollo", "no-weight-here") is None

    def test_empty_inputs(self):
        assert estimate_weight_kg("", "") is None
        assert estimate_weight_kg(None, None) is None


class TestLineItemWeight:
    """Tests for quantity-weighted item and order weights."""

    def test_quantity_multiplies(self):
        item = {"name": "Pollo", "options": [{"name": "5KG", "quantity": 3}]}
        assert line_item_weight_kg(item) == 15

    def test_sums_options(self):
        item = {
            "name": "Perro Vaca",
            "options": [
                {"name": "5KG", "quantity": 1},
                {"name": "10KG", "quantity": 2},
            ],
        }
        assert line_item_weight_kg(item) == 25

    def test_missing_quantity_counts_as_one(self):
        assert option_quantity({}) == 1
        assert option_quantity({"quantity": "abc"}) == 1
        assert option_quantity({"quantity": 0}) == 1

    def test_malformed_entries_skipped(self):
        items = [
            "garbage",
            {"name": "Pollo", "options": ["bad", {"name": "5KG", "quantity": 1}]},
            {"name": "Gato", "options": None},
        ]
        assert order_weight_kg(items) == 5

    def test_non_list_items(self):
        assert order_weight_kg(None) == 0
        assert order_weight_kg({"name": "Pollo"}) == 0


class TestProductFamilies:
    """Tests for the ordered family rules."""

    @pytest.mark.parametrize(
        "name,family",
        [
            ("BIG DOG (15kg)", "BIG DOG"),
            ("Huesos Carnosos 5kg", "HUESOS CARNOSOS"),
            ("Complementos Omega", "COMPLEMENTOS"),
            ("Perro Pollo", "PERRO"),
            ("Gato Vaca", "GATO"),
            ("Remera Barfer", "OTROS"),
        ],
    )
    def test_family(self, name, family):
        assert product_family(name) == family

    def test_first_rule_wins(self):
        """A Big Dog product mentioning perro is still BIG DOG."""
        assert product_family("Big Dog para perro") == "BIG DOG"

    def test_big_dog_subcategory_uses_option(self):
        assert product_subcategory("BIG DOG (15kg)", "POLLO") == "big_dog_pollo"
        assert product_subcategory("BIG DOG (15kg)", "VACA") == "big_dog_vaca"
        assert product_subcategory("BIG DOG (15kg)", "") == "big_dog"

    def test_cat_before_dog_proteins(self):
        assert product_subcategory("Gato Pollo", "5KG") == "gato_pollo"
        assert product_subcategory("Perro Pollo", "5KG") == "pollo"

    def test_unknown_subcategory(self):
        assert product_subcategory("Remera", "M") == "otros"
