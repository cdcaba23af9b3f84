"""Tests for weekly menu shopping list aggregation (app/services/shopping_list.py)"""
import logging
import uuid

import pytest

from app.services.shopping_list import build_shopping_list
from tests.factories import make_ingredient, make_meal, make_meal_ingredient, make_menu_item


CHICKEN = make_ingredient(id=uuid.UUID("10000000-0000-4000-8000-000000000001"), name="Piletina", unit="kg", category="Meso")
RICE = make_ingredient(id=uuid.UUID("10000000-0000-4000-8000-000000000002"), name="pirinač", unit="kg", category=None)
BROCCOLI = make_ingredient(id=uuid.UUID("10000000-0000-4000-8000-000000000003"), name="Brokoli", unit="kg", category="Povrće")
CARROT = make_ingredient(id=uuid.UUID("10000000-0000-4000-8000-000000000004"), name="Šargarepa", unit="kg", category="Povrće")
AVOCADO = make_ingredient(id=uuid.UUID("10000000-0000-4000-8000-000000000005"), name="Avokado", unit="kom", category="Povrće")


def _meal(name, *parts):
    meal_id = uuid.uuid4()
    return make_meal(
        id=meal_id,
        name=name,
        ingredients=[make_meal_ingredient(meal_id=meal_id, ingredient=ing, quantity=qty) for ing, qty in parts],
    )


class TestBuildShoppingList:
    def test_same_ingredient_is_summed_across_meals_and_days(self):
        chicken_rice = _meal("Piletina sa pirinčem", (CHICKEN, 0.2), (RICE, 0.1))
        chicken_salad = _meal("Pileća salata", (CHICKEN, 0.15))
        items = [
            make_menu_item(meal=chicken_rice, day_of_week=1),
            make_menu_item(meal=chicken_rice, day_of_week=3),
            make_menu_item(meal=chicken_salad, day_of_week=2),
        ]

        result = build_shopping_list(items)

        chicken = result.groups["Meso"][0]
        assert chicken.ingredient_id == CHICKEN.id
        assert chicken.quantity == pytest.approx(0.55)
        assert chicken.unit == "kg"
        assert result.total_items == 2

    def test_missing_category_falls_back_to_ostalo(self):
        items = [make_menu_item(meal=_meal("Pirinač", (RICE, 0.1)))]
        result = build_shopping_list(items)
        assert list(result.groups) == ["Ostalo"]
        assert result.groups["Ostalo"][0].name == "pirinač"

    def test_names_are_sorted_within_category(self):
        items = [make_menu_item(meal=_meal("Povrće", (CARROT, 0.3), (BROCCOLI, 0.2), (AVOCADO, 1)))]
        result = build_shopping_list(items)
        assert [e.name for e in result.groups["Povrće"]] == ["Avokado", "Brokoli", "Šargarepa"]

    def test_sorting_ignores_case(self):
        lower = make_ingredient(id=uuid.uuid4(), name="banana", category="Voće")
        upper = make_ingredient(id=uuid.uuid4(), name="Ananas", category="Voće")
        items = [make_menu_item(meal=_meal("Voćna salata", (lower, 1), (upper, 1)))]
        result = build_shopping_list(items)
        assert [e.name for e in result.groups["Voće"]] == ["Ananas", "banana"]

    def test_mixed_units_are_summed_and_logged(self, caplog):
        grams = make_ingredient(id=CHICKEN.id, name="Piletina", unit="g", category="Meso")
        items = [
            make_menu_item(meal=_meal("A", (CHICKEN, 1))),
            make_menu_item(meal=_meal("B", (grams, 200))),
        ]

        with caplog.at_level(logging.WARNING, logger="app.services.shopping_list"):
            result = build_shopping_list(items)

        assert result.groups["Meso"][0].quantity == 201
        assert "summed across units" in caplog.text

    def test_empty_menu(self):
        result = build_shopping_list([])
        assert result.groups == {}
        assert result.total_items == 0

    def test_meal_without_ingredients_adds_nothing(self):
        result = build_shopping_list([make_menu_item(meal=_meal("Prazno"))])
        assert result.total_items == 0
