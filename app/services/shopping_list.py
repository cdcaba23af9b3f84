"""
Shopping list for one weekly menu: every ingredient of every planned meal,
summed per ingredient and grouped by ingredient category.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from app.models.ingredient import DEFAULT_INGREDIENT_CATEGORY
from app.models.meal import Meal, MealIngredient
from app.models.weekly_menu import WeeklyMenuItem

logger = logging.getLogger(__name__)


@dataclass
class ShoppingListEntry:
    ingredient_id: UUID
    name: str
    quantity: float
    unit: str
    category: str


@dataclass
class ShoppingList:
    groups: Dict[str, List[ShoppingListEntry]]

    @property
    def total_items(self) -> int:
        return sum(len(entries) for entries in self.groups.values())


def build_shopping_list(items: Iterable[WeeklyMenuItem]) -> ShoppingList:
    """
    Sum quantities per ingredient across the menu items.

    A meal planned twice contributes twice. Quantities are added as stored,
    so an ingredient entered with mixed units is summed anyway and logged.
    """
    totals: Dict[UUID, ShoppingListEntry] = {}
    for item in items:
        meal = item.meal
        if meal is None:
            continue
        for mi in meal.ingredients:
            ingredient = mi.ingredient
            if ingredient is None:
                continue
            entry = totals.get(ingredient.id)
            if entry is None:
                totals[ingredient.id] = ShoppingListEntry(
                    ingredient_id=ingredient.id,
                    name=ingredient.name,
                    quantity=mi.quantity,
                    unit=ingredient.unit,
                    category=ingredient.category or DEFAULT_INGREDIENT_CATEGORY,
                )
                continue
            if entry.unit != ingredient.unit:
                logger.warning(
                    "Ingredient %s summed across units %s and %s", ingredient.name, entry.unit, ingredient.unit
                )
            entry.quantity += mi.quantity

    groups: Dict[str, List[ShoppingListEntry]] = {}
    for entry in totals.values():
        groups.setdefault(entry.category, []).append(entry)
    for entries in groups.values():
        entries.sort(key=lambda e: e.name.casefold())
    return ShoppingList(groups=groups)


def load_menu_items(db: Session, menu_id: UUID) -> List[WeeklyMenuItem]:
    return (
        db.query(WeeklyMenuItem)
        .options(
            joinedload(WeeklyMenuItem.meal)
            .joinedload(Meal.ingredients)
            .joinedload(MealIngredient.ingredient)
        )
        .filter(WeeklyMenuItem.weekly_menu_id == menu_id)
        .all()
    )
