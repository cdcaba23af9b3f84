# Database models
from .base import Base
from .manual_client import ManualClient
from .manual_order import ManualOrder, DEFAULT_PAYMENT_METHOD, DEFAULT_ORDER_STATUS
from .cached_client import CachedClient, ClientSource
from .cached_client_order import CachedClientOrder
from .ingredient import Ingredient, IngredientUnit, DEFAULT_INGREDIENT_CATEGORY
from .meal import MealCategory, Meal, MealIngredient
from .weekly_menu import Program, WeeklyMenu, WeeklyMenuItem

__all__ = [
    "Base",
    "ManualClient",
    "ManualOrder",
    "DEFAULT_PAYMENT_METHOD",
    "DEFAULT_ORDER_STATUS",
    "CachedClient",
    "ClientSource",
    "CachedClientOrder",
    "Ingredient",
    "IngredientUnit",
    "DEFAULT_INGREDIENT_CATEGORY",
    "MealCategory",
    "Meal",
    "MealIngredient",
    "Program",
    "WeeklyMenu",
    "WeeklyMenuItem",
]
