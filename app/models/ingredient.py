import enum
import uuid
from sqlalchemy import Column, String, Text, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base

DEFAULT_INGREDIENT_CATEGORY = "Ostalo"


class IngredientUnit(str, enum.Enum):
    KG = "kg"
    G = "g"
    L = "L"
    ML = "ml"
    PIECE = "kom"
    PACK = "pakovanje"


class Ingredient(Base):
    """Raw ingredient bought for the kitchen. category groups the shopping list."""
    __tablename__ = "ingredients"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False, index=True)
    unit = Column(
        Enum(IngredientUnit, values_callable=lambda e: [m.value for m in e], name="ingredientunit"),
        nullable=False,
    )
    category = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    meal_ingredients = relationship("MealIngredient", back_populates="ingredient", passive_deletes="all")
