from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from app.models.ingredient import IngredientUnit


class MealCategoryResponse(BaseModel):
    id: UUID
    name: str
    display_order: int
    icon: Optional[str] = None

    class Config:
        from_attributes = True


class IngredientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    unit: IngredientUnit
    category: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class IngredientUpdate(IngredientCreate):
    pass


class IngredientResponse(BaseModel):
    id: UUID
    name: str
    unit: IngredientUnit
    category: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class IngredientMutationResponse(BaseModel):
    success: bool = True
    ingredient: IngredientResponse


class MealCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category_id: UUID
    description: Optional[str] = None
    calories: Optional[int] = Field(None, ge=0)
    protein: Optional[float] = Field(None, ge=0)
    carbs: Optional[float] = Field(None, ge=0)
    fats: Optional[float] = Field(None, ge=0)


class MealUpdate(MealCreate):
    is_active: bool = True


class MealResponse(BaseModel):
    id: UUID
    name: str
    category_id: UUID
    category: Optional[MealCategoryResponse] = None
    description: Optional[str] = None
    calories: Optional[int] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fats: Optional[float] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MealIngredientCreate(BaseModel):
    ingredient_id: UUID
    quantity: float = Field(..., gt=0)
    notes: Optional[str] = None


class IngredientBrief(BaseModel):
    id: UUID
    name: str
    unit: IngredientUnit
    category: Optional[str] = None

    class Config:
        from_attributes = True


class MealIngredientResponse(BaseModel):
    id: UUID
    meal_id: UUID
    ingredient_id: UUID
    quantity: float
    notes: Optional[str] = None
    created_at: datetime
    ingredient: Optional[IngredientBrief] = None

    class Config:
        from_attributes = True


class MealDetailResponse(MealResponse):
    ingredients: List[MealIngredientResponse] = []


class MealMutationResponse(BaseModel):
    success: bool = True
    meal: MealResponse


class MealIngredientMutationResponse(BaseModel):
    success: bool = True
    meal_ingredient: MealIngredientResponse
