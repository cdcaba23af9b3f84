from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional, List, Dict
from uuid import UUID

from app.models.ingredient import IngredientUnit


class ProgramResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class ProgramBrief(BaseModel):
    id: UUID
    name: str

    class Config:
        from_attributes = True


class WeeklyMenuCreate(BaseModel):
    """One menu is created per program; program_ids wins over program_id"""
    name: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date
    program_ids: List[UUID] = []
    program_id: Optional[UUID] = None


class WeeklyMenuResponse(BaseModel):
    id: UUID
    program_id: UUID
    program: Optional[ProgramBrief] = None
    name: str
    start_date: date
    end_date: date
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WeeklyMenuBulkResponse(BaseModel):
    success: bool = True
    menus: List[WeeklyMenuResponse]


class MealBrief(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class CategoryBrief(BaseModel):
    id: UUID
    name: str

    class Config:
        from_attributes = True


class WeeklyMenuItemCreate(BaseModel):
    day_of_week: int = Field(..., ge=1, le=7)
    meal_category_id: UUID
    meal_id: UUID


class WeeklyMenuItemResponse(BaseModel):
    id: UUID
    weekly_menu_id: UUID
    day_of_week: int
    meal_category_id: UUID
    meal_id: UUID
    meal: Optional[MealBrief] = None
    category: Optional[CategoryBrief] = None
    created_at: datetime

    class Config:
        from_attributes = True


class WeeklyMenuItemMutationResponse(BaseModel):
    success: bool = True
    item: WeeklyMenuItemResponse


class WeeklyMenuDetailResponse(WeeklyMenuResponse):
    items: List[WeeklyMenuItemResponse] = []


class MenuCopyRequest(BaseModel):
    source_menu_id: UUID
    target_menu_id: UUID


class DeleteWeekRequest(BaseModel):
    start_date: date


class CountResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    count: int


class ShoppingListEntry(BaseModel):
    ingredient_id: UUID
    name: str
    quantity: float
    unit: IngredientUnit
    category: str


class ShoppingListResponse(BaseModel):
    shopping_list: Dict[str, List[ShoppingListEntry]]
    total_items: int
