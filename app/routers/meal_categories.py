from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.meal import MealCategory
from app.schemas.meals import MealCategoryResponse

router = APIRouter(prefix="/meal-categories", tags=["Meals"])


@router.get("", response_model=List[MealCategoryResponse])
def list_meal_categories(db: Session = Depends(get_db)):
    return db.query(MealCategory).order_by(MealCategory.display_order).all()
