"""
Meal catalog CRUD and the ingredients of each meal.
"""
import logging
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, joinedload

from app.database import get_db
from app.models.ingredient import Ingredient
from app.models.meal import Meal, MealCategory, MealIngredient
from app.schemas.clients import DeleteResponse
from app.schemas.meals import (
    MealCreate,
    MealDetailResponse,
    MealIngredientCreate,
    MealIngredientMutationResponse,
    MealIngredientResponse,
    MealMutationResponse,
    MealResponse,
    MealUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/meals", tags=["Meals"])

DUPLICATE_NAME = "Jelo sa ovim imenom već postoji"


def _get_meal(db: Session, meal_id: UUID, detail: bool = False) -> Meal:
    query = db.query(Meal).options(joinedload(Meal.category))
    if detail:
        query = query.options(joinedload(Meal.ingredients).joinedload(MealIngredient.ingredient))
    meal = query.filter(Meal.id == meal_id).first()
    if not meal:
        raise HTTPException(status_code=404, detail="Jelo nije pronađeno")
    return meal


def _require_category(db: Session, category_id: UUID) -> None:
    if not db.query(MealCategory).filter(MealCategory.id == category_id).first():
        raise HTTPException(status_code=404, detail="Meal category not found")


@router.get("", response_model=List[MealResponse])
def list_meals(
    search: Optional[str] = Query(None, description="Substring of the meal name"),
    category: Optional[UUID] = Query(None, description="Meal category id"),
    db: Session = Depends(get_db),
):
    query = db.query(Meal).options(joinedload(Meal.category))
    if search:
        query = query.filter(Meal.name.ilike(f"%{search}%"))
    if category:
        query = query.filter(Meal.category_id == category)
    return query.order_by(Meal.name).all()


@router.post("", response_model=MealMutationResponse, status_code=status.HTTP_201_CREATED)
def create_meal(
    data: MealCreate,
    db: Session = Depends(get_db),
):
    if db.query(Meal).filter(Meal.name == data.name).first():
        raise HTTPException(status_code=409, detail=DUPLICATE_NAME)
    _require_category(db, data.category_id)

    meal = Meal(
        name=data.name,
        category_id=data.category_id,
        description=data.description or None,
        calories=data.calories,
        protein=data.protein,
        carbs=data.carbs,
        fats=data.fats,
        is_active=True,
    )
    db.add(meal)
    db.commit()
    db.refresh(meal)
    logger.info("Created meal %s (%s)", meal.name, meal.id)
    return MealMutationResponse(meal=MealResponse.model_validate(meal))


@router.get("/{meal_id}", response_model=MealDetailResponse)
def get_meal(
    meal_id: UUID,
    db: Session = Depends(get_db),
):
    """Meal with its category and ingredient list"""
    return _get_meal(db, meal_id, detail=True)


@router.put("/{meal_id}", response_model=MealMutationResponse)
def update_meal(
    meal_id: UUID,
    data: MealUpdate,
    db: Session = Depends(get_db),
):
    meal = _get_meal(db, meal_id)

    clash = db.query(Meal).filter(Meal.name == data.name, Meal.id != meal_id).first()
    if clash:
        raise HTTPException(status_code=409, detail=DUPLICATE_NAME)
    if data.category_id != meal.category_id:
        _require_category(db, data.category_id)

    meal.name = data.name
    meal.category_id = data.category_id
    meal.description = data.description or None
    meal.calories = data.calories
    meal.protein = data.protein
    meal.carbs = data.carbs
    meal.fats = data.fats
    meal.is_active = data.is_active

    db.commit()
    db.refresh(meal)
    return MealMutationResponse(meal=MealResponse.model_validate(meal))


@router.delete("/{meal_id}", response_model=DeleteResponse)
def delete_meal(
    meal_id: UUID,
    db: Session = Depends(get_db),
):
    """Deletes the meal with its ingredient rows and every menu slot serving it."""
    meal = _get_meal(db, meal_id)
    db.delete(meal)
    db.commit()
    logger.info("Deleted meal %s", meal_id)
    return DeleteResponse()


@router.get("/{meal_id}/meal-ingredients", response_model=List[MealIngredientResponse])
def list_meal_ingredients(
    meal_id: UUID,
    db: Session = Depends(get_db),
):
    return (
        db.query(MealIngredient)
        .options(joinedload(MealIngredient.ingredient))
        .filter(MealIngredient.meal_id == meal_id)
        .order_by(MealIngredient.created_at)
        .all()
    )


@router.post(
    "/{meal_id}/meal-ingredients",
    response_model=MealIngredientMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_meal_ingredient(
    meal_id: UUID,
    data: MealIngredientCreate,
    db: Session = Depends(get_db),
):
    if not db.query(Meal).filter(Meal.id == meal_id).first():
        raise HTTPException(status_code=404, detail="Meal not found")
    if not db.query(Ingredient).filter(Ingredient.id == data.ingredient_id).first():
        raise HTTPException(status_code=404, detail="Ingredient not found")

    existing = (
        db.query(MealIngredient)
        .filter(MealIngredient.meal_id == meal_id, MealIngredient.ingredient_id == data.ingredient_id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=400, detail="Ingredient already added to this meal")

    meal_ingredient = MealIngredient(
        meal_id=meal_id,
        ingredient_id=data.ingredient_id,
        quantity=data.quantity,
        notes=data.notes or None,
    )
    db.add(meal_ingredient)
    db.commit()
    db.refresh(meal_ingredient)
    return MealIngredientMutationResponse(meal_ingredient=MealIngredientResponse.model_validate(meal_ingredient))


@router.delete("/{meal_id}/meal-ingredients", response_model=DeleteResponse)
def remove_meal_ingredient(
    meal_id: UUID,
    ingredient_id: UUID = Query(..., description="Ingredient to remove from the meal"),
    db: Session = Depends(get_db),
):
    deleted = (
        db.query(MealIngredient)
        .filter(MealIngredient.meal_id == meal_id, MealIngredient.ingredient_id == ingredient_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    if not deleted:
        raise HTTPException(status_code=404, detail="Ingredient is not part of this meal")
    return DeleteResponse()
