"""
Ingredient catalog CRUD.
"""
import logging
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.ingredient import Ingredient
from app.models.meal import MealIngredient
from app.schemas.clients import DeleteResponse
from app.schemas.meals import (
    IngredientCreate,
    IngredientMutationResponse,
    IngredientResponse,
    IngredientUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ingredients", tags=["Ingredients"])

DUPLICATE_NAME = "Namirnica sa ovim imenom već postoji"


def _get_ingredient(db: Session, ingredient_id: UUID) -> Ingredient:
    ingredient = db.query(Ingredient).filter(Ingredient.id == ingredient_id).first()
    if not ingredient:
        raise HTTPException(status_code=404, detail="Namirnica nije pronađena")
    return ingredient


@router.get("", response_model=List[IngredientResponse])
def list_ingredients(
    search: Optional[str] = Query(None, description="Substring of the ingredient name"),
    category: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(Ingredient)
    if search:
        query = query.filter(Ingredient.name.ilike(f"%{search}%"))
    if category:
        query = query.filter(Ingredient.category == category)
    return query.order_by(Ingredient.name).all()


@router.post("", response_model=IngredientMutationResponse, status_code=status.HTTP_201_CREATED)
def create_ingredient(
    data: IngredientCreate,
    db: Session = Depends(get_db),
):
    if db.query(Ingredient).filter(Ingredient.name == data.name).first():
        raise HTTPException(status_code=409, detail=DUPLICATE_NAME)

    ingredient = Ingredient(
        name=data.name,
        unit=data.unit,
        category=data.category or None,
        notes=data.notes or None,
    )
    db.add(ingredient)
    db.commit()
    db.refresh(ingredient)
    logger.info("Created ingredient %s (%s)", ingredient.name, ingredient.id)
    return IngredientMutationResponse(ingredient=IngredientResponse.model_validate(ingredient))


@router.get("/{ingredient_id}", response_model=IngredientResponse)
def get_ingredient(
    ingredient_id: UUID,
    db: Session = Depends(get_db),
):
    return _get_ingredient(db, ingredient_id)


@router.put("/{ingredient_id}", response_model=IngredientMutationResponse)
def update_ingredient(
    ingredient_id: UUID,
    data: IngredientUpdate,
    db: Session = Depends(get_db),
):
    ingredient = _get_ingredient(db, ingredient_id)

    clash = (
        db.query(Ingredient)
        .filter(Ingredient.name == data.name, Ingredient.id != ingredient_id)
        .first()
    )
    if clash:
        raise HTTPException(status_code=409, detail=DUPLICATE_NAME)

    ingredient.name = data.name
    ingredient.unit = data.unit
    ingredient.category = data.category or None
    ingredient.notes = data.notes or None

    db.commit()
    db.refresh(ingredient)
    return IngredientMutationResponse(ingredient=IngredientResponse.model_validate(ingredient))


@router.delete("/{ingredient_id}", response_model=DeleteResponse)
def delete_ingredient(
    ingredient_id: UUID,
    db: Session = Depends(get_db),
):
    ingredient = _get_ingredient(db, ingredient_id)

    used = db.query(MealIngredient).filter(MealIngredient.ingredient_id == ingredient_id).count()
    if used:
        raise HTTPException(status_code=409, detail="Namirnica se koristi u jelima i ne može biti obrisana")

    db.delete(ingredient)
    db.commit()
    logger.info("Deleted ingredient %s", ingredient_id)
    return DeleteResponse()
