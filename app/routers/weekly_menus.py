"""
Weekly menus: one menu per program per week, filled with meals per day and
category slot, plus the aggregated shopping list for a menu.
"""
import logging
from datetime import date
from dataclasses import asdict
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, joinedload

from app.database import get_db
from app.models.meal import Meal, MealCategory
from app.models.weekly_menu import Program, WeeklyMenu, WeeklyMenuItem
from app.schemas.clients import DeleteResponse
from app.schemas.weekly_menus import (
    CountResponse,
    DeleteWeekRequest,
    MenuCopyRequest,
    ShoppingListEntry,
    ShoppingListResponse,
    WeeklyMenuBulkResponse,
    WeeklyMenuCreate,
    WeeklyMenuDetailResponse,
    WeeklyMenuItemCreate,
    WeeklyMenuItemMutationResponse,
    WeeklyMenuItemResponse,
    WeeklyMenuResponse,
)
from app.services.shopping_list import build_shopping_list, load_menu_items

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/weekly-menus", tags=["Weekly menus"])


def _get_menu(db: Session, menu_id: UUID, detail: bool = False) -> WeeklyMenu:
    query = db.query(WeeklyMenu).options(joinedload(WeeklyMenu.program))
    if detail:
        query = query.options(
            joinedload(WeeklyMenu.items).joinedload(WeeklyMenuItem.meal),
            joinedload(WeeklyMenu.items).joinedload(WeeklyMenuItem.category),
        )
    menu = query.filter(WeeklyMenu.id == menu_id).first()
    if not menu:
        raise HTTPException(status_code=404, detail="Menu not found")
    return menu


@router.get("", response_model=List[WeeklyMenuResponse])
def list_weekly_menus(
    start_date: Optional[date] = Query(None, description="Only menus of the week starting on this date"),
    db: Session = Depends(get_db),
):
    query = db.query(WeeklyMenu).options(joinedload(WeeklyMenu.program))
    if start_date:
        query = query.filter(WeeklyMenu.start_date == start_date)
    return query.order_by(WeeklyMenu.start_date).all()


@router.post("", response_model=WeeklyMenuBulkResponse, status_code=status.HTTP_201_CREATED)
def create_weekly_menus(
    data: WeeklyMenuCreate,
    db: Session = Depends(get_db),
):
    """Create the week's menu for each selected program. New menus start inactive."""
    program_ids = list(dict.fromkeys(data.program_ids)) or ([data.program_id] if data.program_id else [])
    if not program_ids:
        raise HTTPException(status_code=400, detail="No programs selected")
    if data.end_date < data.start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")

    found = db.query(Program).filter(Program.id.in_(program_ids)).count()
    if found != len(program_ids):
        raise HTTPException(status_code=404, detail="Program not found")

    menus = [
        WeeklyMenu(
            program_id=program_id,
            name=data.name,
            start_date=data.start_date,
            end_date=data.end_date,
            is_active=False,
        )
        for program_id in program_ids
    ]
    db.add_all(menus)
    db.commit()
    for menu in menus:
        db.refresh(menu)
    logger.info("Created %s weekly menus for week %s", len(menus), data.start_date)
    return WeeklyMenuBulkResponse(menus=[WeeklyMenuResponse.model_validate(m) for m in menus])


@router.post("/copy", response_model=CountResponse)
def copy_menu_items(
    data: MenuCopyRequest,
    db: Session = Depends(get_db),
):
    """Replace every item of the target menu with copies of the source menu's items."""
    if data.source_menu_id == data.target_menu_id:
        raise HTTPException(status_code=400, detail="Source and target menu must differ")

    source_items = (
        db.query(WeeklyMenuItem)
        .filter(WeeklyMenuItem.weekly_menu_id == data.source_menu_id)
        .all()
    )
    if not source_items:
        return CountResponse(message="No items to copy", count=0)

    _get_menu(db, data.target_menu_id)

    db.query(WeeklyMenuItem).filter(
        WeeklyMenuItem.weekly_menu_id == data.target_menu_id
    ).delete(synchronize_session=False)
    db.add_all([
        WeeklyMenuItem(
            weekly_menu_id=data.target_menu_id,
            day_of_week=item.day_of_week,
            meal_category_id=item.meal_category_id,
            meal_id=item.meal_id,
        )
        for item in source_items
    ])
    db.commit()
    logger.info("Copied %s items from menu %s to %s", len(source_items), data.source_menu_id, data.target_menu_id)
    return CountResponse(count=len(source_items))


@router.post("/delete-week", response_model=CountResponse)
def delete_week(
    data: DeleteWeekRequest,
    db: Session = Depends(get_db),
):
    """Delete every program's menu for the week starting on start_date."""
    menu_ids = [
        row.id for row in db.query(WeeklyMenu.id).filter(WeeklyMenu.start_date == data.start_date).all()
    ]
    if not menu_ids:
        return CountResponse(message="No menus found for this week", count=0)

    db.query(WeeklyMenuItem).filter(
        WeeklyMenuItem.weekly_menu_id.in_(menu_ids)
    ).delete(synchronize_session=False)
    db.query(WeeklyMenu).filter(WeeklyMenu.id.in_(menu_ids)).delete(synchronize_session=False)
    db.commit()
    logger.info("Deleted %s weekly menus for week %s", len(menu_ids), data.start_date)
    return CountResponse(message="Weekly menus deleted", count=len(menu_ids))


@router.delete("/delete-all", response_model=CountResponse)
def delete_all_menus(db: Session = Depends(get_db)):
    db.query(WeeklyMenuItem).delete(synchronize_session=False)
    count = db.query(WeeklyMenu).delete(synchronize_session=False)
    db.commit()
    logger.warning("Deleted all weekly menus (%s)", count)
    return CountResponse(message="All weekly menus deleted", count=count)


@router.get("/{menu_id}", response_model=WeeklyMenuDetailResponse)
def get_weekly_menu(
    menu_id: UUID,
    db: Session = Depends(get_db),
):
    return _get_menu(db, menu_id, detail=True)


@router.delete("/{menu_id}", response_model=DeleteResponse)
def delete_weekly_menu(
    menu_id: UUID,
    db: Session = Depends(get_db),
):
    menu = _get_menu(db, menu_id)
    db.delete(menu)
    db.commit()
    logger.info("Deleted weekly menu %s", menu_id)
    return DeleteResponse()


@router.post("/{menu_id}/items", response_model=WeeklyMenuItemMutationResponse, status_code=status.HTTP_201_CREATED)
def add_menu_item(
    menu_id: UUID,
    data: WeeklyMenuItemCreate,
    db: Session = Depends(get_db),
):
    _get_menu(db, menu_id)
    if not db.query(Meal).filter(Meal.id == data.meal_id).first():
        raise HTTPException(status_code=404, detail="Meal not found")
    if not db.query(MealCategory).filter(MealCategory.id == data.meal_category_id).first():
        raise HTTPException(status_code=404, detail="Meal category not found")

    item = WeeklyMenuItem(
        weekly_menu_id=menu_id,
        day_of_week=data.day_of_week,
        meal_category_id=data.meal_category_id,
        meal_id=data.meal_id,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return WeeklyMenuItemMutationResponse(item=WeeklyMenuItemResponse.model_validate(item))


@router.delete("/{menu_id}/items", response_model=DeleteResponse)
def remove_menu_item(
    menu_id: UUID,
    item_id: UUID = Query(..., alias="id", description="Menu item to remove"),
    db: Session = Depends(get_db),
):
    # Scoped to the menu so an item id from another menu is never deleted
    deleted = (
        db.query(WeeklyMenuItem)
        .filter(WeeklyMenuItem.id == item_id, WeeklyMenuItem.weekly_menu_id == menu_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    if not deleted:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return DeleteResponse()


@router.get("/{menu_id}/shopping-list", response_model=ShoppingListResponse)
def get_shopping_list(
    menu_id: UUID,
    db: Session = Depends(get_db),
):
    """Ingredients for every meal on the menu, summed per ingredient and grouped by category."""
    _get_menu(db, menu_id)
    shopping_list = build_shopping_list(load_menu_items(db, menu_id))
    return ShoppingListResponse(
        shopping_list={
            category: [ShoppingListEntry(**asdict(entry)) for entry in entries]
            for category, entries in shopping_list.groups.items()
        },
        total_items=shopping_list.total_items,
    )
