from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.weekly_menu import Program
from app.schemas.weekly_menus import ProgramResponse

router = APIRouter(prefix="/programs", tags=["Weekly menus"])


@router.get("", response_model=List[ProgramResponse])
def list_programs(db: Session = Depends(get_db)):
    return db.query(Program).order_by(Program.name).all()
