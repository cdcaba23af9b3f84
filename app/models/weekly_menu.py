import uuid
from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base


class Program(Base):
    """Meal plan line sold to clients (e.g. Keto, Fit). Each week gets one menu per program."""
    __tablename__ = "programs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    menus = relationship("WeeklyMenu", back_populates="program")


class WeeklyMenu(Base):
    __tablename__ = "weekly_menus"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    program_id = Column(
        UUID(as_uuid=True),
        ForeignKey("programs.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False)
    is_active = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    program = relationship("Program", back_populates="menus")
    items = relationship(
        "WeeklyMenuItem",
        back_populates="menu",
        cascade="all, delete-orphan",
        order_by="WeeklyMenuItem.day_of_week",
    )


class WeeklyMenuItem(Base):
    """One meal served on one day (1 = Monday ... 7 = Sunday) in one category slot"""
    __tablename__ = "weekly_menu_items"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_weekly_menu_items_day_of_week"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    weekly_menu_id = Column(
        UUID(as_uuid=True),
        ForeignKey("weekly_menus.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day_of_week = Column(Integer, nullable=False)
    meal_category_id = Column(
        UUID(as_uuid=True),
        ForeignKey("meal_categories.id", ondelete="RESTRICT"),
        nullable=False,
    )
    meal_id = Column(UUID(as_uuid=True), ForeignKey("meals.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    menu = relationship("WeeklyMenu", back_populates="items")
    meal = relationship("Meal")
    category = relationship("MealCategory")
