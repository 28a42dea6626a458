"""MealPlan model for Listly."""
import enum
import datetime as dt
from typing import Optional
from sqlalchemy import Date, ForeignKey, Boolean, Text, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class MealType(str, enum.Enum):
    """Slot of the day a meal is planned for."""
    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    DINNER = "DINNER"
    SNACK = "SNACK"


class MealPlan(Base, TimestampMixin):
    """A planned meal; several may share a date and meal type."""

    __tablename__ = "meal_plans"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    meal_type: Mapped[MealType] = mapped_column(Enum(MealType, name="meal_type"), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    recipe_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("recipes.id", ondelete="SET NULL")
    )

    recipe = relationship("Recipe")

    def __repr__(self) -> str:
        return f"<MealPlan(id={self.id}, date={self.date}, meal_type={self.meal_type})>"
