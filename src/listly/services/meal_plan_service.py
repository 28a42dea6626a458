"""Meal planning service."""
from datetime import date
from typing import Optional, List, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

from listly.domain.errors import NotFoundError, ValidationError
from listly.models import MealPlan, MealType, Recipe
from .base_service import BaseService, Result


def find_meal_plans(
    session: Session,
    user_id: int,
    start_date: date,
    end_date: date,
    meal_type: Optional[MealType] = None
) -> List[MealPlan]:
    """
    Get a user's meal plans with a date in [start_date, end_date].

    Args:
        session: Database session
        user_id: ID of the planning user
        start_date: First day, inclusive
        end_date: Last day, inclusive
        meal_type: Only this meal type

    Returns:
        Meal plans ordered by date, then meal type
    """
    query = select(MealPlan).where(
        MealPlan.user_id == user_id,
        MealPlan.date >= start_date,
        MealPlan.date <= end_date
    )
    if meal_type is not None:
        query = query.where(MealPlan.meal_type == meal_type)
    query = query.order_by(MealPlan.date, MealPlan.meal_type, MealPlan.id)
    return list(session.execute(query).scalars().all())


class MealPlanService(BaseService):
    """Service for the current user's meal plans."""

    def create_meal_plan(
        self,
        date: date,
        meal_type: Union[MealType, str],
        recipe_id: Optional[int] = None,
        notes: Optional[str] = None
    ) -> Result[MealPlan]:
        """
        Plan a meal.

        Several meals may share a date and meal type.

        Args:
            date: Day of the meal
            meal_type: BREAKFAST, LUNCH, DINNER or SNACK
            recipe_id: One of the user's recipes (optional)
            notes: Free-text notes

        Returns:
            Result containing the meal plan or error
        """
        try:
            meal_type = self._parse_meal_type(meal_type)

            with self.transaction.transaction() as session:
                if recipe_id is not None:
                    recipe = session.get(Recipe, recipe_id)
                    if recipe is None or recipe.user_id != self.user_id:
                        raise NotFoundError("Recipe")

                meal_plan = MealPlan(
                    date=date,
                    meal_type=meal_type,
                    recipe_id=recipe_id,
                    notes=notes,
                    is_completed=False,
                    user_id=self.user_id,
                    created_by=self.user_id
                )
                session.add(meal_plan)
                session.flush()

                self._log_action(
                    "create_meal_plan",
                    meal_plan_id=meal_plan.id,
                    date=date.isoformat(),
                    meal_type=meal_type.value
                )
                return Result.ok(meal_plan)

        except Exception as e:
            return self._handle_error("create_meal_plan", e)

    def find_by_user(
        self,
        start_date: date,
        end_date: date,
        meal_type: Union[MealType, str, None] = None
    ) -> Result[List[MealPlan]]:
        """Get the user's meal plans in a date range, inclusive."""
        try:
            if start_date > end_date:
                raise ValidationError("Start date must not be after end date")
            if meal_type is not None:
                meal_type = self._parse_meal_type(meal_type)

            with self.transaction.transaction() as session:
                return Result.ok(
                    find_meal_plans(session, self.user_id, start_date, end_date, meal_type)
                )

        except Exception as e:
            return self._handle_error("find_by_user", e)

    def set_completed(self, meal_plan_id: int, is_completed: bool = True) -> Result[MealPlan]:
        """Mark a planned meal as eaten, or not."""
        try:
            with self.transaction.transaction() as session:
                meal_plan = self._get_owned(meal_plan_id)
                meal_plan.is_completed = is_completed
                meal_plan.updated_by = self.user_id
                session.flush()

                self._log_action("set_completed", meal_plan_id=meal_plan_id, is_completed=is_completed)
                return Result.ok(meal_plan)

        except Exception as e:
            return self._handle_error("set_completed", e)

    def delete_meal_plan(self, meal_plan_id: int) -> Result[int]:
        """Remove a planned meal."""
        try:
            with self.transaction.transaction() as session:
                session.delete(self._get_owned(meal_plan_id))
                session.flush()

                self._log_action("delete_meal_plan", meal_plan_id=meal_plan_id)
                return Result.ok(meal_plan_id)

        except Exception as e:
            return self._handle_error("delete_meal_plan", e)

    def _get_owned(self, meal_plan_id: int) -> MealPlan:
        meal_plan = self.session.get(MealPlan, meal_plan_id)
        if meal_plan is None or meal_plan.user_id != self.user_id:
            raise NotFoundError("Meal plan")
        return meal_plan

    def _parse_meal_type(self, value: Union[MealType, str]) -> MealType:
        if isinstance(value, MealType):
            return value
        try:
            return MealType(str(value).strip().upper())
        except ValueError:
            raise ValidationError(
                f"Invalid meal type: {value!r}",
                suggestions=[meal_type.value for meal_type in MealType]
            ) from None
