"""Shopping list generation from planned meals."""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, List, Dict, Iterable, Iterator, Union

from sqlalchemy import select, func
from sqlalchemy.orm import selectinload

from listly.domain.errors import ValidationError
from listly.domain.types import GenerateListCommand, ListInput
from listly.models import ShoppingList, ListStatus, ListItem, MealPlan, MealType, Recipe, RecipeIngredient
from .base_service import BaseService, Result
from .meal_plan_service import find_meal_plans


@dataclass
class AggregatedIngredient:
    """Summed quantity of one ingredient in one unit."""
    name: str
    quantity: Decimal
    unit: Optional[str] = None


def merge_ingredients(ingredients: Iterable[RecipeIngredient]) -> Dict[str, AggregatedIngredient]:
    """
    Merge ingredient lines by name.

    Names are compared lower-cased and otherwise verbatim, so "Flour" and
    "flour" merge but "flour" and "flours" do not. Quantities are summed
    only when the units match (two missing units match). A line whose unit
    differs from the first one seen for its name goes to a separate
    ``"<name>_<unit>"`` entry; units are never converted.

    Args:
        ingredients: Ingredient lines, one per use (repeat a recipe's lines
            for every meal it is planned for)

    Returns:
        Merge entries in first-seen order
    """
    merged: Dict[str, AggregatedIngredient] = {}

    for ingredient in ingredients:
        name = ingredient.name.lower()
        quantity = Decimal(str(ingredient.quantity))

        key = name
        existing = merged.get(key)
        if existing is not None and existing.unit != ingredient.unit:
            key = f"{name}_{ingredient.unit}"
            existing = merged.get(key)

        if existing is None:
            merged[key] = AggregatedIngredient(name=name, quantity=quantity, unit=ingredient.unit)
        else:
            existing.quantity += quantity

    return merged


class IngredientAggregator(BaseService):
    """Builds a shopping list from the ingredients of the user's planned meals."""

    def generate(
        self,
        start_date: date,
        end_date: date,
        meal_types: Optional[List[Union[MealType, str]]] = None,
        list_name: Optional[str] = None
    ) -> Result[ShoppingList]:
        """
        Create a list holding every ingredient needed for the planned meals.

        A recipe planned several times counts once per meal. Meals without
        a recipe and recipes without ingredients add nothing; an empty
        range produces an empty list. The list and all of its items are
        written in one transaction.

        An ingredient needed in several units becomes one item per unit.
        Each of those items is named after the ingredient alone (``"flour"``,
        not the ``"flour_cup"`` merge key) and carries its own unit.

        Args:
            start_date: First day, inclusive
            end_date: Last day, inclusive
            meal_types: Only meals of these types (default: all; an empty
                list matches no meals)
            list_name: Name of the new list
                (default: "Meal Plan: <start> - <end>")

        Returns:
            Result containing the new list (items are not loaded) or error
        """
        try:
            command = self._parse(
                GenerateListCommand,
                start_date=start_date,
                end_date=end_date,
                meal_types=meal_types,
                list_name=list_name
            )
            name = self._parse(ListInput, name=command.list_name or (
                f"Meal Plan: {command.start_date.isoformat()} - {command.end_date.isoformat()}"
            )).name
            self._check_list_name(name)

            with self.transaction.transaction() as session:
                plans = self._find_plans(command)
                recipes = self._load_recipes(plans)
                merged = merge_ingredients(self._ingredient_lines(plans, recipes))

                limit = self.settings.MAX_ITEMS_PER_LIST
                if len(merged) > limit:
                    raise ValidationError(
                        f"Maximum limit reached ({limit} items per list)",
                        suggestions=["Generate the list for a shorter date range"],
                        metadata={"ingredient_count": len(merged)}
                    )
                self._check_list_quota()

                list_ = ShoppingList(
                    name=name,
                    status=ListStatus.ACTIVE,
                    owner_id=self.user_id,
                    created_by=self.user_id
                )
                session.add(list_)
                session.flush()

                for position, entry in enumerate(merged.values(), start=1):
                    session.add(ListItem(
                        list_id=list_.id,
                        name=entry.name,
                        quantity=entry.quantity,
                        unit=entry.unit,
                        sort_order=position,
                        is_checked=False,
                        created_by=self.user_id
                    ))
                session.flush()

                self._log_action(
                    "generate",
                    list_id=list_.id,
                    meal_plan_count=len(plans),
                    recipe_count=len(recipes),
                    item_count=len(merged)
                )
                return Result.ok(list_)

        except Exception as e:
            return self._handle_error("generate", e)

    def _find_plans(self, command: GenerateListCommand) -> List[MealPlan]:
        # The range query filters on at most one meal type
        single_type = None
        if command.meal_types is not None and len(set(command.meal_types)) == 1:
            single_type = command.meal_types[0]

        plans = find_meal_plans(
            self.session, self.user_id, command.start_date, command.end_date, single_type
        )
        if command.meal_types is not None:
            wanted = set(command.meal_types)
            plans = [plan for plan in plans if plan.meal_type in wanted]
        return plans

    def _load_recipes(self, plans: List[MealPlan]) -> Dict[int, Recipe]:
        recipe_ids = {plan.recipe_id for plan in plans if plan.recipe_id is not None}
        if not recipe_ids:
            return {}

        recipes = self.session.execute(
            select(Recipe)
            .options(selectinload(Recipe.ingredients))
            .where(Recipe.id.in_(recipe_ids))
        ).scalars().all()
        return {recipe.id: recipe for recipe in recipes}

    def _ingredient_lines(
        self,
        plans: List[MealPlan],
        recipes: Dict[int, Recipe]
    ) -> Iterator[RecipeIngredient]:
        for plan in plans:
            recipe = recipes.get(plan.recipe_id)
            if recipe is not None:
                yield from recipe.ingredients

    def _check_list_quota(self) -> None:
        limit = self.settings.MAX_LISTS_PER_USER
        owned = self.session.execute(
            select(func.count(ShoppingList.id)).where(ShoppingList.owner_id == self.user_id)
        ).scalar_one()
        if owned >= limit:
            raise ValidationError(
                f"Maximum limit reached ({limit} lists)",
                suggestions=["Archive or delete lists you no longer need"]
            )
