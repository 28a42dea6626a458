"""Recipe service."""
from typing import Optional, List, Dict, Any

from sqlalchemy import select

from listly.domain.errors import NotFoundError, ValidationError
from listly.domain.types import IngredientInput
from listly.models import Recipe, RecipeIngredient
from .base_service import BaseService, Result


class RecipeService(BaseService):
    """Service for the current user's recipes."""

    def create_recipe(
        self,
        title: str,
        ingredients: List[Dict[str, Any]],
        servings: Optional[int] = None,
        instructions: Optional[str] = None
    ) -> Result[Recipe]:
        """
        Create a recipe with its ingredients.

        Args:
            title: Recipe title
            ingredients: Ingredient fields (name, quantity, unit) in order
            servings: Number of servings
            instructions: Preparation steps

        Returns:
            Result containing the created recipe or error
        """
        try:
            title = (title or "").strip()
            if not title:
                raise ValidationError("Recipe title cannot be empty")
            if servings is not None and servings < 1:
                raise ValidationError("Servings must be at least 1")
            parsed = [self._parse(IngredientInput, **fields) for fields in ingredients]

            with self.transaction.transaction() as session:
                recipe = Recipe(
                    title=title,
                    servings=servings,
                    instructions=instructions,
                    user_id=self.user_id,
                    created_by=self.user_id
                )
                recipe.ingredients = [
                    RecipeIngredient(
                        name=ingredient.name,
                        quantity=ingredient.quantity,
                        unit=ingredient.unit,
                        sort_order=position
                    )
                    for position, ingredient in enumerate(parsed)
                ]
                session.add(recipe)
                session.flush()

                self._log_action("create_recipe", recipe_id=recipe.id, ingredient_count=len(parsed))
                return Result.ok(recipe)

        except Exception as e:
            return self._handle_error("create_recipe", e)

    def get_recipe(self, recipe_id: int) -> Result[Recipe]:
        """Get one of the current user's recipes."""
        try:
            with self.transaction.transaction():
                return Result.ok(self._get_owned(recipe_id))

        except Exception as e:
            return self._handle_error("get_recipe", e)

    def get_recipes(self) -> Result[List[Recipe]]:
        """Get the current user's recipes by title."""
        try:
            with self.transaction.transaction() as session:
                recipes = session.execute(
                    select(Recipe)
                    .where(Recipe.user_id == self.user_id)
                    .order_by(Recipe.title)
                ).scalars().all()
                return Result.ok(list(recipes))

        except Exception as e:
            return self._handle_error("get_recipes", e)

    def delete_recipe(self, recipe_id: int) -> Result[int]:
        """
        Delete a recipe and its ingredients.

        Meal plans that referenced it keep their slot without a recipe.
        """
        try:
            with self.transaction.transaction() as session:
                session.delete(self._get_owned(recipe_id))
                session.flush()

                self._log_action("delete_recipe", recipe_id=recipe_id)
                return Result.ok(recipe_id)

        except Exception as e:
            return self._handle_error("delete_recipe", e)

    def _get_owned(self, recipe_id: int) -> Recipe:
        recipe = self.session.get(Recipe, recipe_id)
        if recipe is None or recipe.user_id != self.user_id:
            raise NotFoundError("Recipe")
        return recipe
