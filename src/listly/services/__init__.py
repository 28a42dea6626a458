"""Services package for Listly."""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from listly.config.settings import ListlySettings
from .base_service import BaseService, Result
from .access_guard import AccessGuard
from .list_service import ListService, ListSummary, ListDetails
from .item_service import ItemService, ItemCreateResult
from .collaboration_service import CollaborationService, SharedList
from .category_service import CategoryService
from .recipe_service import RecipeService
from .meal_plan_service import MealPlanService
from .ingredient_aggregator import IngredientAggregator, AggregatedIngredient, merge_ingredients


@dataclass
class ServiceContainer:
    """The services available to one request."""
    lists: ListService
    items: ItemService
    collaboration: CollaborationService
    categories: CategoryService
    recipes: RecipeService
    meal_plans: MealPlanService
    aggregator: IngredientAggregator


def build_services(
    session: Session,
    user_id: int,
    settings: Optional[ListlySettings] = None
) -> ServiceContainer:
    """
    Build the services for a request made by one user.

    Args:
        session: Database session for the request
        user_id: ID of the authenticated user
        settings: Settings override (defaults to the cached settings)

    Returns:
        Services sharing the session and user
    """
    return ServiceContainer(
        lists=ListService(session, user_id, settings),
        items=ItemService(session, user_id, settings),
        collaboration=CollaborationService(session, user_id, settings),
        categories=CategoryService(session, user_id, settings),
        recipes=RecipeService(session, user_id, settings),
        meal_plans=MealPlanService(session, user_id, settings),
        aggregator=IngredientAggregator(session, user_id, settings)
    )


__all__ = [
    'BaseService', 'Result', 'AccessGuard',
    'ListService', 'ListSummary', 'ListDetails',
    'ItemService', 'ItemCreateResult',
    'CollaborationService', 'SharedList',
    'CategoryService', 'RecipeService', 'MealPlanService',
    'IngredientAggregator', 'AggregatedIngredient', 'merge_ingredients',
    'ServiceContainer', 'build_services'
]
