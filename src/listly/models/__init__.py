"""Models package for Listly."""
from .base import Base
from .user import User
from .shopping_list import ShoppingList, ListStatus
from .collaborator import ListCollaborator
from .item import ListItem
from .category import Category, Store, StoreCategory
from .recipe import Recipe, RecipeIngredient
from .meal_plan import MealPlan, MealType

__all__ = [
    'Base', 'User', 'ShoppingList', 'ListStatus', 'ListCollaborator', 'ListItem',
    'Category', 'Store', 'StoreCategory', 'Recipe', 'RecipeIngredient',
    'MealPlan', 'MealType'
]
