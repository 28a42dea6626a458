"""Domain types for Listly."""
from datetime import date
from decimal import Decimal
from typing import Optional, List, Annotated
from pydantic import BaseModel, Field, field_validator, model_validator

from listly.models.meal_plan import MealType


# At most two decimal places
Quantity = Annotated[Decimal, Field(gt=0, max_digits=10, decimal_places=2)]
Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]


class ItemInput(BaseModel):
    """Fields accepted when adding an item to a list."""
    name: Annotated[str, Field(min_length=1)]
    quantity: Quantity = Decimal("1")
    unit: Optional[Annotated[str, Field(max_length=20)]] = None
    category_id: Optional[int] = None
    estimated_price: Optional[Money] = None
    notes: Optional[str] = None
    priority: int = 0

    @field_validator('name')
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Item name cannot be empty')
        return v

    @field_validator('unit')
    @classmethod
    def blank_unit_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class ItemUpdate(BaseModel):
    """Partial update of an item; only fields that were set are applied."""
    name: Optional[Annotated[str, Field(min_length=1)]] = None
    quantity: Optional[Quantity] = None
    unit: Optional[Annotated[str, Field(max_length=20)]] = None
    category_id: Optional[int] = None
    estimated_price: Optional[Money] = None
    notes: Optional[str] = None
    priority: Optional[int] = None

    @field_validator('name', 'quantity', 'priority')
    @classmethod
    def required_fields_not_null(cls, v, info):
        if v is None:
            raise ValueError(f'{info.field_name} cannot be null')
        return v

    @field_validator('name')
    @classmethod
    def name_must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('Item name cannot be empty')
        return v


class ListInput(BaseModel):
    """Fields accepted when creating or editing a list."""
    name: Annotated[str, Field(min_length=1)]
    budget: Optional[Money] = None
    is_template: bool = False

    @field_validator('name')
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('List name cannot be empty')
        return v


class IngredientInput(BaseModel):
    """One ingredient line of a recipe."""
    name: Annotated[str, Field(min_length=1, max_length=100)]
    quantity: Quantity = Decimal("1")
    unit: Optional[Annotated[str, Field(max_length=20)]] = None

    @field_validator('name')
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Ingredient name cannot be empty')
        return v


class GenerateListCommand(BaseModel):
    """Command for building a shopping list from planned meals."""
    start_date: date
    end_date: date
    meal_types: Optional[List[MealType]] = None
    list_name: Optional[str] = None

    @model_validator(mode='after')
    def range_must_be_ordered(self) -> 'GenerateListCommand':
        if self.start_date > self.end_date:
            raise ValueError('Start date must not be after end date')
        return self
