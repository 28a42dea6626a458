"""Tests for generating lists from meal plans."""
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import event

from listly.config.settings import ListlySettings
from listly.domain.errors import ErrorCode
from listly.models import ShoppingList, ListItem, MealType, RecipeIngredient
from listly.services import ingredient_aggregator, build_services
from listly.services.ingredient_aggregator import AggregatedIngredient, merge_ingredients

MONDAY = date(2024, 3, 4)
TUESDAY = date(2024, 3, 5)
WEDNESDAY = date(2024, 3, 6)


def _line(name, quantity, unit=None) -> RecipeIngredient:
    return RecipeIngredient(name=name, quantity=Decimal(quantity), unit=unit)


def _items(session, list_id):
    return session.query(ListItem).filter_by(list_id=list_id).order_by(ListItem.sort_order).all()


@pytest.fixture
def recipe(services):
    """Create a recipe from (name, quantity, unit) tuples."""
    def _recipe(title, *lines):
        result = services.recipes.create_recipe(title, [
            {"name": name, "quantity": Decimal(quantity), "unit": unit}
            for name, quantity, unit in lines
        ])
        assert result.success
        return result.data
    return _recipe


@pytest.fixture
def plan(services):
    def _plan(day, meal_type, recipe=None):
        result = services.meal_plans.create_meal_plan(day, meal_type, recipe.id if recipe else None)
        assert result.success
        return result.data
    return _plan


def test_merge_same_unit():
    merged = merge_ingredients([_line("Flour", "200", "g"), _line("flour", "100", "g")])
    assert merged == {"flour": AggregatedIngredient("flour", Decimal("300"), "g")}


def test_merge_without_units():
    merged = merge_ingredients([_line("Egg", "2"), _line("EGG", "1.5")])
    assert merged == {"egg": AggregatedIngredient("egg", Decimal("3.5"), None)}


def test_merge_different_units_stay_apart():
    """Different units are never converted or overwritten."""
    merged = merge_ingredients([
        _line("Flour", "200", "g"),
        _line("Flour", "2", "cup"),
        _line("flour", "1", "cup"),
        _line("Flour", "50", "g"),
    ])
    assert list(merged) == ["flour", "flour_cup"]
    assert merged["flour"].quantity == Decimal("250")
    assert merged["flour_cup"] == AggregatedIngredient("flour", Decimal("3"), "cup")


def test_merge_unit_versus_no_unit():
    merged = merge_ingredients([_line("Salt", "1", "tsp"), _line("Salt", "1")])
    assert set(merged) == {"salt", "salt_None"}
    assert merged["salt_None"].unit is None


def test_merge_no_stemming_or_trimming():
    """Only case is ignored; plurals are different ingredients."""
    merged = merge_ingredients([_line("Tomato", "1"), _line("Tomatoes", "2")])
    assert set(merged) == {"tomato", "tomatoes"}


def test_generate(session, services, recipe, plan, owner):
    """Test building a list from a week of meals."""
    pancakes = recipe("Pancakes", ("Flour", "200", "g"), ("Milk", "300", "ml"), ("Egg", "2", None))
    omelette = recipe("Omelette", ("Egg", "3", None), ("Cheese", "50", "g"))
    plan(MONDAY, MealType.BREAKFAST, pancakes)
    plan(TUESDAY, MealType.BREAKFAST, omelette)

    result = services.aggregator.generate(MONDAY, TUESDAY)
    assert result.success
    list_ = result.data
    assert list_.name == "Meal Plan: 2024-03-04 - 2024-03-05"
    assert list_.owner_id == owner.id

    items = _items(session, list_.id)
    assert [(i.name, i.quantity, i.unit) for i in items] == [
        ("flour", Decimal("200"), "g"),
        ("milk", Decimal("300"), "ml"),
        ("egg", Decimal("5"), None),
        ("cheese", Decimal("50"), "g"),
    ]
    assert [i.sort_order for i in items] == [1, 2, 3, 4]
    assert all(i.created_by == owner.id and not i.is_checked for i in items)


def test_generate_counts_every_planned_meal(session, services, recipe, plan):
    """A recipe planned twice needs its ingredients twice."""
    toast = recipe("Toast", ("Bread", "2", "slice"))
    plan(MONDAY, MealType.BREAKFAST, toast)
    plan(TUESDAY, MealType.BREAKFAST, toast)

    list_ = services.aggregator.generate(MONDAY, TUESDAY).data
    items = _items(session, list_.id)
    assert [(i.name, i.quantity) for i in items] == [("bread", Decimal("4"))]


def test_generate_loads_recipes_in_one_query(engine, services, recipe, plan):
    """Recipes planned on several days are fetched once."""
    toast = recipe("Toast", ("Bread", "2", "slice"))
    eggs = recipe("Eggs", ("Egg", "2", None))
    for day in (MONDAY, TUESDAY, WEDNESDAY):
        plan(day, MealType.BREAKFAST, toast)
        plan(day, MealType.LUNCH, eggs)

    statements = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", record)
    try:
        assert services.aggregator.generate(MONDAY, WEDNESDAY).success
    finally:
        event.remove(engine, "before_cursor_execute", record)

    assert len([s for s in statements if "FROM recipes" in s]) == 1
    assert len([s for s in statements if "FROM recipe_ingredients" in s]) == 1


def test_generate_filters_and_skips(session, services, recipe, plan):
    """Out-of-range meals, other meal types and recipe-less meals add nothing."""
    soup = recipe("Soup", ("Carrot", "3", None))
    salad = recipe("Salad", ("Lettuce", "1", "head"))
    empty = recipe("Water")
    plan(MONDAY, MealType.DINNER, soup)
    plan(MONDAY, MealType.LUNCH, salad)
    plan(TUESDAY, MealType.DINNER)
    plan(TUESDAY, MealType.DINNER, empty)
    plan(date(2024, 3, 10), MealType.DINNER, soup)

    list_ = services.aggregator.generate(MONDAY, WEDNESDAY, meal_types=[MealType.DINNER]).data
    assert [i.name for i in _items(session, list_.id)] == ["carrot"]

    list_ = services.aggregator.generate(
        MONDAY, WEDNESDAY, meal_types=["DINNER", "LUNCH"], list_name="Early week"
    ).data
    assert list_.name == "Early week"
    assert sorted(i.name for i in _items(session, list_.id)) == ["carrot", "lettuce"]


def test_generate_ignores_other_users(session, services, friend_services):
    friend_recipe = friend_services.recipes.create_recipe("Stew", [{"name": "Beef"}]).data
    friend_services.meal_plans.create_meal_plan(MONDAY, MealType.DINNER, friend_recipe.id)

    list_ = services.aggregator.generate(MONDAY, MONDAY).data
    assert _items(session, list_.id) == []


def test_generate_empty_range(session, services):
    """No meals gives an empty list."""
    result = services.aggregator.generate(MONDAY, WEDNESDAY)
    assert result.success
    assert _items(session, result.data.id) == []


def test_generate_invalid_range(session, services):
    result = services.aggregator.generate(TUESDAY, MONDAY)
    assert result.code == ErrorCode.VALIDATION_ERROR
    assert session.query(ShoppingList).count() == 0


def test_generate_rolls_back_on_failure(session, services, recipe, plan, monkeypatch):
    """A failure while writing items leaves no partial list behind."""
    soup = recipe("Soup", ("Carrot", "3", None), ("Onion", "1", None))
    plan(MONDAY, MealType.DINNER, soup)

    created = []

    def failing_item(**fields):
        if created:
            raise RuntimeError("disk full")
        created.append(fields["name"])
        return ListItem(**fields)

    monkeypatch.setattr(ingredient_aggregator, "ListItem", failing_item)
    result = services.aggregator.generate(MONDAY, MONDAY)
    assert not result.success
    assert result.code == ErrorCode.INTERNAL_ERROR
    assert created == ["carrot"]

    assert session.query(ShoppingList).count() == 0
    assert session.query(ListItem).count() == 0


def test_generate_item_limit(session, owner, recipe, plan):
    soup = recipe("Soup", ("Carrot", "3", None), ("Onion", "1", None), ("Leek", "1", None))
    plan(MONDAY, MealType.DINNER, soup)

    limited = build_services(session, owner.id, ListlySettings(MAX_ITEMS_PER_LIST=2))
    result = limited.aggregator.generate(MONDAY, MONDAY)
    assert result.code == ErrorCode.VALIDATION_ERROR
    assert session.query(ShoppingList).count() == 0


def test_generate_empty_meal_type_filter(session, services, recipe, plan):
    """An empty filter matches no meals."""
    soup = recipe("Soup", ("Carrot", "3", None))
    plan(MONDAY, MealType.DINNER, soup)

    result = services.aggregator.generate(MONDAY, MONDAY, meal_types=[])
    assert result.success
    assert _items(session, result.data.id) == []


def test_generate_invalid_list_name(session, owner, services):
    assert services.aggregator.generate(MONDAY, MONDAY, list_name="   ").code == ErrorCode.VALIDATION_ERROR

    short_names = build_services(session, owner.id, ListlySettings(MAX_LIST_NAME_LENGTH=10))
    result = short_names.aggregator.generate(MONDAY, MONDAY)
    assert result.code == ErrorCode.VALIDATION_ERROR
    assert "10 characters" in result.error

    assert session.query(ShoppingList).count() == 0


def test_generate_strips_list_name(services):
    result = services.aggregator.generate(MONDAY, MONDAY, list_name="  Dinners  ")
    assert result.data.name == "Dinners"
