"""Pytest configuration and fixtures for costing tests."""

import pytest

from src.models import Ingredient, Recipe, RecipeItem, SubRecipeLink
from src.utils.config import reset_config

_CONFIG_VARS = (
    "RECIPE_COSTING_ENV",
    "RECIPE_COSTING_MAX_DEPTH",
    "RECIPE_COSTING_VOLUME_SYSTEM",
    "RECIPE_COSTING_REFERENCE_DENSITIES",
    "RECIPE_COSTING_CURRENCY_SYMBOL",
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Give every test the default configuration.

    Clears any RECIPE_COSTING_* variables from the environment and resets
    the config singleton before and after the test.
    """
    for var in _CONFIG_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def flour():
    """Flour sold by the gram: 1000 g for 4.00, density 0.6 g/ml."""
    return Ingredient(
        id=1, name="Flour", pack_quantity=1000, pack_unit="g", pack_price="4.00",
        density_g_per_ml="0.6",
    )


@pytest.fixture
def butter():
    """Butter sold by the gram: 250 g for 7.50."""
    return Ingredient(id=2, name="Butter", pack_quantity=250, pack_unit="g", pack_price="7.50")


@pytest.fixture
def strawberries():
    return Ingredient(
        id=3, name="Strawberries", pack_quantity=1000, pack_unit="g", pack_price="24.00"
    )


@pytest.fixture
def sugar():
    """Sugar without a density of its own."""
    return Ingredient(id=4, name="Sugar", pack_quantity=1000, pack_unit="g", pack_price="10.00")


@pytest.fixture
def milk():
    """Milk sold by volume: 1000 ml for 1.20."""
    return Ingredient(id=5, name="Milk", pack_quantity=1000, pack_unit="ml", pack_price="1.20")


@pytest.fixture
def eggs():
    """Eggs sold by the dozen at 3.00."""
    return Ingredient(id=6, name="Eggs", pack_quantity=12, pack_unit="each", pack_price="3.00")


@pytest.fixture
def ingredient_catalog(flour, butter, strawberries, sugar, milk, eggs):
    """All sample ingredients, as a list."""
    return [flour, butter, strawberries, sugar, milk, eggs]


@pytest.fixture
def jam():
    """Jam: 500 g strawberries + 300 g sugar (15.00), yields 300 g (0.05/g)."""
    return Recipe(
        id=10,
        name="Jam",
        yield_quantity=300,
        yield_unit="g",
        items=[
            RecipeItem(ingredient_id=3, quantity=500, unit="g"),
            RecipeItem(ingredient_id=4, quantity=300, unit="g"),
        ],
    )


@pytest.fixture
def scones():
    """Scones: 500 g flour (2.00) + 100 g butter (3.00) + 30 g jam (1.50), yields 5."""
    return Recipe(
        id=20,
        name="Scones",
        yield_quantity=5,
        yield_unit="each",
        items=[
            RecipeItem(ingredient_id=1, quantity=500, unit="g"),
            RecipeItem(ingredient_id=2, quantity=100, unit="g"),
        ],
        sub_recipes=[SubRecipeLink(sub_recipe_id=10, quantity=30, unit="g")],
    )


@pytest.fixture
def recipe_catalog(jam, scones):
    """Sample recipes, as a list."""
    return [jam, scones]


def make_recipe_chain(length, ingredient_id=1):
    """Build recipes 0..length-1 where recipe N uses one unit of recipe N+1.

    Every recipe also uses 100 g of the given ingredient and yields 1 each,
    so recipe 0 is the root and recipe length-1 is nested length-1 deep.
    """
    recipes = []
    for index in range(length):
        links = []
        if index + 1 < length:
            links.append(SubRecipeLink(sub_recipe_id=index + 1, quantity=1, unit="each"))
        recipes.append(
            Recipe(
                id=index,
                name=f"Layer {index}",
                yield_quantity=1,
                yield_unit="each",
                items=[RecipeItem(ingredient_id=ingredient_id, quantity=100, unit="g")],
                sub_recipes=links,
            )
        )
    return recipes


@pytest.fixture
def recipe_chain():
    """Factory fixture: recipe_chain(n) builds a linear chain of n recipes."""
    return make_recipe_chain
