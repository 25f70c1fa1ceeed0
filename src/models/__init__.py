"""
Costing models package.

This package contains the immutable value objects the costing engine
consumes (ingredients, recipes) and produces (cost breakdowns).
"""

from .enums import UnitKind, BaseUnit, Unit, VolumeSystem
from .ingredient import Ingredient
from .recipe import Recipe, RecipeItem, SubRecipeLink
from .cost_breakdown import CostBreakdown, LineItemCost

__all__ = [
    "UnitKind",
    "BaseUnit",
    "Unit",
    "VolumeSystem",
    "Ingredient",
    "Recipe",
    "RecipeItem",
    "SubRecipeLink",
    "CostBreakdown",
    "LineItemCost",
]
