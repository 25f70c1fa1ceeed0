"""
Cost breakdown result objects.

A CostBreakdown is the only output of the recipe costing engine: an
itemized, totaled account of what one batch of a recipe costs. Sub-recipe
results are flattened into scalar line items before being attached to their
parent, so a breakdown never references another breakdown.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Tuple

from src.services.dto_utils import cost_to_string, quantity_to_string

from .enums import Unit


@dataclass(frozen=True)
class LineItemCost:
    """
    Cost of one ingredient or sub-recipe line in a recipe.

    Attributes:
        id: Ingredient or sub-recipe ID
        name: Ingredient or sub-recipe display name
        quantity: Quantity as written on the recipe line
        unit: Unit as written on the recipe line
        cost: Cost contributed by this line
        cost_per_unit: Ingredient price per base unit (g, ml or item), or the
            sub-recipe cost per unit of its yield
    """

    id: Any
    name: str
    quantity: Decimal
    unit: Unit
    cost: Decimal
    cost_per_unit: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": quantity_to_string(self.quantity),
            "unit": self.unit.value,
            "cost": cost_to_string(self.cost),
            "cost_per_unit": str(self.cost_per_unit),
        }


@dataclass(frozen=True)
class CostBreakdown:
    """
    Itemized cost of one batch of a recipe.

    Attributes:
        recipe_id: Costed recipe's ID
        recipe_name: Costed recipe's display name
        ingredient_costs: One line per recipe ingredient, in recipe order
        sub_recipe_costs: One line per sub-recipe link, in recipe order
        total_cost: Sum of every line's cost
        cost_per_output_unit: total_cost divided by the recipe yield
    """

    recipe_id: Any
    recipe_name: str
    ingredient_costs: Tuple[LineItemCost, ...] = field(default_factory=tuple)
    sub_recipe_costs: Tuple[LineItemCost, ...] = field(default_factory=tuple)
    total_cost: Decimal = Decimal("0")
    cost_per_output_unit: Decimal = Decimal("0")

    @property
    def ingredient_total(self) -> Decimal:
        """Cost of the recipe's direct ingredients only."""
        return sum((line.cost for line in self.ingredient_costs), Decimal("0"))

    @property
    def sub_recipe_total(self) -> Decimal:
        """Cost of the recipe's sub-recipes only."""
        return sum((line.cost for line in self.sub_recipe_costs), Decimal("0"))

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert breakdown to a JSON-safe dictionary.

        Costs are rounded to 2 places for display; per-unit prices keep full
        precision since they are often fractions of a cent.
        """
        return {
            "recipe_id": self.recipe_id,
            "recipe_name": self.recipe_name,
            "ingredient_costs": [line.to_dict() for line in self.ingredient_costs],
            "sub_recipe_costs": [line.to_dict() for line in self.sub_recipe_costs],
            "total_cost": cost_to_string(self.total_cost),
            "cost_per_output_unit": cost_to_string(self.cost_per_output_unit),
        }
