"""
Recipe value objects.

A Recipe lists the ingredients it uses (RecipeItem) and the other recipes it
consumes as components (SubRecipeLink). Sub-recipe links make the recipe
catalog a directed graph that may be arbitrarily deep and, through bad data,
may contain cycles.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Tuple

from src.utils.validators import require_decimal

from .enums import Unit


@dataclass(frozen=True)
class RecipeItem:
    """
    An ingredient used by a recipe.

    Attributes:
        ingredient_id: Catalog ID of the ingredient
        quantity: Amount used (any unit, not necessarily the pack unit)
        unit: Unit the quantity is expressed in
    """

    ingredient_id: Any
    quantity: Decimal
    unit: Unit

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", require_decimal(self.quantity, "Quantity"))
        object.__setattr__(self, "unit", Unit.parse(self.unit))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecipeItem":
        return cls(
            ingredient_id=data["ingredient_id"],
            quantity=data["quantity"],
            unit=data["unit"],
        )


@dataclass(frozen=True)
class SubRecipeLink:
    """
    Another recipe consumed as a component of a recipe.

    Attributes:
        sub_recipe_id: Catalog ID of the component recipe
        quantity: Amount of the component used
        unit: Unit the quantity is expressed in; converted to the component's
            yield unit when costing
    """

    sub_recipe_id: Any
    quantity: Decimal
    unit: Unit

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", require_decimal(self.quantity, "Quantity"))
        object.__setattr__(self, "unit", Unit.parse(self.unit))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubRecipeLink":
        return cls(
            sub_recipe_id=data["sub_recipe_id"],
            quantity=data["quantity"],
            unit=data["unit"],
        )


@dataclass(frozen=True)
class Recipe:
    """
    A recipe and the amount it produces.

    Attributes:
        id: Catalog identity (int or str)
        name: Display name
        yield_quantity: Amount produced by one batch (costing requires > 0)
        yield_unit: Unit of the yield
        items: Ingredients used
        sub_recipes: Component recipes used

    The yield is not validated here: a recipe with a zero yield can be built
    and is rejected with InvalidYield when it is costed.
    """

    id: Any
    name: str
    yield_quantity: Decimal
    yield_unit: Unit
    items: Tuple[RecipeItem, ...] = field(default_factory=tuple)
    sub_recipes: Tuple[SubRecipeLink, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "yield_quantity", require_decimal(self.yield_quantity, "Yield quantity")
        )
        object.__setattr__(self, "yield_unit", Unit.parse(self.yield_unit))
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(self, "sub_recipes", tuple(self.sub_recipes))

    def __repr__(self) -> str:
        """String representation of recipe."""
        return (
            f"Recipe(id={self.id!r}, name='{self.name}', "
            f"yield={self.yield_quantity} {self.yield_unit.value})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert recipe to a plain dictionary (numbers as strings)."""
        return {
            "id": self.id,
            "name": self.name,
            "yield_quantity": str(self.yield_quantity),
            "yield_unit": self.yield_unit.value,
            "items": [
                {
                    "ingredient_id": item.ingredient_id,
                    "quantity": str(item.quantity),
                    "unit": item.unit.value,
                }
                for item in self.items
            ],
            "sub_recipes": [
                {
                    "sub_recipe_id": link.sub_recipe_id,
                    "quantity": str(link.quantity),
                    "unit": link.unit.value,
                }
                for link in self.sub_recipes
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipe":
        """
        Build a recipe from a plain dictionary.

        Args:
            data: Mapping with id, name, yield_quantity, yield_unit and
                optional "items" / "sub_recipes" lists of dictionaries

        Returns:
            Recipe instance
        """
        return cls(
            id=data["id"],
            name=data["name"],
            yield_quantity=data["yield_quantity"],
            yield_unit=data["yield_unit"],
            items=tuple(RecipeItem.from_dict(item) for item in data.get("items", ())),
            sub_recipes=tuple(
                SubRecipeLink.from_dict(link) for link in data.get("sub_recipes", ())
            ),
        )
