"""
Ingredient value object.

An Ingredient is a priced pack of a purchasable item, supplied to the
costing engine as part of a read-only catalog. The engine never mutates or
persists ingredients.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from src.utils.validators import (
    require_decimal,
    validate_density,
    validate_non_negative_number,
    validate_positive_number,
)

from .enums import BaseUnit


@dataclass(frozen=True)
class Ingredient:
    """
    A purchasable ingredient and the price of one pack of it.

    Attributes:
        id: Catalog identity (int or str)
        name: Display name
        pack_quantity: Size of one pack, expressed in pack_unit (must be > 0)
        pack_unit: Base unit the pack size is expressed in (g, ml, each or slice)
        pack_price: Price of one pack (non-negative, single currency)
        density_g_per_ml: Optional density bridging volume usage to mass packs

    Numeric fields accept int, float, str or Decimal and are stored as Decimal.
    The pack unit also accepts free-text spellings such as "grams" or "ml".

    Example:
        >>> flour = Ingredient(id=1, name="Flour", pack_quantity=1500,
        ...                    pack_unit="g", pack_price="1.20", density_g_per_ml="0.6")
        >>> flour.cost_per_base_unit
        Decimal('0.0008')
    """

    id: Any
    name: str
    pack_quantity: Decimal
    pack_unit: BaseUnit
    pack_price: Decimal
    density_g_per_ml: Optional[Decimal] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "pack_quantity", require_decimal(self.pack_quantity, "Pack quantity")
        )
        object.__setattr__(self, "pack_unit", BaseUnit.parse(self.pack_unit))
        object.__setattr__(self, "pack_price", require_decimal(self.pack_price, "Pack price"))
        if self.density_g_per_ml is not None:
            object.__setattr__(
                self, "density_g_per_ml", require_decimal(self.density_g_per_ml, "Density")
            )

    def __repr__(self) -> str:
        """String representation of ingredient."""
        return (
            f"Ingredient(id={self.id!r}, name='{self.name}', "
            f"pack={self.pack_quantity} {self.pack_unit.value} @ {self.pack_price})"
        )

    def validation_errors(self) -> List[str]:
        """
        Check the pack invariants.

        Returns:
            List of error messages; empty when the ingredient can be costed
        """
        errors = []
        label = f"Ingredient '{self.name}'"

        is_valid, error = validate_positive_number(self.pack_quantity, f"{label} pack quantity")
        if not is_valid:
            errors.append(error)

        is_valid, error = validate_non_negative_number(self.pack_price, f"{label} pack price")
        if not is_valid:
            errors.append(error)

        if self.density_g_per_ml is not None:
            is_valid, error = validate_density(self.density_g_per_ml, f"{label} density")
            if not is_valid:
                errors.append(error)

        return errors

    @property
    def cost_per_base_unit(self) -> Decimal:
        """Pack price divided by pack quantity (price per g, ml or item)."""
        return self.pack_price / self.pack_quantity

    def to_dict(self) -> Dict[str, Any]:
        """Convert ingredient to a plain dictionary (numbers as strings)."""
        return {
            "id": self.id,
            "name": self.name,
            "pack_quantity": str(self.pack_quantity),
            "pack_unit": self.pack_unit.value,
            "pack_price": str(self.pack_price),
            "density_g_per_ml": (
                str(self.density_g_per_ml) if self.density_g_per_ml is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ingredient":
        """
        Build an ingredient from a plain dictionary.

        Args:
            data: Mapping with id, name, pack_quantity, pack_unit, pack_price
                and optionally density_g_per_ml

        Returns:
            Ingredient instance
        """
        return cls(
            id=data["id"],
            name=data["name"],
            pack_quantity=data["pack_quantity"],
            pack_unit=data["pack_unit"],
            pack_price=data["pack_price"],
            density_g_per_ml=data.get("density_g_per_ml"),
        )
