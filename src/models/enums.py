"""
Enumerations for unit handling.

This module contains the closed unit vocabulary used across the costing models:
- UnitKind: Physical dimension of a unit (mass, volume, countable)
- BaseUnit: Canonical unit each kind normalizes to
- Unit: Every measurement unit a recipe or ingredient may use
- VolumeSystem: Which regional volume table to apply
"""

from enum import Enum
from typing import Union

from src.services.exceptions import UnknownUnit
from src.utils.constants import BASE_UNIT_ALIASES, UNIT_ALIASES


class UnitKind(str, Enum):
    """
    Physical dimension of a unit.

    Values:
        MASS: Weighed quantities (grams and multiples)
        VOLUME: Measured quantities (milliliters and culinary measures)
        EACH: Countable, dimensionless quantities (items, slices)
    """

    MASS = "mass"
    VOLUME = "volume"
    EACH = "each"


class BaseUnit(str, Enum):
    """
    Canonical representation a quantity is normalized to before arithmetic.

    Values:
        GRAMS: Base for mass (and for volume bridged through density)
        MILLILITERS: Base for volume
        EACH: Base for whole countable items
        SLICE: Base for slices; never interchangeable with whole items
    """

    GRAMS = "g"
    MILLILITERS = "ml"
    EACH = "each"
    SLICE = "slice"

    @property
    def kind(self) -> UnitKind:
        return _BASE_KIND[self]

    @classmethod
    def parse(cls, value: Union["BaseUnit", str]) -> "BaseUnit":
        """
        Resolve a base unit from an enum member or a free-text spelling.

        Raises:
            UnknownUnit: If the text is not a recognized base unit
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise UnknownUnit(value)
        symbol = BASE_UNIT_ALIASES.get(value.strip().lower())
        if symbol is None:
            raise UnknownUnit(value)
        return cls(symbol)


class Unit(str, Enum):
    """
    Every supported measurement unit.

    Each member belongs to exactly one UnitKind and never changes kind.
    """

    # Mass
    GRAM = "g"
    KILOGRAM = "kg"
    MILLIGRAM = "mg"
    OUNCE = "oz"
    POUND = "lb"
    # Volume
    MILLILITER = "ml"
    LITER = "l"
    TEASPOON = "tsp"
    TABLESPOON = "tbsp"
    CUP = "cup"
    FLUID_OUNCE = "fl oz"
    PINT = "pint"
    QUART = "quart"
    GALLON = "gallon"
    PINCH = "pinch"
    DASH = "dash"
    # Each
    EACH = "each"
    SLICE = "slice"

    @property
    def kind(self) -> UnitKind:
        return _UNIT_KIND[self]

    @property
    def base(self) -> BaseUnit:
        """Base unit this unit normalizes to without a density bridge."""
        return _COUNTABLE_BASE.get(self, _KIND_BASE[self.kind])

    @classmethod
    def parse(cls, value: Union["Unit", str]) -> "Unit":
        """
        Resolve a unit from an enum member or a free-text spelling.

        Matching is case-insensitive and accepts common plurals and
        abbreviations (e.g. "Tablespoons", "lbs", "floz").

        Raises:
            UnknownUnit: If the text is not a recognized unit
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, BaseUnit):
            return cls(value.value)
        if not isinstance(value, str):
            raise UnknownUnit(value)
        symbol = UNIT_ALIASES.get(" ".join(value.strip().lower().split()))
        if symbol is None:
            raise UnknownUnit(value)
        return cls(symbol)


class VolumeSystem(str, Enum):
    """
    Regional volume table.

    Values:
        UK: Metric culinary measures (5/15/250 mL) with UK imperial fl oz and pints
        US: US customary measures
    """

    UK = "uk"
    US = "us"


_UNIT_KIND = {
    Unit.GRAM: UnitKind.MASS,
    Unit.KILOGRAM: UnitKind.MASS,
    Unit.MILLIGRAM: UnitKind.MASS,
    Unit.OUNCE: UnitKind.MASS,
    Unit.POUND: UnitKind.MASS,
    Unit.MILLILITER: UnitKind.VOLUME,
    Unit.LITER: UnitKind.VOLUME,
    Unit.TEASPOON: UnitKind.VOLUME,
    Unit.TABLESPOON: UnitKind.VOLUME,
    Unit.CUP: UnitKind.VOLUME,
    Unit.FLUID_OUNCE: UnitKind.VOLUME,
    Unit.PINT: UnitKind.VOLUME,
    Unit.QUART: UnitKind.VOLUME,
    Unit.GALLON: UnitKind.VOLUME,
    Unit.PINCH: UnitKind.VOLUME,
    Unit.DASH: UnitKind.VOLUME,
    Unit.EACH: UnitKind.EACH,
    Unit.SLICE: UnitKind.EACH,
}

_KIND_BASE = {
    UnitKind.MASS: BaseUnit.GRAMS,
    UnitKind.VOLUME: BaseUnit.MILLILITERS,
    UnitKind.EACH: BaseUnit.EACH,
}

# Each countable unit is its own base
_COUNTABLE_BASE = {
    Unit.EACH: BaseUnit.EACH,
    Unit.SLICE: BaseUnit.SLICE,
}

_BASE_KIND = {base: kind for kind, base in _KIND_BASE.items()}
_BASE_KIND[BaseUnit.SLICE] = UnitKind.EACH
