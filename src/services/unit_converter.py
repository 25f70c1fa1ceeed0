"""
Unit conversion system for the Recipe Costing Engine.

This module provides:
- Standard unit conversions (mass, volume, countable items)
- Density-bridged conversions between volume and mass
- Ingredient usage costing
- Cost-per-yield / per-serving / food-cost-percentage utilities
- Conversion display helpers

Conversion Strategy:
- Mass units convert through grams (base unit)
- Volume units convert through milliliters (base unit)
- Countable units never scale
- Volume and mass only meet through a density in grams per milliliter;
  without one the conversion fails with IncompatibleUnits

All arithmetic uses Decimal so the fixed factors below stay exact.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional, Tuple, Union

from src.models.enums import BaseUnit, Unit, UnitKind, VolumeSystem
from src.models.ingredient import Ingredient
from src.services.exceptions import (
    IncompatibleUnits,
    UnknownUnit,
    ValidationError,
)
from src.services.dto_utils import quantity_to_string
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.config import get_config
from src.utils.validators import require_decimal, validate_density

logger = get_service_logger(__name__)

UnitLike = Union[Unit, str]
Number = Union[Decimal, int, float, str]


# ============================================================================
# Standard Conversion Tables
# ============================================================================

# Mass conversions to grams (base unit)
MASS_TO_GRAMS: Dict[Unit, Decimal] = {
    Unit.GRAM: Decimal("1"),
    Unit.KILOGRAM: Decimal("1000"),
    Unit.MILLIGRAM: Decimal("0.001"),
    Unit.OUNCE: Decimal("28.349523125"),
    Unit.POUND: Decimal("453.59237"),
}

# Volume units identical in every regional table
_COMMON_VOLUME_TO_ML: Dict[Unit, Decimal] = {
    Unit.MILLILITER: Decimal("1"),
    Unit.LITER: Decimal("1000"),
    Unit.PINCH: Decimal("0.5"),
    Unit.DASH: Decimal("0.25"),
}

# Metric culinary measures with UK imperial fluid measures
UK_VOLUME_TO_ML: Dict[Unit, Decimal] = {
    **_COMMON_VOLUME_TO_ML,
    Unit.TEASPOON: Decimal("5"),
    Unit.TABLESPOON: Decimal("15"),
    Unit.CUP: Decimal("250"),
    Unit.FLUID_OUNCE: Decimal("28.4130625"),
    Unit.PINT: Decimal("568.26125"),
    Unit.QUART: Decimal("1136.5225"),
    Unit.GALLON: Decimal("4546.09"),
}

# US customary measures (exact definitions)
US_VOLUME_TO_ML: Dict[Unit, Decimal] = {
    **_COMMON_VOLUME_TO_ML,
    Unit.TEASPOON: Decimal("4.92892159375"),
    Unit.TABLESPOON: Decimal("14.78676478125"),
    Unit.CUP: Decimal("236.5882365"),
    Unit.FLUID_OUNCE: Decimal("29.5735295625"),
    Unit.PINT: Decimal("473.176473"),
    Unit.QUART: Decimal("946.352946"),
    Unit.GALLON: Decimal("3785.411784"),
}

VOLUME_TABLES: Dict[VolumeSystem, Dict[Unit, Decimal]] = {
    VolumeSystem.UK: UK_VOLUME_TO_ML,
    VolumeSystem.US: US_VOLUME_TO_ML,
}

# Typical densities (g/ml) used only when a caller opts in and the
# ingredient carries no density of its own
REFERENCE_DENSITIES: Dict[str, Decimal] = {
    # Baking
    "flour": Decimal("0.6"),
    "plain flour": Decimal("0.6"),
    "all-purpose flour": Decimal("0.6"),
    "bread flour": Decimal("0.6"),
    "cake flour": Decimal("0.5"),
    "self-raising flour": Decimal("0.6"),
    "whole wheat flour": Decimal("0.6"),
    "sugar": Decimal("0.85"),
    "granulated sugar": Decimal("0.85"),
    "caster sugar": Decimal("0.85"),
    "brown sugar": Decimal("0.8"),
    "icing sugar": Decimal("0.6"),
    "powdered sugar": Decimal("0.6"),
    "baking powder": Decimal("0.8"),
    "baking soda": Decimal("0.87"),
    "bicarbonate of soda": Decimal("0.87"),
    "salt": Decimal("1.2"),
    "table salt": Decimal("1.2"),
    "sea salt": Decimal("1.1"),
    "cocoa powder": Decimal("0.4"),
    "cornstarch": Decimal("0.6"),
    "corn flour": Decimal("0.6"),
    "almond flour": Decimal("0.4"),
    "ground almonds": Decimal("0.4"),
    # Dairy
    "milk": Decimal("1.03"),
    "whole milk": Decimal("1.03"),
    "skim milk": Decimal("1.03"),
    "butter": Decimal("0.91"),
    "cream": Decimal("1.0"),
    "double cream": Decimal("1.0"),
    "single cream": Decimal("1.0"),
    "yogurt": Decimal("1.05"),
    "greek yogurt": Decimal("1.05"),
    "sour cream": Decimal("1.0"),
    # Oils
    "vegetable oil": Decimal("0.92"),
    "olive oil": Decimal("0.92"),
    "sunflower oil": Decimal("0.92"),
    "rapeseed oil": Decimal("0.92"),
    # Syrups and liquids
    "water": Decimal("1.0"),
    "honey": Decimal("1.4"),
    "maple syrup": Decimal("1.3"),
    "golden syrup": Decimal("1.4"),
    "molasses": Decimal("1.4"),
    "vinegar": Decimal("1.0"),
    "lemon juice": Decimal("1.0"),
    "coconut milk": Decimal("1.0"),
    "tomato paste": Decimal("1.2"),
}


# ============================================================================
# Unit Type Detection
# ============================================================================


def parse_unit(unit: UnitLike) -> Unit:
    """
    Resolve a unit from an enum member or free text (e.g. "Tablespoons").

    Raises:
        UnknownUnit: If the unit is not recognized
    """
    return Unit.parse(unit)


def parse_base_unit(unit: Union[BaseUnit, str]) -> BaseUnit:
    """
    Resolve a base unit (g, ml, each, slice) from an enum member or free text.

    Raises:
        UnknownUnit: If the text is not a base unit
    """
    return BaseUnit.parse(unit)


def get_unit_kind(unit: UnitLike) -> UnitKind:
    """
    Determine the kind of a unit.

    Args:
        unit: Unit member or spelling

    Returns:
        UnitKind.MASS, UnitKind.VOLUME or UnitKind.EACH

    Raises:
        UnknownUnit: If the unit is not recognized
    """
    return Unit.parse(unit).kind


def units_compatible(unit1: UnitLike, unit2: UnitLike, density: Optional[Number] = None) -> bool:
    """
    Check if two units can be converted into each other.

    Mass units convert among themselves, as do volume units. Countable
    units only match themselves, so slices and whole items never mix. Mass
    and volume are compatible only when a density is supplied. Unknown
    units are never compatible.
    """
    try:
        unit1 = Unit.parse(unit1)
        unit2 = Unit.parse(unit2)
    except UnknownUnit:
        return False
    kind1, kind2 = unit1.kind, unit2.kind

    if kind1 == kind2:
        return unit1.base == unit2.base

    return density is not None and {kind1, kind2} == {UnitKind.MASS, UnitKind.VOLUME}


def get_volume_table(volume_system: Union[VolumeSystem, str, None] = None) -> Dict[Unit, Decimal]:
    """
    Get the volume-to-milliliter table for a regional volume system.

    Args:
        volume_system: "uk" or "us"; the configured system when None

    Raises:
        ValidationError: If the volume system is not recognized
    """
    if volume_system is None:
        volume_system = get_config().volume_system
    try:
        system = VolumeSystem(str(getattr(volume_system, "value", volume_system)).lower())
    except ValueError:
        raise ValidationError([f"Unknown volume system: {volume_system!r}"])
    return VOLUME_TABLES[system]


def _coerce_density(density: Optional[Number]) -> Optional[Decimal]:
    if density is None:
        return None
    is_valid, error = validate_density(density)
    if not is_valid:
        raise ValidationError([error])
    return require_decimal(density, "Density")


# ============================================================================
# Base Unit Conversions
# ============================================================================


def to_base(
    quantity: Number,
    unit: UnitLike,
    density: Optional[Number] = None,
    volume_system: Union[VolumeSystem, str, None] = None,
) -> Tuple[Decimal, BaseUnit]:
    """
    Convert a quantity to its base representation.

    Args:
        quantity: Amount to convert (negative values are not rejected here)
        unit: Source unit
        density: Optional density (g/ml). When given, volume quantities are
            re-expressed as an equivalent mass in grams.
        volume_system: Volume table to use; the configured one when None

    Returns:
        Tuple of (amount, base_unit)

    Raises:
        UnknownUnit: If the unit is not recognized
        ValidationError: If quantity is not a number or density is not positive

    Example:
        >>> to_base(1, "kg")
        (Decimal('1000'), <BaseUnit.GRAMS: 'g'>)
        >>> to_base(1, "ml", density="0.95")
        (Decimal('0.95'), <BaseUnit.GRAMS: 'g'>)
    """
    amount = require_decimal(quantity, "Quantity")
    unit = Unit.parse(unit)
    density = _coerce_density(density)

    if unit.kind == UnitKind.EACH:
        return amount, unit.base

    if unit.kind == UnitKind.MASS:
        return amount * MASS_TO_GRAMS[unit], BaseUnit.GRAMS

    amount_ml = amount * get_volume_table(volume_system)[unit]
    if density is None:
        return amount_ml, BaseUnit.MILLILITERS
    return amount_ml * density, BaseUnit.GRAMS


def from_base(
    amount: Number,
    target_unit: UnitLike,
    density: Optional[Number] = None,
    base: Union[BaseUnit, str, None] = None,
    volume_system: Union[VolumeSystem, str, None] = None,
) -> Decimal:
    """
    Re-express a base amount in a target unit.

    Args:
        amount: Amount in the base unit given by ``base``
        target_unit: Unit to express the amount in
        density: Density (g/ml); required when the amount is grams and the
            target is a volume unit, or milliliters and the target is a mass unit
        base: Base unit the amount is in; defaults to the target's own base
        volume_system: Volume table to use; the configured one when None

    Returns:
        Quantity in target_unit

    Raises:
        IncompatibleUnits: If crossing mass/volume without a density, or
            mixing countable and measured units, or two different countable units
    """
    amount = require_decimal(amount, "Amount")
    target = Unit.parse(target_unit)
    base = target.base if base is None else BaseUnit.parse(base)
    density = _coerce_density(density)

    if target.kind == UnitKind.EACH or base.kind == UnitKind.EACH:
        if target.kind != base.kind:
            raise IncompatibleUnits(base, target, "countable and measured units do not mix")
        if target.base != base:
            raise IncompatibleUnits(base, target, "different countable units do not convert")
        return amount

    if target.kind == UnitKind.MASS:
        if base == BaseUnit.MILLILITERS:
            if density is None:
                raise IncompatibleUnits(base, target, "density required for volume to mass")
            amount = amount * density
        return amount / MASS_TO_GRAMS[target]

    if base == BaseUnit.GRAMS:
        if density is None:
            raise IncompatibleUnits(base, target, "density required for mass to volume")
        amount = amount / density
    return amount / get_volume_table(volume_system)[target]


def convert_between_units(
    quantity: Number,
    from_unit: UnitLike,
    to_unit: UnitLike,
    density: Optional[Number] = None,
    volume_system: Union[VolumeSystem, str, None] = None,
) -> Decimal:
    """
    Convert between any two units, bridging mass and volume with a density.

    Identical units short-circuit so the quantity comes back unchanged.

    Args:
        quantity: Quantity to convert
        from_unit: Source unit
        to_unit: Target unit
        density: Optional density (g/ml) for volume <-> mass conversions
        volume_system: Volume table to use; the configured one when None

    Returns:
        Converted quantity as Decimal

    Raises:
        IncompatibleUnits: If the units cannot be bridged
        UnknownUnit: If either unit is not recognized

    Example:
        >>> convert_between_units(2, "kg", "g")
        Decimal('2000')
        >>> convert_between_units(250, "ml", "g", density="1.03")
        Decimal('257.50')
    """
    source = Unit.parse(from_unit)
    target = Unit.parse(to_unit)
    if source == target:
        return require_decimal(quantity, "Quantity")

    amount, base = to_base(quantity, source, volume_system=volume_system)
    return from_base(amount, target, density, base=base, volume_system=volume_system)


def format_conversion(
    value: Number,
    from_unit: UnitLike,
    to_unit: UnitLike,
    density: Optional[Number] = None,
    precision: int = 2,
) -> str:
    """
    Format a unit conversion for display.

    Returns:
        Formatted string (e.g., "1 lb = 16.00 oz"), or an error message
        if the conversion is not possible
    """
    try:
        converted = convert_between_units(value, from_unit, to_unit, density)
    except (IncompatibleUnits, UnknownUnit, ValidationError) as e:
        return f"Error: {e}"

    source = Unit.parse(from_unit).value
    target = Unit.parse(to_unit).value
    return f"{quantity_to_string(value)} {source} = {converted:.{precision}f} {target}"


# ============================================================================
# Density Resolution
# ============================================================================


def get_reference_density(ingredient_name: str) -> Optional[Decimal]:
    """
    Look up a typical density for an ingredient by name (case-insensitive).

    Returns:
        Density in g/ml, or None if the name is not in the reference table
    """
    if not ingredient_name:
        return None
    return REFERENCE_DENSITIES.get(" ".join(ingredient_name.lower().split()))


def resolve_density(
    ingredient: Ingredient, use_reference_densities: Optional[bool] = None
) -> Optional[Decimal]:
    """
    Get the density to bridge volume and mass for an ingredient.

    The ingredient's own density always wins. The reference table is only
    consulted when the caller opts in.

    Args:
        ingredient: Ingredient being costed
        use_reference_densities: Allow the reference table; the configured
            flag when None

    Returns:
        Density in g/ml, or None when no density is available
    """
    if ingredient.density_g_per_ml is not None:
        return ingredient.density_g_per_ml

    if use_reference_densities is None:
        use_reference_densities = get_config().use_reference_densities
    if not use_reference_densities:
        return None

    density = get_reference_density(ingredient.name)
    if density is not None:
        log_operation(
            logger,
            operation="resolve_density",
            outcome="reference_density_used",
            level=logging.DEBUG,
            ingredient_id=ingredient.id,
            density=str(density),
        )
    return density


# ============================================================================
# Cost Calculation Utilities
# ============================================================================


def cost_per_base_unit(pack_price: Number, pack_quantity: Number) -> Decimal:
    """
    Calculate the price of one base unit (g, ml or item) of a pack.

    Raises:
        ValidationError: If the pack quantity is not positive
    """
    pack_quantity = require_decimal(pack_quantity, "Pack quantity")
    if pack_quantity <= 0:
        raise ValidationError(["Pack quantity must be greater than zero"])
    return require_decimal(pack_price, "Pack price") / pack_quantity


def _usage_in_pack_base(
    quantity: Number,
    unit: Unit,
    ingredient: Ingredient,
    volume_system: Union[VolumeSystem, str, None],
    use_reference_densities: Optional[bool],
) -> Decimal:
    """Express a usage quantity in the ingredient's pack base unit."""
    pack_base = ingredient.pack_unit

    if unit.kind == pack_base.kind:
        amount, base = to_base(quantity, unit, volume_system=volume_system)
        if base != pack_base:
            raise IncompatibleUnits(
                unit, pack_base, f"'{ingredient.name}' is counted in {pack_base.value}"
            )
        return amount

    if unit.kind == UnitKind.EACH or pack_base.kind == UnitKind.EACH:
        raise IncompatibleUnits(
            unit, pack_base, f"'{ingredient.name}' is sold by {pack_base.kind.value}"
        )

    density = resolve_density(ingredient, use_reference_densities)
    if density is None:
        raise IncompatibleUnits(unit, pack_base, f"no density for '{ingredient.name}'")

    amount, base = to_base(quantity, unit, volume_system=volume_system)
    return from_base(
        amount, Unit(pack_base.value), density, base=base, volume_system=volume_system
    )


def compute_ingredient_usage_cost(
    usage_quantity: Number,
    usage_unit: UnitLike,
    ingredient: Ingredient,
    volume_system: Union[VolumeSystem, str, None] = None,
    use_reference_densities: Optional[bool] = None,
) -> Decimal:
    """
    Calculate the cost of using an amount of an ingredient.

    Formula: cost = (pack_price / pack_quantity) × usage in pack base unit

    The ingredient's density is only used when the usage unit and the pack
    unit are of different kinds (e.g. cups of a flour sold by the gram).

    Args:
        usage_quantity: Amount used
        usage_unit: Unit of the amount used
        ingredient: Ingredient supplying pack size, price and density
        volume_system: Volume table to use; the configured one when None
        use_reference_densities: Allow reference densities for ingredients
            without their own; the configured flag when None

    Returns:
        Cost as Decimal

    Raises:
        ValidationError: If the ingredient's pack data is invalid
        IncompatibleUnits: If the usage cannot be expressed in the pack unit

    Example:
        >>> flour = Ingredient(1, "Flour", 1000, "g", 10)
        >>> compute_ingredient_usage_cost(500, "g", flour)
        Decimal('5.00')
    """
    errors = ingredient.validation_errors()
    if errors:
        raise ValidationError(errors)

    usage_base_amount = _usage_in_pack_base(
        usage_quantity,
        Unit.parse(usage_unit),
        ingredient,
        volume_system,
        use_reference_densities,
    )
    return ingredient.cost_per_base_unit * usage_base_amount


def compute_cost_per_output_unit(total_cost: Number, yield_quantity: Number) -> Decimal:
    """
    Divide a total cost by a yield.

    A non-positive yield returns the total unchanged rather than dividing;
    the recipe aggregator rejects such yields before ever calling this.
    """
    total_cost = require_decimal(total_cost, "Total cost")
    yield_quantity = require_decimal(yield_quantity, "Yield quantity")
    if yield_quantity <= 0:
        return total_cost
    return total_cost / yield_quantity


def calculate_cost_per_serving(total_cost: Number, servings: Number) -> Optional[Decimal]:
    """
    Calculate the cost of one serving.

    Returns:
        Cost per serving, or None if servings is not positive
    """
    servings = require_decimal(servings, "Servings")
    if servings <= 0:
        return None
    return require_decimal(total_cost, "Total cost") / servings


def calculate_food_cost_percentage(
    cost_per_serving: Number, selling_price: Number
) -> Optional[Decimal]:
    """
    Calculate food cost as a percentage of the selling price.

    Returns:
        Percentage (e.g. Decimal('30') for 30%), or None if the selling
        price is not positive
    """
    selling_price = require_decimal(selling_price, "Selling price")
    if selling_price <= 0:
        return None
    return require_decimal(cost_per_serving, "Cost per serving") / selling_price * 100
