"""
Unit tests for the unit conversion system.

Tests cover:
- Unit kind detection and compatibility checking
- Fixed-factor conversions (mass, volume, countable)
- Density-bridged conversions
- Ingredient usage costing
- Edge cases and error handling
"""

from decimal import Decimal

import pytest

from src.models import BaseUnit, Ingredient, Unit, UnitKind
from src.services.exceptions import IncompatibleUnits, UnknownUnit, ValidationError
from src.services.unit_converter import (
    # Unit kind detection
    get_unit_kind,
    parse_base_unit,
    parse_unit,
    units_compatible,
    get_volume_table,
    # Conversions
    convert_between_units,
    format_conversion,
    from_base,
    to_base,
    # Densities
    get_reference_density,
    resolve_density,
    # Cost calculations
    calculate_cost_per_serving,
    calculate_food_cost_percentage,
    compute_cost_per_output_unit,
    compute_ingredient_usage_cost,
    cost_per_base_unit,
)

# Every ordered pair of distinct units that share a base unit
CONVERTIBLE_PAIRS = [
    (source, target) for source in Unit for target in Unit
    if source != target and source.base == target.base
]


# ============================================================================
# Unit Kind Detection Tests
# ============================================================================


class TestUnitKindDetection:
    """Test unit kind detection and compatibility checking."""

    def test_get_unit_kind_mass(self):
        """Test mass unit detection."""
        for unit in ("g", "kg", "mg", "oz", "lb"):
            assert get_unit_kind(unit) == UnitKind.MASS

    def test_get_unit_kind_volume(self):
        """Test volume unit detection."""
        for unit in ("ml", "l", "tsp", "tbsp", "cup", "fl oz", "pint", "quart", "gallon",
                     "pinch", "dash"):
            assert get_unit_kind(unit) == UnitKind.VOLUME

    def test_get_unit_kind_each(self):
        """Test countable unit detection."""
        assert get_unit_kind("each") == UnitKind.EACH
        assert get_unit_kind("slice") == UnitKind.EACH

    def test_get_unit_kind_accepts_spellings(self):
        """Plurals, long names and mixed case resolve to the same unit."""
        assert parse_unit("Tablespoons") == Unit.TABLESPOON
        assert parse_unit("LBS") == Unit.POUND
        assert parse_unit("  fluid   ounces ") == Unit.FLUID_OUNCE
        assert parse_unit("litres") == Unit.LITER
        assert parse_unit(Unit.CUP) is Unit.CUP

    def test_get_unit_kind_unknown(self):
        """Test unknown units are rejected."""
        with pytest.raises(UnknownUnit) as exc_info:
            get_unit_kind("bushel")
        assert exc_info.value.unit == "bushel"

    def test_unknown_unit_is_value_error(self):
        """UnknownUnit can be caught as a plain ValueError."""
        with pytest.raises(ValueError):
            parse_unit("handful")

    def test_parse_base_unit(self):
        """Pack units resolve to base units only."""
        assert parse_base_unit("grams") == BaseUnit.GRAMS
        assert parse_base_unit("ML") == BaseUnit.MILLILITERS
        assert parse_base_unit("slices") == BaseUnit.SLICE
        assert parse_base_unit("each") == BaseUnit.EACH
        with pytest.raises(UnknownUnit):
            parse_base_unit("kg")

    def test_units_compatible_same_kind(self):
        """Test compatibility within a kind."""
        assert units_compatible("cup", "tbsp") is True
        assert units_compatible("lb", "g") is True
        assert units_compatible("slice", "slices") is True

    def test_slices_and_whole_items_are_not_compatible(self):
        """Slices and whole items are different countable units."""
        assert units_compatible("each", "slice") is False
        assert units_compatible("slice", "each", density="1") is False

    def test_units_compatible_mass_volume_needs_density(self):
        """Mass and volume are only compatible with a density."""
        assert units_compatible("cup", "g") is False
        assert units_compatible("cup", "g", density="0.6") is True

    def test_units_compatible_each_never_crosses(self):
        """Countable units never convert to measured ones."""
        assert units_compatible("each", "g", density="1") is False

    def test_units_compatible_unknown(self):
        """Unknown units are never compatible."""
        assert units_compatible("bag", "g") is False


# ============================================================================
# Fixed Conversion Tests
# ============================================================================


class TestFixedConversions:
    """Test conversions that need no density."""

    def test_kilograms_to_grams(self):
        """1 kg normalizes to 1000 g."""
        assert to_base(1, "kg") == (Decimal("1000"), BaseUnit.GRAMS)

    def test_liters_to_milliliters(self):
        """1 L normalizes to 1000 ml."""
        assert to_base(1, "l") == (Decimal("1000"), BaseUnit.MILLILITERS)

    def test_uk_pint(self):
        """UK pint is 568.26125 ml."""
        assert to_base(1, "pint", volume_system="uk") == (
            Decimal("568.26125"),
            BaseUnit.MILLILITERS,
        )

    def test_default_volume_system_is_uk(self):
        """The UK table is used unless configured otherwise."""
        amount, _ = to_base(1, "cup")
        assert amount == Decimal("250")

    def test_us_volume_table(self):
        """US customary measures come from the US table."""
        amount, _ = to_base(1, "cup", volume_system="us")
        assert amount == Decimal("236.5882365")
        assert get_volume_table("US")[Unit.PINT] == Decimal("473.176473")

    def test_volume_system_from_config(self, monkeypatch):
        """The configured volume system is the default."""
        monkeypatch.setenv("RECIPE_COSTING_VOLUME_SYSTEM", "us")
        amount, _ = to_base(1, "tsp")
        assert amount == Decimal("4.92892159375")

    def test_unknown_volume_system(self):
        """Test unknown volume systems are rejected."""
        with pytest.raises(ValidationError):
            get_volume_table("metric")

    def test_pinch_and_dash(self):
        """Pinch and dash are tiny volume measures."""
        assert to_base(1, "pinch")[0] == Decimal("0.5")
        assert to_base(2, "dash")[0] == Decimal("0.50")

    def test_each_never_scales(self):
        """Countable quantities pass through unchanged."""
        assert to_base(3, "slice") == (Decimal("3"), BaseUnit.SLICE)
        assert to_base(3, "each") == (Decimal("3"), BaseUnit.EACH)

    def test_slices_do_not_convert_to_whole_items(self):
        """A slice is not one whole item."""
        with pytest.raises(IncompatibleUnits) as exc_info:
            convert_between_units(2, "slice", "each")
        assert exc_info.value.from_unit == BaseUnit.SLICE
        assert exc_info.value.to_unit == Unit.EACH
        with pytest.raises(IncompatibleUnits):
            convert_between_units(1, "each", "slices")
        with pytest.raises(IncompatibleUnits):
            from_base(4, "slice", base="each")

    def test_pounds_to_ounces(self):
        """Test mass conversion through grams."""
        assert convert_between_units(1, "lb", "oz") == pytest.approx(Decimal("16"))

    def test_cups_to_tablespoons(self):
        """Test volume conversion through milliliters."""
        assert convert_between_units(1, "cup", "tbsp") == pytest.approx(
            Decimal("250") / Decimal("15")
        )

    def test_identity_returns_quantity_unchanged(self):
        """Converting a unit to itself returns the quantity exactly."""
        assert convert_between_units(Decimal("0.1"), "cup", "cups") == Decimal("0.1")
        assert convert_between_units(7, "g", "g") == Decimal("7")

    def test_base_round_trip(self):
        """to_base then from_base recovers the quantity."""
        for quantity, unit in ((Decimal("2.5"), "lb"), (Decimal("3"), "fl oz"),
                               (Decimal("0.75"), "gallon")):
            amount, base = to_base(quantity, unit)
            assert from_base(amount, unit, base=base) == pytest.approx(quantity)

    @pytest.mark.parametrize("volume_system", ["uk", "us"])
    @pytest.mark.parametrize("source,target", CONVERTIBLE_PAIRS)
    def test_round_trip_between_units(self, source, target, volume_system):
        """Converting to any other unit of the same base and back recovers the quantity."""
        quantity = Decimal("2.5")
        there = convert_between_units(quantity, source, target, volume_system=volume_system)
        back = convert_between_units(there, target, source, volume_system=volume_system)
        assert back == pytest.approx(quantity)

    def test_convert_across_kinds_without_density_fails(self):
        """Mass and volume do not mix without a density."""
        with pytest.raises(IncompatibleUnits) as exc_info:
            convert_between_units(1, "cup", "g")
        assert exc_info.value.from_unit == BaseUnit.MILLILITERS
        assert exc_info.value.to_unit == Unit.GRAM

    def test_convert_each_to_mass_fails(self):
        """Countable units never convert to mass, even with a density."""
        with pytest.raises(IncompatibleUnits):
            convert_between_units(2, "each", "g", density="1")

    def test_invalid_quantity(self):
        """Test non-numeric quantities are rejected."""
        with pytest.raises(ValidationError):
            to_base("lots", "g")


# ============================================================================
# Density Conversion Tests
# ============================================================================


class TestDensityConversions:
    """Test volume <-> mass conversions bridged by density."""

    def test_volume_to_mass_with_density(self):
        """1 ml at 0.95 g/ml is 0.95 g."""
        assert to_base(1, "ml", density="0.95") == (Decimal("0.95"), BaseUnit.GRAMS)

    def test_from_base_grams_to_volume(self):
        """Grams re-expressed as cups divide by density and cup size."""
        result = from_base(150, "cup", density="0.6", base="g")
        assert result == pytest.approx(Decimal("1"))

    def test_from_base_grams_to_volume_without_density(self):
        """Test mass to volume without density fails."""
        with pytest.raises(IncompatibleUnits) as exc_info:
            from_base(100, "cup", base="g")
        assert "density required" in str(exc_info.value)

    def test_convert_between_with_density(self):
        """250 ml of milk at 1.03 g/ml is 257.5 g."""
        assert convert_between_units(250, "ml", "g", density="1.03") == Decimal("257.5")

    def test_density_round_trip(self):
        """Volume -> mass -> volume recovers the quantity."""
        grams = convert_between_units(Decimal("2"), "cup", "g", density="0.6")
        assert convert_between_units(grams, "g", "cup", density="0.6") == pytest.approx(
            Decimal("2")
        )

    def test_invalid_density(self):
        """Test non-positive densities are rejected."""
        with pytest.raises(ValidationError):
            to_base(1, "cup", density=0)
        with pytest.raises(ValidationError):
            to_base(1, "cup", density="-1")

    def test_reference_density_lookup(self):
        """Reference densities are looked up by normalized name."""
        assert get_reference_density("Plain  Flour") == Decimal("0.6")
        assert get_reference_density("unobtainium") is None
        assert get_reference_density("") is None

    def test_resolve_density_prefers_own(self, flour):
        """An ingredient's own density always wins."""
        assert resolve_density(flour, use_reference_densities=True) == Decimal("0.6")

    def test_resolve_density_reference_opt_in(self, sugar):
        """Reference densities are only used when enabled."""
        assert resolve_density(sugar) is None
        assert resolve_density(sugar, use_reference_densities=True) == Decimal("0.85")

    def test_resolve_density_reference_from_config(self, sugar, monkeypatch):
        """The reference density flag can be enabled through config."""
        monkeypatch.setenv("RECIPE_COSTING_REFERENCE_DENSITIES", "true")
        assert resolve_density(sugar) == Decimal("0.85")


# ============================================================================
# Ingredient Cost Tests
# ============================================================================


class TestIngredientUsageCost:
    """Test ingredient usage costing."""

    def test_cost_scales_linearly(self):
        """500 g of a 1000 g pack costing 10 costs 5."""
        ingredient = Ingredient(1, "Flour", 1000, "g", 10)
        assert compute_ingredient_usage_cost(500, "g", ingredient) == Decimal("5")

    def test_cost_with_unit_conversion(self, flour):
        """0.5 kg of flour at 4.00/kg costs 2.00."""
        assert compute_ingredient_usage_cost("0.5", "kg", flour) == Decimal("2.00")

    def test_cost_volume_pack(self, milk):
        """1 cup (250 ml) of milk at 1.20/l costs 0.30."""
        assert compute_ingredient_usage_cost(1, "cup", milk) == Decimal("0.30")

    def test_cost_volume_usage_of_mass_pack(self, flour):
        """1 cup of flour at 0.6 g/ml is 150 g, costing 0.60."""
        assert compute_ingredient_usage_cost(1, "cup", flour) == Decimal("0.60")

    def test_cost_mass_usage_of_volume_pack(self):
        """Grams of a liquid sold by volume convert through density."""
        oil = Ingredient(7, "Olive Oil", 500, "ml", "5.00", density_g_per_ml="0.92")
        assert compute_ingredient_usage_cost(92, "g", oil) == pytest.approx(Decimal("1.00"))

    def test_cost_without_density_fails(self, sugar):
        """Volume usage of a mass pack without density fails."""
        with pytest.raises(IncompatibleUnits) as exc_info:
            compute_ingredient_usage_cost(1, "cup", sugar)
        assert "Sugar" in str(exc_info.value)

    def test_cost_with_reference_density(self, sugar):
        """Opting in to reference densities costs density-less ingredients."""
        cost = compute_ingredient_usage_cost(1, "cup", sugar, use_reference_densities=True)
        # 250 ml * 0.85 g/ml = 212.5 g at 0.01/g
        assert cost == Decimal("2.125")

    def test_cost_each_pack(self, eggs):
        """Countable packs cost per item."""
        assert compute_ingredient_usage_cost(2, "each", eggs) == Decimal("0.50")

    def test_cost_slice_pack(self):
        """Packs counted in slices cost per slice."""
        ham = Ingredient(8, "Ham", 10, "slices", "4.00")
        assert ham.pack_unit == BaseUnit.SLICE
        assert compute_ingredient_usage_cost(3, "slice", ham) == Decimal("1.20")

    def test_cost_slices_of_whole_item_pack_fails(self, eggs):
        """Slices of an ingredient sold whole cannot be costed."""
        with pytest.raises(IncompatibleUnits) as exc_info:
            compute_ingredient_usage_cost(2, "slice", eggs)
        assert "Eggs" in str(exc_info.value)

    def test_cost_each_pack_with_mass_usage_fails(self, eggs):
        """Test mixing countable packs with mass usage."""
        with pytest.raises(IncompatibleUnits):
            compute_ingredient_usage_cost(50, "g", eggs)

    def test_cost_zero_quantity(self, butter):
        """Using none of an ingredient costs nothing."""
        assert compute_ingredient_usage_cost(0, "g", butter) == 0

    def test_cost_invalid_pack_quantity(self):
        """Ingredients with an empty pack cannot be costed."""
        broken = Ingredient(9, "Broken", 0, "g", "1.00")
        with pytest.raises(ValidationError) as exc_info:
            compute_ingredient_usage_cost(10, "g", broken)
        assert "pack quantity" in str(exc_info.value)

    def test_cost_negative_price(self):
        """Test negative pack prices are rejected."""
        broken = Ingredient(9, "Broken", 100, "g", "-1.00")
        with pytest.raises(ValidationError):
            compute_ingredient_usage_cost(10, "g", broken)

    def test_cost_per_base_unit(self):
        """Test price per base unit."""
        assert cost_per_base_unit("1.20", 1500) == Decimal("0.0008")
        with pytest.raises(ValidationError):
            cost_per_base_unit("1.20", 0)


# ============================================================================
# Yield and Serving Cost Tests
# ============================================================================


class TestYieldCosts:
    """Test per-yield and per-serving cost utilities."""

    def test_cost_per_output_unit(self):
        """Test total cost divided by yield."""
        assert compute_cost_per_output_unit("6.50", 5) == Decimal("1.3")

    def test_cost_per_output_unit_non_positive_yield(self):
        """A non-positive yield returns the total unchanged."""
        assert compute_cost_per_output_unit("6.50", 0) == Decimal("6.50")

    def test_cost_per_serving(self):
        """Test cost per serving."""
        assert calculate_cost_per_serving(12, 8) == Decimal("1.5")
        assert calculate_cost_per_serving(12, 0) is None

    def test_food_cost_percentage(self):
        """Test food cost percentage."""
        assert calculate_food_cost_percentage("1.50", 5) == Decimal("30")
        assert calculate_food_cost_percentage("1.50", 0) is None


# ============================================================================
# Display Tests
# ============================================================================


class TestFormatConversion:
    """Test conversion display helpers."""

    def test_format_conversion(self):
        """Test formatting a successful conversion."""
        assert format_conversion(1, "kg", "g") == "1 kg = 1000.00 g"

    def test_format_conversion_error(self):
        """Test formatting a failed conversion."""
        result = format_conversion(1, "cup", "g")
        assert result.startswith("Error: Cannot convert")

    def test_format_conversion_unknown_unit(self):
        """Test formatting with an unknown unit."""
        assert format_conversion(1, "bag", "g") == "Error: Unknown unit: 'bag'"
