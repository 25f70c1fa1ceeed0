"""Service layer exception classes for the Recipe Costing Engine.

This module defines all custom exceptions raised while converting units and
costing recipes, so callers can report which recipe, ingredient or unit is
at fault instead of showing a stack trace.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── UnknownUnit
    ├── IncompatibleUnits
    ├── IngredientNotFound
    ├── SubRecipeNotFound
    ├── InvalidYield
    ├── CircularDependency
    └── MaxDepthExceeded

Every error is fatal to the calculation that raised it; none are retried.
"""

from typing import Any, Optional, Sequence


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    pass


class ValidationError(ServiceError):
    """Raised when input data validation fails.

    Args:
        errors: List of human-readable validation messages

    Example:
        >>> raise ValidationError(["Quantity cannot be negative"])
        ValidationError: Validation failed: Quantity cannot be negative
    """

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class UnknownUnit(ServiceError, ValueError):
    """Raised when a unit spelling cannot be resolved to a supported unit.

    Args:
        unit: The unrecognized unit value

    Example:
        >>> raise UnknownUnit("bushel")
        UnknownUnit: Unknown unit: 'bushel'
    """

    def __init__(self, unit: Any):
        self.unit = unit
        super().__init__(f"Unknown unit: {unit!r}")


class IncompatibleUnits(ServiceError):
    """Raised when a quantity cannot be converted between two unit kinds.

    Mass and volume are only convertible through a density; countable units
    never convert to mass or volume.

    Args:
        from_unit: Unit (or base unit) the quantity is expressed in
        to_unit: Unit (or base unit) the quantity was requested in
        reason: Optional extra detail (e.g. which ingredient lacks a density)

    Example:
        >>> raise IncompatibleUnits("cup", "g", "no density for 'Flour'")
        IncompatibleUnits: Cannot convert cup to g: no density for 'Flour'
    """

    def __init__(self, from_unit: Any, to_unit: Any, reason: Optional[str] = None):
        self.from_unit = from_unit
        self.to_unit = to_unit
        self.reason = reason
        message = f"Cannot convert {_unit_label(from_unit)} to {_unit_label(to_unit)}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class IngredientNotFound(ServiceError):
    """Raised when a recipe references an ingredient missing from the catalog.

    Args:
        ingredient_id: The ingredient ID that was not found
        recipe_id: The recipe holding the dangling reference, if known
    """

    def __init__(self, ingredient_id: Any, recipe_id: Any = None):
        self.ingredient_id = ingredient_id
        self.recipe_id = recipe_id
        message = f"Ingredient with ID {ingredient_id} not found"
        if recipe_id is not None:
            message = f"{message} (referenced by recipe {recipe_id})"
        super().__init__(message)


class SubRecipeNotFound(ServiceError):
    """Raised when a recipe references a sub-recipe missing from the catalog.

    Args:
        sub_recipe_id: The sub-recipe ID that was not found
        recipe_id: The parent recipe holding the dangling reference, if known
    """

    def __init__(self, sub_recipe_id: Any, recipe_id: Any = None):
        self.sub_recipe_id = sub_recipe_id
        self.recipe_id = recipe_id
        message = f"Sub-recipe with ID {sub_recipe_id} not found"
        if recipe_id is not None:
            message = f"{message} (referenced by recipe {recipe_id})"
        super().__init__(message)


class InvalidYield(ServiceError):
    """Raised when a recipe's yield is zero or negative.

    Cost per output unit is undefined for such a recipe.

    Args:
        recipe_id: The malformed recipe's ID
        recipe_name: The malformed recipe's display name
        yield_quantity: The offending yield value
    """

    def __init__(self, recipe_id: Any, recipe_name: str, yield_quantity: Any):
        self.recipe_id = recipe_id
        self.recipe_name = recipe_name
        self.yield_quantity = yield_quantity
        super().__init__(
            f"Recipe '{recipe_name}' (ID {recipe_id}) has invalid yield "
            f"{yield_quantity}: yield must be greater than zero"
        )


class CircularDependency(ServiceError):
    """Raised when a recipe appears in its own chain of sub-recipes.

    Args:
        chain: Recipe IDs from the top-level recipe down to the repeated ID

    Example:
        >>> raise CircularDependency([1, 2, 1])
        CircularDependency: Circular sub-recipe reference: 1 -> 2 -> 1
    """

    def __init__(self, chain: Sequence[Any]):
        self.chain = list(chain)
        path = " -> ".join(str(recipe_id) for recipe_id in self.chain)
        super().__init__(f"Circular sub-recipe reference: {path}")


class MaxDepthExceeded(ServiceError):
    """Raised when sub-recipe nesting goes deeper than the allowed maximum.

    Args:
        recipe_id: The recipe reached beyond the limit
        depth: Nesting depth at which it was reached
        max_depth: The configured limit
    """

    def __init__(self, recipe_id: Any, depth: int, max_depth: int):
        self.recipe_id = recipe_id
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(
            f"Recipe {recipe_id} is nested {depth} levels deep, "
            f"exceeding the maximum of {max_depth}"
        )


def _unit_label(unit: Any) -> str:
    return str(getattr(unit, "value", unit))
