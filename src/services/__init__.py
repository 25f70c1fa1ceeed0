"""Services package - Business logic layer for the Recipe Costing Engine.

This package contains the pure, stateless services that convert units and
cost recipes. Nothing here performs I/O or keeps state between calls.

Architecture:
- Services: Stateless functions organized by concern
- Exceptions: Consistent error handling via ServiceError hierarchy
- Validation: Input validation before any arithmetic

Service Modules:
- unit_converter: Unit taxonomy conversions and ingredient usage costing
- recipe_cost_service: Recursive recipe/sub-recipe cost aggregation

Infrastructure:
- exceptions: Custom exception classes for service layer errors
- logging_utils: Structured operation logging
- dto_utils: Display formatting for costs and quantities

Service modules are imported directly (``from src.services import
recipe_cost_service``); this package only re-exports the exception classes
so the models package can depend on them without an import cycle.
"""

from .exceptions import (
    ServiceError,
    ValidationError,
    UnknownUnit,
    IncompatibleUnits,
    IngredientNotFound,
    SubRecipeNotFound,
    InvalidYield,
    CircularDependency,
    MaxDepthExceeded,
)

__all__ = [
    "ServiceError",
    "ValidationError",
    "UnknownUnit",
    "IncompatibleUnits",
    "IngredientNotFound",
    "SubRecipeNotFound",
    "InvalidYield",
    "CircularDependency",
    "MaxDepthExceeded",
]
