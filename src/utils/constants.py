"""
Constants for the Recipe Costing Engine.

This module defines all system-wide constants including:
- Application metadata
- Unit spellings accepted from callers (aliases)
- Costing defaults (recursion depth, volume system, currency)
- Validation limits and error messages
"""

from typing import Dict

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Recipe Costing Engine"
APP_VERSION = "0.1.0"

# Prefix for structured service loggers
LOGGER_NAMESPACE = "recipe_costing.services"

# Prefix for environment variable configuration
ENV_PREFIX = "RECIPE_COSTING_"

# ============================================================================
# Costing Defaults
# ============================================================================

# Maximum sub-recipe nesting before a calculation is abandoned
MAX_RECIPE_DEPTH = 10

# Default volume table ("uk" = metric culinary measures + UK imperial)
DEFAULT_VOLUME_SYSTEM = "uk"

DEFAULT_CURRENCY_SYMBOL = "£"

# Decimal places used when displaying costs
COST_PRECISION = 2

# ============================================================================
# Unit Aliases
# ============================================================================

# Free-text spellings (lowercase, trimmed) -> canonical unit symbol
UNIT_ALIASES: Dict[str, str] = {
    # Mass
    "g": "g",
    "gram": "g",
    "grams": "g",
    "gr": "g",
    "kg": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "mg": "mg",
    "milligram": "mg",
    "milligrams": "mg",
    "oz": "oz",
    "ounce": "oz",
    "ounces": "oz",
    "lb": "lb",
    "lbs": "lb",
    "pound": "lb",
    "pounds": "lb",
    # Volume
    "ml": "ml",
    "millilitre": "ml",
    "millilitres": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "l": "l",
    "litre": "l",
    "litres": "l",
    "liter": "l",
    "liters": "l",
    "tsp": "tsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "tbsp": "tbsp",
    "tbs": "tbsp",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "cup": "cup",
    "cups": "cup",
    "fl oz": "fl oz",
    "floz": "fl oz",
    "fluid ounce": "fl oz",
    "fluid ounces": "fl oz",
    "pint": "pint",
    "pints": "pint",
    "pt": "pint",
    "quart": "quart",
    "quarts": "quart",
    "qt": "quart",
    "gallon": "gallon",
    "gallons": "gallon",
    "gal": "gallon",
    "pinch": "pinch",
    "pinches": "pinch",
    "dash": "dash",
    "dashes": "dash",
    # Each
    "each": "each",
    "ea": "each",
    "item": "each",
    "items": "each",
    "piece": "each",
    "pieces": "each",
    "slice": "slice",
    "slices": "slice",
}

# Spellings accepted for a base unit (pack units)
BASE_UNIT_ALIASES: Dict[str, str] = {
    "g": "g",
    "gram": "g",
    "grams": "g",
    "ml": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "millilitre": "ml",
    "millilitres": "ml",
    "each": "each",
    "ea": "each",
    "slice": "slice",
    "slices": "slice",
}

# ============================================================================
# Validation Limits
# ============================================================================

MAX_QUANTITY = 1e9
MAX_DENSITY = 100.0

ERROR_INVALID_NUMBER = "Must be a valid number"
ERROR_INVALID_POSITIVE = "Must be greater than zero"
ERROR_INVALID_NON_NEGATIVE = "Cannot be negative"
ERROR_TOO_LARGE = "Is unreasonably large"
