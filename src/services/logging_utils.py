"""Service layer logging utilities.

Provides structured logging functions for service operations, enabling
consistent log format and context across unit conversion and recipe
costing.

Usage:
    from src.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    # Log successful operation
    log_operation(
        logger,
        operation="calculate_recipe_cost",
        outcome="success",
        recipe_id=12,
        total_cost="6.50",
    )

    # Log a detected data problem
    log_operation(
        logger,
        operation="calculate_recipe_cost",
        outcome="circular_dependency",
        level=logging.WARNING,
        chain=[12, 14, 12],
    )
"""

import logging
from typing import Any

from src.utils.constants import LOGGER_NAMESPACE


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance with the 'recipe_costing.services' prefix.

    Example:
        >>> logger = get_service_logger("src.services.recipe_cost_service")
        >>> logger.name
        'recipe_costing.services.recipe_cost_service'
    """
    # Extract just the module name if full path is provided
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The message is always "<operation>: <outcome>"; the context is passed
    via the 'extra' parameter so handlers can emit it as structured fields.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "calculate_recipe_cost")
        outcome: Outcome description (e.g., "success", "invalid_yield")
        level: Log level (default: INFO). Use DEBUG for verbose/frequent logs.
        **context: Additional context fields (recipe IDs, costs, error details).
            Names must not clash with LogRecord attributes such as "name"
            or "message".
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
