"""
Recipe Cost Service - Recursive cost aggregation for recipes and sub-recipes.

This service provides:
- Itemized cost breakdowns for a recipe, including nested sub-recipes
- Cycle detection and a nesting depth guard over the sub-recipe graph
- Unit conversion of sub-recipe usage into the sub-recipe's yield unit
- Batch costing of many recipes, optionally across worker threads
- Plain-text cost summaries

The service is stateless: catalogs are handed in, a fresh CostBreakdown is
handed back, and nothing is cached between calls. Any failure aborts the
whole calculation; a partial breakdown is never returned.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from src.models import CostBreakdown, Ingredient, LineItemCost, Recipe, VolumeSystem
from src.models.recipe import RecipeItem, SubRecipeLink
from src.services.dto_utils import format_cost, quantity_to_string
from src.services.exceptions import (
    CircularDependency,
    IncompatibleUnits,
    IngredientNotFound,
    InvalidYield,
    MaxDepthExceeded,
    ServiceError,
    SubRecipeNotFound,
    ValidationError,
)
from src.services.logging_utils import get_service_logger, log_operation
from src.services.unit_converter import (
    compute_cost_per_output_unit,
    compute_ingredient_usage_cost,
    convert_between_units,
)
from src.utils.config import get_config
from src.utils.constants import MAX_RECIPE_DEPTH
from src.utils.validators import validate_quantity

logger = get_service_logger(__name__)

IngredientCatalog = Union[Mapping[Any, Ingredient], Iterable[Ingredient]]
RecipeCatalog = Union[Mapping[Any, Recipe], Iterable[Recipe]]

__all__ = [
    "MAX_RECIPE_DEPTH",
    "BatchCostResult",
    "calculate_recipe_cost",
    "calculate_recipe_costs",
    "format_cost_breakdown",
]


@dataclass(frozen=True)
class _CostingOptions:
    """Settings resolved once per top-level call and shared by every level."""

    max_depth: int
    volume_system: str
    use_reference_densities: bool


@dataclass(frozen=True)
class BatchCostResult:
    """
    Outcome of costing several recipes.

    Attributes:
        breakdowns: Recipe ID -> CostBreakdown for recipes costed successfully
        errors: Recipe ID -> error for recipes that could not be costed
    """

    breakdowns: Dict[Any, CostBreakdown] = field(default_factory=dict)
    errors: Dict[Any, ServiceError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when every recipe was costed."""
        return not self.errors


# ============================================================================
# Catalog Helpers
# ============================================================================


def _index_catalog(catalog: Union[Mapping, Iterable]) -> Mapping[Any, Any]:
    """Key a catalog by entry ID (mappings are assumed to be keyed already)."""
    if isinstance(catalog, Mapping):
        return catalog
    return {entry.id: entry for entry in catalog}


def _resolve_options(
    max_depth: Optional[int],
    volume_system: Union[VolumeSystem, str, None],
    use_reference_densities: Optional[bool],
) -> _CostingOptions:
    config = get_config()
    if max_depth is None:
        max_depth = config.max_recipe_depth
    if volume_system is None:
        volume_system = config.volume_system
    if use_reference_densities is None:
        use_reference_densities = config.use_reference_densities
    return _CostingOptions(
        max_depth=max_depth,
        volume_system=getattr(volume_system, "value", volume_system),
        use_reference_densities=use_reference_densities,
    )


def _require_usable_quantity(recipe: Recipe, quantity: Decimal, label: str) -> None:
    is_valid, error = validate_quantity(
        quantity, allow_zero=True, field_name=f"Recipe '{recipe.name}' {label}"
    )
    if not is_valid:
        log_operation(
            logger,
            operation="calculate_recipe_cost",
            outcome="invalid_quantity",
            level=logging.WARNING,
            recipe_id=recipe.id,
            error=error,
        )
        raise ValidationError([error])


# ============================================================================
# Cost Aggregation
# ============================================================================


def calculate_recipe_cost(
    recipe: Recipe,
    ingredients: IngredientCatalog,
    all_recipes: RecipeCatalog,
    visited: Optional[Iterable[Any]] = None,
    depth: int = 0,
    *,
    max_depth: Optional[int] = None,
    volume_system: Union[VolumeSystem, str, None] = None,
    use_reference_densities: Optional[bool] = None,
) -> CostBreakdown:
    """
    Calculate an itemized cost breakdown for one batch of a recipe.

    Each ingredient line is costed from its pack price. Each sub-recipe is
    costed recursively, turned into a cost per unit of its yield, and
    multiplied by the quantity used (converted into the sub-recipe's yield
    unit first).

    Args:
        recipe: Recipe to cost
        ingredients: Ingredient catalog (sequence, or mapping keyed by ID)
        all_recipes: Recipe catalog holding every transitive sub-recipe
        visited: Recipe IDs of the ancestors of ``recipe``, outermost first;
            leave as None for a top-level call
        depth: Nesting depth of ``recipe``; leave as 0 for a top-level call
        max_depth: Deepest nesting allowed; the configured value
            (default MAX_RECIPE_DEPTH) when None
        volume_system: Volume table for conversions; configured when None
        use_reference_densities: Allow reference densities for ingredients
            without their own; configured when None

    Returns:
        CostBreakdown for the recipe

    Raises:
        InvalidYield: If this recipe or any sub-recipe has a yield <= 0
        CircularDependency: If a recipe appears among its own ancestors
        MaxDepthExceeded: If nesting goes deeper than max_depth
        IngredientNotFound: If an ingredient ID is missing from the catalog
        SubRecipeNotFound: If a sub-recipe ID is missing from the catalog
        IncompatibleUnits: If a usage cannot be converted to its pack or
            yield unit
        ValidationError: If a quantity is negative or pack data is invalid

    Example:
        >>> breakdown = calculate_recipe_cost(scones, ingredients, recipes)
        >>> print(f"Batch costs {breakdown.total_cost:.2f}")
        Batch costs 6.50
    """
    options = _resolve_options(max_depth, volume_system, use_reference_densities)
    ancestors = tuple(visited) if visited else ()

    breakdown = _cost_recipe(
        recipe,
        _index_catalog(ingredients),
        _index_catalog(all_recipes),
        ancestors,
        depth,
        options,
    )

    log_operation(
        logger,
        operation="calculate_recipe_cost",
        outcome="success",
        level=logging.DEBUG,
        recipe_id=recipe.id,
        total_cost=str(breakdown.total_cost),
        cost_per_output_unit=str(breakdown.cost_per_output_unit),
    )
    return breakdown


def _cost_recipe(
    recipe: Recipe,
    ingredients: Mapping[Any, Ingredient],
    recipes: Mapping[Any, Recipe],
    ancestors: Tuple[Any, ...],
    depth: int,
    options: _CostingOptions,
) -> CostBreakdown:
    if recipe.yield_quantity <= 0:
        log_operation(
            logger,
            operation="calculate_recipe_cost",
            outcome="invalid_yield",
            level=logging.WARNING,
            recipe_id=recipe.id,
            yield_quantity=str(recipe.yield_quantity),
        )
        raise InvalidYield(recipe.id, recipe.name, recipe.yield_quantity)

    if recipe.id in ancestors:
        chain = ancestors + (recipe.id,)
        log_operation(
            logger,
            operation="calculate_recipe_cost",
            outcome="circular_dependency",
            level=logging.WARNING,
            recipe_id=recipe.id,
            chain=list(chain),
        )
        raise CircularDependency(chain)

    if depth > options.max_depth:
        log_operation(
            logger,
            operation="calculate_recipe_cost",
            outcome="max_depth_exceeded",
            level=logging.WARNING,
            recipe_id=recipe.id,
            depth=depth,
            max_depth=options.max_depth,
        )
        raise MaxDepthExceeded(recipe.id, depth, options.max_depth)

    # A new tuple per level: siblings only ever see their own ancestors
    ancestors = ancestors + (recipe.id,)

    ingredient_costs = tuple(
        _cost_ingredient_line(recipe, item, ingredients, options) for item in recipe.items
    )
    sub_recipe_costs = tuple(
        _cost_sub_recipe_line(recipe, link, ingredients, recipes, ancestors, depth, options)
        for link in recipe.sub_recipes
    )

    total_cost = sum((line.cost for line in ingredient_costs), Decimal("0")) + sum(
        (line.cost for line in sub_recipe_costs), Decimal("0")
    )

    return CostBreakdown(
        recipe_id=recipe.id,
        recipe_name=recipe.name,
        ingredient_costs=ingredient_costs,
        sub_recipe_costs=sub_recipe_costs,
        total_cost=total_cost,
        cost_per_output_unit=compute_cost_per_output_unit(total_cost, recipe.yield_quantity),
    )


def _cost_ingredient_line(
    recipe: Recipe,
    item: RecipeItem,
    ingredients: Mapping[Any, Ingredient],
    options: _CostingOptions,
) -> LineItemCost:
    _require_usable_quantity(recipe, item.quantity, f"quantity of ingredient {item.ingredient_id}")

    ingredient = ingredients.get(item.ingredient_id)
    if ingredient is None:
        log_operation(
            logger,
            operation="calculate_recipe_cost",
            outcome="ingredient_not_found",
            level=logging.WARNING,
            recipe_id=recipe.id,
            ingredient_id=item.ingredient_id,
        )
        raise IngredientNotFound(item.ingredient_id, recipe.id)

    cost = compute_ingredient_usage_cost(
        item.quantity,
        item.unit,
        ingredient,
        volume_system=options.volume_system,
        use_reference_densities=options.use_reference_densities,
    )

    return LineItemCost(
        id=ingredient.id,
        name=ingredient.name,
        quantity=item.quantity,
        unit=item.unit,
        cost=cost,
        cost_per_unit=ingredient.cost_per_base_unit,
    )


def _cost_sub_recipe_line(
    recipe: Recipe,
    link: SubRecipeLink,
    ingredients: Mapping[Any, Ingredient],
    recipes: Mapping[Any, Recipe],
    ancestors: Tuple[Any, ...],
    depth: int,
    options: _CostingOptions,
) -> LineItemCost:
    _require_usable_quantity(recipe, link.quantity, f"quantity of sub-recipe {link.sub_recipe_id}")

    sub_recipe = recipes.get(link.sub_recipe_id)
    if sub_recipe is None:
        log_operation(
            logger,
            operation="calculate_recipe_cost",
            outcome="sub_recipe_not_found",
            level=logging.WARNING,
            recipe_id=recipe.id,
            sub_recipe_id=link.sub_recipe_id,
        )
        raise SubRecipeNotFound(link.sub_recipe_id, recipe.id)

    sub_breakdown = _cost_recipe(
        sub_recipe, ingredients, recipes, ancestors, depth + 1, options
    )
    cost_per_yield_unit = sub_breakdown.total_cost / sub_recipe.yield_quantity

    try:
        quantity_in_yield_unit = convert_between_units(
            link.quantity,
            link.unit,
            sub_recipe.yield_unit,
            volume_system=options.volume_system,
        )
    except IncompatibleUnits as e:
        raise IncompatibleUnits(
            link.unit,
            sub_recipe.yield_unit,
            f"sub-recipe '{sub_recipe.name}' yields {sub_recipe.yield_unit.value} "
            f"but recipe '{recipe.name}' uses it in {link.unit.value}",
        ) from e

    return LineItemCost(
        id=sub_recipe.id,
        name=sub_recipe.name,
        quantity=link.quantity,
        unit=link.unit,
        cost=cost_per_yield_unit * quantity_in_yield_unit,
        cost_per_unit=cost_per_yield_unit,
    )


# ============================================================================
# Batch Costing
# ============================================================================


def calculate_recipe_costs(
    recipes: Iterable[Recipe],
    ingredients: IngredientCatalog,
    all_recipes: Optional[RecipeCatalog] = None,
    max_workers: Optional[int] = None,
    *,
    max_depth: Optional[int] = None,
    volume_system: Union[VolumeSystem, str, None] = None,
    use_reference_densities: Optional[bool] = None,
) -> BatchCostResult:
    """
    Cost several recipes independently.

    Each recipe gets its own calculation and ancestor chain, so one bad
    recipe does not stop the others: its error is collected instead.
    Errors that are not ServiceErrors propagate.

    Args:
        recipes: Recipes to cost; any iterable, read once
        ingredients: Ingredient catalog
        all_recipes: Recipe catalog for sub-recipe lookup; ``recipes`` when None
        max_workers: Worker threads to use; costs sequentially when None or 1
        max_depth: See calculate_recipe_cost
        volume_system: See calculate_recipe_cost
        use_reference_densities: See calculate_recipe_cost

    Returns:
        BatchCostResult with a breakdown or an error for every recipe
    """
    recipes = list(recipes)
    ingredient_index = _index_catalog(ingredients)
    recipe_index = _index_catalog(recipes if all_recipes is None else all_recipes)
    # Resolve defaults before fanning out so every worker sees the same settings
    resolved = _resolve_options(max_depth, volume_system, use_reference_densities)
    options = {
        "max_depth": resolved.max_depth,
        "volume_system": resolved.volume_system,
        "use_reference_densities": resolved.use_reference_densities,
    }

    def cost_one(recipe: Recipe):
        try:
            return calculate_recipe_cost(recipe, ingredient_index, recipe_index, **options)
        except ServiceError as e:
            return e

    if max_workers is None or max_workers <= 1:
        outcomes = [cost_one(recipe) for recipe in recipes]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(executor.map(cost_one, recipes))

    result = BatchCostResult()
    for recipe, outcome in zip(recipes, outcomes):
        if isinstance(outcome, ServiceError):
            result.errors[recipe.id] = outcome
        else:
            result.breakdowns[recipe.id] = outcome

    log_operation(
        logger,
        operation="calculate_recipe_costs",
        outcome="success" if result.ok else "partial",
        costed=len(result.breakdowns),
        failed=len(result.errors),
    )
    return result


# ============================================================================
# Display Helpers
# ============================================================================


def format_cost_breakdown(breakdown: CostBreakdown, currency_symbol: Optional[str] = None) -> str:
    """
    Format a cost breakdown as a plain-text summary.

    Lines appear in recipe order. The unit cost line reads "Cost per batch"
    when the unit cost is zero. Example output::

        Scones
        Total Recipe Cost: £6.50
        Cost per output unit: £1.30

        Ingredient Costs:
          - Flour: 500 g = £2.00
          - Butter: 100 g = £3.00

        Sub-Recipe Costs:
          - Jam: 30 g = £1.50

    Args:
        breakdown: Breakdown to format
        currency_symbol: Symbol prefix; the configured symbol when None

    Returns:
        Multi-line summary string
    """
    if currency_symbol is None:
        currency_symbol = get_config().currency_symbol

    # A zero unit cost reads as a per-batch figure
    per = "output unit" if breakdown.cost_per_output_unit > 0 else "batch"
    lines = [
        breakdown.recipe_name,
        f"Total Recipe Cost: {format_cost(breakdown.total_cost, currency_symbol)}",
        f"Cost per {per}: {format_cost(breakdown.cost_per_output_unit, currency_symbol)}",
    ]

    for title, entries in (
        ("Ingredient Costs:", breakdown.ingredient_costs),
        ("Sub-Recipe Costs:", breakdown.sub_recipe_costs),
    ):
        if not entries:
            continue
        lines.append("")
        lines.append(title)
        for line in entries:
            lines.append(
                f"  - {line.name}: {quantity_to_string(line.quantity)} {line.unit.value} "
                f"= {format_cost(line.cost, currency_symbol)}"
            )

    return "\n".join(lines) + "\n"
