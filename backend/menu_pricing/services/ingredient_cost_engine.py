"""
ingredient_cost_engine.py — Recipe ingredient costing

Covers:
  - Unit conversion of a recipe quantity to the stock item's base unit
    (g → kg, ml → l; kg, l and unidade pass through)
  - Line cost = stock unit price × base quantity
  - Recipe CMV = sum of line costs, written onto the technical sheet
"""

import logging
from typing import Dict, Iterable, List, Mapping, Union

from pydantic import BaseModel, ConfigDict

from menu_pricing.models.pricing_schema import (
    IngredientLine,
    IngredientUnit,
    StockItem,
    TechnicalSheet,
)

logger = logging.getLogger("menu-pricing.ingredients")


# ---------------------------------------------------------------------------
# Divisor that converts a recipe unit into the stock item's base unit
# ---------------------------------------------------------------------------
_BASE_UNIT_DIVISORS: Dict[IngredientUnit, float] = {
    IngredientUnit.G: 1000.0,
    IngredientUnit.KG: 1.0,
    IngredientUnit.ML: 1000.0,
    IngredientUnit.L: 1.0,
    IngredientUnit.UNIDADE: 1.0,
}


class CostedLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    stock_item_id: str
    quantity: float
    unit_type: IngredientUnit
    calculated_cost: float


class RecipeCosting(BaseModel):
    model_config = ConfigDict(frozen=True)

    lines: List[CostedLine]
    total_cost: float
    missing_stock_items: List[str] = []


def to_base_quantity(quantity: float, unit_type: Union[IngredientUnit, str]) -> float:
    """Convert ``quantity`` to kg / l / unidade.  Unknown units raise ValueError."""
    unit = IngredientUnit(unit_type)
    return quantity / _BASE_UNIT_DIVISORS[unit]


def calculate_ingredient_cost(
    stock_item: StockItem,
    quantity: float,
    unit_type: Union[IngredientUnit, str],
) -> float:
    """
    Monetary cost of ``quantity`` of a stock item.

    The stock item's ``value`` is the price per base unit.  Items with no
    price, or a non-positive one, cost 0.
    """
    if not stock_item.value or stock_item.value <= 0:
        return 0.0
    return stock_item.value * to_base_quantity(quantity, unit_type)


def _index(stock_items: Union[Mapping[str, StockItem], Iterable[StockItem]]) -> Dict[str, StockItem]:
    if isinstance(stock_items, Mapping):
        return dict(stock_items)
    return {item.id: item for item in stock_items}


def cost_recipe(
    lines: Iterable[IngredientLine],
    stock_items: Union[Mapping[str, StockItem], Iterable[StockItem]],
) -> RecipeCosting:
    """
    Cost every ingredient line of a recipe.

    Lines that reference an unknown stock item cost 0 and are reported in
    ``missing_stock_items``.
    """
    by_id = _index(stock_items)
    costed: List[CostedLine] = []
    missing: List[str] = []
    total = 0.0

    for line in lines:
        item = by_id.get(line.stock_item_id)
        if item is None:
            logger.warning(f"Stock item {line.stock_item_id} not found; costing line at 0")
            missing.append(line.stock_item_id)
            cost = 0.0
        else:
            cost = calculate_ingredient_cost(item, line.quantity, line.unit_type)
        costed.append(CostedLine(
            stock_item_id=line.stock_item_id,
            quantity=line.quantity,
            unit_type=line.unit_type,
            calculated_cost=cost,
        ))
        total += cost

    return RecipeCosting(lines=costed, total_cost=total, missing_stock_items=missing)


def calculate_recipe_cmv(
    lines: Iterable[IngredientLine],
    stock_items: Union[Mapping[str, StockItem], Iterable[StockItem]],
) -> float:
    """Sum of all ingredient line costs for one unit of the recipe."""
    return cost_recipe(lines, stock_items).total_cost


def apply_recipe_cmv(
    sheet: TechnicalSheet,
    lines: Iterable[IngredientLine],
    stock_items: Union[Mapping[str, StockItem], Iterable[StockItem]],
) -> TechnicalSheet:
    """Return a copy of ``sheet`` whose CMV is the ingredient-based total."""
    return sheet.model_copy(update={"cmv": calculate_recipe_cmv(lines, stock_items)})
