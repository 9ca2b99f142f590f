"""
test_ingredient_cost_engine.py — Unit tests for recipe ingredient costing.

Tests cover:
  - Base-unit conversion (g → kg, ml → l, pass-through units)
  - Line cost, including unpriced stock items
  - Recipe CMV totals and missing stock items
  - Writing the ingredient-based CMV onto a technical sheet
"""

import pytest


def _item(value, unit="kg"):
    from menu_pricing.models.pricing_schema import StockItem
    return StockItem(id="x", name="x", unit=unit, value=value)


class TestUnitConversion:

    @pytest.mark.parametrize(
        "quantity, unit, expected",
        [
            (250, "g", 0.25),
            (1500, "ml", 1.5),
            (2, "kg", 2.0),
            (0.75, "l", 0.75),
            (3, "unidade", 3.0),
        ],
    )
    def test_to_base_quantity(self, quantity, unit, expected):
        from menu_pricing.services.ingredient_cost_engine import to_base_quantity
        assert to_base_quantity(quantity, unit) == pytest.approx(expected)

    def test_unknown_unit_raises(self):
        from menu_pricing.services.ingredient_cost_engine import to_base_quantity
        with pytest.raises(ValueError):
            to_base_quantity(1, "oz")


class TestIngredientCost:

    def test_grams_of_item_priced_per_kg(self):
        """10.00/kg × 250 g = 2.50."""
        from menu_pricing.services.ingredient_cost_engine import calculate_ingredient_cost
        assert calculate_ingredient_cost(_item(10.0), 250, "g") == pytest.approx(2.50)

    def test_millilitres_of_item_priced_per_litre(self):
        from menu_pricing.services.ingredient_cost_engine import calculate_ingredient_cost
        assert calculate_ingredient_cost(_item(6.0, "l"), 200, "ml") == pytest.approx(1.2)

    def test_units_pass_through(self):
        from menu_pricing.models.pricing_schema import IngredientUnit
        from menu_pricing.services.ingredient_cost_engine import calculate_ingredient_cost
        assert calculate_ingredient_cost(_item(0.8, "unidade"), 3, IngredientUnit.UNIDADE) == pytest.approx(2.4)

    @pytest.mark.parametrize("value", [None, 0.0, -4.0])
    def test_unpriced_item_costs_nothing(self, value):
        from menu_pricing.services.ingredient_cost_engine import calculate_ingredient_cost
        assert calculate_ingredient_cost(_item(value), 500, "g") == 0.0


class TestRecipeCosting:

    def _lines(self):
        from menu_pricing.models.pricing_schema import IngredientLine
        return [
            IngredientLine(stock_item_id="flour", quantity=250, unit_type="g"),   # 2.50
            IngredientLine(stock_item_id="milk", quantity=200, unit_type="ml"),   # 1.20
            IngredientLine(stock_item_id="egg", quantity=3, unit_type="unidade"), # 2.40
            IngredientLine(stock_item_id="salt", quantity=5, unit_type="g"),      # unpriced
        ]

    def test_line_breakdown_and_total(self, stock_items):
        from menu_pricing.services.ingredient_cost_engine import cost_recipe
        costing = cost_recipe(self._lines(), stock_items)
        costs = [line.calculated_cost for line in costing.lines]
        assert costs == pytest.approx([2.5, 1.2, 2.4, 0.0])
        assert costing.total_cost == pytest.approx(6.1)
        assert costing.missing_stock_items == []

    def test_stock_items_by_id_mapping(self, stock_items):
        from menu_pricing.services.ingredient_cost_engine import calculate_recipe_cmv
        by_id = {item.id: item for item in stock_items}
        assert calculate_recipe_cmv(self._lines(), by_id) == pytest.approx(6.1)

    def test_missing_stock_item_costs_zero(self, stock_items, caplog):
        from menu_pricing.models.pricing_schema import IngredientLine
        from menu_pricing.services.ingredient_cost_engine import cost_recipe
        lines = [IngredientLine(stock_item_id="ghost", quantity=100, unit_type="g")]
        with caplog.at_level("WARNING", logger="menu-pricing.ingredients"):
            costing = cost_recipe(lines, stock_items)
        assert costing.total_cost == 0.0
        assert costing.missing_stock_items == ["ghost"]
        assert "ghost" in caplog.text

    def test_empty_recipe(self, stock_items):
        from menu_pricing.services.ingredient_cost_engine import calculate_recipe_cmv
        assert calculate_recipe_cmv([], stock_items) == 0.0

    def test_apply_recipe_cmv_feeds_pricing(self, stock_items, pricing_engine, global_config):
        """Ingredient CMV 6.1 replaces the manual CMV; CVU follows."""
        from menu_pricing.models.pricing_schema import TechnicalSheet
        from menu_pricing.services.ingredient_cost_engine import apply_recipe_cmv
        sheet = TechnicalSheet(cmv=99.0, packaging_cost=0.4)
        updated = apply_recipe_cmv(sheet, self._lines(), stock_items)
        assert updated.cmv == pytest.approx(6.1)
        assert sheet.cmv == 99.0
        assert pricing_engine.calculate(updated, global_config).cvu == pytest.approx(6.5)
