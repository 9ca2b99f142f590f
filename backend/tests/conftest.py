"""
conftest.py — Shared pytest fixtures for the menu pricing test suite.

No database or external service fixtures are defined here.  All tests in this
suite are pure unit tests that exercise computation code in isolation.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``menu_pricing.*`` imports resolve correctly regardless of where pytest
    is invoked.
"""

import sys
import os
import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any package imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# PricingEngine fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def pricing_engine():
    """PricingEngine with the default cache size."""
    from menu_pricing.services.pricing_engine import PricingEngine
    return PricingEngine()


@pytest.fixture
def fresh_engine():
    """PricingEngine with an empty cache — for cache hit/miss assertions."""
    from menu_pricing.services.pricing_engine import PricingEngine
    return PricingEngine(cache_size=16)


# ---------------------------------------------------------------------------
# Sample records
# ---------------------------------------------------------------------------

@pytest.fixture
def global_config():
    """
    DV=10 %, DF=30 %, L=15 %, I=5 % (sum 60 %), healthy margin 50 %,
    proximity factor 1.05.
    """
    from menu_pricing.models.pricing_schema import GlobalConfig
    return GlobalConfig(
        variable_expenses_pct=10,
        fixed_expenses_pct=30,
        profit_pct=15,
        investment_pct=5,
        healthy_margin_threshold=50,
        price_proximity_factor=1.05,
    )


@pytest.fixture
def sheet():
    """
    cmv=2, labour 30/h for 12 min, packaging 0.5, no charged price, no yield.
    CVU = 2 + 30×0.2 + 0.5 = 8.5.
    """
    from menu_pricing.models.pricing_schema import TechnicalSheet
    return TechnicalSheet(
        product_id="p-brigadeiro",
        cmv=2.0,
        labor_cost_per_hour=30.0,
        prep_time_minutes=12,
        packaging_cost=0.5,
    )


@pytest.fixture
def stock_items():
    """Flour priced per kg, milk per litre, eggs per unit, one unpriced item."""
    from menu_pricing.models.pricing_schema import StockItem
    return [
        StockItem(id="flour", name="Farinha", unit="kg", value=10.0),
        StockItem(id="milk", name="Leite", unit="l", value=6.0),
        StockItem(id="egg", name="Ovo", unit="unidade", value=0.8),
        StockItem(id="salt", name="Sal", unit="kg", value=None),
    ]


@pytest.fixture
def menu():
    """
    Four active products across three categories plus one inactive product.
    Returned as (products, sheets) with sheets keyed by product id.
    """
    from menu_pricing.models.pricing_schema import Product, TechnicalSheet
    products = [
        Product(id="cafe-1", name="Espresso", category="cafe", sale_unit="copo"),
        Product(id="bolo-1", name="Bolo de cenoura", category="bolo", sale_unit="fatia"),
        Product(id="bolo-2", name="Bolo de chocolate", category="bolo", sale_unit="fatia"),
        Product(id="doce-1", name="Brigadeiro", category="doce"),
        Product(id="old-1", name="Descontinuado", category="outro", is_active=False),
    ]
    sheets = {
        # CVU 2.0, charged 6 (≥ PV 5.0) → saudavel
        "cafe-1": TechnicalSheet(product_id="cafe-1", cmv=1.5, packaging_cost=0.5, sale_price=6.0),
        # CVU 8.5, charged 10 (< PM) → inviavel
        "bolo-1": TechnicalSheet(
            product_id="bolo-1", cmv=2.0, labor_cost_per_hour=30.0,
            prep_time_minutes=12, packaging_cost=0.5, sale_price=10.0,
        ),
        # CVU 8.5, charged 18 (PM ≤ 18 < PV) → atencao
        "bolo-2": TechnicalSheet(
            product_id="bolo-2", cmv=2.0, labor_cost_per_hour=30.0,
            prep_time_minutes=12, packaging_cost=0.5, sale_price=18.0,
        ),
        # CVU 1.0, charged 5 (≥ PV 2.5) → saudavel
        "doce-1": TechnicalSheet(product_id="doce-1", cmv=1.0, sale_price=5.0),
        "old-1": TechnicalSheet(product_id="old-1", cmv=1.0),
    }
    return products, sheets
