"""
Pricing records exchanged with the product catalog and config store.

Percentages are stored as plain percent numbers (10 means 10 %), never as
fractions.  All records are frozen so they can key the pricing cache.
"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from menu_pricing.config import DEFAULT_HEALTHY_MARGIN_THRESHOLD, DEFAULT_PRICE_PROXIMITY_FACTOR


class PricingStatus(str, Enum):
    SAUDAVEL = "saudavel"
    ATENCAO = "atencao"
    INVIAVEL = "inviavel"


class ProductCategory(str, Enum):
    CAFE = "cafe"
    DOCE = "doce"
    BOLO = "bolo"
    COMBO = "combo"
    SALGADO = "salgado"
    BEBIDA = "bebida"
    OUTRO = "outro"


class SaleUnit(str, Enum):
    UNIDADE = "unidade"
    FATIA = "fatia"
    COPO = "copo"
    PORCAO = "porcao"
    KG = "kg"
    LITRO = "litro"


class IngredientUnit(str, Enum):
    G = "g"
    KG = "kg"
    ML = "ml"
    L = "l"
    UNIDADE = "unidade"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# ─── Catalog records ─────────────────────────────────────────────────────────

class Product(_Record):
    id: str
    name: str
    category: ProductCategory = ProductCategory.OUTRO
    sale_unit: SaleUnit = SaleUnit.UNIDADE
    is_active: bool = True


class TechnicalSheet(_Record):
    """Recipe economics for one unit of a product (at most one per product)."""
    product_id: Optional[str] = None
    cmv: float = Field(0.0, ge=0, description="Ingredient cost per unit produced")
    labor_cost_per_hour: float = Field(0.0, ge=0)
    prep_time_minutes: int = Field(0, ge=0, description="Minutes to produce one unit")
    packaging_cost: float = Field(0.0, ge=0)
    yield_kg: float = Field(0.0, ge=0, description="0 = not applicable")
    yield_portions: float = Field(0.0, ge=0, description="0 = not applicable")
    sale_price: float = Field(0.0, ge=0, description="Charged price; 0 = not set")
    notes: Optional[str] = None

    @field_validator("yield_kg", "yield_portions", "sale_price", mode="before")
    @classmethod
    def _none_is_zero(cls, v: Any) -> Any:
        return 0.0 if v is None else v


class StockItem(_Record):
    id: str
    name: str = ""
    unit: str = ""
    value: Optional[float] = Field(None, description="Price per kg, per litre or per unit")


class IngredientLine(_Record):
    stock_item_id: str
    quantity: float = Field(..., ge=0)
    unit_type: IngredientUnit


# ─── Configuration records ───────────────────────────────────────────────────

class GlobalConfig(_Record):
    """System-wide percentage defaults and status thresholds (singleton)."""
    variable_expenses_pct: float = 0.0
    fixed_expenses_pct: float = 0.0
    profit_pct: float = 0.0
    investment_pct: float = 0.0
    healthy_margin_threshold: float = DEFAULT_HEALTHY_MARGIN_THRESHOLD
    price_proximity_factor: float = DEFAULT_PRICE_PROXIMITY_FACTOR


class ProductConfig(_Record):
    """Per-product overrides; a ``None`` field inherits the global value."""
    product_id: Optional[str] = None
    variable_expenses_pct: Optional[float] = None
    fixed_expenses_pct: Optional[float] = None
    profit_pct: Optional[float] = None
    investment_pct: Optional[float] = None


class EffectivePercentages(_Record):
    """
    Resolved levers as fractions of PV (0.10 means 10 %).

    ``total_pct`` and ``break_even_pct`` are summed from the percent values
    before division, so 70+10+10+10 is exactly 100.
    """
    dv: float
    df: float
    l: float  # noqa: E741
    i: float
    total_pct: float
    break_even_pct: float

    @property
    def total(self) -> float:
        return self.dv + self.df + self.l + self.i

    @property
    def break_even(self) -> float:
        return self.dv + self.df


# ─── Engine output ───────────────────────────────────────────────────────────

class CalculatedPricing(_Record):
    """
    Derived pricing indicators for one technical sheet.  Never persisted.

    ``cost_per_kg`` and friends stay ``None`` when the yield is not set;
    ``to_dict`` drops them so renderers can tell "not applicable" from a
    computed zero.  ``error`` is only set for invalid percentage totals.
    """
    cvu: float
    pv: float
    pm: float
    profit_per_unit: float
    investment_per_unit: float
    contribution_margin: float
    contribution_margin_pct: float
    cost_per_kg: Optional[float] = None
    price_per_kg: Optional[float] = None
    cost_per_portion: Optional[float] = None
    price_per_portion: Optional[float] = None
    status: PricingStatus
    error: Optional[str] = None

    @property
    def has_error(self) -> bool:
        return bool(self.error)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
