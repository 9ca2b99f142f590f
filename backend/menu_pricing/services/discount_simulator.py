"""Discount simulator — what a promotion does to a priced product."""
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict

from menu_pricing.models.pricing_schema import CalculatedPricing, PricingStatus, TechnicalSheet


class DiscountSimulation(BaseModel):
    model_config = ConfigDict(frozen=True)

    discount_pct: float
    base_price: float
    discount_value: float
    discounted_price: float
    status: PricingStatus
    new_margin_pct: float
    max_discount_for_survival: float
    max_discount_for_healthy: float

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def simulate_discount(
    pricing: CalculatedPricing,
    discount_pct: float,
    sale_price: float = 0.0,
) -> DiscountSimulation:
    """
    Apply ``discount_pct`` (clamped to 0–100) to the charged price, or to the
    suggested price when nothing is charged, and reclassify against PM / PV.

    ``max_discount_for_survival`` is the largest discount that keeps the price
    at or above PM; ``max_discount_for_healthy`` the largest that keeps it at
    or above PV.  Both floor at 0.

    ``CalculatedPricing`` does not carry the charged price: pass the
    sheet's ``sale_price`` here, or use ``simulate_sheet_discount``, or the
    discount is taken off PV.
    """
    d = min(100.0, max(0.0, float(discount_pct)))
    base_price = sale_price if sale_price and sale_price > 0 else pricing.pv
    discount_value = base_price * (d / 100)
    discounted_price = base_price - discount_value

    if pricing.has_error or discounted_price < pricing.pm:
        status = PricingStatus.INVIAVEL
    elif discounted_price < pricing.pv:
        status = PricingStatus.ATENCAO
    else:
        status = PricingStatus.SAUDAVEL

    new_margin_pct = (
        (discounted_price - pricing.cvu) / discounted_price * 100
        if discounted_price > 0 else 0.0
    )

    if base_price > 0:
        max_survival = (base_price - pricing.pm) / base_price * 100
        max_healthy = (base_price - pricing.pv) / base_price * 100
    else:
        max_survival = max_healthy = 0.0

    return DiscountSimulation(
        discount_pct=d,
        base_price=base_price,
        discount_value=discount_value,
        discounted_price=discounted_price,
        status=status,
        new_margin_pct=new_margin_pct,
        max_discount_for_survival=max(0.0, max_survival),
        max_discount_for_healthy=max(0.0, max_healthy),
    )


def simulate_sheet_discount(
    sheet: TechnicalSheet,
    pricing: CalculatedPricing,
    discount_pct: float,
) -> DiscountSimulation:
    """Simulate ``discount_pct`` off the price actually charged on ``sheet``."""
    return simulate_discount(pricing, discount_pct, sale_price=sheet.sale_price)
