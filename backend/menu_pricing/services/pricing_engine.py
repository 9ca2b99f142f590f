"""
PricingEngine — cost-plus menu pricing for restaurant technical sheets.

Covers:
  - Two-tier percentage resolution (global defaults, per-product overrides)
  - Percentage saturation guards (DV+DF+L+I and DV+DF)
  - Unit variable cost (ingredients + labour + packaging)
  - Suggested sale price (PV) and minimum survival price (PM)
  - Profit, investment and contribution margin per unit
  - Viability status in theoretical mode (no charged price) and actual mode
  - Cost / price per kg and per portion when a yield is known

Pricing failures are returned as data (``status`` + ``error``), never raised.
"""

import functools
import logging
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from menu_pricing.config import PERCENT_ERROR_THRESHOLD, PRICING_CACHE_SIZE
from menu_pricing.models.pricing_schema import (
    CalculatedPricing,
    EffectivePercentages,
    GlobalConfig,
    PricingStatus,
    ProductConfig,
    TechnicalSheet,
)

logger = logging.getLogger("menu-pricing")

_M = TypeVar("_M", bound=BaseModel)


# ---------------------------------------------------------------------------
# Validation messages. The error text is how callers tell an input failure
# from a legitimately inviable price.
# ---------------------------------------------------------------------------
PERCENT_SUM_ERROR: str = "Percentages cannot add up to 100% or more."
BREAK_EVEN_SUM_ERROR: str = "Variable plus fixed expenses cannot add up to 100% or more."

_PERCENT_FIELDS = (
    ("dv", "variable_expenses_pct"),
    ("df", "fixed_expenses_pct"),
    ("l", "profit_pct"),
    ("i", "investment_pct"),
)


class PricingInputError(ValueError):
    """Raised when a plain mapping cannot be read as a pricing record."""


def coerce_record(record: Union[_M, Mapping[str, Any], None], model: Type[_M]) -> Optional[_M]:
    if record is None or isinstance(record, model):
        return record
    try:
        return model.model_validate(record)
    except ValidationError as e:
        raise PricingInputError(f"Invalid {model.__name__}: {e}") from e


def resolve_percentages(
    global_config: GlobalConfig,
    product_config: Optional[ProductConfig] = None,
) -> EffectivePercentages:
    """
    Merge the per-product overrides onto the global defaults and convert
    percent values to fractions.  A ``None`` override inherits the global value.
    """
    percents = {}
    for key, attr in _PERCENT_FIELDS:
        value = getattr(product_config, attr, None) if product_config is not None else None
        if value is None:
            value = getattr(global_config, attr)
        percents[key] = float(value)
    return EffectivePercentages(
        **{key: value / 100.0 for key, value in percents.items()},
        total_pct=percents["dv"] + percents["df"] + percents["l"] + percents["i"],
        break_even_pct=percents["dv"] + percents["df"],
    )


def _failed(error: str) -> CalculatedPricing:
    return CalculatedPricing(
        cvu=0.0,
        pv=0.0,
        pm=0.0,
        profit_per_unit=0.0,
        investment_per_unit=0.0,
        contribution_margin=0.0,
        contribution_margin_pct=0.0,
        status=PricingStatus.INVIAVEL,
        error=error,
    )


class PricingEngine:
    """
    Stateless pricing calculator.

    All monetary values are in the caller's currency; nothing is rounded.
    """

    def __init__(self, cache_size: int = PRICING_CACHE_SIZE) -> None:
        self._cached = functools.lru_cache(maxsize=cache_size)(self._calculate)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def calculate(
        self,
        sheet: Union[TechnicalSheet, Mapping[str, Any], None],
        global_config: Union[GlobalConfig, Mapping[str, Any]],
        product_config: Union[ProductConfig, Mapping[str, Any], None] = None,
    ) -> Optional[CalculatedPricing]:
        """
        Price one technical sheet.

        Returns ``None`` when there is no sheet.  Invalid percentage totals
        come back as ``status=inviavel`` with ``error`` set and every numeric
        field zeroed.
        """
        sheet = coerce_record(sheet, TechnicalSheet)
        if sheet is None:
            return None
        return self._calculate(
            sheet,
            coerce_record(global_config, GlobalConfig),
            coerce_record(product_config, ProductConfig),
        )

    def calculate_cached(
        self,
        sheet: Union[TechnicalSheet, Mapping[str, Any], None],
        global_config: Union[GlobalConfig, Mapping[str, Any]],
        product_config: Union[ProductConfig, Mapping[str, Any], None] = None,
    ) -> Optional[CalculatedPricing]:
        """Memoized ``calculate`` for as-you-type previews."""
        sheet = coerce_record(sheet, TechnicalSheet)
        if sheet is None:
            return None
        return self._cached(
            sheet,
            coerce_record(global_config, GlobalConfig),
            coerce_record(product_config, ProductConfig),
        )

    def cache_info(self):
        return self._cached.cache_info()

    def cache_clear(self) -> None:
        self._cached.cache_clear()

    # ------------------------------------------------------------------
    # Unit variable cost
    # ------------------------------------------------------------------

    @staticmethod
    def unit_variable_cost(sheet: TechnicalSheet) -> float:
        """CVU = cmv + labour_rate × prep_minutes / 60 + packaging."""
        labor_cost_unit = sheet.labor_cost_per_hour * (sheet.prep_time_minutes / 60)
        return sheet.cmv + labor_cost_unit + sheet.packaging_cost

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @staticmethod
    def classify(
        pv: float,
        pm: float,
        contribution_margin_pct: float,
        sale_price: float,
        global_config: GlobalConfig,
    ) -> PricingStatus:
        """
        Actual mode (``sale_price > 0``) compares the charged price against
        PM and PV.  Theoretical mode compares PV against PM, the proximity
        band and the healthy-margin threshold.
        """
        if sale_price > 0:
            if sale_price < pm:
                return PricingStatus.INVIAVEL
            if sale_price < pv:
                return PricingStatus.ATENCAO
            return PricingStatus.SAUDAVEL

        if pv <= pm:
            return PricingStatus.INVIAVEL
        if (
            pv <= pm * global_config.price_proximity_factor
            or contribution_margin_pct < global_config.healthy_margin_threshold
        ):
            return PricingStatus.ATENCAO
        return PricingStatus.SAUDAVEL

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _calculate(
        self,
        sheet: TechnicalSheet,
        global_config: GlobalConfig,
        product_config: Optional[ProductConfig],
    ) -> CalculatedPricing:
        pct = resolve_percentages(global_config, product_config)

        # The four-lever sum is the more general failure; check it first.
        if pct.total_pct >= PERCENT_ERROR_THRESHOLD:
            logger.debug(
                "Percentages saturated: total=%.2f%%", pct.total_pct,
                extra={"product_id": sheet.product_id},
            )
            return _failed(PERCENT_SUM_ERROR)
        if pct.break_even_pct >= PERCENT_ERROR_THRESHOLD:
            logger.debug(
                "Break-even percentages saturated: dv+df=%.2f%%", pct.break_even_pct,
                extra={"product_id": sheet.product_id},
            )
            return _failed(BREAK_EVEN_SUM_ERROR)

        cvu = self.unit_variable_cost(sheet)
        pv = cvu / (1 - pct.total)
        pm = cvu / (1 - pct.break_even)

        profit_per_unit = pv * pct.l
        investment_per_unit = pv * pct.i
        # Only the variable-expense share is deducted here; the healthy-margin
        # threshold is calibrated against this definition.
        contribution_margin = pv - cvu - (pv * pct.dv)
        contribution_margin_pct = (contribution_margin / pv) * 100 if pv > 0 else 0.0

        status = self.classify(pv, pm, contribution_margin_pct, sheet.sale_price, global_config)

        cost_per_kg = price_per_kg = None
        if sheet.yield_kg > 0:
            cost_per_kg = cvu / sheet.yield_kg
            price_per_kg = pv / sheet.yield_kg

        cost_per_portion = price_per_portion = None
        if sheet.yield_portions > 0:
            cost_per_portion = cvu / sheet.yield_portions
            price_per_portion = pv / sheet.yield_portions

        return CalculatedPricing(
            cvu=cvu,
            pv=pv,
            pm=pm,
            profit_per_unit=profit_per_unit,
            investment_per_unit=investment_per_unit,
            contribution_margin=contribution_margin,
            contribution_margin_pct=contribution_margin_pct,
            cost_per_kg=cost_per_kg,
            price_per_kg=price_per_kg,
            cost_per_portion=cost_per_portion,
            price_per_portion=price_per_portion,
            status=status,
        )


_default_engine = PricingEngine()


def calculate_pricing(
    sheet: Union[TechnicalSheet, Mapping[str, Any], None],
    global_config: Union[GlobalConfig, Mapping[str, Any]],
    product_config: Union[ProductConfig, Mapping[str, Any], None] = None,
) -> Optional[CalculatedPricing]:
    return _default_engine.calculate(sheet, global_config, product_config)


def cached_calculate_pricing(
    sheet: Union[TechnicalSheet, Mapping[str, Any], None],
    global_config: Union[GlobalConfig, Mapping[str, Any]],
    product_config: Union[ProductConfig, Mapping[str, Any], None] = None,
) -> Optional[CalculatedPricing]:
    return _default_engine.calculate_cached(sheet, global_config, product_config)
