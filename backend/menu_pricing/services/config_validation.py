"""Percentage configuration checks run before a config is saved."""
from typing import Optional

from pydantic import BaseModel, ConfigDict

from menu_pricing.config import PERCENT_ERROR_THRESHOLD, PERCENT_WARNING_THRESHOLD
from menu_pricing.models.pricing_schema import GlobalConfig, ProductConfig
from menu_pricing.services.pricing_engine import resolve_percentages


class PercentageCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_pct: float
    has_error: bool
    has_warning: bool


def check_percentages(
    global_config: GlobalConfig,
    product_config: Optional[ProductConfig] = None,
    warning_threshold: float = PERCENT_WARNING_THRESHOLD,
) -> PercentageCheck:
    """
    Sum of DV+DF+L+I in percent after override resolution.

    ``has_error`` marks a configuration the pricing engine would reject;
    callers must not persist it.
    """
    total_pct = resolve_percentages(global_config, product_config).total_pct
    has_error = total_pct >= PERCENT_ERROR_THRESHOLD
    return PercentageCheck(
        total_pct=total_pct,
        has_error=has_error,
        has_warning=not has_error and total_pct >= warning_threshold,
    )
