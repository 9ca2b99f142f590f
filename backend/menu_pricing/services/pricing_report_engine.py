"""
pricing_report_engine.py — Menu-wide pricing report

Covers:
  - Pricing every active product that has a technical sheet
  - Average CVU, PV, contribution margin % and profit per unit
  - Status distribution (saudavel / atencao / inviavel)
  - Per-category count, average margin and summed PV
  - Most profitable products ranking
  - Problem list: inviable products first, then lowest margin
"""

import logging
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel

from menu_pricing.config import TOP_PROFITABLE_LIMIT
from menu_pricing.models.pricing_schema import (
    CalculatedPricing,
    GlobalConfig,
    PricingStatus,
    Product,
    ProductCategory,
    ProductConfig,
    TechnicalSheet,
)
from menu_pricing.services.perf_monitor import ReportTracker, timed, tracker as default_tracker
from menu_pricing.services.pricing_engine import PricingEngine, coerce_record

logger = logging.getLogger("menu-pricing.report")

_M = TypeVar("_M", bound=BaseModel)

RecordsByProduct = Union[Mapping[str, Any], Iterable[Any], None]


def _by_product_id(records: RecordsByProduct, model: Type[_M]) -> Dict[str, _M]:
    """Accept ``{product_id: record}`` or a list of records carrying ``product_id``."""
    if not records:
        return {}
    if isinstance(records, Mapping):
        return {pid: coerce_record(rec, model) for pid, rec in records.items()}
    indexed: Dict[str, _M] = {}
    for rec in records:
        rec = coerce_record(rec, model)
        if rec.product_id is None:
            logger.warning(f"{model.__name__} without product_id ignored")
            continue
        indexed[rec.product_id] = rec
    return indexed


def _average(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class PricingReportEngine:
    """Aggregates engine output across the whole menu."""

    def __init__(
        self,
        engine: Optional[PricingEngine] = None,
        tracker: Optional[ReportTracker] = None,
        top_limit: int = TOP_PROFITABLE_LIMIT,
    ) -> None:
        self.engine = engine or PricingEngine()
        self.tracker = tracker if tracker is not None else default_tracker
        self.top_limit = top_limit

    def build_report(
        self,
        products: Iterable[Union[Product, Mapping[str, Any]]],
        sheets: RecordsByProduct,
        global_config: Union[GlobalConfig, Mapping[str, Any]],
        product_configs: RecordsByProduct = None,
    ) -> Dict[str, Any]:
        """
        Build the pricing report for all active products with a sheet.

        ``sheets`` and ``product_configs`` may be dicts keyed by product id or
        plain lists of records.  Products without a sheet are left out.
        """
        start = time.perf_counter()
        global_config = coerce_record(global_config, GlobalConfig)
        priced = self._price_products(
            [coerce_record(p, Product) for p in products],
            _by_product_id(sheets, TechnicalSheet),
            global_config,
            _by_product_id(product_configs, ProductConfig),
        )

        status_counts = {status.value: 0 for status in PricingStatus}
        for _, pricing in priced:
            status_counts[pricing.status.value] += 1

        by_category = []
        for category in ProductCategory:
            in_cat = [pr for p, pr in priced if p.category == category]
            if not in_cat:
                continue
            by_category.append({
                "category": category.value,
                "count": len(in_cat),
                "avg_margin_pct": _average([pr.contribution_margin_pct for pr in in_cat]),
                "total_revenue": sum(pr.pv for pr in in_cat),
            })

        ranked = sorted(priced, key=lambda row: row[1].contribution_margin_pct, reverse=True)
        problematic = sorted(
            (row for row in priced if row[1].status != PricingStatus.SAUDAVEL),
            key=lambda row: (
                0 if row[1].status == PricingStatus.INVIAVEL else 1,
                row[1].contribution_margin_pct,
            ),
        )
        validation_failures = sum(1 for _, pr in priced if pr.has_error)

        report = {
            "total_products": len(priced),
            "avg_cvu": _average([pr.cvu for _, pr in priced]),
            "avg_pv": _average([pr.pv for _, pr in priced]),
            "avg_margin_pct": _average([pr.contribution_margin_pct for _, pr in priced]),
            "avg_profit": _average([pr.profit_per_unit for _, pr in priced]),
            "status_counts": status_counts,
            "validation_failures": validation_failures,
            "by_category": by_category,
            "top_profitable": [self._row(p, pr) for p, pr in ranked[: self.top_limit]],
            "problematic": [self._row(p, pr) for p, pr in problematic],
        }

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        self.tracker.record_report(duration_ms, status_counts, validation_failures)
        logger.info(
            f"Pricing report: {len(priced)} products, "
            f"{status_counts['inviavel']} inviable, {status_counts['atencao']} attention",
            extra={"duration_ms": duration_ms},
        )
        return report

    @timed
    def _price_products(
        self,
        products: List[Product],
        sheets: Dict[str, TechnicalSheet],
        global_config: GlobalConfig,
        configs: Dict[str, ProductConfig],
    ) -> List[Tuple[Product, CalculatedPricing]]:
        priced = []
        for product in products:
            if not product.is_active:
                continue
            pricing = self.engine.calculate(sheets.get(product.id), global_config, configs.get(product.id))
            if pricing is not None:
                priced.append((product, pricing))
        return priced

    @staticmethod
    def _row(product: Product, pricing: CalculatedPricing) -> Dict[str, Any]:
        return {
            "product_id": product.id,
            "name": product.name,
            "category": product.category.value,
            "pricing": pricing.to_dict(),
        }
