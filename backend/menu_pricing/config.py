"""
Pricing configuration — single source of truth for defaults, thresholds
and runtime knobs.

Import from here in all services rather than hardcoding values.  Every
value may be overridden through the environment (a local ``.env`` file is
loaded automatically in dev).
"""
from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


# ── Status thresholds ─────────────────────────────────────────────────────────

# Contribution margin (%) under which a theoretical price degrades to "atencao"
DEFAULT_HEALTHY_MARGIN_THRESHOLD: float = _env_float("DEFAULT_HEALTHY_MARGIN_THRESHOLD", 50.0)

# PV within this multiple of PM is flagged "atencao" (theoretical mode only)
DEFAULT_PRICE_PROXIMITY_FACTOR: float = _env_float("DEFAULT_PRICE_PROXIMITY_FACTOR", 1.05)


# ── Percentage configuration checks ───────────────────────────────────────────

# Sum of DV+DF+L+I (in percent) at which a configuration is rejected
PERCENT_ERROR_THRESHOLD: float = 100.0

# Sum of DV+DF+L+I (in percent) at which a configuration is flagged
PERCENT_WARNING_THRESHOLD: float = _env_float("PERCENT_WARNING_THRESHOLD", 80.0)


# ── Engine / report knobs ─────────────────────────────────────────────────────

PRICING_CACHE_SIZE: int = _env_int("PRICING_CACHE_SIZE", 512)

TOP_PROFITABLE_LIMIT: int = _env_int("TOP_PROFITABLE_LIMIT", 10)


# ── Logging ───────────────────────────────────────────────────────────────────

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON: bool = os.getenv("LOG_FORMAT", "json").lower() != "text"

# Level for the per-call timing logger (menu-pricing.perf)
LOG_PERF_LEVEL: str = os.getenv("LOG_PERF_LEVEL", "WARNING")
