"""Performance monitoring utilities for menu pricing reports."""
import time
import logging
import threading
import functools
from typing import Any, Callable, Dict

logger = logging.getLogger("menu-pricing.perf")


def timed(func: Callable) -> Callable:
    """
    Decorator that measures and logs execution time for synchronous functions.

    Usage::

        @timed
        def build_report(...):
            ...
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.debug(
                "function timed",
                extra={
                    "timed_function": func.__qualname__,
                    "duration_ms": duration_ms,
                },
            )
    return wrapper


class ReportTracker:
    """
    Thread-safe in-memory tracker for pricing report metrics.

    Tracks:
    - Reports built and their cumulative duration
    - Products priced across all reports
    - Status totals across all reports
    - Products whose configuration failed percentage validation
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._reports_built: int = 0
        self._total_duration_ms: float = 0.0
        self._products_priced: int = 0
        self._status_totals: Dict[str, int] = {}
        self._validation_failures: int = 0

    # ------------------------------------------------------------------
    # Public write API
    # ------------------------------------------------------------------

    def record_report(
        self,
        duration_ms: float,
        status_counts: Dict[str, int],
        validation_failures: int = 0,
    ) -> None:
        """Call once per finished report."""
        with self._lock:
            self._reports_built += 1
            self._total_duration_ms += duration_ms
            for status, count in status_counts.items():
                self._status_totals[status] = self._status_totals.get(status, 0) + count
                self._products_priced += count
            self._validation_failures += validation_failures

    # ------------------------------------------------------------------
    # Public read API
    # ------------------------------------------------------------------

    def get_metrics(self) -> Dict[str, Any]:
        """
        Return a snapshot of all collected metrics.

        Returns
        -------
        dict with keys:
            reports_built          : int
            avg_report_duration_ms : float  (0 if none built)
            products_priced        : int
            status_totals          : dict  {status: count}
            validation_failures    : int
        """
        with self._lock:
            avg = (
                round(self._total_duration_ms / self._reports_built, 2)
                if self._reports_built > 0
                else 0.0
            )
            return {
                "reports_built": self._reports_built,
                "avg_report_duration_ms": avg,
                "products_priced": self._products_priced,
                "status_totals": dict(self._status_totals),
                "validation_failures": self._validation_failures,
            }

    def reset(self) -> None:
        """Reset all counters (useful in tests)."""
        with self._lock:
            self._reports_built = 0
            self._total_duration_ms = 0.0
            self._products_priced = 0
            self._status_totals.clear()
            self._validation_failures = 0


# Module-level singleton; import this instance everywhere else.
tracker = ReportTracker()
