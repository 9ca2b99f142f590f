"""
Structured logging configuration for the menu pricing services.

Call ``setup_logging()`` once from whatever process embeds the engines
(a worker, a script, a notebook).  Records from the pricing loggers carry
``product_id`` / ``duration_ms`` / ``timed_function`` extras; the JSON
formatter emits them as keys and the text formatter appends them as
``key=value`` pairs.
"""
import logging
import json
import sys
from datetime import datetime, timezone

from menu_pricing.config import LOG_JSON, LOG_LEVEL, LOG_PERF_LEVEL

_EXTRA_FIELDS = ("product_id", "duration_ms", "timed_function")


def _extras(record):
    return {name: getattr(record, name) for name in _EXTRA_FIELDS if getattr(record, name, None) is not None}


class JSONFormatter(logging.Formatter):
    """JSON structured log formatter for production."""
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        log_entry.update(_extras(record))
        return json.dumps(log_entry)


class TextFormatter(logging.Formatter):
    """Plain formatter for local runs; pricing extras go at the end of the line."""
    def __init__(self):
        super().__init__("%(asctime)s [%(name)s] %(levelname)s: %(message)s")

    def format(self, record):
        line = super().format(record)
        extras = _extras(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        return line


def setup_logging(
    level: str = LOG_LEVEL,
    json_output: bool = LOG_JSON,
    perf_level: str = LOG_PERF_LEVEL,
):
    """
    Configure application logging.

    ``perf_level`` applies to ``menu-pricing.perf`` only, so per-call
    timings can be switched on without turning every pricing logger to DEBUG.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_output else TextFormatter())
    root.handlers = [handler]

    logging.getLogger("menu-pricing.perf").setLevel(
        getattr(logging, perf_level.upper(), logging.WARNING)
    )
