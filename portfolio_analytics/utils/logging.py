"""
Logging setup for the portfolio-analytics CLI and dashboard.

``configure_logging(config)`` runs once per CLI command, after the config is
loaded and before the CSVs are read.  Library modules only ever call
``logging.getLogger(__name__)``.

What gets logged
----------------
  INFO   csv_loader: rows loaded per file; export: Parquet files written;
         views: predictive view has no dated cost history.
  WARN   csv_loader: header-only CSV.
  DEBUG  csv_loader: each unparsable cell coerced to missing;
         views.recompute: one line per full recompute.
  ERROR  cli: a CSV could not be read (the command then exits 1).

JSON lines (``json_format = true`` under ``[logging]``)
------------------------------------------------------
Each record becomes one object with ``ts``, ``level``, ``logger`` and
``msg``.  Keys passed via ``extra=`` sit beside them, so the recompute and
load-failure lines can be filtered on their fields directly::

    {"ts": "2026-10-17T09:00:00Z", "level": "DEBUG",
     "logger": "portfolio_analytics.pipeline.views", "msg": "Recomputing views",
     "year": 2023, "horizon": 3, "top_n": 10, "projects": 20}

    {"ts": "2026-10-17T09:00:00Z", "level": "ERROR",
     "logger": "portfolio_analytics.cli", "msg": "Data load failed: ...",
     "path": "data/projects.csv"}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from portfolio_analytics.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came in via extra=.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """Emit one JSON object per log line.

    Fields: ``ts``, ``level``, ``logger``, ``msg``.
    Extra fields from ``extra=`` kwargs are included at the top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        for key, val in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = val
        return json.dumps(payload, default=str)


def _with_format(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(config: "LoggingConfig") -> None:
    """Configure the root logger from the ``[logging]`` config section.

    Console output always goes to stdout.  A relative ``log_file`` is
    anchored at the project root, like the ``[data]`` paths, so the CLI and
    the dashboard append to the same file whatever directory they start in.

    Args:
        config: Logging configuration section from ``AppConfig``.
    """
    from portfolio_analytics.config import resolve_data_path

    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = (
        _JsonFormatter() if config.json_format
        else logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    )

    handlers = [_with_format(logging.StreamHandler(sys.stdout), level, formatter)]
    if config.log_file:
        log_path = resolve_data_path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _with_format(logging.FileHandler(log_path, encoding="utf-8"), level, formatter)
        )

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # The snapshot loader runs on asyncio; Parquet export goes through pyarrow.
    for name in ("asyncio", "pyarrow"):
        logging.getLogger(name).setLevel(logging.WARNING)
