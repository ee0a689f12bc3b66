from __future__ import annotations

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

LOG_FIELDS = ("asctime", "levelname", "name", "message")

FIELD_RENAME_MAP = {
    "asctime": "ts",
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """JSON formatter emitting ts, level, logger, message and every ``extra`` field."""
    return JsonFormatter(
        " ".join(f"%({field})s" for field in LOG_FIELDS),
        rename_fields=FIELD_RENAME_MAP,
    )


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_mail_digest", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(create_json_formatter())
    handler._mail_digest = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
