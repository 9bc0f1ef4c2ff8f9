"""
JSON log lines for the letter service.

One line per record on stdout. Alongside level, logger and message, every
line carries two context values set by the middleware in app.main:

- request_id: short id for the HTTP request, echoed as X-Request-ID
- anon_id: the visitor's anonymous analytics id, when the cookie exists

Outside a request both read '-'. Anything passed through `extra=` is
appended as top-level keys.

Usage:
    setup_logging(settings.log_level)   # once, in app.main
    logger = logging.getLogger(__name__)
    logger.info("letter.step_advanced", extra={"action": "letter.step_advanced", "step": 2})
"""

import logging
import json
import sys
from datetime import datetime, timezone
from contextvars import ContextVar


request_id_var: ContextVar[str] = ContextVar("request_id", default="-")
anon_id_var: ContextVar[str] = ContextVar("anon_id", default="-")


class JSONFormatter(logging.Formatter):
    """Formats every log record as a single JSON line."""

    INTERNAL_FIELDS = {
        "name", "msg", "args", "created", "relativeCreated", "exc_info",
        "exc_text", "stack_info", "lineno", "funcName", "pathname",
        "filename", "module", "thread", "threadName", "process",
        "processName", "msecs", "levelname", "levelno", "message",
        "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": request_id_var.get(),
            "anon_id": anon_id_var.get(),
        }

        for key, val in record.__dict__.items():
            if key not in self.INTERNAL_FIELDS and key not in log:
                log[key] = val

        if record.exc_info and record.exc_info[0] is not None:
            log["exception_type"] = record.exc_info[0].__name__
            log["exception_message"] = str(record.exc_info[1])
            log["traceback"] = self.formatException(record.exc_info)

        return json.dumps(log, default=str)


def setup_logging(level: str = "info") -> None:
    """Configure the root logger to output structured JSON to stdout."""
    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Beacon requests go through httpx; one line per event is noise.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
