"""
Logging setup.

- Console handler for dev
- Rotating file handlers for runtime and errors
- Request ID aware formatter
"""

from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.config import Settings

_CONFIGURED = False


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        # Middleware passes request_id via `extra=` when it has one
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def _mk_handler(path: Path, level: int) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
    handler.setLevel(level)
    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s %(request_id)s - %(message)s"
    )
    handler.setFormatter(fmt)
    handler.addFilter(RequestIdFilter())
    return handler


def configure_logging(settings: Settings) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        # create_app() may run many times in one process (tests)
        return
    _CONFIGURED = True

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Console (dev)
    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s"))
    root.addHandler(console)

    # Files
    logs_dir = Path(settings.LOG_DIR)
    runtime = _mk_handler(logs_dir / "backend.log", logging.INFO)
    errors = _mk_handler(logs_dir / "errors.log", logging.ERROR)

    logging.getLogger("Runtime").addHandler(runtime)
    logging.getLogger("Backend").addHandler(runtime)
    logging.getLogger("Enhance").addHandler(runtime)
    root.addHandler(errors)

    # The SDK is chatty at INFO
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
