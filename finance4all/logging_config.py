import logging
import logging.handlers
import sys
import time
from pathlib import Path
from typing import List, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


ROOT_LOGGER = "finance4all"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that are chatty at INFO (SQL echo, access logs, token fetches)
NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "sqlalchemy.orm",
    "alembic",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "firebase_admin",
    "google.auth",
)


def _level(name: str, fallback: int) -> int:
    return getattr(logging, name.upper(), fallback)


def _handlers(level: int, log_file: Optional[str], max_bytes: int, backups: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backups))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    app_log_level: str = "INFO",
    third_party_log_level: str = "WARNING",
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure the ``finance4all`` logger tree: stdout, plus a rotating file
    when ``log_file`` is set. Safe to call more than once; handlers are
    replaced, not stacked.
    """
    level = _level(app_log_level, logging.INFO)

    app_logger = logging.getLogger(ROOT_LOGGER)
    app_logger.setLevel(level)
    app_logger.handlers.clear()
    for handler in _handlers(level, log_file, max_file_size, backup_count):
        app_logger.addHandler(handler)
    app_logger.propagate = False

    third_party_level = _level(third_party_log_level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    return app_logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Logger under the ``finance4all`` tree; bare names are prefixed"""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request with status code and duration."""

    def __init__(self, app):
        super().__init__(app)
        self.logger = get_logger("finance4all.requests")

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        self.logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method, request.url.path, response.status_code, elapsed_ms
        )
        return response
