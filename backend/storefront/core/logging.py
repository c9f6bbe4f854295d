"""Logging setup: stdlib logging with the current request id on every record."""

import logging
from contextvars import ContextVar

from storefront.core.config import settings

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def configure_logging(level: str | None = None) -> None:
    """Install a stream handler on the ``storefront`` logger (idempotent)."""
    logger = logging.getLogger("storefront")
    logger.setLevel((level or settings.LOG_LEVEL).upper())
    if any(getattr(h, "_storefront", False) for h in logger.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIdFilter())
    handler._storefront = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
