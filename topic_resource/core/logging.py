"""Logging helpers: process-wide setup plus per-invocation request context."""
from __future__ import annotations

import logging
from typing import Any, MutableMapping, Tuple

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level: str) -> None:
    lvl = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=lvl, format=LOG_FORMAT)


class RequestLoggerAdapter(logging.LoggerAdapter):
    """Appends the request context as ``key=value`` pairs to every message.

    Call sites may add their own fields with ``extra={"fields": {...}}``.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = kwargs.pop("extra", None) or {}
        fields = {**(self.extra or {}), **extra.get("fields", {})}
        if fields:
            pairs = " ".join(f"{k}={v}" for k, v in fields.items())
            msg = f"{msg} [{pairs}]"
        return msg, kwargs


def request_logger(name: str, **context: Any) -> RequestLoggerAdapter:
    """Return a logger bound to *context* (stack id, request id, ...)."""
    return RequestLoggerAdapter(logging.getLogger(name), context)
