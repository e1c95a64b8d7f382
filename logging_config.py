from __future__ import annotations

import logging
from typing import Any, Final


DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

SECRET_FIELDS: Final[tuple[str, ...]] = (
    "token",
    "password",
    "secret",
    "apikey",
    "api_key",
    "private-token",
    "private_token",
    "authorization",
)
REDACTED: Final[str] = "[REDACTED]"

# attributes every LogRecord has; anything else arrived through `extra=`
_RECORD_ATTRS: Final[frozenset[str]] = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _is_secret_key(key: Any) -> bool:
    lowered = str(key).lower()
    return any(field in lowered for field in SECRET_FIELDS)


def redact_secrets(obj: Any) -> Any:
    """Return a copy of obj with values under secret-looking keys replaced, recursing into dicts and lists."""
    if isinstance(obj, dict):
        return {k: REDACTED if _is_secret_key(k) else redact_secrets(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return type(obj)(redact_secrets(item) for item in obj)
    return obj


class RedactingFilter(logging.Filter):
    """Mask secrets passed to a logger as `extra` fields or as dict arguments."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key in list(vars(record)):
            if key in _RECORD_ATTRS:
                continue
            value = getattr(record, key)
            setattr(record, key, REDACTED if _is_secret_key(key) else redact_secrets(value))
        if isinstance(record.args, dict):
            record.args = redact_secrets(record.args)
        elif isinstance(record.args, tuple):
            record.args = tuple(redact_secrets(a) for a in record.args)
        return True


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure standard library logging for the server and CLI.

    Logs go to stderr only: stdout carries the stdio tool transport and CLI payloads.
    """
    handler = logging.StreamHandler()
    handler.addFilter(RedactingFilter())
    logging.basicConfig(level=level, format=DEFAULT_LOG_FORMAT, handlers=[handler], force=True)
