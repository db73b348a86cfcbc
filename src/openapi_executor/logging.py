"""Log setup and masking of credentials in logged payloads."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping


_SENSITIVE_KEYS = re.compile(r"(token|secret|api[_-]?key|password|authorization)", re.IGNORECASE)
REDACTED = "***REDACTED***"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # httpx logs every request URL at INFO, which would leak query-string api keys.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def is_sensitive(key: Any) -> bool:
    return bool(_SENSITIVE_KEYS.search(str(key)))


def redact_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy ``payload`` with the values of credential-like keys masked, at any depth."""
    return {
        key: REDACTED if is_sensitive(key) else _redact_value(value)
        for key, value in payload.items()
    }


def _redact_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return redact_payload(value)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item) for item in value]
    return value
