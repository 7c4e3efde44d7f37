"""Redaction of secrets before URLs and headers reach the logs."""

import re
from collections.abc import Mapping

REDACTED = "***REDACTED***"

# Query parameters whose values are masked
SENSITIVE_PARAMS = (
    "token",
    "access_token",
    "refresh_token",
    "password",
    "secret",
    "client_secret",
    "key",
    "code",
    "state",
    "authorization",
    "bearer",
)

# Headers never written to logs in clear text
SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "x-sonos-event-signature",
    }
)

_SENSITIVE_QUERY = re.compile(
    r"([?&])(" + "|".join(re.escape(param) for param in SENSITIVE_PARAMS) + r")=([^&#\s\"]+)",
    re.IGNORECASE,
)


def redact_sensitive_data(url: str) -> str:
    """Mask the values of sensitive query parameters in a URL."""
    return _SENSITIVE_QUERY.sub(lambda m: f"{m.group(1)}{m.group(2)}={REDACTED}", url)


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of headers safe for logging."""
    return {name: REDACTED if name.lower() in SENSITIVE_HEADERS else value for name, value in headers.items()}
