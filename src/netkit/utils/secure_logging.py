"""Sanitization helpers and secure logging setup.

Dispatched requests carry bearer tokens and refresh cookies in their
headers. This module keeps them out of log output:
- Redaction of tokens embedded in strings
- Redaction of sensitive request headers
- A logging formatter that sanitizes every record
"""

import logging
import re
import sys
from typing import Any, Dict, Mapping, Optional

from ..config.settings import Settings

# Patterns for sensitive data detection
SENSITIVE_PATTERNS = {
    "jwt_token": re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
    "bearer_token": re.compile(r"Bearer\s+[A-Za-z0-9._~+/=-]+", re.IGNORECASE),
    "basic_auth": re.compile(r"Basic\s+[A-Za-z0-9+/=]+", re.IGNORECASE),
}

# Headers that should never be logged
SENSITIVE_HEADERS = {
    "authorization",
    "x-api-key",
    "x-auth-token",
    "cookie",
    "set-cookie",
    "x-csrf-token",
    "x-access-token",
    "x-refresh-token",
    "refresh-token",
}


def sanitize_string(value: str) -> str:
    """Redact tokens and credentials embedded in a string.

    :param value: String to sanitize
    :type value: str
    :return: String with every sensitive match replaced
    :rtype: str
    """
    if not value:
        return value
    for pattern_name, pattern in SENSITIVE_PATTERNS.items():
        value = pattern.sub(f"<{pattern_name}:REDACTED>", value)
    return value


def sanitize_headers(headers: Mapping[str, Any]) -> Dict[str, Any]:
    """Sanitize HTTP headers for logging.

    :param headers: Request or response headers
    :type headers: Mapping[str, Any]
    :return: Copy of the headers with sensitive values redacted
    :rtype: Dict[str, Any]
    """
    sanitized: Dict[str, Any] = {}
    if not headers:
        return sanitized
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            if isinstance(value, str) and len(value) > 0:
                sanitized[key] = f"<REDACTED:length={len(value)}>"
            else:
                sanitized[key] = "<REDACTED>"
        elif isinstance(value, str):
            sanitized[key] = sanitize_string(value)
        else:
            sanitized[key] = value
    return sanitized


class SanitizingFormatter(logging.Formatter):
    """Formatter that redacts tokens from log messages and arguments."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with automatic sanitization.

        :param record: Log record to format
        :type record: logging.LogRecord
        :return: Sanitized log message
        :rtype: str
        """
        if record.args:
            try:
                record.msg = sanitize_string(record.msg % record.args)
                record.args = None
            except (TypeError, ValueError):
                record.msg = sanitize_string(str(record.msg))
                record.args = tuple(
                    sanitize_string(a) if isinstance(a, str) else a
                    for a in record.args
                )
        else:
            record.msg = sanitize_string(str(record.msg))
        return super().format(record)


# Global flag to track if logging has been set up
_LOGGING_CONFIGURED = False


def setup_logging(level: Optional[str] = None, force: bool = False) -> None:
    """Set up logging with automatic sanitization.

    Configures the root logger once with a sanitizing stdout handler.
    Subsequent calls are no-ops unless ``force`` is set.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL);
        defaults to ``Settings().log_level`` (``NETKIT_LOG_LEVEL``)
    :type level: Optional[str]
    :param force: Reconfigure even if logging was already set up
    :type force: bool
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED and not force:
        logging.getLogger(__name__).debug(
            "Logging already configured, skipping duplicate setup"
        )
        return

    if level is None:
        level = Settings().log_level

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        SanitizingFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,
    )

    # httpx logs every request at INFO; keep it quieter than our own output
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _LOGGING_CONFIGURED = True
