"""
imsaccess logging utilities.

Provides configurable logging for registry HTTP traffic and access fan-outs.
Bearer tokens and API keys are never logged in full.
"""

import logging
import re
from typing import Any

_root_logger = logging.getLogger("imsaccess")
_http_logger = logging.getLogger("imsaccess.http")
_access_logger = logging.getLogger("imsaccess.access")

_SENSITIVE_PATTERNS = [
    (re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"(secret|token|password|api_key)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE), r"\1: [REDACTED]"),
]

_DEFAULT_SENSITIVE_KEYS = {"token", "secret", "password", "api_key", "authorization"}

_TOKEN_PREVIEW_LENGTH = 6


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    access_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure imsaccess logging.

    Args:
        level: Default log level for all imsaccess loggers (default: INFO)
        http_level: Log level for registry HTTP logging (default: same as level)
        access_level: Log level for grant/revoke fan-out logging (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from imsaccess.logging import configure_logging

        configure_logging(level=logging.INFO, http_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    _root_logger.setLevel(level)
    _root_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)
    _access_logger.setLevel(access_level if access_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get an imsaccess logger.

    Args:
        name: Logger name suffix (e.g., "http", "access"). If None, returns the package logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _root_logger
    return logging.getLogger(f"imsaccess.{name}")


def mask_sensitive_data(text: str) -> str:
    """Replace bearer tokens and secret assignments in ``text`` with placeholders."""
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def mask_token(token: str) -> str:
    """
    Shorten a token for display, keeping only a short prefix.

    Args:
        token: Opaque bearer token

    Returns:
        Prefix followed by an ellipsis, or a placeholder for short tokens
    """
    if len(token) <= _TOKEN_PREVIEW_LENGTH * 2:
        return "[TOKEN_REDACTED]"
    return f"{token[:_TOKEN_PREVIEW_LENGTH]}..."


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values
        sensitive_keys: Keys to mask (default: token, secret, password, api_key, authorization)

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]"
    """
    if sensitive_keys is None:
        sensitive_keys = _DEFAULT_SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = key.lower()
        if any(sk in key_lower for sk in sensitive_keys):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    body: dict[str, Any] | None = None,
) -> None:
    """Log a registry HTTP request at DEBUG level with sensitive data masked."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {url}"]

    if headers:
        log_parts.append(f"headers={safe_log_dict(headers)}")

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    elapsed_ms: float | None = None,
) -> None:
    """Log a registry HTTP response at DEBUG level."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {url}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    _http_logger.debug(" | ".join(log_parts))


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "mask_token",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
]
