"""
Tests for imsaccess logging helpers.
"""

import io
import logging

from hypothesis import given, settings
from hypothesis import strategies as st

from imsaccess.logging import (
    configure_logging,
    get_logger,
    log_http_request,
    mask_sensitive_data,
    mask_token,
    safe_log_dict,
)
from imsaccess.testing import MemoryStore
from imsaccess.tokens import TokenManager

token_strategy = st.text(
    alphabet=st.sampled_from("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"),
    min_size=13,
    max_size=64,
)


@given(token=token_strategy)
@settings(max_examples=100)
def test_mask_token_never_reveals_full_token(token: str) -> None:
    masked = mask_token(token)

    assert token not in masked
    assert masked.startswith(token[:6])


def test_mask_short_token() -> None:
    assert mask_token("abc") == "[TOKEN_REDACTED]"


def test_bearer_header_is_masked() -> None:
    assert mask_sensitive_data("Authorization: Bearer abc.def") == "Authorization: Bearer [REDACTED]"


def test_safe_log_dict_redacts_nested_secrets() -> None:
    data = {
        "user": "alice",
        "Authorization": "Bearer xyz",
        "item": {"Token": "abc", "User": "alice"},
        "items": [{"password": "p"}],
    }

    assert safe_log_dict(data) == {
        "user": "alice",
        "Authorization": "[REDACTED]",
        "item": {"Token": "[REDACTED]", "User": "alice"},
        "items": [{"password": "[REDACTED]"}],
    }


def test_get_logger_names() -> None:
    assert get_logger().name == "imsaccess"
    assert get_logger("access").name == "imsaccess.access"


def test_configure_logging_levels() -> None:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    try:
        configure_logging(level=logging.INFO, http_level=logging.DEBUG, handler=handler)

        assert get_logger().level == logging.INFO
        assert get_logger("http").level == logging.DEBUG
        assert get_logger("access").level == logging.INFO

        log_http_request("PUT", "/v1/repositories/acme/api/policy", body={"policyText": "x"})
        assert "PUT /v1/repositories/acme/api/policy" in stream.getvalue()
    finally:
        get_logger().removeHandler(handler)


def test_token_lifecycle_logs_do_not_contain_tokens() -> None:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    logger = get_logger("tokens")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        manager = TokenManager(MemoryStore())
        token = manager.create_token("alice")
        manager.delete_token(token)

        output = stream.getvalue()
        assert "alice" in output
        assert token not in output
    finally:
        logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
