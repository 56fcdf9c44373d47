"""
Property-based tests for HTTP transport retry behavior.
"""

import logging

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from imsaccess.exceptions import NotFoundError, RegistryError
from imsaccess.transport import HTTPTransport, RetryConfig

backoff_factor_strategy = st.floats(min_value=1.1, max_value=5.0)
attempt_strategy = st.integers(min_value=0, max_value=5)
retry_after_strategy = st.integers(min_value=1, max_value=120)


def make_transport(handler=None, **retry) -> HTTPTransport:
    return HTTPTransport(
        base_url="https://registry.example.com",
        retry_config=RetryConfig(**retry),
        http_transport=httpx.MockTransport(handler) if handler else None,
    )


@given(backoff_factor=backoff_factor_strategy, attempt=attempt_strategy)
@settings(max_examples=100)
def test_exponential_backoff_timing(backoff_factor: float, attempt: int) -> None:
    """The wait before attempt N is backoff_factor ** N within the jitter band."""
    transport = make_transport(backoff_factor=backoff_factor, jitter=0.1, max_backoff=1000.0)

    expected_base = backoff_factor ** attempt
    actual = transport._get_backoff_time(attempt, None)

    assert min(expected_base * 0.9, 1000.0) <= actual <= min(expected_base * 1.1, 1000.0)


@given(retry_after=retry_after_strategy)
@settings(max_examples=100)
def test_retry_after_header_respected(retry_after: int) -> None:
    transport = make_transport(respect_retry_after=True)

    assert transport._get_backoff_time(0, str(retry_after)) == float(retry_after)


@given(
    status_code=st.sampled_from([400, 401, 403, 404, 409]),
    attempt=st.integers(min_value=0, max_value=2),
)
@settings(max_examples=100)
def test_no_retry_on_non_retryable_errors(status_code: int, attempt: int) -> None:
    transport = make_transport(max_retries=3)

    assert not transport._should_retry(status_code, attempt)


@given(
    status_code=st.sampled_from([429, 500, 502, 503]),
    attempt=st.integers(min_value=0, max_value=2),
)
@settings(max_examples=100)
def test_retry_on_retryable_errors(status_code: int, attempt: int) -> None:
    transport = make_transport(max_retries=3)

    assert transport._should_retry(status_code, attempt)


def test_no_retry_after_max_retries() -> None:
    transport = make_transport(max_retries=3)

    assert not transport._should_retry(503, 3)


def test_retries_then_succeeds(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("imsaccess.transport.time.sleep", lambda s: None)
    responses = iter([
        httpx.Response(503, json={"error": {"code": "UNAVAILABLE", "message": "busy"}}),
        httpx.Response(200, json={"ok": True}),
    ])

    transport = make_transport(lambda request: next(responses), max_retries=2)

    assert transport.request("GET", "/v1/repositories") == {"ok": True}


def test_error_response_is_typed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            404,
            json={
                "error": {"code": "REPOSITORY_NOT_FOUND", "message": "no such repository"},
                "meta": {"requestId": "req-1"},
            },
        )

    transport = make_transport(handler)

    with pytest.raises(NotFoundError) as exc_info:
        transport.request("GET", "/v1/repositories/acme/missing")

    assert exc_info.value.code == "REPOSITORY_NOT_FOUND"
    assert exc_info.value.request_id == "req-1"


def test_non_json_error_body() -> None:
    transport = make_transport(lambda request: httpx.Response(400, text="bad request"))

    with pytest.raises(RegistryError) as exc_info:
        transport.request("POST", "/v1/repositories", body={})

    assert exc_info.value.code == "UNKNOWN_ERROR"
    assert exc_info.value.message == "HTTP 400"


def test_connection_errors_raise_after_retries(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("imsaccess.transport.time.sleep", lambda s: None)
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    transport = make_transport(handler, max_retries=2)

    with pytest.raises(RegistryError) as exc_info:
        transport.request("GET", "/v1/repositories")

    assert exc_info.value.code == "CONNECTION_ERROR"
    assert len(attempts) == 3


def test_empty_success_body() -> None:
    transport = make_transport(lambda request: httpx.Response(204))

    assert transport.request("DELETE", "/v1/repositories/acme/api") == {}


def test_api_key_sent_as_bearer() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["authorization"] = request.headers.get("Authorization")
        return httpx.Response(200, json={})

    transport = HTTPTransport(
        base_url="https://registry.example.com",
        api_key="secret-key",
        http_transport=httpx.MockTransport(handler),
    )
    transport.request("GET", "/v1/repositories")

    assert seen["authorization"] == "Bearer secret-key"


@pytest.mark.parametrize(
    "body",
    [
        {"error": "registry unavailable"},
        {"error": {"code": "INTERNAL"}, "meta": "req-1"},
        {"error": None, "meta": None},
        {"error": ["x"]},
    ],
)
def test_irregular_error_bodies_are_typed(body: dict) -> None:
    transport = make_transport(lambda request: httpx.Response(400, json=body))

    with pytest.raises(RegistryError) as exc_info:
        transport.request("GET", "/v1/repositories")

    assert exc_info.value.request_id is None
    if body["error"] == "registry unavailable":
        assert exc_info.value.message == "registry unavailable"
        assert exc_info.value.code == "UNKNOWN_ERROR"


def test_request_log_masks_api_key(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="imsaccess.http")
    transport = HTTPTransport(
        base_url="https://registry.example.com",
        api_key="secret-key",
        http_transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
    )

    transport.request("GET", "/v1/repositories")

    assert "GET /v1/repositories" in caplog.text
    assert "[REDACTED]" in caplog.text
    assert "secret-key" not in caplog.text


def test_retry_warning_masks_bearer_tokens(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr("imsaccess.transport.time.sleep", lambda s: None)
    caplog.set_level(logging.WARNING, logger="imsaccess.http")
    responses = iter([
        httpx.Response(503, json={"error": {"code": "UNAVAILABLE", "message": "rejected Bearer abc123"}}),
        httpx.Response(200, json={}),
    ])

    transport = make_transport(lambda request: next(responses), max_retries=1)
    transport.request("GET", "/v1/repositories")

    assert "retrying" in caplog.text
    assert "abc123" not in caplog.text
