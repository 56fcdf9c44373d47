"""
HTTP transport for the registry control-plane API.

Handles HTTP communication with automatic retry logic and error handling.
"""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from imsaccess.exceptions import ImsError, NotFoundError, RegistryError
from imsaccess.logging import get_logger, log_http_request, log_http_response, mask_sensitive_data

logger = get_logger("http")


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # seconds
    jitter: float = 0.1  # ±10%


class HTTPTransport:
    """
    HTTP transport with retry logic.

    Handles:
    - Bearer authentication with an optional API key
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - Error response parsing into typed exceptions
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            base_url: Base URL of the registry API (e.g., "https://registry.example.com")
            api_key: Optional bearer credential for the registry API
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            http_transport: Optional httpx transport (used to inject a MockTransport in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=http_transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Make a request with automatic retry.

        Args:
            method: HTTP method
            path: API path (e.g., "/v1/repositories")
            params: Query parameters
            body: JSON request body

        Returns:
            Parsed JSON response, or an empty dict for empty responses

        Raises:
            RegistryError: On API errors
        """
        def make_request() -> httpx.Response:
            log_http_request(method, path, headers=dict(self._client.headers), body=body)
            started = time.monotonic()
            response = self._client.request(method, path, params=params, json=body)
            log_http_response(
                response.status_code, path, (time.monotonic() - started) * 1000
            )
            return response

        return self._execute_with_retry(make_request)

    def _execute_with_retry(
        self, request_fn: Callable[[], httpx.Response]
    ) -> dict[str, Any]:
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                response = request_fn()

                if response.status_code < 400:
                    if not response.content:
                        return {}
                    return response.json()

                error = self._parse_error_response(response)

                if not self._should_retry(response.status_code, attempt):
                    raise error

                last_error = error

                retry_after = response.headers.get("Retry-After")
                wait = self._get_backoff_time(attempt, retry_after)
                logger.warning(
                    "HTTP %d (attempt %d), retrying in %.2fs: %s",
                    response.status_code,
                    attempt + 1,
                    wait,
                    mask_sensitive_data(str(error)),
                )
                time.sleep(wait)

            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= self.retry_config.max_retries:
                    raise RegistryError("CONNECTION_ERROR", str(e)) from e

                last_error = e
                wait = self._get_backoff_time(attempt, None)
                logger.warning(
                    "Request failed (attempt %d), retrying in %.2fs: %s",
                    attempt + 1,
                    wait,
                    mask_sensitive_data(str(e)),
                )
                time.sleep(wait)

        if last_error:
            if isinstance(last_error, ImsError):
                raise last_error
            raise RegistryError("MAX_RETRIES_EXCEEDED", str(last_error))

        raise RegistryError("UNKNOWN_ERROR", "Request failed with no error details")

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        if attempt >= self.retry_config.max_retries:
            return False

        return status_code in self.retry_config.retry_on

    def _get_backoff_time(
        self, attempt: int, retry_after: str | None
    ) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting the Retry-After
        header if present.

        Args:
            attempt: Current attempt number (0-indexed)
            retry_after: Value of Retry-After header (if present)

        Returns:
            Time to wait in seconds
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass  # fall through to exponential backoff

        base_wait = self.retry_config.backoff_factor ** attempt

        jitter_range = base_wait * self.retry_config.jitter
        wait_time = base_wait + random.uniform(-jitter_range, jitter_range)

        return min(wait_time, self.retry_config.max_backoff)

    def _parse_error_response(self, response: httpx.Response) -> RegistryError:
        try:
            data = response.json()
        except ValueError:
            data = {}

        if not isinstance(data, dict):
            data = {}

        error = data.get("error")
        if isinstance(error, str):
            error = {"message": error}
        elif not isinstance(error, dict):
            error = {}

        meta = data.get("meta")
        if not isinstance(meta, dict):
            meta = {}

        code = error.get("code") or "UNKNOWN_ERROR"
        message = error.get("message") or f"HTTP {response.status_code}"
        request_id = meta.get("requestId")

        if response.status_code == 404:
            return NotFoundError(code, message, request_id)
        return RegistryError(code, message, request_id)
