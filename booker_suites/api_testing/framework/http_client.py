"""
================================================================================
HTTP Client with Allure Integration
================================================================================

Thin httpx wrapper used by the API helper:
    - Automatic retry with exponential backoff on network errors
    - Rate limit (429) handling with Retry-After parsing
    - Allure request/response attachments with cURL reproduction
    - Redaction of the session cookie and credential fields in reports

The client never adds authentication on its own; callers pass the session
cookie explicitly so each helper instance owns its token.

================================================================================
"""

from __future__ import annotations

import json
import time
from typing import Any, Dict, Optional

import allure
import httpx
from allure_commons.types import AttachmentType

from booker_tools.common import ConfigLoader, get_logger


# Maximum response length to include in Allure reports
MAX_RESPONSE_LENGTH = 3000

# Default retry settings
DEFAULT_RETRY_COUNT = 3
DEFAULT_RETRY_BACKOFF = 0.5
DEFAULT_RETRY_MAX_WAIT = 5.0

MASK = "***MASKED***"
SENSITIVE_HEADERS = {"authorization", "cookie", "set-cookie", "x-api-key"}
SENSITIVE_FIELDS = ("password", "secret", "token", "authorization", "session")

log = get_logger("HttpClient")


class HttpClientError(Exception):
    """Base exception for HTTP client errors."""
    pass


class RateLimitExceeded(HttpClientError):
    """Raised when rate limit is exceeded and all retries are exhausted."""
    pass


class HttpClient:
    """
    HTTP client with built-in resilience and reporting.

    Usage:
        >>> with HttpClient() as client:
        ...     response = client.get("/ping")
        ...     print(response.status_code)
    """

    def __init__(
        self,
        config: Optional[ConfigLoader] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize HTTP client with configuration.

        Args:
            config: Configuration loader instance. Creates new one if None.
            base_url: Overrides ``api.base_url``
            transport: Custom httpx transport (mock transports in tests)
        """
        if config is None:
            config = ConfigLoader()

        self.config = config
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.timeout = int(config.get("api.timeout", 30))
        self.retry_count = max(1, int(config.get("api.retry_count", DEFAULT_RETRY_COUNT)))
        self.retry_backoff = float(config.get("api.retry_backoff", DEFAULT_RETRY_BACKOFF))
        self.retry_max_wait = float(config.get("api.retry_max_wait", DEFAULT_RETRY_MAX_WAIT))

        self._transport = transport
        self.session: Optional[httpx.Client] = None

    def __enter__(self) -> "HttpClient":
        """Enter context manager - initialize HTTP session."""
        self.session = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - close HTTP session."""
        self.close()

    def close(self) -> None:
        if self.session:
            self.session.close()
            self.session = None

    def request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Execute HTTP request with automatic retry and Allure logging.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE, PATCH)
            url: Request URL (relative to base_url)
            **kwargs: Additional arguments passed to httpx.request

        Returns:
            httpx.Response object

        Raises:
            RateLimitExceeded: When rate limit retries are exhausted
            httpx.HTTPError: When network retries are exhausted
        """
        if self.session is None:
            raise HttpClientError(
                "HttpClient must be used within a context manager. "
                "Use 'with HttpClient() as client:'"
            )

        kwargs["headers"] = dict(kwargs.get("headers") or {})

        for attempt in range(self.retry_count):
            try:
                response = self.session.request(method, url, **kwargs)

                if response.status_code == 429:
                    retry_after = self._parse_retry_after(response)
                    log.warning(
                        f"Rate limited (429) on {method} {url}. Waiting {retry_after}s. "
                        f"Attempt {attempt + 1}/{self.retry_count}"
                    )
                    time.sleep(retry_after)
                    continue

                log.debug(f"{method} {url} -> {response.status_code}")
                self._log_to_allure(method, url, kwargs, response)
                return response

            except (httpx.TimeoutException, httpx.NetworkError) as e:
                if attempt < self.retry_count - 1:
                    wait_time = self._calculate_backoff(attempt)
                    log.warning(
                        f"Network error on {method} {url}: {e}. Retrying in {wait_time}s. "
                        f"Attempt {attempt + 1}/{self.retry_count}"
                    )
                    time.sleep(wait_time)
                else:
                    log.error(f"All retries exhausted for {method} {url}. Last error: {e}")
                    raise

        raise RateLimitExceeded(
            f"Rate limit exceeded after {self.retry_count} retries"
        )

    def raw_request(
        self,
        method: str,
        url: str,
        content: str,
        content_type: str = "application/json",
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a literal body, bypassing JSON serialization.

        Used for malformed-payload tests.
        """
        headers = dict(kwargs.pop("headers", None) or {})
        headers.setdefault("Content-Type", content_type)
        return self.request(method, url, content=content, headers=headers, **kwargs)

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Execute GET request."""
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Execute POST request."""
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> httpx.Response:
        """Execute PUT request."""
        return self.request("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        """Execute PATCH request."""
        return self.request("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        """Execute DELETE request."""
        return self.request("DELETE", url, **kwargs)

    def _parse_retry_after(self, response: httpx.Response) -> float:
        """
        Parse Retry-After header (seconds) from a 429 response.

        Returns:
            Wait time in seconds (capped at retry_max_wait)
        """
        retry_after = response.headers.get("Retry-After", "")

        try:
            wait_time = float(retry_after)
        except ValueError:
            wait_time = self.retry_backoff

        return min(wait_time, self.retry_max_wait)

    def _calculate_backoff(self, attempt: int) -> float:
        """base * (2 ^ attempt), capped at max_wait"""
        wait_time = self.retry_backoff * (2 ** attempt)
        return min(wait_time, self.retry_max_wait)

    def _log_to_allure(
        self,
        method: str,
        url: str,
        kwargs: Dict[str, Any],
        response: httpx.Response,
    ) -> None:
        """
        Attach request/response details to the current Allure step.
        """
        full_url = str(response.request.url)

        status_mark = "PASS" if response.status_code < 400 else "FAIL"
        step_title = f"[{status_mark}] {method} {url} -> {response.status_code}"

        with allure.step(step_title):
            allure.attach(
                full_url,
                name="Request URL",
                attachment_type=AttachmentType.TEXT
            )

            safe_headers = self._redact_headers(kwargs.get("headers", {}))
            if safe_headers:
                allure.attach(
                    json.dumps(safe_headers, ensure_ascii=False, indent=2),
                    name="Request Headers",
                    attachment_type=AttachmentType.JSON
                )

            safe_body = self._redact_body(kwargs.get("json"))
            if safe_body is not None:
                allure.attach(
                    json.dumps(safe_body, ensure_ascii=False, indent=2),
                    name="Request Body",
                    attachment_type=AttachmentType.JSON
                )
            elif kwargs.get("content") is not None:
                allure.attach(
                    str(kwargs["content"])[:MAX_RESPONSE_LENGTH],
                    name="Request Body (raw)",
                    attachment_type=AttachmentType.TEXT
                )

            allure.attach(
                self._build_curl(method, full_url, safe_headers, safe_body),
                name="cURL Command",
                attachment_type=AttachmentType.TEXT
            )

            try:
                response_content = json.dumps(
                    self._redact_body(response.json()), ensure_ascii=False, indent=2
                )
            except (json.JSONDecodeError, ValueError):
                response_content = response.text or "<empty>"

            if len(response_content) > MAX_RESPONSE_LENGTH:
                response_content = (
                    f"{response_content[:MAX_RESPONSE_LENGTH]}\n\n"
                    f"... [Truncated, full length: {len(response_content)} chars] ..."
                )

            allure.attach(
                response_content,
                name=f"Response Body ({response.status_code})",
                attachment_type=AttachmentType.TEXT
            )

    @staticmethod
    def _redact_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
        """Mask sensitive header values before logging."""
        return {
            key: MASK if key.lower() in SENSITIVE_HEADERS else value
            for key, value in headers.items()
        }

    @classmethod
    def _redact_body(cls, payload: Any) -> Any:
        """Recursively mask credential-like fields in request and response bodies."""
        if isinstance(payload, dict):
            redacted = {}
            for key, value in payload.items():
                if any(token in str(key).lower() for token in SENSITIVE_FIELDS):
                    redacted[key] = MASK
                else:
                    redacted[key] = cls._redact_body(value)
            return redacted
        if isinstance(payload, list):
            return [cls._redact_body(item) for item in payload]
        return payload

    @staticmethod
    def _build_curl(
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[Any],
    ) -> str:
        """
        Build a copy-paste ready cURL command from already-redacted parts.
        """
        parts = [f"curl -X {method}"]

        for key, value in headers.items():
            parts.append(f"-H '{key}: {value}'")

        if body is not None:
            parts.append(f"-d '{json.dumps(body, ensure_ascii=False)}'")

        parts.append(f"'{url}'")

        return " \\\n  ".join(parts)


__all__ = [
    "HttpClient",
    "HttpClientError",
    "RateLimitExceeded",
]
