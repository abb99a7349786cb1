"""
================================================================================
API Client with Allure Integration
================================================================================

REST client for API tests featuring:
    - Environment-aware base URL (current environment's api_url)
    - Non-2xx responses returned as values, not raised
    - Bearer/Basic authentication and custom headers
    - Multipart file upload
    - Allure reporting with cURL command generation and secret masking

Only transport failures (DNS, connection refused, timeouts) raise.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import allure
import httpx
from allure_commons.types import AttachmentType

from e2e_tools.common import create_logger, get_settings


# Maximum response length to include in Allure reports
MAX_RESPONSE_LENGTH = 3000

DEFAULT_TIMEOUT = 30.0

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

SENSITIVE_HEADERS = {"authorization", "x-api-key", "cookie", "set-cookie"}
SENSITIVE_FIELDS = ("password", "secret", "token", "api_key", "authorization", "session")
MASK = "***MASKED***"

log = create_logger("ApiClient")


class ApiClientError(Exception):
    """Raised when the client is misused."""
    pass


@dataclass
class ApiResponse:
    """Response wrapper; `data` is the decoded JSON body, or text when not JSON."""
    data: Any
    status: int
    status_text: str
    headers: Dict[str, str] = field(default_factory=dict)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class ApiClient:
    """
    REST API client.

    Usage:
        >>> with ApiClient("https://jsonplaceholder.typicode.com") as client:
        ...     response = client.get("/posts/1")
        ...     assert response.status == 200
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Args:
            base_url: API root. Defaults to the current environment's api_url.
            timeout: Request timeout in seconds
            transport: Optional httpx transport (e.g. httpx.MockTransport in unit tests)
        """
        if not base_url:
            base_url = get_settings().current_environment().api_url

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers: Dict[str, str] = dict(DEFAULT_HEADERS)
        self._transport = transport
        self.session: Optional[httpx.Client] = None

    def __enter__(self) -> "ApiClient":
        self.session = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.session:
            self.session.close()
            self.session = None

    # =========================================================================
    # Headers
    # =========================================================================

    def set_auth_token(self, token: str, scheme: str = "Bearer") -> None:
        self.headers["Authorization"] = f"{scheme} {token}"

    def clear_auth_token(self) -> None:
        self.headers.pop("Authorization", None)

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    # =========================================================================
    # Requests
    # =========================================================================

    def request(self, method: str, url: str, **kwargs: Any) -> ApiResponse:
        """
        Execute a request and wrap the response.

        Raises:
            ApiClientError: When used outside the context manager
            httpx.TransportError: When no response was received
        """
        if self.session is None:
            raise ApiClientError(
                "ApiClient must be used within a context manager. "
                "Use 'with ApiClient() as client:'"
            )

        headers = kwargs.pop("headers", None) or self.headers
        log.debug(f"→ {method} {url}")
        started = time.monotonic()
        try:
            response = self.session.request(method, url, headers=headers, **kwargs)
        except httpx.TransportError as e:
            log.error(f"Request error: {method} {url}", e)
            raise
        duration_ms = int((time.monotonic() - started) * 1000)

        if response.is_success:
            log.debug(f"← {response.status_code} {url}")
        else:
            log.error(f"← {response.status_code} {url}")

        self._log_to_allure(method, url, headers, kwargs, response)
        return ApiResponse(
            data=self._decode(response),
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            duration_ms=duration_ms,
        )

    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        log.info(f"GET {url}")
        return self.request("GET", url, params=params)

    def post(self, url: str, data: Any = None) -> ApiResponse:
        log.info(f"POST {url}")
        return self.request("POST", url, json=data)

    def put(self, url: str, data: Any = None) -> ApiResponse:
        log.info(f"PUT {url}")
        return self.request("PUT", url, json=data)

    def patch(self, url: str, data: Any = None) -> ApiResponse:
        log.info(f"PATCH {url}")
        return self.request("PATCH", url, json=data)

    def delete(self, url: str) -> ApiResponse:
        log.info(f"DELETE {url}")
        return self.request("DELETE", url)

    def upload(
        self,
        url: str,
        content: bytes,
        filename: str,
        additional_data: Optional[Dict[str, str]] = None,
    ) -> ApiResponse:
        """POST a multipart form with the file under the `file` field."""
        log.info(f"UPLOAD {url}")
        # httpx sets the multipart Content-Type with its boundary
        headers = {k: v for k, v in self.headers.items() if k.lower() != "content-type"}
        return self.request(
            "POST",
            url,
            headers=headers,
            files={"file": (filename, content)},
            data=additional_data or {},
        )

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    # =========================================================================
    # Reporting
    # =========================================================================

    def _log_to_allure(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        kwargs: Dict[str, Any],
        response: httpx.Response,
    ) -> None:
        """
        Attach request URL, headers, body, cURL command and response to Allure.
        """
        full_url = str(response.request.url)
        status_emoji = "✅" if response.status_code < 400 else "❌"

        with allure.step(f"{status_emoji} {method} {url} → {response.status_code}"):
            allure.attach(full_url, name="🔗 Request URL", attachment_type=AttachmentType.TEXT)

            safe_headers = self._redact_headers(headers)
            if safe_headers:
                allure.attach(
                    json.dumps(safe_headers, ensure_ascii=False, indent=2),
                    name="📤 Request Headers",
                    attachment_type=AttachmentType.JSON,
                )

            safe_body = self._redact_body(kwargs.get("json"))
            if safe_body:
                allure.attach(
                    json.dumps(safe_body, ensure_ascii=False, indent=2),
                    name="📤 Request Body",
                    attachment_type=AttachmentType.JSON,
                )

            allure.attach(
                self._build_curl(method, full_url, safe_headers, safe_body),
                name="🔧 cURL Command",
                attachment_type=AttachmentType.TEXT,
            )

            try:
                response_content = json.dumps(response.json(), ensure_ascii=False, indent=2)
            except ValueError:
                response_content = response.text or "<empty>"

            if len(response_content) > MAX_RESPONSE_LENGTH:
                response_content = (
                    f"{response_content[:MAX_RESPONSE_LENGTH]}\n\n"
                    f"... [Truncated, full length: {len(response_content)} chars] ..."
                )

            allure.attach(
                response_content,
                name=f"📥 Response {response.status_code}",
                attachment_type=AttachmentType.JSON,
            )

    def _redact_headers(self, headers: Dict[str, Any]) -> Dict[str, Any]:
        """
        Mask sensitive header values before logging.
        """
        return {
            key: MASK if key.lower() in SENSITIVE_HEADERS else value
            for key, value in headers.items()
        }

    def _redact_body(self, payload: Any) -> Any:
        """
        Recursively mask sensitive fields in request bodies.
        """
        if isinstance(payload, dict):
            return {
                key: MASK if any(token in key.lower() for token in SENSITIVE_FIELDS)
                else self._redact_body(value)
                for key, value in payload.items()
            }
        if isinstance(payload, list):
            return [self._redact_body(item) for item in payload]
        return payload

    def _build_curl(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Any,
    ) -> str:
        """Copy-paste ready cURL command (headers and body already masked)."""
        parts = [f"curl -X {method}"]
        for key, value in headers.items():
            parts.append(f"-H '{key}: {value}'")
        if body:
            parts.append(f"-d '{json.dumps(body, ensure_ascii=False)}'")
        parts.append(f"'{url}'")
        return " \\\n  ".join(parts)


__all__ = [
    "ApiClient",
    "ApiClientError",
    "ApiResponse",
]
