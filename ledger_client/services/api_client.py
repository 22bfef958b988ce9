"""HTTP client for the SoupFinance REST backend."""

from enum import Enum
from typing import Any, Optional

import httpx
import structlog

from ..core.config import get_settings
from ..domain.accounting.exceptions import (
    AuthenticationError,
    BackendRejectedError,
    TransportError,
)

logger = structlog.get_logger()

CSRF_TOKEN_KEY = "SYNCHRONIZER_TOKEN"
CSRF_URI_KEY = "SYNCHRONIZER_URI"


def _query_value(value) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def to_query_string(params: Optional[dict]) -> str:
    """Encode query parameters, skipping ``None`` values."""
    if not params:
        return ""
    cleaned = {key: _query_value(value) for key, value in params.items() if value is not None}
    return str(httpx.QueryParams(cleaned))


def extract_error_message(response: httpx.Response) -> str:
    """Pull the server's human-readable message out of an error response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
        errors = payload.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict) and first.get("message"):
                return str(first["message"])
            if isinstance(first, str):
                return first
    elif isinstance(payload, str) and payload:
        return payload

    return response.reason_phrase or f"Request failed with status {response.status_code}"


class ApiClient:
    """
    Thin wrapper over ``httpx.Client``.

    Attaches the auth token header, converts non-2xx responses to
    ``BackendRejectedError`` and transport failures to ``TransportError``.
    Requests are never retried.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.settings = get_settings()
        self.token = token if token is not None else self.settings.auth_token
        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(
                base_url=base_url or self.settings.get_base_url(),
                timeout=timeout or self.settings.api_timeout_seconds,
                headers={"Accept": "application/json"},
            )
        self._client = http_client

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.token:
            headers[self.settings.auth_header_name] = self.token
        return headers

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None when empty)."""
        query = to_query_string(params)
        url = f"{path}?{query}" if query else path

        try:
            response = self._client.request(method, url, json=json, headers=self._headers())
        except httpx.TransportError as e:
            logger.error("Backend unreachable", method=method, path=path, error=str(e))
            raise TransportError() from e

        if response.status_code == 401:
            self.token = None
            logger.warning("Auth token rejected", method=method, path=path)
            raise AuthenticationError(
                extract_error_message(response),
                status_code=response.status_code,
            )

        if response.is_error:
            message = extract_error_message(response)
            logger.warning(
                "Backend rejected request",
                method=method,
                path=path,
                status=response.status_code,
                message=message,
            )
            try:
                payload = response.json()
            except ValueError:
                payload = None
            raise BackendRejectedError(message, status_code=response.status_code, payload=payload)

        logger.debug("Backend request completed", method=method, path=path, status=response.status_code)

        if not response.content:
            return None
        return response.json()

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[dict] = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Optional[dict] = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def csrf_token(self, controller: str, record_id: Optional[str] = None) -> dict:
        """
        Fetch the synchronizer token the backend requires on save/update.

        ``create.json`` issues it for new records, ``edit/{id}.json`` for
        existing ones.
        """
        if record_id:
            data = self.get(f"/{controller}/edit/{record_id}.json")
        else:
            data = self.get(f"/{controller}/create.json")
        data = data or {}
        return {
            CSRF_TOKEN_KEY: data.get(CSRF_TOKEN_KEY),
            CSRF_URI_KEY: data.get(CSRF_URI_KEY),
        }
