"""
Request forwarder — one HTTP call to the configured backend.

Usage:
    forwarder = RequestForwarder()
    payload = await forwarder.forward("/all/simple", "GET")
    payload = await forwarder.forward("/ai/simple", "POST", {"question": "用户"})

The backend wraps every result as {"data": ...}; forward() returns only the
value under "data". Its shape is whatever the backend sends.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from entity_mcp.config import BackendConfig
from entity_mcp.errors import (
    BackendResponseError,
    ConfigurationError,
    HttpStatusError,
    NetworkError,
)

logger = logging.getLogger(__name__)

BODY_METHODS = ("POST", "PUT")
ALLOWED_METHODS = ("GET",) + BODY_METHODS


class RequestForwarder:
    """
    Issues a single request per call against BackendConfig.endpoint.

    There is no retry and no backoff. Configuration is loaded on every call
    through `config_loader`, so the forwarder itself holds no settings.
    """

    def __init__(
        self,
        config_loader: Callable[[], BackendConfig] = BackendConfig.from_env,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        """
        Args:
            config_loader: Returns the configuration snapshot for a call.
            client: Optional shared client. When omitted, each call opens
                    and closes its own client.
            timeout: Optional timeout for self-created clients; httpx's
                     default applies when None.
        """
        self._config_loader = config_loader
        self._client = client
        self._timeout = timeout

    def _headers(self, config: BackendConfig) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        return headers

    async def forward(self, path: str, method: str = "GET", body: Any = None) -> Any:
        """
        Send one request and return the envelope's "data" field.

        Raises:
            ConfigurationError: ENDPOINT is not set (no request is made).
            NetworkError: no HTTP response was received.
            HttpStatusError: the backend answered with a non-2xx status.
            BackendResponseError: a 2xx body was not valid JSON.
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported method: {method}")

        config = self._config_loader()
        if not config.endpoint:
            raise ConfigurationError("ENDPOINT environment variable is not set")

        url = f"{config.endpoint.rstrip('/')}{path}"
        request_kwargs: dict[str, Any] = {
            "headers": self._headers(config),
            "follow_redirects": True,
        }
        if body is not None and method in BODY_METHODS:
            request_kwargs["json"] = body

        logger.info(f"Request: {method} {url}")
        response = await self._send(method, url, request_kwargs)

        if not response.is_success:
            raise HttpStatusError(
                response.status_code,
                response.reason_phrase,
                _decode_error_body(response),
            )

        try:
            envelope = response.json()
        except ValueError as e:
            raise BackendResponseError(
                f"Invalid JSON in response from {method} {url}: {e}"
            ) from e

        if isinstance(envelope, dict):
            return envelope.get("data")
        return None

    async def _send(self, method: str, url: str, request_kwargs: dict[str, Any]) -> httpx.Response:
        try:
            if self._client is not None:
                return await self._client.request(method, url, **request_kwargs)

            client_kwargs: dict[str, Any] = {}
            if self._timeout is not None:
                client_kwargs["timeout"] = self._timeout
            async with httpx.AsyncClient(**client_kwargs) as client:
                return await client.request(method, url, **request_kwargs)
        except httpx.RequestError as e:
            raise NetworkError(f"{e.__class__.__name__}: {e}" if str(e) else e.__class__.__name__) from e


def _decode_error_body(response: httpx.Response) -> Any:
    """Decoded JSON error body, else its raw text, else None."""
    try:
        return response.json()
    except ValueError:
        return response.text or None
