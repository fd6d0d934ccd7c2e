"""
Transport - HTTP access to the remote API.

The transport owns the endpoint URLs and performs the blocking and
asynchronous requests the rest of the library needs. Responses use the
envelope ``{"data": ...}`` on success and ``{"error": {"message": ...}}``
on failure.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import get_config
from .errors import TransportError

__all__ = ["Transport"]

logger = logging.getLogger(__name__)


def _build_api_url(base_url: str, path: str) -> str:
    """
    Join an endpoint base URL and a request path.

    Args:
        base_url: Endpoint base, with or without a trailing slash
        path: Request path, with or without a leading slash

    Returns:
        The full request URL
    """
    if path.startswith("http://") or path.startswith("https://"):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


class Transport:
    """
    HTTP transport for the API endpoint.

    Example:
        transport = Transport()
        transport.configure("http://localhost:8080/api")
        algorithms = transport.send("/algorithms")
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        http_transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            timeout: HTTP timeout in seconds (default: from get_config())
            http_transport: Optional httpx transport, e.g. httpx.MockTransport
        """
        self._api_url: str | None = None
        self._tile_url: str | None = None
        self._timeout = timeout
        self._http_transport = http_transport

    @property
    def api_url(self) -> str:
        """The API base URL, falling back to the process configuration."""
        return self._api_url or get_config().api_url

    @property
    def tile_url(self) -> str:
        """The tile base URL, falling back to the process configuration."""
        return self._tile_url or get_config().tile_url

    @property
    def timeout(self) -> float:
        return self._timeout if self._timeout is not None else get_config().timeout

    def configure(self, api_url: str | None = None, tile_url: str | None = None) -> None:
        """
        Point the transport at new endpoints.

        URLs that are not given keep their current value.
        """
        if api_url:
            self._api_url = api_url
        if tile_url:
            self._tile_url = tile_url
        logger.debug("Transport configured: api=%s tile=%s", self.api_url, self.tile_url)

    def reset(self) -> None:
        """Forget configured endpoints."""
        self._api_url = None
        self._tile_url = None

    def send(self, path: str, params: dict[str, Any] | None = None, method: str = "GET") -> Any:
        """
        Perform a blocking request and return the response payload.

        Raises:
            TransportError: If the request fails or the server reports an error
        """
        url = _build_api_url(self.api_url, path)
        kwargs = self._client_kwargs()
        try:
            with httpx.Client(**kwargs) as client:
                response = client.request(method, url, **self._request_kwargs(method, params))
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {url} failed: {e}", url=url) from e
        return self._parse(response, url)

    async def send_async(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        method: str = "GET",
    ) -> Any:
        """
        Perform a request on the running event loop and return the payload.

        Raises:
            TransportError: If the request fails or the server reports an error
        """
        url = _build_api_url(self.api_url, path)
        kwargs = self._client_kwargs()
        try:
            async with httpx.AsyncClient(**kwargs) as client:
                response = await client.request(method, url, **self._request_kwargs(method, params))
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {url} failed: {e}", url=url) from e
        return self._parse(response, url)

    def _client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if self._http_transport is not None:
            kwargs["transport"] = self._http_transport
        return kwargs

    @staticmethod
    def _request_kwargs(method: str, params: dict[str, Any] | None) -> dict[str, Any]:
        if not params:
            return {}
        if method.upper() == "GET":
            return {"params": params}
        return {"data": params}

    @staticmethod
    def _parse(response: httpx.Response, url: str) -> Any:
        """
        Unwrap the response envelope.

        Args:
            response: The HTTP response
            url: The requested URL, for error messages

        Returns:
            The ``data`` member of the response body
        """
        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON from {url} (HTTP {response.status_code})",
                status=response.status_code,
                url=url,
            ) from e

        if isinstance(body, dict) and body.get("error"):
            error = body["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise TransportError(
                message or f"Server error from {url}",
                status=response.status_code,
                url=url,
            )

        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code} {response.reason_phrase} from {url}",
                status=response.status_code,
                url=url,
            )

        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def __repr__(self) -> str:
        return f"Transport({self.api_url})"
