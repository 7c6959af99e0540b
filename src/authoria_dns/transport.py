"""
HTTP transport for the AuthoriaDNS API.

Thin wrapper around httpx: builds the request for one endpoint, sends it
and decodes the JSON response. Every call opens and closes its own
client, so a Transport holds no connection state between calls.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "OPTIONS"})


class AuthoriaDNSError(Exception):
    """Base class for all AuthoriaDNS client errors."""


class TransportError(AuthoriaDNSError):
    """Raised when the request could not be completed (network failure)."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class DecodeError(AuthoriaDNSError):
    """Raised when a response body is not the JSON the client expects."""

    def __init__(
        self,
        message: str,
        body: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.body = body
        self.status_code = status_code


class Transport:
    """Sends requests to an AuthoriaDNS API base URL."""

    def __init__(self, base_url: str, verify_ssl: bool = True) -> None:
        """Initialize the transport.

        Args:
            base_url: API base URL, e.g. "https://dns.example.com/api/v1".
            verify_ssl: Whether to verify TLS certificates and host names.
        """
        self.base_url = base_url
        self.verify_ssl = verify_ssl

    def send(
        self,
        path: str,
        method: str,
        data: dict[str, Any] | None = None,
        json_body: bool = False,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON response.

        Args:
            path: Endpoint path relative to the base URL (e.g. "/new").
            method: One of GET, POST, PUT or OPTIONS.
            data: Request body. Sent only when non-empty.
            json_body: Encode ``data`` as JSON instead of form fields.
            params: Query string parameters.

        Returns:
            The decoded JSON value.

        Raises:
            ValueError: If ``method`` is not supported.
            TransportError: If the request fails at the network level.
            DecodeError: If the body is not valid JSON.
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Invalid HTTP method: {method}")

        url = self.base_url + path
        kwargs: dict[str, Any] = {}
        if params:
            kwargs["params"] = params
        if data:
            if json_body:
                kwargs["json"] = data
            else:
                kwargs["data"] = data

        logger.debug(
            "%s %s (%s)",
            method,
            url,
            ("json" if json_body else "form") if data else "no body",
        )

        try:
            with httpx.Client(verify=self.verify_ssl) as client:
                response = client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise TransportError(f"Network error calling {url}: {e}", cause=e) from e

        return self._decode(response)

    def _decode(self, response: httpx.Response) -> Any:
        """Decode a JSON response body.

        The HTTP status is not checked; the API reports application
        errors inside the JSON body.
        """
        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(
                "Undecodable response from %s (HTTP %s)",
                response.request.url,
                response.status_code,
            )
            raise DecodeError(
                f"AuthoriaDNS API response could not be decoded: {response.text!r}",
                body=response.text,
                status_code=response.status_code,
            ) from e

        if payload is None:
            raise DecodeError(
                "AuthoriaDNS API response is empty (null)",
                body=response.text,
                status_code=response.status_code,
            )

        return payload
