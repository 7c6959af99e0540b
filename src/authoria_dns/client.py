"""
AuthoriaDNS client.

Issues DNS TXT verification requests against an AuthoriaDNS instance and
queries their status.

Endpoints (relative to {instance}/api/v1):
- OPTIONS /is-that-authoria  instance handshake
- POST    /new               new verification request (form body)
- GET     /verify?id=...     status of one request
- POST    /bulk-verify       status of several requests (JSON body)
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, TypedDict

import httpx

from authoria_dns.transport import AuthoriaDNSError, DecodeError, Transport

logger = logging.getLogger(__name__)

API_PATH = "/api/v1"
HANDSHAKE_PATH = "/is-that-authoria"
DEFAULT_TTL = 300

_SCHEME_RE = re.compile(r"^https?://")


class ConfigurationError(AuthoriaDNSError):
    """Raised when the instance URL is invalid or not an AuthoriaDNS instance."""


class ServerError(AuthoriaDNSError):
    """Raised when the API answers with an explicit error message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class VerificationState(Enum):
    """Verification status values reported by the server."""

    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    EXPIRED = "EXPIRED"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> VerificationState:
        """Map a raw status value to a state, UNKNOWN if unrecognised."""
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


class VerificationStatus(TypedDict):
    """Status record as returned by /verify and /bulk-verify."""

    id: str
    domain: str
    verified: bool
    status: str


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings of one client."""

    base_url: str
    verify_ssl: bool = True

    @property
    def skip_tls_verify(self) -> bool:
        return not self.verify_ssl


@dataclass
class VerificationRequest:
    """A newly created verification request."""

    id: str
    token: str
    instructions: str

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> VerificationRequest:
        token = data["TXT_record_to_verify"]
        return cls(
            id=data["id"],
            token=token,
            instructions=(
                f"Add a TXT record with the value '{token}' "
                "to your domain's DNS records"
            ),
        )

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "token": self.token, "instructions": self.instructions}


def normalize_instance_url(instance_url: str, verify_ssl: bool = True) -> str:
    """Normalize and validate an instance URL.

    A URL without scheme gets "https://" when SSL verification is
    enabled and "http://" when it is disabled.

    Args:
        instance_url: Instance URL as given by the caller.
        verify_ssl: Whether SSL verification is enabled.

    Returns:
        The normalized URL, without trailing slash.

    Raises:
        ConfigurationError: If the URL is not a valid absolute http(s) URL.
    """
    url = instance_url.strip()
    if not _SCHEME_RE.match(url):
        url = ("https://" if verify_ssl else "http://") + url
    url = url.rstrip("/")

    if any(c.isspace() for c in url):
        raise ConfigurationError(f"invalid instance URL: {instance_url!r}")

    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise ConfigurationError(f"invalid instance URL: {instance_url!r}") from e

    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigurationError(f"invalid instance URL: {instance_url!r}")

    return url


class AuthoriaDNS:
    """Client for an AuthoriaDNS instance.

    Construction performs the instance handshake; a client object only
    exists once the remote server has identified itself.
    """

    def __init__(self, instance_url: str, verify_ssl: bool = True) -> None:
        """Connect to an AuthoriaDNS instance.

        Args:
            instance_url: URL of the instance, with or without scheme.
            verify_ssl: Whether to verify TLS certificates.

        Raises:
            ConfigurationError: If the URL is invalid or the server is not
                an AuthoriaDNS instance.
            TransportError: If the server cannot be reached.
            DecodeError: If the handshake response is not JSON.
        """
        url = normalize_instance_url(instance_url, verify_ssl)
        self._config = ClientConfig(base_url=url + API_PATH, verify_ssl=verify_ssl)
        self._transport = Transport(self._config.base_url, verify_ssl=verify_ssl)

        response = self._transport.send(HANDSHAKE_PATH, "OPTIONS")
        if not isinstance(response, dict) or not response.get("authoria"):
            raise ConfigurationError(f"not a compatible instance: {url}")

        logger.info("Connected to AuthoriaDNS instance at %s", url)

    @property
    def config(self) -> ClientConfig:
        return self._config

    def create_verification(
        self, domain: str, ttl: int = DEFAULT_TTL
    ) -> VerificationRequest:
        """Create a new DNS verification request.

        Args:
            domain: Domain to verify (e.g. "example.com").
            ttl: Lifetime of the request in seconds.

        Returns:
            The request id, the TXT token and publishing instructions.

        Raises:
            ServerError: If the server rejects the request.
        """
        data = self._transport.send("/new", "POST", {"domain": domain, "ttl": ttl})

        if isinstance(data, dict) and data.get("error"):
            raise ServerError(str(data["error"]))

        try:
            request = VerificationRequest.from_response(data)
        except (KeyError, TypeError) as e:
            raise DecodeError(
                f"Malformed response to new verification request: missing {e}",
                body=json.dumps(data),
            ) from e

        logger.debug("Created verification request %s for %s", request.id, domain)
        return request

    def get_verification_status(self, id: str) -> VerificationStatus:
        """Get the details and status of a verification request.

        The decoded response is returned as is; the server decides the
        status (PENDING, VERIFIED, EXPIRED or NOT_FOUND).
        """
        return self._transport.send("/verify", "GET", params={"id": id})

    def bulk_get_verification_status(
        self, ids: Iterable[str]
    ) -> list[VerificationStatus]:
        """Get the status of several verification requests in one call."""
        return self._transport.send(
            "/bulk-verify", "POST", {"ids": list(ids)}, json_body=True
        )
