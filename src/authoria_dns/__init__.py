"""
AuthoriaDNS - client library for AuthoriaDNS domain verification.

Supports:
- Instance handshake and URL normalization
- New DNS TXT verification requests
- Single and bulk verification status queries
"""

from authoria_dns.client import (
    AuthoriaDNS,
    ClientConfig,
    ConfigurationError,
    ServerError,
    VerificationRequest,
    VerificationState,
    VerificationStatus,
)
from authoria_dns.transport import (
    AuthoriaDNSError,
    DecodeError,
    Transport,
    TransportError,
)

__version__ = "1.0.0"

__all__ = [
    "AuthoriaDNS",
    "ClientConfig",
    "VerificationRequest",
    "VerificationState",
    "VerificationStatus",
    "Transport",
    "AuthoriaDNSError",
    "ConfigurationError",
    "TransportError",
    "DecodeError",
    "ServerError",
]
