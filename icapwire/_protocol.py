"""Shared ICAP protocol constants.

This module contains the wire-level constants shared by the request model,
the body framer and the encoder.
"""

from typing import FrozenSet, Tuple


class IcapProtocol:
    """Base class with shared ICAP protocol constants."""

    DEFAULT_PORT: int = 1344
    SCHEME: str = "icap"
    CRLF: bytes = b"\r\n"
    DOUBLE_CRLF: bytes = b"\r\n\r\n"
    ICAP_VERSION: str = "ICAP/1.0"
    HTTP_VERSION: str = "HTTP/1.1"

    # Upper bound of a single chunk when a body is re-framed. Read-only,
    # requests may override it per instance with ``chunk_length``.
    DEFAULT_CHUNK_LENGTH: int = 4096

    METHOD_OPTIONS: str = "OPTIONS"
    METHOD_REQMOD: str = "REQMOD"
    METHOD_RESPMOD: str = "RESPMOD"
    METHODS: FrozenSet[str] = frozenset({METHOD_OPTIONS, METHOD_REQMOD, METHOD_RESPMOD})

    HOST_HEADER: str = "Host"
    ENCAPSULATED_HEADER: str = "Encapsulated"
    PREVIEW_HEADER: str = "Preview"
    PROXY_AUTHORIZATION_HEADER: str = "Proxy-Authorization"
    PROXY_AUTHENTICATE_HEADER: str = "Proxy-Authenticate"

    # RFC 7230 section 6.1, plus the proxy authentication pair which belongs to
    # the ICAP exchange rather than the encapsulated hop.
    HOP_BY_HOP_HEADERS: Tuple[str, ...] = (
        "Connection",
        "Keep-Alive",
        "Proxy-Authenticate",
        "Proxy-Authorization",
        "Te",
        "Trailer",
        "Transfer-Encoding",
        "Upgrade",
    )

    IEOF_EXTENSION: bytes = b"ieof"
