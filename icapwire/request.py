import logging
from typing import Any, Optional
from urllib.parse import SplitResult, urlsplit

from ._protocol import IcapProtocol
from .exception import InvalidMethodBodyCombinationError, InvalidMethodError, InvalidURLError
from .http import Headers, HttpRequest, HttpResponse, filter_hop_by_hop

logger = logging.getLogger(__name__)


class IcapRequest(IcapProtocol):
    """
    Represents an ICAP request before it is encoded.

    The embedded HTTP messages are deep clones of the caller's objects with
    hop-by-hop headers removed, so encoding never touches caller state.
    ``method`` and ``url`` are fixed at construction.

    Example:
        >>> http_request = HttpRequest("POST", "http://example.com/upload", body=b"data")
        >>> request = IcapRequest("reqmod", "icap://icap.example.com/avscan", http_request)
        >>> request.method
        'REQMOD'
    """

    def __init__(
        self,
        method: str,
        url: str,
        http_request: Optional[HttpRequest] = None,
        http_response: Optional[HttpResponse] = None,
        headers: Any = None,
        chunk_length: Optional[int] = None,
        preview: Optional[int] = None,
        context: Any = None,
    ) -> None:
        """
        Initialize ICAP request.

        Args:
            method: ICAP method, case-insensitive (OPTIONS, REQMOD or RESPMOD)
            url: ICAP service URL (e.g., "icap://localhost:1344/avscan")
            http_request: HTTP request to encapsulate
            http_response: HTTP response to encapsulate
            headers: Additional ICAP headers
            chunk_length: Maximum bytes per chunk when framing bodies
                (default: DEFAULT_CHUNK_LENGTH)
            preview: Preview size in bytes, None disables preview
            context: Cancellation or deadline token for the transport layer.
                It is carried, never consulted, by the encoder.

        Raises:
            InvalidMethodError: If the method is not registered.
            InvalidURLError: If the URL does not parse as an icap:// URL with a host.
            InvalidMethodBodyCombinationError: If the embedded messages do not
                match the method.
        """
        method = method.upper()
        if method not in self.METHODS:
            raise InvalidMethodError(f"ICAP method not registered: {method}")
        self._method: str = method
        self._url: SplitResult = self._parse_url(url)

        self.headers: Headers = Headers(headers)
        self.http_request: Optional[HttpRequest] = None
        self.http_response: Optional[HttpResponse] = None
        if http_request is not None:
            self.http_request = http_request.clone()
            filter_hop_by_hop(self.http_request.headers)
        if http_response is not None:
            self.http_response = http_response.clone()
            filter_hop_by_hop(self.http_response.headers)

        self._validate_messages()

        if http_request is not None and self.PROXY_AUTHORIZATION_HEADER in http_request.headers:
            self.headers[self.PROXY_AUTHORIZATION_HEADER] = http_request.headers.get_all(
                self.PROXY_AUTHORIZATION_HEADER
            )
        if http_response is not None and self.PROXY_AUTHENTICATE_HEADER in http_response.headers:
            self.headers[self.PROXY_AUTHENTICATE_HEADER] = http_response.headers.get_all(
                self.PROXY_AUTHENTICATE_HEADER
            )

        self._chunk_length: Optional[int] = None
        self._preview: Optional[int] = None
        self.chunk_length = chunk_length
        self.preview = preview
        self.context = context
        logger.debug(f"Created {self}")

    def _parse_url(self, url: str) -> SplitResult:
        try:
            parsed = urlsplit(url)
            # Accessing the port validates it.
            parsed.port
        except (ValueError, TypeError, AttributeError) as e:
            raise InvalidURLError(f"Invalid ICAP URL {url!r}: {e}") from e
        if parsed.scheme.lower() != self.SCHEME:
            raise InvalidURLError(f"Invalid ICAP URL scheme {parsed.scheme!r} in {url!r}")
        if not parsed.hostname:
            raise InvalidURLError(f"ICAP URL has no host: {url!r}")
        return parsed

    def _validate_messages(self) -> None:
        if self._method == self.METHOD_REQMOD:
            if self.http_request is None:
                raise InvalidMethodBodyCombinationError("REQMOD requires an HTTP request")
            if self.http_response is not None:
                raise InvalidMethodBodyCombinationError("REQMOD cannot carry an HTTP response")
        elif self._method == self.METHOD_RESPMOD:
            if self.http_response is None:
                raise InvalidMethodBodyCombinationError("RESPMOD requires an HTTP response")
        elif self.http_request is not None or self.http_response is not None:
            raise InvalidMethodBodyCombinationError("OPTIONS cannot carry HTTP messages")

    @property
    def method(self) -> str:
        """Return the upper-case ICAP method."""
        return self._method

    @property
    def url(self) -> str:
        """Return the ICAP service URL."""
        return self._url.geturl()

    @property
    def netloc(self) -> str:
        """Return the host[:port] part of the URL, as sent in the Host header."""
        return self._url.netloc

    @property
    def host(self) -> str:
        return self._url.hostname or ""

    @property
    def port(self) -> int:
        return self._url.port or self.DEFAULT_PORT

    @property
    def service(self) -> str:
        """Return the service name from the URL path (e.g., "avscan")."""
        return self._url.path.strip("/")

    @property
    def chunk_length(self) -> int:
        """Return the chunk length used to frame bodies."""
        return self._chunk_length or self.DEFAULT_CHUNK_LENGTH

    @chunk_length.setter
    def chunk_length(self, length: Optional[int]) -> None:
        if length is not None and (not isinstance(length, int) or length < 0):
            raise ValueError(f"Chunk length must be a non-negative int, got {length!r}")
        self._chunk_length = length

    @property
    def preview(self) -> Optional[int]:
        """Return the preview size in bytes, or None when preview is disabled."""
        return self._preview

    @preview.setter
    def preview(self, size: Optional[int]) -> None:
        if size is not None and (not isinstance(size, int) or size < 0):
            raise ValueError(f"Preview size must be a non-negative int, got {size!r}")
        self._preview = size

    @property
    def preview_enabled(self) -> bool:
        return self._preview is not None

    @property
    def preview_bytes(self) -> int:
        return self._preview or 0

    def __repr__(self) -> str:
        return f"IcapRequest(method='{self.method}', url='{self.url}')"
