"""HTTP message value types embedded in ICAP requests.

``HttpRequest`` and ``HttpResponse`` are small value types with an explicit
deep ``clone()`` and a byte-exact ``dump()``. ``Headers`` is the header
container shared by both and by the ICAP request itself.
"""

import re
from collections import UserDict
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any, Iterable, Iterator, List, Optional, Tuple, Union
from urllib.parse import urlsplit

from ._protocol import IcapProtocol
from .exception import MalformedDumpError, SerializationFailureError

BodyType = Union[bytes, bytearray, memoryview, str]

_INVALID_NAME_CHARS = re.compile(r"[\x00-\x20:\x7f]")
_INVALID_VALUE_CHARS = re.compile(r"[\r\n\x00]")


def canonical_header_name(name: str) -> str:
    """Return the canonical form of a header name, e.g. ``content-type`` -> ``Content-Type``."""
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.strip().split("-"))


class Headers(UserDict):
    """Case-insensitive, multi-valued header container.

    Keys are stored in canonical form and map to a list of values. Insertion
    order is preserved, which keeps serialization deterministic.

    Example:
        >>> headers = Headers({"content-type": "text/plain"})
        >>> headers.add("X-Tag", "a")
        >>> headers.add("x-tag", "b")
        >>> headers["X-Tag"]
        ['a', 'b']
    """

    def __init__(self, headers: Any = None) -> None:
        super().__init__()
        if headers is None:
            return
        items = headers.items() if isinstance(headers, Mapping) else headers
        for name, value in items:
            if isinstance(value, (list, tuple)):
                for v in value:
                    self.add(name, v)
            else:
                self.add(name, value)

    def __getitem__(self, key: str) -> List[str]:
        return self.data[canonical_header_name(key)]

    def __setitem__(self, key: str, value: Union[str, Iterable[str]]) -> None:
        if isinstance(value, str):
            values = [value]
        else:
            values = [str(v) for v in value]
        self.data[canonical_header_name(key)] = values

    def __delitem__(self, key: str) -> None:
        del self.data[canonical_header_name(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and canonical_header_name(key) in self.data

    def add(self, name: str, value: str) -> None:
        """Append a value, keeping any existing values for the same name."""
        self.data.setdefault(canonical_header_name(name), []).append(str(value))

    def set(self, name: str, value: str) -> None:
        """Replace all values of ``name`` with a single value."""
        self[name] = str(value)

    def get_first(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the first value of ``name``, or ``default`` when absent."""
        values = self.data.get(canonical_header_name(name))
        return values[0] if values else default

    def get_all(self, name: str) -> List[str]:
        """Return a copy of every value of ``name``."""
        return list(self.data.get(canonical_header_name(name), []))

    def lines(self) -> Iterator[Tuple[str, str]]:
        """Iterate over ``(name, value)`` pairs, one per header line."""
        for name, values in self.data.items():
            for value in values:
                yield name, value

    def copy(self) -> "Headers":
        clone = Headers()
        for name, values in self.data.items():
            clone.data[name] = list(values)
        return clone


def filter_hop_by_hop(headers: Headers) -> None:
    """Remove hop-by-hop headers in place.

    Besides the fixed RFC 7230 set this drops every header named in the
    message's own ``Connection`` header.
    """
    for value in headers.get_all("Connection"):
        for token in value.split(","):
            token = token.strip()
            if token:
                headers.pop(token, None)
    for name in IcapProtocol.HOP_BY_HOP_HEADERS:
        headers.pop(name, None)


def serialize_headers(headers: Headers, encoding: str = "latin-1") -> bytes:
    """Serialize headers as ``Name: value`` lines, each terminated by CRLF.

    Raises:
        SerializationFailureError: If a name or value cannot be written on the wire.
    """
    lines = []
    for name, value in headers.lines():
        if not name or _INVALID_NAME_CHARS.search(name):
            raise SerializationFailureError(f"Invalid header name: {name!r}")
        if _INVALID_VALUE_CHARS.search(value):
            raise SerializationFailureError(f"Invalid value for header {name}: {value!r}")
        lines.append(f"{name}: {value}\r\n")
    try:
        return "".join(lines).encode(encoding)
    except UnicodeEncodeError as e:
        raise SerializationFailureError(f"Headers are not {encoding} encodable: {e}") from e


def set_request_target(dump: bytes, target: str) -> bytes:
    """Replace the request target in the request line of a dumped HTTP request.

    Raises:
        MalformedDumpError: If the dump has no request line of three elements.
        SerializationFailureError: If ``target`` is not ASCII.
    """
    line_end = dump.find(IcapProtocol.CRLF)
    if line_end < 0:
        raise MalformedDumpError(f"Failed to parse dumped HTTP request: {dump[:80]!r}")
    parts = dump[:line_end].split(b" ")
    if len(parts) != 3:
        raise MalformedDumpError(f"Incorrect HTTP request line: {dump[:line_end]!r}")
    try:
        encoded_target = target.encode("ascii")
    except UnicodeEncodeError as e:
        raise SerializationFailureError(f"Request target is not ASCII: {target!r}") from e
    return b" ".join((parts[0], encoded_target, parts[2])) + dump[line_end:]


def _start_line(*parts: str) -> bytes:
    for part in parts:
        if not part or any(c.isspace() for c in part):
            raise SerializationFailureError(f"Invalid start line element: {part!r}")
    try:
        return " ".join(parts).encode("ascii") + IcapProtocol.CRLF
    except UnicodeEncodeError as e:
        raise SerializationFailureError(f"Start line is not ASCII: {e}") from e


def _as_body(body: Optional[BodyType]) -> Optional[bytes]:
    if body is None:
        return None
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


class HttpRequest:
    """An HTTP request to be encapsulated in an ICAP message.

    Args:
        method: HTTP method (e.g. "GET")
        url: Absolute URL (``http://host/path?query``) or an origin-form path
        headers: Request headers
        body: Request body, ``None`` when the request carries no body
        version: HTTP version of the request line
        chunked: True if ``body`` is already in chunked transfer-coding
    """

    def __init__(
        self,
        method: str = "GET",
        url: str = "/",
        headers: Any = None,
        body: Optional[BodyType] = None,
        version: str = IcapProtocol.HTTP_VERSION,
        chunked: bool = False,
    ) -> None:
        self.method = method.upper()
        self.url = url
        self.headers = Headers(headers)
        self.body = _as_body(body)
        self.version = version
        self.chunked = chunked

    @property
    def host(self) -> str:
        """Return the host from the URL, falling back to the Host header."""
        return urlsplit(self.url).netloc or self.headers.get_first("Host", "")

    @property
    def target(self) -> str:
        """Return the origin-form request target (path and query)."""
        parts = urlsplit(self.url)
        target = parts.path or "/"
        if parts.query:
            target += "?" + parts.query
        return target

    @property
    def absolute_url(self) -> str:
        """Return the request URL in absolute form.

        Raises:
            SerializationFailureError: If neither the URL nor a Host header
                names the authority.
        """
        parts = urlsplit(self.url)
        if parts.scheme and parts.netloc:
            return self.url
        if not self.host:
            raise SerializationFailureError(f"No host for absolute form of {self.url!r}")
        return f"http://{self.host}{self.target}"

    def clone(self) -> "HttpRequest":
        """Return an independent deep copy of this request."""
        return HttpRequest(
            method=self.method,
            url=self.url,
            headers=self.headers.copy(),
            body=None if self.body is None else bytes(self.body),
            version=self.version,
            chunked=self.chunked,
        )

    def dump(self, absolute: bool = False) -> bytes:
        """Serialize the request: request line, headers, CRLF, body.

        A Host header is written first when the headers have none.

        Args:
            absolute: Write the absolute URL as the request target instead of
                the origin-form path

        Raises:
            SerializationFailureError: If the request cannot be written on the wire.
        """
        data = _start_line(self.method, self.target, self.version)
        if "Host" not in self.headers and self.host:
            data += serialize_headers(Headers({"Host": self.host}))
        data += serialize_headers(self.headers)
        data += IcapProtocol.CRLF
        if self.body:
            data += self.body
        if absolute:
            data = set_request_target(data, self.absolute_url)
        return data

    def __repr__(self) -> str:
        return f"HttpRequest(method='{self.method}', url='{self.url}')"


class HttpResponse:
    """An HTTP response to be encapsulated in an ICAP message.

    ``trailers`` and ``transfer_encoding`` are metadata about how the response
    was received; they are not serialized and are cleared on clone because
    the encoder recomputes framing. ``chunked`` marks a body that is held in
    chunked transfer-coding and must not be framed again.
    """

    def __init__(
        self,
        status_code: int = 200,
        reason: Optional[str] = None,
        headers: Any = None,
        body: Optional[BodyType] = None,
        version: str = IcapProtocol.HTTP_VERSION,
        trailers: Any = None,
        transfer_encoding: Optional[List[str]] = None,
        chunked: bool = False,
    ) -> None:
        self.status_code = status_code
        if reason is None:
            try:
                reason = HTTPStatus(status_code).phrase
            except ValueError:
                reason = ""
        self.reason = reason
        self.headers = Headers(headers)
        self.body = _as_body(body)
        self.version = version
        self.trailers = Headers(trailers) if trailers is not None else None
        self.transfer_encoding = list(transfer_encoding) if transfer_encoding else None
        self.chunked = chunked

    def clone(self) -> "HttpResponse":
        """Return an independent deep copy without trailers or transfer-encoding metadata."""
        return HttpResponse(
            status_code=self.status_code,
            reason=self.reason,
            headers=self.headers.copy(),
            body=None if self.body is None else bytes(self.body),
            version=self.version,
            chunked=self.chunked,
        )

    def dump(self) -> bytes:
        """Serialize the response: status line, headers, CRLF, body.

        Raises:
            SerializationFailureError: If the response cannot be written on the wire.
        """
        status_line = f"{self.version} {self.status_code} {self.reason}".rstrip()
        if _INVALID_VALUE_CHARS.search(status_line):
            raise SerializationFailureError(f"Invalid status line: {status_line!r}")
        try:
            data = status_line.encode("latin-1") + IcapProtocol.CRLF
        except UnicodeEncodeError as e:
            raise SerializationFailureError(f"Status line is not latin-1 encodable: {e}") from e
        data += serialize_headers(self.headers)
        data += IcapProtocol.CRLF
        if self.body:
            data += self.body
        return data

    def __repr__(self) -> str:
        return f"HttpResponse(status={self.status_code}, reason='{self.reason}')"
