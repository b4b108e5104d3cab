"""Fluent builders for creating HTTP messages for testing."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from icapwire import HttpRequest, HttpResponse


class HttpRequestBuilder:
    """
    Fluent builder for creating HttpRequest objects.

    Example:
        # Plain GET
        request = HttpRequestBuilder().get("http://example.com/").build()

        # Upload with a body
        request = (
            HttpRequestBuilder()
            .post("http://example.com/upload")
            .with_header("Content-Type", "text/plain")
            .with_body(b"hello world")
            .build()
        )
    """

    def __init__(self) -> None:
        self._method: str = "GET"
        self._url: str = "http://example.com/"
        self._headers: list[tuple[str, str]] = []
        self._body: bytes | None = None

    def get(self, url: str) -> HttpRequestBuilder:
        """Configure as a GET request without body."""
        self._method = "GET"
        self._url = url
        self._body = None
        return self

    def post(self, url: str) -> HttpRequestBuilder:
        """Configure as a POST request."""
        self._method = "POST"
        self._url = url
        return self

    def with_method(self, method: str) -> HttpRequestBuilder:
        """Set a custom HTTP method."""
        self._method = method
        return self

    def with_url(self, url: str) -> HttpRequestBuilder:
        """Set the request URL."""
        self._url = url
        return self

    def with_header(self, key: str, value: str) -> HttpRequestBuilder:
        """Add a header; repeated keys keep every value."""
        self._headers.append((key, value))
        return self

    def with_headers(self, headers: dict[str, str]) -> HttpRequestBuilder:
        """Add multiple headers."""
        self._headers.extend(headers.items())
        return self

    def with_proxy_authorization(self, credentials: str = "Basic dXNlcjpwYXNz") -> HttpRequestBuilder:
        """Add a Proxy-Authorization header."""
        self._headers.append(("Proxy-Authorization", credentials))
        return self

    def with_body(self, body: bytes) -> HttpRequestBuilder:
        """Set the request body."""
        self._body = body
        return self

    def build(self) -> HttpRequest:
        """Build the HttpRequest object."""
        from icapwire import HttpRequest

        return HttpRequest(
            method=self._method,
            url=self._url,
            headers=list(self._headers),
            body=self._body,
        )


class HttpResponseBuilder:
    """
    Fluent builder for creating HttpResponse objects.

    Example:
        # 200 OK with a body
        response = HttpResponseBuilder().ok(b"content").build()

        # Proxy authentication challenge
        response = HttpResponseBuilder().proxy_auth_required().build()
    """

    def __init__(self) -> None:
        self._status_code: int = 200
        self._reason: str | None = None
        self._headers: list[tuple[str, str]] = []
        self._body: bytes | None = None

    def ok(self, body: bytes = b"", content_type: str = "text/plain") -> HttpResponseBuilder:
        """Configure as 200 OK carrying ``body``."""
        self._status_code = 200
        self._reason = "OK"
        self._headers.append(("Content-Type", content_type))
        self._headers.append(("Content-Length", str(len(body))))
        self._body = body
        return self

    def no_content(self) -> HttpResponseBuilder:
        """Configure as 204 No Content without body."""
        self._status_code = 204
        self._reason = "No Content"
        self._body = None
        return self

    def proxy_auth_required(self, challenge: str = 'Basic realm="proxy"') -> HttpResponseBuilder:
        """Configure as 407 with a Proxy-Authenticate challenge."""
        self._status_code = 407
        self._reason = "Proxy Authentication Required"
        self._headers.append(("Proxy-Authenticate", challenge))
        return self

    def with_status(self, code: int, reason: str | None = None) -> HttpResponseBuilder:
        """Set custom status code and reason."""
        self._status_code = code
        self._reason = reason
        return self

    def with_header(self, key: str, value: str) -> HttpResponseBuilder:
        """Add a header; repeated keys keep every value."""
        self._headers.append((key, value))
        return self

    def with_headers(self, headers: dict[str, str]) -> HttpResponseBuilder:
        """Add multiple headers."""
        self._headers.extend(headers.items())
        return self

    def with_body(self, body: bytes) -> HttpResponseBuilder:
        """Set the response body."""
        self._body = body
        return self

    def build(self) -> HttpResponse:
        """Build the HttpResponse object."""
        from icapwire import HttpResponse

        return HttpResponse(
            status_code=self._status_code,
            reason=self._reason,
            headers=list(self._headers),
            body=self._body,
        )
