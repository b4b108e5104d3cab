"""
Pytest plugin for testing code that builds ICAP requests with icapwire.

This plugin provides fixtures, builders and a marker for constructing HTTP
messages and ICAP requests without repeating boilerplate in every test.

Fixture Categories:
    **Builder Fixtures**:
        - `http_request_builder` - Fresh HttpRequestBuilder
        - `http_response_builder` - Fresh HttpResponseBuilder

    **Message Fixtures** (pre-built HTTP messages):
        - `sample_http_get` - GET request without body
        - `sample_http_post` - POST request with body b"hello world"
        - `sample_http_response` - 200 OK response with a short text body

    **Marker-Based Fixtures**:
        - `icap_request` - IcapRequest configured via @pytest.mark.icap_request

Markers:
    @pytest.mark.icap_request(method, url, preview, chunk_length, headers)
        Configure the `icap_request` fixture declaratively. REQMOD wraps
        `sample_http_post`; RESPMOD wraps `sample_http_get` and
        `sample_http_response`; OPTIONS carries no HTTP messages.

Example - Encode a REQMOD request:
    >>> def test_reqmod(icap_request):
    ...     encoded = encode_request(icap_request)
    ...     assert encoded.data.startswith(b"REQMOD ")

Example - RESPMOD with preview:
    >>> @pytest.mark.icap_request(method="RESPMOD", preview=4)
    ... def test_preview(icap_request):
    ...     encoded = encode_request(icap_request)
    ...     assert encoded.preview_size == 4

See Also:
    - HttpRequestBuilder: Fluent builder for HTTP requests
    - HttpResponseBuilder: Fluent builder for HTTP responses
"""

from __future__ import annotations

from typing import Any

import pytest

from icapwire import HttpRequest, HttpResponse, IcapRequest

from .builder import HttpRequestBuilder, HttpResponseBuilder

__all__ = [
    # Plugin hooks
    "pytest_configure",
    # Builder fixtures
    "http_request_builder",
    "http_response_builder",
    # Message fixtures
    "sample_http_get",
    "sample_http_post",
    "sample_http_response",
    # Marker-based fixtures
    "icap_request",
    # Builders
    "HttpRequestBuilder",
    "HttpResponseBuilder",
]


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "icap_request(method, url, preview, chunk_length, headers): "
        "configure the icap_request fixture",
    )


@pytest.fixture
def http_request_builder() -> HttpRequestBuilder:
    """Factory for building custom HttpRequest objects."""
    return HttpRequestBuilder()


@pytest.fixture
def http_response_builder() -> HttpResponseBuilder:
    """Factory for building custom HttpResponse objects."""
    return HttpResponseBuilder()


@pytest.fixture
def sample_http_get() -> HttpRequest:
    """Pre-built GET request without body."""
    return (
        HttpRequestBuilder()
        .get("http://example.com/index.html")
        .with_header("Accept", "text/html")
        .build()
    )


@pytest.fixture
def sample_http_post() -> HttpRequest:
    """Pre-built POST request with body b"hello world"."""
    return (
        HttpRequestBuilder()
        .post("http://example.com/upload")
        .with_header("Content-Type", "text/plain")
        .with_header("Content-Length", "11")
        .with_body(b"hello world")
        .build()
    )


@pytest.fixture
def sample_http_response() -> HttpResponse:
    """Pre-built 200 OK response with a short text body."""
    return HttpResponseBuilder().ok(b"This is clean test content.").build()


@pytest.fixture
def icap_request(request, sample_http_get, sample_http_post, sample_http_response) -> IcapRequest:
    """
    Provide an IcapRequest for testing.

    Supported marker kwargs:
        - method: ICAP method (default: 'REQMOD')
        - url: ICAP service URL (default: 'icap://localhost:1344/avscan')
        - preview: Preview size in bytes (default: None)
        - chunk_length: Chunk length (default: None)
        - headers: Additional ICAP headers (default: None)
    """
    marker = request.node.get_closest_marker("icap_request")

    # Default configuration
    config: dict[str, Any] = {
        "method": "REQMOD",
        "url": "icap://localhost:1344/avscan",
        "preview": None,
        "chunk_length": None,
        "headers": None,
    }

    # Override with marker kwargs if provided
    if marker and marker.kwargs:
        config.update(marker.kwargs)

    method = config["method"].upper()
    http_request = None
    http_response = None
    if method == "REQMOD":
        http_request = sample_http_post
    elif method == "RESPMOD":
        http_request = sample_http_get
        http_response = sample_http_response

    return IcapRequest(
        method,
        config["url"],
        http_request=http_request,
        http_response=http_response,
        headers=config["headers"],
        chunk_length=config["chunk_length"],
        preview=config["preview"],
    )
