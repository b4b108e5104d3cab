"""
Pytest plugin entry point for icapwire.
"""

from pytest_icapwire import (
    http_request_builder,
    http_response_builder,
    icap_request,
    pytest_configure,
    sample_http_get,
    sample_http_post,
    sample_http_response,
)

__all__ = [
    "pytest_configure",
    "http_request_builder",
    "http_response_builder",
    "icap_request",
    "sample_http_get",
    "sample_http_post",
    "sample_http_response",
]
