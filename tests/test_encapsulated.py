"""
Unit tests for Encapsulated header computation and parsing.
"""

import pytest

from icapwire import FramedSection, calculate_encapsulated, parse_encapsulated
from icapwire.encapsulated import format_encapsulated

REQ_HEADER = b"GET /index.html HTTP/1.1\r\nHost: example.com\r\n\r\n"
RES_HEADER = b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n\r\n"
BODY = b"3\r\nabc\r\n0\r\n\r\n"


def test_options_has_null_body_at_zero():
    """Test no sections yields null-body=0."""
    assert calculate_encapsulated() == "null-body=0"


def test_request_with_body():
    """Test REQMOD with a body declares req-body after the header block."""
    section = FramedSection(REQ_HEADER, BODY)

    assert calculate_encapsulated(section) == f"req-hdr=0, req-body={len(REQ_HEADER)}"


def test_request_without_body():
    """Test REQMOD without a body declares null-body."""
    section = FramedSection(REQ_HEADER)

    assert calculate_encapsulated(section) == f"req-hdr=0, null-body={len(REQ_HEADER)}"


def test_request_and_response_with_body():
    """Test RESPMOD offsets account for the request header block."""
    request = FramedSection(REQ_HEADER)
    response = FramedSection(RES_HEADER, BODY)

    expected = (
        f"req-hdr=0, res-hdr={len(REQ_HEADER)}, "
        f"res-body={len(REQ_HEADER) + len(RES_HEADER)}"
    )
    assert calculate_encapsulated(request, response) == expected


def test_response_only():
    """Test RESPMOD without a request starts the response at offset 0."""
    response = FramedSection(RES_HEADER, BODY)

    assert calculate_encapsulated(None, response) == f"res-hdr=0, res-body={len(RES_HEADER)}"


def test_response_without_body():
    """Test a response without body ends with null-body."""
    request = FramedSection(REQ_HEADER)
    response = FramedSection(RES_HEADER)

    expected = (
        f"req-hdr=0, res-hdr={len(REQ_HEADER)}, "
        f"null-body={len(REQ_HEADER) + len(RES_HEADER)}"
    )
    assert calculate_encapsulated(request, response) == expected


def test_request_body_before_response_is_refused():
    """Test a request body cannot precede a response section."""
    with pytest.raises(ValueError):
        calculate_encapsulated(FramedSection(REQ_HEADER, BODY), FramedSection(RES_HEADER, BODY))


@pytest.mark.parametrize("with_request", [True, False])
@pytest.mark.parametrize("response_body", [BODY, b""])
def test_offsets_land_on_section_boundaries(with_request, response_body):
    """Test slicing the concatenated sections by the offsets recovers each section."""
    request = FramedSection(REQ_HEADER) if with_request else None
    response = FramedSection(RES_HEADER, response_body)
    stream = (request.data if request else b"") + response.data

    entries = dict(parse_encapsulated(calculate_encapsulated(request, response)))

    if with_request:
        assert stream[entries["req-hdr"] : entries["res-hdr"]] == REQ_HEADER
    body_name = "res-body" if response_body else "null-body"
    assert stream[entries["res-hdr"] : entries[body_name]] == RES_HEADER
    assert stream[entries[body_name] :] == response_body


def test_format_encapsulated():
    """Test entries are joined with comma and space."""
    assert format_encapsulated([("req-hdr", 0), ("null-body", 42)]) == "req-hdr=0, null-body=42"


def test_parse_encapsulated():
    """Test parsing returns ordered name/offset pairs."""
    assert parse_encapsulated("req-hdr=0, res-hdr=45, res-body=100") == [
        ("req-hdr", 0),
        ("res-hdr", 45),
        ("res-body", 100),
    ]
    assert parse_encapsulated("null-body=0") == [("null-body", 0)]


@pytest.mark.parametrize(
    "value",
    ["", "req-hdr", "bogus=0", "req-hdr=x", "req-hdr=10, req-body=5"],
)
def test_parse_encapsulated_invalid(value):
    """Test malformed values raise ValueError."""
    with pytest.raises(ValueError):
        parse_encapsulated(value)
