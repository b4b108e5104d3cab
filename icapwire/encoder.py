"""ICAP request encoder.

Assembles the ICAP request line, the ICAP headers and the encapsulated HTTP
request and response sections into the bytes sent to an ICAP server.
"""

import logging
from typing import Any, Optional

from ._protocol import IcapProtocol
from .encapsulated import calculate_encapsulated
from .encoded import EncodedRequest
from .exception import SerializationFailureError
from .framing import FramedSection, chunk_terminator, encode_chunks, frame_message
from .http import Headers, serialize_headers, set_request_target
from .request import IcapRequest

logger = logging.getLogger(__name__)


def encode_request(request: IcapRequest, set_absolute_url: bool = False) -> EncodedRequest:
    """
    Encode an ICAP request to its wire representation.

    Args:
        request: The request to encode
        set_absolute_url: Rewrite the embedded HTTP request line to carry the
            absolute URL instead of the origin-form path

    Returns:
        EncodedRequest with the bytes and the preview bookkeeping

    Raises:
        MalformedDumpError: If an HTTP message dump cannot be split into
            header and body.
        SerializationFailureError: If an HTTP message cannot be dumped.
    """
    logger.debug(f"Encoding {request.method} request for {request.url}")
    request_section: Optional[FramedSection] = None
    response_section: Optional[FramedSection] = None
    previewed: Optional[FramedSection] = None

    if request.http_request is not None:
        dump = _dump_message(request.http_request)
        if set_absolute_url:
            dump = set_request_target(dump, request.http_request.absolute_url)

        if request.method == IcapProtocol.METHOD_REQMOD:
            request_section = frame_message(
                dump,
                include_body=request.http_request.body is not None,
                preview=request.preview,
                chunk_length=request.chunk_length,
                chunked=request.http_request.chunked,
            )
            previewed = request_section
        else:
            # RESPMOD sends only the request headers (RFC 3507 section 4.9.1).
            request_section = frame_message(dump, include_body=False)
        logger.debug(f"HTTP request section: {len(request_section)} bytes")

    if request.http_response is not None:
        dump = _dump_message(request.http_response)
        response_section = frame_message(
            dump,
            include_body=request.http_response.body is not None,
            preview=request.preview,
            chunk_length=request.chunk_length,
            chunked=request.http_response.chunked,
        )
        previewed = response_section
        logger.debug(f"HTTP response section: {len(response_section)} bytes")

    preview_size = previewed.preview_size if previewed is not None else None

    encapsulated = request.headers.get_first(IcapProtocol.ENCAPSULATED_HEADER)
    if not encapsulated:
        encapsulated = calculate_encapsulated(request_section, response_section)

    header_block = _build_header_block(request, encapsulated, preview_size)

    data = header_block
    if request_section is not None:
        data += request_section.data
    if response_section is not None:
        data += response_section.data

    logger.debug(f"Encoded {request.method} request: {len(data)} bytes")
    return EncodedRequest(
        data,
        header_length=len(header_block),
        encapsulated=encapsulated,
        preview_enabled=request.preview_enabled,
        preview_size=preview_size,
        body_fits_in_preview=previewed is not None and previewed.body_fits_in_preview,
        remaining_body=previewed.remaining_body if previewed is not None else b"",
        chunk_length=request.chunk_length,
    )


def dump_request(request: IcapRequest, set_absolute_url: bool = False) -> bytes:
    """Return the given request in its ICAP/1.0 wire representation."""
    return encode_request(request, set_absolute_url=set_absolute_url).data


def encode_remaining_body(encoded: EncodedRequest, chunk_length: Optional[int] = None) -> bytes:
    """
    Frame the body bytes held back by a preview.

    These are the bytes sent after the server answers a preview with
    100 Continue: the remainder as chunks, then the terminating chunk.
    ``chunk_length`` defaults to the one the request was encoded with.
    """
    chunk_length = chunk_length or encoded.chunk_length
    return encode_chunks(encoded.remaining_body, chunk_length) + chunk_terminator()


def _build_header_block(request: IcapRequest, encapsulated: str, preview_size: Optional[int]) -> bytes:
    """Build the ICAP request line and headers, ending with a blank line.

    Order: Host (when not supplied), caller headers, Preview, Encapsulated.
    """
    headers = Headers()
    if IcapProtocol.HOST_HEADER not in request.headers:
        headers.set(IcapProtocol.HOST_HEADER, request.netloc)
    for name, value in request.headers.lines():
        if name == IcapProtocol.ENCAPSULATED_HEADER:
            continue
        if name == IcapProtocol.PREVIEW_HEADER and preview_size is not None:
            continue
        headers.add(name, value)
    if preview_size is not None:
        headers.set(IcapProtocol.PREVIEW_HEADER, str(preview_size))
    headers.set(IcapProtocol.ENCAPSULATED_HEADER, encapsulated)

    request_line = f"{request.method} {request.url} {IcapProtocol.ICAP_VERSION}"
    try:
        data = request_line.encode("utf-8") + IcapProtocol.CRLF
    except UnicodeEncodeError as e:
        raise SerializationFailureError(f"Invalid ICAP request line: {e}") from e
    data += serialize_headers(headers, encoding="utf-8")
    data += IcapProtocol.CRLF
    return data


def _dump_message(message: Any) -> bytes:
    """Serialize an HTTP message, surfacing collaborator failures."""
    try:
        return bytes(message.dump())
    except (ValueError, UnicodeError, OSError) as e:
        raise SerializationFailureError(f"Failed to dump {type(message).__name__}: {e}") from e
