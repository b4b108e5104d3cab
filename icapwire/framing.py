"""Body framing for encapsulated HTTP messages.

Turns the text dump of an HTTP message (start line, headers, CRLFCRLF, body)
into the bytes embedded in an ICAP request. In order:

1. preview truncation, when preview is enabled;
2. chunked transfer-coding, unless the body is already chunked;
3. trailing separator normalization (exactly one CRLFCRLF at the end);
4. the ``ieof`` extension on the terminating chunk when the whole body fit
   in the preview.
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

from ._protocol import IcapProtocol
from .exception import MalformedDumpError

logger = logging.getLogger(__name__)

CRLF = IcapProtocol.CRLF
DOUBLE_CRLF = IcapProtocol.DOUBLE_CRLF


class MessageParts(NamedTuple):
    """Result of splitting a message dump at its header/body boundary.

    ``header_block`` includes the CRLFCRLF separator. When ``found`` is False
    the whole input is in ``header_block``.
    """

    header_block: bytes
    body_block: bytes
    found: bool


@dataclass(frozen=True)
class FramedSection:
    """One encapsulated HTTP section, ready for the wire."""

    header_block: bytes
    body_block: bytes = b""
    preview_size: Optional[int] = None
    body_fits_in_preview: bool = False
    remaining_body: bytes = b""

    @property
    def data(self) -> bytes:
        return self.header_block + self.body_block

    @property
    def has_body(self) -> bool:
        return bool(self.body_block)

    def __len__(self) -> int:
        return len(self.header_block) + len(self.body_block)


def split_message(dump: bytes) -> MessageParts:
    """Split a dump at the first CRLFCRLF."""
    index = dump.find(DOUBLE_CRLF)
    if index < 0:
        return MessageParts(dump, b"", False)
    end = index + len(DOUBLE_CRLF)
    return MessageParts(dump[:end], dump[end:], True)


def declares_chunked(header_block: bytes) -> bool:
    """Return True if the header block declares ``Transfer-Encoding: chunked``."""
    for line in header_block.split(CRLF)[1:]:
        name, sep, value = line.partition(b":")
        if not sep or name.strip().lower() != b"transfer-encoding":
            continue
        codings = [c.strip().lower() for c in value.split(b",")]
        if codings and codings[-1] == b"chunked":
            return True
    return False


def _parse_chunks(body: bytes) -> Tuple[bytes, int]:
    """Decode a chunked stream.

    Returns:
        The decoded payload and the offset just past the final CRLF.

    Raises:
        MalformedDumpError: If the framing is invalid or truncated.
    """
    payload = []
    pos = 0
    while True:
        line_end = body.find(CRLF, pos)
        if line_end < 0:
            raise MalformedDumpError("Chunked body ends inside a chunk size line")
        size_line = body[pos:line_end]
        try:
            size = int(size_line.split(b";", 1)[0].strip(), 16)
        except ValueError:
            raise MalformedDumpError(f"Invalid chunk size: {size_line!r}") from None
        if size < 0:
            raise MalformedDumpError(f"Invalid chunk size: {size_line!r}")
        pos = line_end + len(CRLF)

        if size == 0:
            # Skip trailer fields up to the empty line.
            while True:
                line_end = body.find(CRLF, pos)
                if line_end < 0:
                    raise MalformedDumpError("Chunked body is missing its final CRLF")
                if line_end == pos:
                    return b"".join(payload), line_end + len(CRLF)
                pos = line_end + len(CRLF)

        data_end = pos + size
        if body[data_end : data_end + len(CRLF)] != CRLF:
            raise MalformedDumpError(f"Chunk of {size} bytes is truncated or unterminated")
        payload.append(body[pos:data_end])
        pos = data_end + len(CRLF)


def dechunk(body: bytes) -> bytes:
    """Return the payload of a chunked body, ignoring extensions and trailers.

    Raises:
        MalformedDumpError: If ``body`` is not a valid chunked stream.
    """
    payload, _ = _parse_chunks(body)
    return payload


def is_chunked(header_block: bytes, body_block: bytes) -> bool:
    """Return True if the body is already in chunked transfer-coding.

    Either the header block declares it, or the body parses completely as a
    chunked stream (only stray CRLFs may follow the final chunk).
    """
    if declares_chunked(header_block):
        return True
    if not body_block:
        return False
    try:
        _, end = _parse_chunks(body_block)
    except MalformedDumpError:
        return False
    return body_block[end:].strip(CRLF) == b""


def encode_chunks(payload: bytes, chunk_length: int = IcapProtocol.DEFAULT_CHUNK_LENGTH) -> bytes:
    """Encode ``payload`` as chunks of at most ``chunk_length`` bytes, without terminator."""
    if chunk_length <= 0:
        raise ValueError(f"chunk_length must be positive, got {chunk_length}")
    chunks = []
    for start in range(0, len(payload), chunk_length):
        piece = payload[start : start + chunk_length]
        chunks.append(b"%x" % len(piece) + CRLF + piece + CRLF)
    return b"".join(chunks)


def chunk_terminator(ieof: bool = False) -> bytes:
    """Return the zero-length terminating chunk, optionally with the ``ieof`` extension."""
    if ieof:
        return b"0; " + IcapProtocol.IEOF_EXTENSION + DOUBLE_CRLF
    return b"0" + DOUBLE_CRLF


def normalize_trailing_separator(block: bytes) -> bytes:
    """Make a non-empty block end with exactly one CRLFCRLF."""
    if not block:
        return block
    while block.endswith(CRLF):
        block = block[: -len(CRLF)]
    return block + DOUBLE_CRLF


def frame_message(
    dump: bytes,
    include_body: bool = True,
    preview: Optional[int] = None,
    chunk_length: Optional[int] = None,
    chunked: Optional[bool] = None,
) -> FramedSection:
    """Frame an HTTP message dump for encapsulation.

    Args:
        dump: Serialized HTTP message
        include_body: When False only the header block is kept (RESPMOD request)
        preview: Preview size in bytes, ``None`` when preview is disabled
        chunk_length: Maximum bytes per chunk (default: ``DEFAULT_CHUNK_LENGTH``)
        chunked: Whether the body is already chunked. ``None`` detects it
            from the dump with ``is_chunked``.

    Returns:
        FramedSection with the header block, the framed body and preview bookkeeping

    Raises:
        MalformedDumpError: If the dump has no header/body separator, or a
            chunked body must be re-framed and is invalid.
    """
    parts = split_message(dump)
    if not parts.found:
        raise MalformedDumpError(f"No header/body separator in HTTP message: {dump[:80]!r}")

    if not include_body:
        return FramedSection(header_block=parts.header_block)

    chunk_length = chunk_length or IcapProtocol.DEFAULT_CHUNK_LENGTH
    body = parts.body_block
    if chunked is None:
        already_chunked = is_chunked(parts.header_block, body)
    else:
        already_chunked = chunked

    if preview is None:
        if already_chunked:
            logger.debug("Body already chunked, passing through")
            body_block = body
        else:
            body_block = encode_chunks(body, chunk_length) + chunk_terminator()
        return FramedSection(
            header_block=parts.header_block,
            body_block=normalize_trailing_separator(body_block),
        )

    # A previewed body is always re-framed from its payload so the
    # terminating chunk can carry ieof.
    payload = dechunk(body) if already_chunked else body
    fits = len(payload) <= preview
    remaining = b"" if fits else payload[preview:]
    payload = payload[:preview]
    logger.debug(
        f"Preview: {len(payload)} bytes, remainder: {len(remaining)} bytes, "
        f"complete in preview: {fits}"
    )

    body_block = encode_chunks(payload, chunk_length) + chunk_terminator(ieof=fits)
    return FramedSection(
        header_block=parts.header_block,
        body_block=normalize_trailing_separator(body_block),
        preview_size=len(payload),
        body_fits_in_preview=fits,
        remaining_body=remaining,
    )
