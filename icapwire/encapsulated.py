"""Encapsulated header computation.

Offsets are relative to the first byte after the ICAP header block.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from .framing import FramedSection

logger = logging.getLogger(__name__)

SECTION_NAMES = ("req-hdr", "res-hdr", "req-body", "res-body", "opt-body", "null-body")


def format_encapsulated(entries: Sequence[Tuple[str, int]]) -> str:
    """Format ``(name, offset)`` pairs as an Encapsulated header value."""
    return ", ".join(f"{name}={offset}" for name, offset in entries)


def parse_encapsulated(value: str) -> List[Tuple[str, int]]:
    """Parse an Encapsulated header value into ``(name, offset)`` pairs.

    Raises:
        ValueError: If an entry is malformed or offsets decrease.
    """
    entries = []
    last_offset = 0
    for token in value.split(","):
        name, sep, offset = token.strip().partition("=")
        if not sep or name not in SECTION_NAMES:
            raise ValueError(f"Invalid Encapsulated entry: {token.strip()!r}")
        offset_value = int(offset)
        if offset_value < last_offset:
            raise ValueError(f"Encapsulated offsets must not decrease: {value!r}")
        entries.append((name, offset_value))
        last_offset = offset_value
    return entries


def calculate_encapsulated(
    request_section: Optional[FramedSection] = None,
    response_section: Optional[FramedSection] = None,
) -> str:
    """Compute the Encapsulated header value for the given sections.

    Args:
        request_section: Framed HTTP request section, if any
        response_section: Framed HTTP response section, if any

    Returns:
        Header value such as ``req-hdr=0, res-hdr=137, res-body=296``

    Raises:
        ValueError: If a request body would precede a response section; a
            message carries at most one body, and it comes last.
    """
    if request_section is not None and response_section is not None:
        if request_section.has_body:
            raise ValueError("A request body cannot precede an encapsulated response")

    entries: List[Tuple[str, int]] = []
    offset = 0

    if request_section is not None:
        entries.append(("req-hdr", 0))
        if response_section is None:
            body_name = "req-body" if request_section.has_body else "null-body"
            entries.append((body_name, len(request_section.header_block)))
        offset = len(request_section)

    if response_section is not None:
        entries.append(("res-hdr", offset))
        body_name = "res-body" if response_section.has_body else "null-body"
        entries.append((body_name, offset + len(response_section.header_block)))

    if not entries:
        entries.append(("null-body", 0))

    value = format_encapsulated(entries)
    logger.debug(f"Computed Encapsulated: {value}")
    return value
