from typing import Dict, Optional

from ._protocol import IcapProtocol
from .encapsulated import parse_encapsulated


class EncodedRequest:
    """
    Represents an encoded ICAP request.

    Holds the wire bytes together with the preview bookkeeping produced while
    encoding, so the request itself is never mutated.
    """

    def __init__(
        self,
        data: bytes,
        header_length: int,
        encapsulated: str,
        preview_enabled: bool = False,
        preview_size: Optional[int] = None,
        body_fits_in_preview: bool = False,
        remaining_body: bytes = b"",
        chunk_length: int = IcapProtocol.DEFAULT_CHUNK_LENGTH,
    ):
        """
        Initialize encoded request.

        Args:
            data: Complete ICAP request bytes
            header_length: Length of the ICAP header block, including its blank line
            encapsulated: Value of the Encapsulated header that was sent
            preview_enabled: Whether the request was encoded in preview mode
            preview_size: Bytes of body sent in the preview, None if nothing was previewed
            body_fits_in_preview: True if the previewed body was sent whole (ieof)
            remaining_body: Body bytes beyond the preview window
            chunk_length: Chunk length the bodies were framed with
        """
        self.data = data
        self.header_length = header_length
        self.encapsulated = encapsulated
        self.preview_enabled = preview_enabled
        self.preview_size = preview_size
        self.body_fits_in_preview = body_fits_in_preview
        self.remaining_body = remaining_body
        self.chunk_length = chunk_length

    @property
    def icap_header(self) -> bytes:
        """Return the ICAP request line and headers, including the blank line."""
        return self.data[: self.header_length]

    @property
    def encapsulated_data(self) -> bytes:
        """Return everything after the ICAP header block."""
        return self.data[self.header_length :]

    @property
    def is_preview(self) -> bool:
        """Check if a body was sent as a preview."""
        return self.preview_size is not None

    @property
    def needs_continue(self) -> bool:
        """Check if the server must ask for the rest of the body with 100 Continue."""
        return self.is_preview and not self.body_fits_in_preview

    def sections(self) -> Dict[str, bytes]:
        """
        Slice the encapsulated data by the offsets of the Encapsulated header.

        Returns:
            Mapping of section name (e.g. "req-hdr", "res-body") to its bytes.
            A null-body section maps to b"".
        """
        entries = parse_encapsulated(self.encapsulated)
        body = self.encapsulated_data
        sections = {}
        for index, (name, offset) in enumerate(entries):
            if name == "null-body":
                sections[name] = b""
                continue
            end = entries[index + 1][1] if index + 1 < len(entries) else len(body)
            sections[name] = body[offset:end]
        return sections

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self):
        return f"EncodedRequest(size={len(self.data)}, encapsulated='{self.encapsulated}')"
