import logging

from .encapsulated import calculate_encapsulated, parse_encapsulated
from .encoded import EncodedRequest
from .encoder import dump_request, encode_remaining_body, encode_request
from .exception import (
    IcapException,
    IcapProtocolError,
    InvalidMethodBodyCombinationError,
    InvalidMethodError,
    InvalidURLError,
    MalformedDumpError,
    SerializationFailureError,
)
from .framing import FramedSection, dechunk, frame_message, split_message
from .http import Headers, HttpRequest, HttpResponse, filter_hop_by_hop
from .request import IcapRequest

# Set up logging with NullHandler to avoid "No handler found" warnings
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "EncodedRequest",
    "FramedSection",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "IcapRequest",
    "calculate_encapsulated",
    "dechunk",
    "dump_request",
    "encode_remaining_body",
    "encode_request",
    "filter_hop_by_hop",
    "frame_message",
    "parse_encapsulated",
    "split_message",
    "IcapException",
    "IcapProtocolError",
    "InvalidMethodBodyCombinationError",
    "InvalidMethodError",
    "InvalidURLError",
    "MalformedDumpError",
    "SerializationFailureError",
]
