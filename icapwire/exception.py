class IcapException(Exception):
    """Base exception for ICAP errors."""

    pass


class InvalidURLError(IcapException):
    """Raised when the ICAP target URL cannot be parsed or is not an icap:// URL."""

    pass


class InvalidMethodError(IcapException):
    """Raised when the ICAP method is not one of OPTIONS, REQMOD or RESPMOD."""

    pass


class InvalidMethodBodyCombinationError(IcapException):
    """Raised when the embedded HTTP messages are not allowed for the ICAP method."""

    pass


class IcapProtocolError(IcapException):
    """Raised when an ICAP message cannot be laid out on the wire."""

    pass


class MalformedDumpError(IcapProtocolError):
    """Raised when a serialized HTTP message has no discoverable header/body boundary."""

    pass


class SerializationFailureError(IcapProtocolError):
    """Raised when an embedded HTTP message cannot be serialized."""

    pass
