class TinyTwampError(Exception):
    """Base class for all tinytwamp errors."""


class SetupError(TinyTwampError):
    """Bind, address resolution or process spawn failed."""


class TransportError(TinyTwampError):
    """Sending or receiving a datagram failed mid-session."""


class ReceiveTimeout(TransportError):
    """No reply arrived within the configured timeout."""


class FormatError(TinyTwampError):
    """Payload does not carry the expected label and timestamp."""
