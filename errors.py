"""Exceptions shared by the clipmirror server, client and codec."""


class MirrorError(Exception):
    """Base exception for all clipmirror errors."""


class TransportError(MirrorError):
    """Raised when reading from or writing to a connection fails."""


class ClipboardError(MirrorError):
    """Raised when the clipboard cannot be read, written or acquired."""


class ProtocolError(MirrorError):
    """Raised when a request frame is malformed."""


class EmptyFrame(ProtocolError):
    """Raised when a frame is too short to hold operation and selection."""

    def __init__(self, length):
        super().__init__(f"Invalid empty request ({length} bytes)")
        self.length = length


class UnknownOperation(ProtocolError):
    """Raised when byte 0 is not a known operation."""

    def __init__(self, value):
        super().__init__(f"Invalid request type: {value}")
        self.value = value


class UnknownSelection(ProtocolError):
    """Raised when byte 1 is outside the operation's selection range."""

    def __init__(self, value, operation=None):
        super().__init__(f"Invalid clipboard type: {value}")
        self.value = value
        self.operation = operation


class InvalidText(ProtocolError):
    """Raised when a write payload is not valid UTF-8."""
