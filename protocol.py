"""Wire format for clipmirror requests.

A request is ``[operation, selection, *payload]``:

    byte 0   operation   0 = read, 1 = write
    byte 1   selection   decoded with the enumeration picked by byte 0
    byte 2.. payload     UTF-8 text, write requests only

There is no length prefix and no terminator. The sender half-closes its
side of the connection once the payload is out, so the server reads to EOF.

Responses carry no header at all: a read is answered with the raw UTF-8
text of the slot, a write with nothing. The client has to know what it
asked for.
"""
import enum
from dataclasses import dataclass
from typing import Optional

from errors import EmptyFrame, InvalidText, UnknownOperation, UnknownSelection

DEFAULT_ADDRESS = "127.0.0.1"
DEFAULT_PORT = 3660

ENCODING = "utf-8"
HEADER_SIZE = 2


class Slot(enum.Enum):
    """A clipboard slot on the server host."""

    PRIMARY = "primary"
    CLIPBOARD = "clipboard"
    SECONDARY = "secondary"


class Operation(enum.IntEnum):
    READ = 0
    WRITE = 1


class ReadTarget(enum.IntEnum):
    PRIMARY = 0
    CLIPBOARD = 1
    SECONDARY = 2

    @property
    def slots(self):
        return (Slot[self.name],)


class WriteTarget(enum.IntEnum):
    # Shifted by one against ReadTarget: 0 is "every slot".
    ALL = 0
    PRIMARY = 1
    CLIPBOARD = 2
    SECONDARY = 3

    @property
    def slots(self):
        if self is WriteTarget.ALL:
            return (Slot.PRIMARY, Slot.CLIPBOARD, Slot.SECONDARY)
        return (Slot[self.name],)


TARGETS = {
    Operation.READ: ReadTarget,
    Operation.WRITE: WriteTarget,
}


@dataclass(frozen=True)
class Request:
    operation: Operation
    target: enum.IntEnum
    text: Optional[str] = None

    def encode(self):
        payload = b"" if self.text is None else self.text.encode(ENCODING)
        return encode_request(self.operation, self.target, payload)

    def describe(self):
        line = f"{self.operation.name} {self.target.name.lower()}"
        if self.text is not None:
            line += f" ({len(self.text)} chars)"
        return line


def parse_target(operation, name):
    """Look up a target by its CLI name ("clipboard", "all", ...)."""
    operation = Operation(operation)
    targets = TARGETS[operation]
    try:
        return targets[name.upper()]
    except KeyError:
        choices = ", ".join(t.name.lower() for t in targets)
        raise ValueError(f"unknown {operation.name.lower()} target {name!r} (choose from {choices})") from None


def encode_header(operation, target):
    operation = Operation(operation)
    if not isinstance(target, TARGETS[operation]):
        raise ValueError(f"{target!r} is not a {operation.name.lower()} target")
    return bytes((operation, target))


def encode_request(operation, target, payload=b""):
    """Build a complete request frame."""
    header = encode_header(operation, target)
    if payload and operation == Operation.READ:
        raise ValueError("read requests carry no payload")
    return header + bytes(payload)


def decode_request(data):
    """Parse a complete request frame.

    The operation byte is resolved first and picks the enumeration the
    selection byte is read with, so the same byte can mean different slots
    (or be invalid) depending on the operation.

    Raises:
        EmptyFrame: fewer than two bytes.
        UnknownOperation: byte 0 is not a known operation.
        UnknownSelection: byte 1 is out of range for that operation.
        InvalidText: a write payload is not valid UTF-8.
    """
    if len(data) < HEADER_SIZE:
        raise EmptyFrame(len(data))

    op_byte, sel_byte = data[0], data[1]
    try:
        operation = Operation(op_byte)
    except ValueError:
        raise UnknownOperation(op_byte) from None

    try:
        target = TARGETS[operation](sel_byte)
    except ValueError:
        raise UnknownSelection(sel_byte, operation) from None

    if operation == Operation.READ:
        return Request(operation, target)

    try:
        text = bytes(data[HEADER_SIZE:]).decode(ENCODING)
    except UnicodeDecodeError as exc:
        raise InvalidText(f"Invalid UTF-8: {exc}") from exc
    return Request(operation, target, text)
