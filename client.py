import shutil
import socket
import sys

from errors import TransportError
from protocol import DEFAULT_ADDRESS, DEFAULT_PORT, Operation, ReadTarget, WriteTarget, encode_header

CHUNK_SIZE = 64 * 1024


def connect(address, port):
    try:
        return socket.create_connection((str(address), port))
    except OSError as exc:
        raise TransportError(f"Cannot connect to {address}:{port}: {exc}") from exc


def send_set(address=DEFAULT_ADDRESS, port=DEFAULT_PORT, target=WriteTarget.CLIPBOARD, source=None):
    """Stream ``source`` (stdin by default) into a clipboard slot on the server.

    The server sends nothing back for a write, so this returns as soon as
    the payload is out and the write side is shut down.
    """
    if source is None:
        source = sys.stdin.buffer
    header = encode_header(Operation.WRITE, target)

    with connect(address, port) as sock:
        try:
            with sock.makefile("wb") as stream:
                stream.write(header)
                shutil.copyfileobj(source, stream, CHUNK_SIZE)
                stream.flush()
            sock.shutdown(socket.SHUT_WR)
        except OSError as exc:
            raise TransportError(f"IO error: {exc}") from exc


def send_get(address=DEFAULT_ADDRESS, port=DEFAULT_PORT, target=ReadTarget.CLIPBOARD, sink=None):
    """Copy a clipboard slot from the server into ``sink`` (stdout by default)."""
    if sink is None:
        sink = sys.stdout.buffer
    header = encode_header(Operation.READ, target)

    with connect(address, port) as sock:
        try:
            sock.sendall(header)
            sock.shutdown(socket.SHUT_WR)
            with sock.makefile("rb") as stream:
                shutil.copyfileobj(stream, sink, CHUNK_SIZE)
            sink.flush()
        except OSError as exc:
            raise TransportError(f"IO error: {exc}") from exc
