import socket
import sys

from clipboard import open_clipboard
from errors import ClipboardError, MirrorError, TransportError
from protocol import DEFAULT_ADDRESS, DEFAULT_PORT, ENCODING, Operation, decode_request


def log(message):
    # stdout is reserved for clipboard data
    stream = sys.stderr
    encoding = getattr(stream, "encoding", None) or "utf-8"
    print(message.encode(encoding, "replace").decode(encoding), file=stream, flush=True)


def read_request(conn):
    """Read until the peer shuts down its write side."""
    try:
        with conn.makefile("rb") as stream:
            return stream.read()
    except OSError as exc:
        raise TransportError(f"IO error: {exc}") from exc


def dispatch(clipboard, request):
    """Run a decoded request against the clipboard, return the response body."""
    if request.operation == Operation.READ:
        (slot,) = request.target.slots
        return clipboard.get(slot).encode(ENCODING)

    # No rollback: a failing slot leaves the earlier ones written.
    for slot in request.target.slots:
        try:
            clipboard.set(slot, request.text)
        except ClipboardError as exc:
            raise ClipboardError(f"Clipboard error on {slot.value}: {exc}") from exc
    return b""


def handle_connection(conn, clipboard):
    request = decode_request(read_request(conn))
    log(f"[📋] {request.describe()}")

    body = dispatch(clipboard, request)
    if body:
        try:
            conn.sendall(body)
        except OSError as exc:
            raise TransportError(f"IO error: {exc}") from exc


def serve(listener, clipboard, limit=None):
    """Handle connections one after another; ``limit`` stops after that many."""
    handled = 0
    while limit is None or handled < limit:
        conn, addr = listener.accept()
        with conn:
            try:
                log(f"🔗 Received connection from {addr[0]}:{addr[1]}")
                handle_connection(conn, clipboard)
            except (MirrorError, OSError) as e:
                log(f"[⚠️] Error handling request: {type(e).__name__}: {e}")
        handled += 1


def bind(address=DEFAULT_ADDRESS, port=DEFAULT_PORT):
    family = socket.AF_INET6 if ":" in str(address) else socket.AF_INET
    return socket.create_server((str(address), port), family=family)


def run_server(address=DEFAULT_ADDRESS, port=DEFAULT_PORT, backend="system"):
    try:
        clipboard = open_clipboard(backend)
    except ClipboardError as e:
        sys.exit(f"❌ Error loading clipboard: {e}")
    try:
        listener = bind(address, port)
    except OSError as e:
        sys.exit(f"❌ Error binding to {address}:{port}: {e}")

    with listener:
        log(f"📡 Server listening on {address}:{port} ({clipboard.name} clipboard)")
        serve(listener, clipboard)


if __name__ == "__main__":
    try:
        run_server()
    except KeyboardInterrupt:
        log("\n🛑 Stopped clipboard server.")
