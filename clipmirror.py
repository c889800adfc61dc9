import argparse
import ipaddress
import sys

from client import send_get, send_set
from errors import MirrorError
from protocol import DEFAULT_ADDRESS, DEFAULT_PORT, Operation, ReadTarget, WriteTarget, parse_target
from server import log, run_server


def write_target(name):
    try:
        return parse_target(Operation.WRITE, name)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def read_target(name):
    try:
        return parse_target(Operation.READ, name)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser():
    parser = argparse.ArgumentParser(
        prog="clipmirror",
        description="clipmirror - mirror a host's clipboard over TCP",
    )
    parser.add_argument("-a", "--address", type=ipaddress.ip_address, default=ipaddress.ip_address(DEFAULT_ADDRESS),
                        help=f"address to connect to (or listen on), default {DEFAULT_ADDRESS}")
    parser.add_argument("-p", "--port", type=int, default=DEFAULT_PORT,
                        help=f"port to connect to (or listen on), default {DEFAULT_PORT}")
    commands = parser.add_subparsers(dest="command", required=True)

    server = commands.add_parser("server", help="start a server")
    server.add_argument("--backend", choices=["system", "memory"], default="system",
                        help="clipboard to serve; 'memory' keeps slots in the server process. "
                             "Without xclip/xsel/wl-clipboard only the clipboard slot works, "
                             "so 'set all' fails at primary")

    set_cmd = commands.add_parser("set", help="read stdin and set it to the clipboard")
    set_cmd.add_argument("target", nargs="?", default="clipboard",
                         type=write_target,
                         help="one of: " + ", ".join(t.name.lower() for t in WriteTarget))

    get_cmd = commands.add_parser("get", help="send the contents of the clipboard to stdout")
    get_cmd.add_argument("target", nargs="?", default="clipboard",
                         type=read_target,
                         help="one of: " + ", ".join(t.name.lower() for t in ReadTarget))
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        if args.command == "server":
            run_server(args.address, args.port, args.backend)
        elif args.command == "set":
            send_set(args.address, args.port, args.target)
        else:
            send_get(args.address, args.port, args.target)
    except (MirrorError, OSError) as e:
        log(f"[❌] {type(e).__name__}: {e}")
        return 1
    except KeyboardInterrupt:
        log("\n🛑 Stopped clipmirror.")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
