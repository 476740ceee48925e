from __future__ import annotations

import argparse
import logging

from resplink.connection import Connection
from resplink.protocol.reply import CommandError, ValueDecoder
from resplink.transport.base import CONNECT_TIMEOUT, KeepaliveConfig


def _run(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    decoder = ValueDecoder(encoding=args.encoding) if args.encoding else ValueDecoder()
    keepalive = None
    if args.keepalive is not None:
        keepalive = KeepaliveConfig(time=args.keepalive, interval=args.keepalive, probes=3)

    command = args.command or ["PING"]
    with Connection.connect(
        args.url,
        connect_timeout=args.connect_timeout,
        timeout=args.timeout,
        decoder=decoder,
        keepalive=keepalive,
    ) as conn:
        reply = conn.call(*command)
        if keepalive is not None:
            print({"keepalive": conn.get_keepalive()})
    print({"command": command, "reply": repr(reply)})
    return 1 if isinstance(reply, CommandError) else 0


def main() -> int:
    p = argparse.ArgumentParser(description="Send one command to a RESP server and print the reply.")
    p.add_argument(
        "command",
        nargs="*",
        help="Command and arguments (default: PING)",
    )
    p.add_argument(
        "--url",
        type=str,
        default="redis://127.0.0.1:6379",
        help="redis://host:port or unix:///path/to/socket",
    )
    p.add_argument(
        "--connect-timeout",
        type=float,
        default=CONNECT_TIMEOUT,
        help="Connect timeout (seconds)",
    )
    p.add_argument("--timeout", type=float, default=5.0, help="Read timeout (seconds, 0 = none)")
    p.add_argument("--encoding", type=str, default=None, help="Decode bulk replies as text")
    p.add_argument("--keepalive", type=int, default=None, help="Enable TCP keepalive (seconds)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = p.parse_args()
    return _run(args)


if __name__ == "__main__":
    raise SystemExit(main())
