import argparse
import asyncio
import logging
import os

from drawcore.models import TableConfig

from .server import TableServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Draw poker table server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", 3000)))
    parser.add_argument("--seats", type=int, default=5)
    parser.add_argument("--starting-chips", type=int, default=200)
    parser.add_argument("--sb", type=int, default=1)
    parser.add_argument("--bb", type=int, default=2)
    parser.add_argument("--next-hand-delay", type=int, default=5_000, help="Pause between hands in milliseconds")
    parser.add_argument("--room", default="iowa-room", help="Room used when a client omits roomId")
    parser.add_argument("--log-level", default="INFO")
    return parser


def config_from_args(args: argparse.Namespace) -> TableConfig:
    return TableConfig(
        seats=args.seats,
        starting_chips=args.starting_chips,
        sb=args.sb,
        bb=args.bb,
        next_hand_delay_ms=args.next_hand_delay,
        default_room=args.room,
    )


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    server = TableServer(config_from_args(args))
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
