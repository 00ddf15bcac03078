"""
Command-line interface for the event batcher.

Sends single events to the batch ingestion API, mostly useful for checking a
write key and host from a shell.
"""

import argparse
import asyncio
import json
import logging
import sys

import structlog

from event_batcher import __version__
from event_batcher.config import SdkConfig, set_config
from event_batcher.events.types import IdentifyData, PageData, ScreenData, TrackData
from event_batcher.sdk import EventSdk
from event_batcher.transport.interface import TransportError


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def _json_object(value: str) -> dict:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e}")
    if not isinstance(parsed, dict):
        raise argparse.ArgumentTypeError("expected a JSON object")
    return parsed


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--write-key",
        help="Workspace write key (default: EVENT_BATCHER_WRITE_KEY)",
    )
    parser.add_argument(
        "--host",
        help="Ingestion API host (default: EVENT_BATCHER_HOST or the hosted API)",
    )
    identity = parser.add_mutually_exclusive_group(required=True)
    identity.add_argument("--user-id", help="Known user id")
    identity.add_argument("--anonymous-id", help="Anonymous id")
    parser.add_argument(
        "--message-id",
        help="Explicit message id (generated if omitted)",
    )
    parser.add_argument(
        "--context",
        type=_json_object,
        help="Context as a JSON object",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="event-batcher",
        description="Send events to the batch ingestion API",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Event to send")

    identify_parser = subparsers.add_parser("identify", help="Send an identify event")
    _add_common_arguments(identify_parser)
    identify_parser.add_argument(
        "--traits",
        type=_json_object,
        help="Traits as a JSON object",
    )

    track_parser = subparsers.add_parser("track", help="Send a track event")
    _add_common_arguments(track_parser)
    track_parser.add_argument(
        "--event",
        required=True,
        help="Event name",
    )
    track_parser.add_argument(
        "--properties",
        type=_json_object,
        help="Properties as a JSON object",
    )

    for command in ("page", "screen"):
        view_parser = subparsers.add_parser(command, help=f"Send a {command} event")
        _add_common_arguments(view_parser)
        view_parser.add_argument(
            "--name",
            help=f"{command.capitalize()} name",
        )
        view_parser.add_argument(
            "--properties",
            type=_json_object,
            help="Properties as a JSON object",
        )

    return parser


def build_config(args: argparse.Namespace) -> SdkConfig:
    """Create configuration from arguments, falling back to the environment."""
    overrides = {
        "write_key": args.write_key,
        "host": args.host,
        "log_level": args.log_level,
        "log_json": args.log_json,
    }
    return SdkConfig(**{key: value for key, value in overrides.items() if value is not None})


def build_event(args: argparse.Namespace):
    """Create the event payload for the chosen command."""
    common = {
        "user_id": args.user_id,
        "anonymous_id": args.anonymous_id,
        "message_id": args.message_id,
        "context": args.context,
    }

    if args.command == "identify":
        return IdentifyData(traits=args.traits, **common)
    if args.command == "track":
        return TrackData(event=args.event, properties=args.properties, **common)
    if args.command == "page":
        return PageData(name=args.name, properties=args.properties, **common)
    return ScreenData(name=args.name, properties=args.properties, **common)


async def send_event(args: argparse.Namespace) -> str:
    """Send one event and wait for delivery. Returns the message id."""
    config = build_config(args)
    set_config(config)

    event = build_event(args)

    async with EventSdk(config) as sdk:
        send = getattr(sdk, args.command)
        item = send(event)

    return item.message_id


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.log_level, args.log_json)

    try:
        message_id = asyncio.run(send_event(args))
    except (TransportError, ValueError) as e:
        print(f"Failed to send {args.command} event: {e}", file=sys.stderr)
        sys.exit(1)

    print(message_id)


if __name__ == "__main__":
    main()
