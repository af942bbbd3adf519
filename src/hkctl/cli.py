"""Command-line client for the HomeKit automation service."""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import httpx

from . import __version__
from .commands import CommandHandler
from .commands.registry import build_registry
from .config import DEFAULT_PORT, OUTPUT_FORMATS, ClientConfig
from .connection import HomeKitClient
from .errors import HkctlError, InternalInvariantError, RemoteError, UsageError
from .filters import EnabledFilter, RoomOperation
from .invocation import GlobalOptions, ParsedInvocation
from .logging import configure_logging, get_logger

PROG = "hkctl"

logger = get_logger("hkctl.cli")


@dataclass(frozen=True)
class OptionSpec:
    """One argument of a command, in ``add_argument`` terms."""

    flags: Tuple[str, ...]
    options: Tuple[Tuple[str, Any], ...] = ()

    def add_to(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(*self.flags, **dict(self.options))


@dataclass(frozen=True)
class CommandSpec:
    name: str
    help: str
    arguments: Tuple[OptionSpec, ...] = ()


def _option(*flags: str, **options: Any) -> OptionSpec:
    return OptionSpec(flags=flags, options=tuple(options.items()))


def _timestamp(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid timestamp: {value!r} (expected ISO 8601, e.g. 2024-05-01T07:30)"
        ) from None


def _port(value: str) -> int:
    try:
        port = int(value, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}") from None
    if port < 1 or port > 65535:
        raise argparse.ArgumentTypeError(f"port must be between 1 and 65535; got {port}")
    return port


_NAME = _option("--name", metavar="NAME OR UUID", help="Name pattern filter")
_ROOM = _option("--room", metavar="NAME OR UUID", help="Room name pattern filter")
_ZONE = _option("--zone", metavar="NAME OR UUID", help="Zone name pattern filter")

# The whole command grammar. Parsers are built from it on demand and never shared.
COMMANDS: Tuple[CommandSpec, ...] = (
    CommandSpec("homes", "Lists homes"),
    CommandSpec("rooms", "Lists rooms", (_NAME,)),
    CommandSpec("zones", "Lists zones", (_ROOM, _NAME)),
    CommandSpec("accessories", "Lists accessories", (_ROOM, _NAME, _ZONE)),
    CommandSpec(
        "services",
        "Lists services",
        (
            _NAME,
            _option(
                "-t",
                "--type",
                action="append",
                metavar="TYPE",
                help="Service type filter (repeatable)",
            ),
        ),
    ),
    CommandSpec("servicegroups", "Lists service groups", (_NAME,)),
    CommandSpec("actionsets", "Lists action sets", (_NAME,)),
    CommandSpec(
        "triggers",
        "Lists triggers",
        (
            _option(
                "-e",
                "--enabled",
                choices=[choice.value for choice in EnabledFilter],
                help="Filter on enabled/disabled triggers",
            ),
            _option(
                "-a",
                "--after",
                type=_timestamp,
                metavar="TIME",
                help="Triggered after specified time",
            ),
            _option(
                "-b",
                "--before",
                type=_timestamp,
                metavar="TIME",
                help="Triggered before specified time",
            ),
            _NAME,
        ),
    ),
    CommandSpec(
        "room",
        "Manipulate rooms",
        (
            _option(
                "operation",
                choices=[choice.value for choice in RoomOperation],
                help="Operation to be performed",
            ),
            _option("name", metavar="NAME OR UUID", help="Name"),
            _option(
                "accessories",
                nargs="*",
                metavar="ACCESSORY",
                help=(
                    "List of accessories to add/remove to/from a room. "
                    "If empty, the room itself will be added or deleted"
                ),
            ),
        ),
    ),
)

_GLOBAL_DESTS = ("verbosity", "port", "home", "output", "command")


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting on bad input."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message, self)


def build_parser(commands: Sequence[CommandSpec] = COMMANDS) -> argparse.ArgumentParser:
    parser = _Parser(prog=PROG, description="Command line porcelain for HomeKit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        dest="verbosity",
        action="count",
        default=0,
        help="Sets verbosity (repeat for more detail)",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=_port,
        metavar="PORT",
        help=f"Local port to connect to (default: {DEFAULT_PORT})",
    )
    parser.add_argument(
        "--output",
        choices=list(OUTPUT_FORMATS),
        help="Output format (env: HKCTL_OUTPUT). Defaults to 'table'.",
    )
    home = _option(
        "--home",
        metavar="NAME OR UUID",
        help="Specify a home. Defaults to the primary home",
    )
    home.add_to(parser)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    for spec in commands:
        sub = subparsers.add_parser(spec.name, help=spec.help, description=spec.help)
        for argument in spec.arguments:
            argument.add_to(sub)
        # Accepted after the command too; SUPPRESS keeps a value given before it.
        sub.add_argument(*home.flags, default=argparse.SUPPRESS, **dict(home.options))
    return parser


def parse_invocation(argv: Optional[Iterable[str]] = None) -> ParsedInvocation:
    """Parse argv into a :class:`ParsedInvocation`, raising :class:`UsageError`."""

    parser = build_parser()
    args = vars(parser.parse_args(args=None if argv is None else list(argv)))
    command_arguments = {key: value for key, value in args.items() if key not in _GLOBAL_DESTS}
    return ParsedInvocation(
        global_options=GlobalOptions(
            verbosity=args["verbosity"],
            port=args["port"],
            home=args["home"],
            output=args["output"],
        ),
        command_name=args["command"],
        command_arguments=command_arguments,
    )


async def dispatch(
    invocation: ParsedInvocation,
    client: Optional[HomeKitClient],
    registry: Mapping[str, CommandHandler],
) -> int:
    """Run the invoked command's handler and map its outcome to an exit status."""

    if invocation.command_name is None:
        build_parser().print_help(sys.stdout)
        return 0

    handler = registry.get(invocation.command_name)
    if handler is None:
        raise InternalInvariantError(
            f"Command {invocation.command_name!r} is in the grammar but has no handler"
        )
    if client is None:
        raise InternalInvariantError("A command was dispatched without a connection")

    try:
        await handler.execute(invocation, client)
    except RemoteError as exc:
        logger.debug("Remote error", extra={"code": exc.code, "http_status": exc.http_status})
        sys.stderr.write(f"Error returned by server: {exc}\n")
        return 1
    except HkctlError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    except httpx.TransportError as exc:
        sys.stderr.write(f"Error: request to {client.endpoint} failed: {exc}\n")
        return 1
    return 0


async def run(
    argv: Optional[Iterable[str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Parse, connect and dispatch a single command; return the exit status."""

    try:
        invocation = parse_invocation(argv)
    except UsageError as exc:
        if exc.parser is not None:
            exc.parser.print_usage(sys.stderr)
        sys.stderr.write(f"{PROG}: error: {exc}\n")
        return 2

    try:
        config = ClientConfig.from_sources(
            overrides=_config_overrides(invocation.global_options), environ=environ
        )
    except HkctlError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    configure_logging(config)
    registry = build_registry(config)

    if invocation.command_name is None:
        return await dispatch(invocation, None, registry)

    logger.info("Connecting", extra={"endpoint": config.endpoint, "command": invocation.command_name})
    try:
        client = await HomeKitClient.create(config.host, config.port, transport=transport)
    except HkctlError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    async with client:
        return await dispatch(invocation, client, registry)


def _config_overrides(options: GlobalOptions) -> Dict[str, Any]:
    return {
        "port": options.port,
        "output": options.output,
        "verbosity": options.verbosity,
    }


def main(argv: Optional[List[str]] = None) -> None:
    sys.exit(asyncio.run(run(argv)))


if __name__ == "__main__":
    main()
