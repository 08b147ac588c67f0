"""
simple-odata command line

Runs single entry writes against the configured OData service. With
--dry-run nothing is sent; the wire commands are printed instead.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional
import httpx
import structlog

from .auth import AuthenticationError
from .config import load_dotenv_if_exists, get_settings, ConfigurationError
from .di_container import DIContainer
from .factories import RecordingTransport
from .schema import UnresolvableObjectError
from .transport import BatchRequestError

logger = structlog.get_logger(__name__)


def configure_logging(log_level: str) -> None:
    """Configure structured logging to stderr"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        stream=sys.stderr,
        format="%(message)s",
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _json_arg(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="simple-odata", description="OData entry writes")
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: warning)",
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Print wire commands instead of sending them"
    )
    parser.add_argument(
        "--validate-config", action="store_true", help="Validate configuration and exit"
    )

    commands = parser.add_subparsers(dest="command")

    insert = commands.add_parser("insert", help="Insert an entry")
    insert.add_argument("collection")
    insert.add_argument("data", type=_json_arg, help="Entry data as JSON object")
    insert.add_argument("--no-result", action="store_true", help="Do not return the created entry")

    for name, help_text in (("update", "Update entries"), ("delete", "Delete entries")):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("collection")
        target = sub.add_mutually_exclusive_group(required=True)
        target.add_argument("--key", type=_json_arg, help="Entry key as JSON object")
        target.add_argument("--where", help="Query text selecting the entries")
        if name == "update":
            sub.add_argument("data", type=_json_arg, help="Entry data as JSON object")

    link = commands.add_parser("link", help="Link an entry to another entry")
    link.add_argument("collection")
    link.add_argument("key", type=_json_arg)
    link.add_argument("association")
    link.add_argument("target_key", type=_json_arg)

    unlink = commands.add_parser("unlink", help="Remove an entry's link")
    unlink.add_argument("collection")
    unlink.add_argument("key", type=_json_arg)
    unlink.add_argument("association")

    get = commands.add_parser("get", help="Get an entry by positional key values")
    get.add_argument("collection")
    get.add_argument("key_parts", nargs="+", type=_json_arg)

    return parser


async def run_command(args: argparse.Namespace, container: DIContainer) -> Any:
    """Run one parsed subcommand against the container's client"""
    client = await container.get_client()

    if args.command == "insert":
        return await client.insert_entry(args.collection, args.data, not args.no_result)
    if args.command == "update":
        if args.key is not None:
            return await client.update_entry(args.collection, args.key, args.data)
        return await client.update_entries(args.collection, args.where, args.data)
    if args.command == "delete":
        if args.key is not None:
            return await client.delete_entry(args.collection, args.key)
        return await client.delete_entries(args.collection, args.where)
    if args.command == "link":
        return await client.link_entry(args.collection, args.key, args.association, args.target_key)
    if args.command == "unlink":
        return await client.unlink_entry(args.collection, args.key, args.association)
    if args.command == "get":
        return await client.get_entry(args.collection, *args.key_parts)
    raise ValueError(f"Unknown command: {args.command}")


async def dry_run(args: argparse.Namespace, container: DIContainer) -> List[Dict[str, Any]]:
    """Run the subcommand on the recording transport and return the recorded commands"""
    await run_command(args, container)
    transport = await container.get_transport()
    if not isinstance(transport, RecordingTransport):
        raise ConfigurationError("Dry run requires the recording transport")
    return [command.to_dict() for command in transport.commands]


async def validate_configuration(container: DIContainer) -> bool:
    """Check credentials and schema loading"""
    auth_ok = await container.get_auth_provider().validate_credentials()
    schema_service = await container.get_schema_service()
    await schema_service.get_schema()
    print(json.dumps(container.get_container_info(), indent=2, default=str))
    return auth_ok


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with command line argument parsing"""
    load_dotenv_if_exists()

    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if not args.validate_config and not args.command:
        parser.print_help()
        return 2

    try:
        settings = get_settings()
        if args.dry_run:
            settings = settings.model_copy(update={"transport": "recording"})
        container = DIContainer(settings)

        if args.validate_config:
            return 0 if asyncio.run(validate_configuration(container)) else 1

        if args.dry_run:
            result: Any = asyncio.run(dry_run(args, container))
        else:
            result = asyncio.run(run_command(args, container))
    except (ValueError, UnresolvableObjectError, AuthenticationError,
            BatchRequestError, httpx.HTTPError) as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1

    if result is not None:
        print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
