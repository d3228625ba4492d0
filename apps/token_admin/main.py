"""Token store administration entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from passwordless_tokenstore.application.ports.token_store_backend_port import (
    TokenStoreOperationalError,
)
from passwordless_tokenstore.application.services.token_store import TokenStore
from passwordless_tokenstore.config.settings import load_settings
from passwordless_tokenstore.domain.token_inputs import TokenStoreContractError
from passwordless_tokenstore.infrastructure.logging import configure_logging
from passwordless_tokenstore.infrastructure.token_store_factory import build_token_store

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for administrative token store commands."""

    parser = argparse.ArgumentParser(description="Passwordless token store administration")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("count", help="print the number of stored token records")
    commands.add_parser("clear", help="remove every token record")
    commands.add_parser("purge-expired", help="remove token records past their expiry")

    invalidate_user = commands.add_parser(
        "invalidate-user",
        help="remove the token record held for one user id",
    )
    invalidate_user.add_argument("user_id")

    invalidate_token = commands.add_parser(
        "invalidate-token",
        help="remove the token record holding one token value",
    )
    invalidate_token.add_argument("token")
    return parser


async def run_command(store: TokenStore, args: argparse.Namespace) -> str:
    """Execute one parsed command against the store and return its output line."""

    if args.command == "count":
        return str(await store.length())
    if args.command == "clear":
        await store.clear()
        return "cleared"
    if args.command == "purge-expired":
        return f"purged {await store.purge_expired()}"
    if args.command == "invalidate-user":
        await store.invalidate_user(user_id=args.user_id)
        return "invalidated"
    if args.command == "invalidate-token":
        await store.invalidate_token(token=args.token)
        return "invalidated"
    raise ValueError(f"unsupported command: {args.command}")


async def run_and_close(store: TokenStore, args: argparse.Namespace) -> str:
    """Run one command and release the store before the event loop ends."""

    try:
        return await run_command(store, args)
    finally:
        await store.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    """Run one administrative command and return the process exit code."""

    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(level=settings.log_level)
    logger.info(
        "token_admin_starting command=%s backend=%s",
        args.command,
        settings.token_store_backend,
    )

    store = build_token_store(settings=settings)
    try:
        output = asyncio.run(run_and_close(store, args))
    except (TokenStoreContractError, TokenStoreOperationalError) as error:
        logger.error("token_admin_failed command=%s error=%s", args.command, error)
        print(f"error: {error}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
