"""Command-line entry point for smtp2tg."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from smtp2tg.core import (
    AppSettings,
    ConfigurationError,
    MarkupDialect,
    configure_logging,
    ensure_required,
    load_app_settings,
)
from smtp2tg.smtp import serve
from smtp2tg.transport import TelegramNotifier

LOGGER = logging.getLogger(__name__)

EXAMPLE = (
    "example:\n"
    "  smtp2tg --token abc123 --chatid 123456789 --parsemode HTML --verbose"
)


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="smtp2tg",
        description="Lightweight SMTP to Telegram forwarder",
        epilog=EXAMPLE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-t",
        "--token",
        default=None,
        help="Telegram bot token (or SMTP2TG_TELEGRAM__TOKEN).",
    )
    parser.add_argument(
        "-c",
        "--chatid",
        dest="chat_id",
        default=None,
        help="Telegram chat ID (or SMTP2TG_TELEGRAM__CHAT_ID).",
    )
    parser.add_argument(
        "-p",
        "--parsemode",
        dest="parse_mode",
        default=None,
        help="Message format: MarkdownV2 (default) or HTML.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Enable verbose output.",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Interface to listen on (default: 0.0.0.0).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="TCP port to listen on (default: 2525).",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file containing configuration overrides.",
    )
    return parser


def resolve_settings(args: argparse.Namespace) -> AppSettings:
    """Merge CLI flags over environment and ``.env`` configuration."""
    parse_mode = None
    if args.parse_mode is not None:
        parse_mode = MarkupDialect.parse(args.parse_mode).value
    settings = load_app_settings(
        env_file=args.env_file,
        telegram__token=args.token,
        telegram__chat_id=args.chat_id,
        telegram__parse_mode=parse_mode,
        server__host=args.host,
        server__port=args.port,
        verbose=args.verbose,
    )
    return ensure_required(settings)


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = resolve_settings(args)
    except ConfigurationError as exc:
        print("ERROR: Required --token and --chatid", file=sys.stderr)
        LOGGER.debug("%s", exc)
        return 1

    configure_logging(settings.logging, verbose=settings.verbose)
    with TelegramNotifier(settings.telegram) as notifier:
        try:
            serve(settings, notifier)
        except OSError as exc:
            LOGGER.error(
                "Unable to listen on %s:%s: %s",
                settings.server.host,
                settings.server.port,
                exc,
            )
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
