# =============================================================================
# mailbox-engine Command Line
# =============================================================================
# A small CLI over MailboxService, handy for poking at a real server:
#
#   mailbox-engine check                      # can we log in?
#   mailbox-engine folders --children         # folder tree with counts
#   mailbox-engine messages INBOX --start 1 --end 20
#   mailbox-engine show INBOX 4242            # render one message
#
# Accounts come from config.toml; passwords from the system keyring.
#
# Exit codes:
#   0 success, 1 config/usage error, 2 authentication failure,
#   3 not found, 4 protocol failure
# =============================================================================

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from mailbox_engine import __version__, __app_name__
from mailbox_engine.config import Config, ConfigError, print_paths
from mailbox_engine.core import Credentials, Folder, FolderRef
from mailbox_engine.errors import AuthenticationError, NotFoundError, ProtocolError
from mailbox_engine.service import MailboxService
from mailbox_engine.session import MailSession

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_AUTH = 2
EXIT_NOT_FOUND = 3
EXIT_PROTOCOL = 4


# =============================================================================
# Commands
# =============================================================================

def _print_folder(folder: Folder, depth: int = 0) -> None:
    marker = "" if folder.selectable else " [noselect]"
    print(f"{'  ' * depth}{folder.name:<30} {folder.message_count:>6} {folder.unread_count:>6}{marker}")
    for child in folder.children:
        _print_folder(child, depth + 1)


async def run_command(args: argparse.Namespace, config: Config, credentials: Credentials) -> int:
    """Run one subcommand against the server. Returns the exit code."""
    service = MailboxService(config)

    async with MailSession(credentials, timeout=config.imap.timeout) as session:
        if args.command == "check":
            creds = await service.check_credentials(session)
            print(f"OK: {creds.user}@{creds.host}:{creds.port}")

        elif args.command == "folders":
            for folder in await service.list_folders(session, load_children=args.children):
                _print_folder(folder)

        elif args.command == "messages":
            ref = FolderRef.for_path(credentials, args.folder)
            for message in await service.list_messages(session, ref, args.start, args.end):
                print(message)

        elif args.command == "show":
            ref = FolderRef.for_path(credentials, args.folder)
            message = await service.get_message(session, ref, args.uid)
            print(f"From:    {message.display_sender} <{message.sender}>")
            print(f"Subject: {message.subject}")
            if message.date_sent:
                print(f"Date:    {message.date_sent:%Y-%m-%d %H:%M}")
            for attachment in message.attachments:
                print(f"Attachment: {attachment.filename or attachment.content_id} ({attachment.human_size})")
            print()
            print(message.content)

    return EXIT_OK


# =============================================================================
# CLI Entry Point
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="mailbox-engine: browse an IMAP mailbox from the command line",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--paths",
        action="store_true",
        help="Print configuration paths and exit",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: XDG config location)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (verbose logging)",
    )

    parser.add_argument(
        "--account",
        help="Account to use (default: general.default_account)",
    )

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("check", help="Verify that the account can log in")

    folders = subparsers.add_parser("folders", help="List folders with message counts")
    folders.add_argument("--children", action="store_true", help="Show the full folder tree")

    messages = subparsers.add_parser("messages", help="List messages in a folder")
    messages.add_argument("folder", help="Full folder path, e.g. INBOX")
    messages.add_argument("--start", type=int, help="First message (sequence number)")
    messages.add_argument("--end", type=int, help="Last message (sequence number)")

    show = subparsers.add_parser("show", help="Render a single message")
    show.add_argument("folder", help="Full folder path, e.g. INBOX")
    show.add_argument("uid", type=int, help="Message UID")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for mailbox-engine.

    This function:
        1. Parses command-line arguments
        2. Handles special commands (--paths, --version)
        3. Loads configuration and the account's credentials
        4. Runs the subcommand

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Handle --paths flag
    if args.paths:
        print_paths()
        return EXIT_OK

    if args.command is None:
        print("No command given (try --help)", file=sys.stderr)
        return EXIT_CONFIG

    try:
        config = Config.load(args.config)
        account = config.get_account(args.account)
        credentials = Credentials.from_account(account)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except KeyError as e:
        print(f"Configuration error: {e.args[0]}", file=sys.stderr)
        return EXIT_CONFIG

    try:
        return asyncio.run(run_command(args, config, credentials))
    except AuthenticationError as e:
        print(f"Authentication failed: {e}", file=sys.stderr)
        return EXIT_AUTH
    except NotFoundError as e:
        print(f"Not found: {e}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except ProtocolError as e:
        print(f"Server error: {e}", file=sys.stderr)
        return EXIT_PROTOCOL


if __name__ == "__main__":
    sys.exit(main())
