"""imapstore CLI — inspect folders and message counts of an IMAP mailbox."""
from __future__ import annotations

import argparse
import getpass
import logging
import sys

import imapstore.config as cfg
from imapstore.exceptions import MailboxError
from imapstore.imap.session import MailboxSession
from imapstore.models.account import Account, SslMode
from imapstore.models.folder import Folder
from imapstore.utils.keyring_store import forget_password, lookup_password, store_password
from imapstore.utils.size_fmt import human_size

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    try:
        cfg.DATA_DIR.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(cfg.LOG_PATH, encoding="utf-8"))
    except OSError as exc:
        print(f"WARNING: not logging to {cfg.LOG_PATH}: {exc}", file=sys.stderr)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=fmt,
        handlers=handlers,
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="imapstore-cli",
        description="imapstore — IMAP folder and message browser (CLI)",
    )
    p.add_argument("--host", default=cfg.CLI_HOST, help=f"IMAP server hostname (default {cfg.CLI_HOST})")
    p.add_argument("--port", type=int, default=None, help="IMAP port (default 993 with SSL, else 143)")
    p.add_argument("--username", required=True, help="IMAP username / email")
    p.add_argument("--ssl", choices=[m.value for m in SslMode if m.value], default=None,
                   help="SSL for implicit TLS, TLS for STARTTLS (default: plain)")
    p.add_argument("--folder", default=cfg.CLI_FOLDER, help=f"Folder to select first (default {cfg.CLI_FOLDER})")
    p.add_argument("--remember", action="store_true", help="Store the password in the system keyring")
    p.add_argument("--forget", action="store_true", help="Remove the stored password and exit")
    p.add_argument("--save-defaults", action="store_true",
                   help="Remember --host and --folder as the defaults of later runs and exit")
    p.add_argument("-v", "--verbose", action="store_true")

    sub = p.add_subparsers(dest="command")
    folders = sub.add_parser("folders", help="Print the folder tree")
    folders.add_argument("--root", default=None, help="Only list below this folder")
    count = sub.add_parser("count", help="Count messages in the selected folder")
    count.add_argument("--flag", action="append", default=None,
                       help="Only count messages with this flag (repeatable), e.g. \\\\Seen")
    unseen = sub.add_parser("unseen", help="Count unseen messages in a folder")
    unseen.add_argument("name")
    sub.add_parser("sizes", help="List message sizes in the selected folder")
    return p


def print_tree(folder: Folder, depth: int = 0) -> None:
    for child in sorted(folder, key=lambda f: f.local_name):
        marker = "" if child.selectable else "  (not selectable)"
        print(f"{'  ' * depth}{child.local_name}{marker}")
        print_tree(child, depth + 1)


def run_command(session: MailboxSession, args: argparse.Namespace) -> None:
    if args.command == "count":
        print(session.count_messages(args.flag))
    elif args.command == "unseen":
        print(session.count_unseen(args.name))
    elif args.command == "sizes":
        sizes = session.fetch_size()
        total = 0
        for msg_id, size in sorted(sizes.items()):
            print(f"{msg_id:>8} {human_size(size):>10}")
            total += size
        print(f"{'TOTAL':>8} {human_size(total):>10}")
    else:
        print_tree(session.get_folders(getattr(args, "root", None)))


def main(argv: list[str] | None = None) -> None:
    cfg.load_settings()
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.save_defaults:
        cfg.CLI_HOST = args.host
        cfg.CLI_FOLDER = args.folder
        cfg.save_settings()
        print(f"Saved defaults to {cfg.SETTINGS_PATH}")
        return

    account = Account(
        username=args.username,
        host=args.host,
        port=args.port,
        ssl=SslMode.parse(args.ssl),
        folder=args.folder,
    )

    if args.forget:
        forget_password(account)
        return

    password = lookup_password(account)
    if password is None:
        password = getpass.getpass(f"Password for {account}: ")
        if args.remember:
            store_password(account, password)
    account.password = password

    try:
        with MailboxSession(account) as session:
            run_command(session, args)
    except MailboxError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
