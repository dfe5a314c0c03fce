#!/usr/bin/env python3
"""
channelsync -- user and channel-access administration from the command line.

Works directly against the identity store named by STORE_URL (default: the
SQLite file under store/), the same store the API serves.

Usage:
  python main.py user add alice --password s3cret --channel news --channel sports
  python main.py user add "" --channel public        # restrict the guest
  python main.py user show alice
  python main.py user list
  python main.py user delete alice
  python main.py check alice news sports             # all of
  python main.py check alice news sports --any       # any of
"""

import argparse
import getpass
import sys
from typing import Optional

from auth.authenticator import Authenticator
from auth.channels import authorize_all_channels, authorize_any_channels
from auth.models import User
from core.config import get_settings
from core.errors import AuthorizationError, HTTPError, NotFoundError
from store.documents import SQLDocumentStore


def _cmd_user_add(auth: Authenticator, args: argparse.Namespace) -> int:
    """Create or replace a user. Prompts for a password when a new named user has none."""
    try:
        user = auth.get_user(args.name)
    except NotFoundError:
        user = User(name=args.name)
        if args.password is None:
            user.password = getpass.getpass(f"Password for {args.name}: ")
    if args.password is not None:
        user.password = args.password
    user.channels = list(args.channel)
    auth.save_user(user)
    print(f"  Saved user {args.name!r} with channels {user.channels}")
    return 0


def _cmd_user_show(auth: Authenticator, args: argparse.Namespace) -> int:
    user = auth.get_user(args.name)
    print(f"  name:     {user.name!r}")
    print(f"  channels: {', '.join(user.channels) if user.channels else '(none)'}")
    print(f"  password: {'set' if user.credential else 'none'}")
    return 0


def _cmd_user_list(auth: Authenticator, args: argparse.Namespace) -> int:
    names = auth.list_users()
    if not names:
        print("  No users saved.")
    for name in names:
        print(f"  {name!r}")
    return 0


def _cmd_user_delete(auth: Authenticator, args: argparse.Namespace) -> int:
    auth.delete_user(args.name)
    print(f"  Deleted user {args.name!r}")
    return 0


def _cmd_check(auth: Authenticator, args: argparse.Namespace) -> int:
    """Report whether a user may see the given channels. Exit status 3 means denied."""
    user = auth.get_user(args.name)
    try:
        if args.any:
            authorize_any_channels(user, args.channels)
        else:
            authorize_all_channels(user, args.channels)
    except AuthorizationError as exc:
        print(f"  DENIED ({exc.status_code}): {exc.message}")
        return 3
    print("  ALLOWED")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="channelsync",
        description="Manage channelsync users and check channel access.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py user add alice --channel news
  python main.py user add "" --channel public
  python main.py check alice news --any
        """,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    user_parser = sub.add_parser("user", help="Manage user records")
    user_sub = user_parser.add_subparsers(dest="action", required=True)

    add = user_sub.add_parser("add", help="Create or replace a user")
    add.add_argument("name", help='User name ("" for the guest)')
    add.add_argument("--password", default=None, help="Password (prompted if omitted for a new user)")
    add.add_argument(
        "--channel",
        action="append",
        default=[],
        metavar="CHANNEL",
        help='Channel the user may access; repeatable. "*" grants all channels.',
    )
    add.set_defaults(func=_cmd_user_add)

    show = user_sub.add_parser("show", help="Show a user record")
    show.add_argument("name")
    show.set_defaults(func=_cmd_user_show)

    lst = user_sub.add_parser("list", help="List saved users")
    lst.set_defaults(func=_cmd_user_list)

    delete = user_sub.add_parser("delete", help="Delete a user record")
    delete.add_argument("name")
    delete.set_defaults(func=_cmd_user_delete)

    check = sub.add_parser("check", help="Check a user's access to channels")
    check.add_argument("name")
    check.add_argument("channels", nargs="+", metavar="CHANNEL")
    check.add_argument("--any", action="store_true", help="Allow if any one channel is visible (default: all)")
    check.set_defaults(func=_cmd_check)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    store = SQLDocumentStore(settings.store_url)
    auth = Authenticator(store, key_prefix=settings.user_key_prefix)
    try:
        return args.func(auth, args)
    except HTTPError as exc:
        print(f"  [!] {exc.message}", file=sys.stderr)
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
