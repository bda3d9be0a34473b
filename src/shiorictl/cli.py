"""Command-line interface for a Shiori bookmark server.

Usage:
    python -m shiorictl [-c CONFIG] [-v] login
    python -m shiorictl list [--limit N]
    python -m shiorictl article BOOKMARK_ID
    python -m shiorictl add URL
    python -m shiorictl delete BOOKMARK_ID [BOOKMARK_ID ...]

Environment variables:
    SHIORI_URL       — server base URL (e.g. https://shiori.example.com)
    SHIORI_USERNAME  — account name
    SHIORI_PASSWORD  — account password
    SHIORI_TIMEOUT   — request timeout in seconds (default 30)
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

from .client import ShioriClient, format_ids
from .config import load_config
from .errors import ShioriError
from .logging_setup import setup_logging


def get_client(args) -> ShioriClient:
    config = load_config(Path(args.config) if args.config else None)
    setup_logging(config, verbose=args.verbose)
    return ShioriClient(config)


# --- Command handlers ---


def cmd_login(args) -> dict:
    client = get_client(args)
    client.session_manager.ensure_authenticated(client.credentials)
    expires_at = client.session_manager.session.expires_at
    return {
        "status": "ok",
        "username": client.credentials.username,
        "expires": datetime.fromtimestamp(expires_at, timezone.utc).isoformat(),
    }


def cmd_list(args) -> dict:
    client = get_client(args)
    bookmarks = client.list_bookmarks()
    if args.limit:
        bookmarks = bookmarks[:args.limit]
    return {
        "status": "ok",
        "count": len(bookmarks),
        "bookmarks": [bm.to_dict() for bm in bookmarks],
    }


def cmd_article(args) -> dict:
    client = get_client(args)
    html = client.fetch_article(args.bookmark_id)
    return {"status": "ok", "id": args.bookmark_id, "html": html}


def cmd_add(args) -> dict:
    client = get_client(args)
    result = client.add_bookmark(args.url)
    return {"status": "ok", "bookmark": result}


def cmd_delete(args) -> dict:
    client = get_client(args)
    client.delete_bookmarks(format_ids(args.bookmark_ids))
    return {"status": "ok", "deleted": args.bookmark_ids}


# --- CLI ---


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m shiorictl",
        description="Shiori bookmarks — list, read, add and delete",
    )
    parser.add_argument("-c", "--config", help="Path to config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose (DEBUG) logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # login
    sub.add_parser("login", help="Check credentials and show token expiry")

    # list
    p_list = sub.add_parser("list", help="List bookmarks")
    p_list.add_argument("--limit", type=int, default=0, help="Max results (0 for all)")

    # article
    p_article = sub.add_parser("article", help="Fetch archived article HTML")
    p_article.add_argument("bookmark_id", type=int, help="Bookmark ID")

    # add
    p_add = sub.add_parser("add", help="Add a bookmark")
    p_add.add_argument("url", help="URL to bookmark")

    # delete
    p_delete = sub.add_parser("delete", help="Delete bookmarks")
    p_delete.add_argument("bookmark_ids", type=int, nargs="+", help="Bookmark IDs")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    commands = {
        "login": cmd_login,
        "list": cmd_list,
        "article": cmd_article,
        "add": cmd_add,
        "delete": cmd_delete,
    }

    try:
        result = commands[args.command](args)
        print(json.dumps(result, indent=2, ensure_ascii=False))
    except ShioriError as e:
        print(json.dumps({"status": "error", "error": str(e), "type": type(e).__name__}))
        sys.exit(1)


if __name__ == "__main__":
    main()
