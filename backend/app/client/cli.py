#!/usr/bin/env python3
"""
Command-line front end for the bookstore API.

Usage:
  moops register alice alice@example.com secret1 "Alice"
  moops login alice secret1
  moops search "dune"
  moops review 3 5 read --text "Loved it"
  moops profile alice

Point at another server with --api-url (remembered after a successful login).
"""

import argparse
import getpass
import json
import sys

import httpx

from app.client.api_client import ApiError, BookstoreClient
from app.client.token_store import TokenStore
from app.schemas.review import ReadStatus


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="moops", description="Moops Bookstore client")
    parser.add_argument("--api-url", type=str, default=None, help="Bookstore API URL")
    parser.add_argument("--credentials", type=str, default=None, help="Credentials file path")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("register", help="Create an account and sign in")
    p.add_argument("username")
    p.add_argument("email")
    p.add_argument("password", nargs="?")
    p.add_argument("display_name", nargs="?")

    p = sub.add_parser("login", help="Sign in with username or email")
    p.add_argument("login")
    p.add_argument("password", nargs="?")

    sub.add_parser("logout", help="Forget the stored token")
    sub.add_parser("whoami", help="Show the signed-in profile")

    p = sub.add_parser("search", help="Search local books and the catalog")
    p.add_argument("query")
    p.add_argument("--max-results", type=int, default=20)

    p = sub.add_parser("book", help="Show a book with its reviews")
    p.add_argument("book_id", type=int)

    p = sub.add_parser("trending", help="Most reviewed books")
    p.add_argument("--limit", type=int, default=20)

    p = sub.add_parser("recent", help="Recently added books")
    p.add_argument("--limit", type=int, default=20)

    p = sub.add_parser("review", help="Create or update your review of a book")
    p.add_argument("book_id", type=int)
    p.add_argument("rating", type=int, choices=range(1, 6))
    p.add_argument("read_status", choices=[s.value for s in ReadStatus])
    p.add_argument("--text", default=None)
    p.add_argument("--private", action="store_true")

    p = sub.add_parser("profile", help="Show a user's profile")
    p.add_argument("username")

    p = sub.add_parser("follow", help="Follow or unfollow a user by id")
    p.add_argument("user_id", type=int)

    sub.add_parser("health", help="Check the server")

    return parser


def run(args: argparse.Namespace, client: BookstoreClient):
    """Execute one parsed command and return its JSON-able result."""
    if args.command == "register":
        password = args.password or getpass.getpass("Password: ")
        display_name = args.display_name or args.username
        return client.register(args.username, args.email, password, display_name)
    if args.command == "login":
        password = args.password or getpass.getpass("Password: ")
        return client.login(args.login, password)
    if args.command == "logout":
        client.logout()
        return {"message": "Logged out"}
    if args.command == "whoami":
        return client.me()
    if args.command == "search":
        return client.search_books(args.query, max_results=args.max_results)
    if args.command == "book":
        return client.get_book(args.book_id)
    if args.command == "trending":
        return client.trending(limit=args.limit)
    if args.command == "recent":
        return client.recent(limit=args.limit)
    if args.command == "review":
        return client.upsert_review(
            args.book_id,
            args.rating,
            args.read_status,
            review_text=args.text,
            is_public=not args.private,
        )
    if args.command == "profile":
        return client.get_profile(args.username)
    if args.command == "follow":
        return client.toggle_follow(args.user_id)
    if args.command == "health":
        return client.health()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    store = TokenStore(args.credentials)
    client = BookstoreClient(base_url=args.api_url, token_store=store)

    try:
        result = run(args, client)
    except ApiError as e:
        print(json.dumps({"status": e.status_code, "detail": e.message, "errors": e.errors}, indent=2))
        return 1
    except httpx.HTTPError as e:
        print(f"Could not reach {client.base_url}: {e}", file=sys.stderr)
        return 2
    finally:
        client.close()

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
