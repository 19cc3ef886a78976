#!/usr/bin/env python3
"""Bookshelf CLI - manage book records and their content documents."""
import argparse
import asyncio
import sys
import json
from typing import Any, Dict, Optional
from tabulate import tabulate
from bookshelf.client import BookshelfClient
from bookshelf.async_client import AsyncBookshelfClient
from bookshelf.config import Config
from bookshelf.service import build_service
import logging

logger = logging.getLogger(__name__)


def setup_logging(config: Config):
    """Configure root logging for the CLI process."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def book_from_args(args) -> Dict[str, Any]:
    """Build a candidate record from command-line flags."""
    return {
        "title": args.title,
        "author": args.author,
        "summary": args.summary,
        "publishDate": args.date,
    }


def report(envelope: Optional[Dict[str, Any]]) -> bool:
    """Print an operation's message/errors. Returns True on success."""
    if envelope is None:
        print("❌ No response from server")
        return False

    if envelope.get("success"):
        if envelope.get("message"):
            print(f"✅ {envelope['message']}")
        return True

    print(f"❌ {envelope.get('message') or 'Operation failed'}")
    for error in envelope.get("errors") or []:
        print(f"   - {error}")
    return False


def display_books(books, format_type: str):
    """Display books in specified format."""
    if not books:
        print("No books yet.")
        return

    if format_type == "table":
        headers = ["#", "Title", "Author", "Published", "Summary"]
        rows = [
            [
                position,
                book["title"][:50] + "..." if len(book["title"]) > 50 else book["title"],
                book["author"][:30] + "..." if len(book["author"]) > 30 else book["author"],
                book["publishDate"],
                book["summary"][:40] + "..." if len(book["summary"]) > 40 else book["summary"]
            ]
            for position, book in enumerate(books)
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps(books, indent=2, ensure_ascii=False))

    elif format_type == "compact":
        for position, book in enumerate(books):
            print(f"{position}. {book['title']} - {book['author']}")


def list_books(args, config: Config) -> bool:
    """List all books."""
    if args.server:
        with BookshelfClient(args.server, config.DEFAULT_TIMEOUT, config.DEFAULT_MAX_RETRIES) as client:
            envelope = client.list_books()
    else:
        envelope = build_service(config).list_all().to_envelope()

    if not report(envelope):
        return False
    display_books(envelope["data"], args.format)
    return True


def add_book(args, config: Config) -> bool:
    """Create a book."""
    book = book_from_args(args)
    if args.server:
        with BookshelfClient(args.server, config.DEFAULT_TIMEOUT, config.DEFAULT_MAX_RETRIES) as client:
            return report(client.create_book(book))
    return report(build_service(config).create(book).to_envelope())


def update_book(args, config: Config) -> bool:
    """Replace the book at a position."""
    book = book_from_args(args)
    if args.server:
        with BookshelfClient(args.server, config.DEFAULT_TIMEOUT, config.DEFAULT_MAX_RETRIES) as client:
            return report(client.update_book(args.position, book))
    return report(build_service(config).update(args.position, book).to_envelope())


def delete_book(args, config: Config) -> bool:
    """Delete the book at a position."""
    if args.server:
        with BookshelfClient(args.server, config.DEFAULT_TIMEOUT, config.DEFAULT_MAX_RETRIES) as client:
            return report(client.delete_book(args.position))
    return report(build_service(config).delete(args.position).to_envelope())


async def read_many_async(args, config: Config):
    """Read several documents from the server in parallel."""
    async with AsyncBookshelfClient(
        args.server,
        timeout=config.DEFAULT_TIMEOUT,
        max_concurrent=args.parallel
    ) as client:
        return await client.read_many(args.positions, args.mode)


def read_content(args, config: Config) -> bool:
    """Print the content documents of one or more books."""
    if args.server and len(args.positions) > 1:
        envelopes = asyncio.run(read_many_async(args, config))
    elif args.server:
        with BookshelfClient(args.server, config.DEFAULT_TIMEOUT, config.DEFAULT_MAX_RETRIES) as client:
            envelopes = [client.read_content(args.positions[0], args.mode)]
    else:
        service = build_service(config)
        envelopes = [
            service.read_content_sync(position, args.mode).to_envelope()
            for position in args.positions
        ]

    ok = True
    for position, envelope in zip(args.positions, envelopes):
        print(f"\n=== Book #{position} ===")
        if not report(envelope):
            ok = False
            continue
        print(f"(read mode: {envelope['data']['mode']})")
        print(envelope["data"]["content"])
    return ok


def write_content(args, config: Config) -> bool:
    """Replace a book's content document."""
    if args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            content = f.read()
    else:
        content = args.text or ""

    if args.server:
        with BookshelfClient(args.server, config.DEFAULT_TIMEOUT, config.DEFAULT_MAX_RETRIES) as client:
            return report(client.write_content(args.position, content))
    return report(build_service(config).write_content_sync(args.position, content).to_envelope())


def serve(args, config: Config) -> bool:
    """Run the HTTP API."""
    import uvicorn
    from bookshelf.api import create_app

    host = args.host or config.API_HOST
    port = args.port or config.API_PORT

    logger.info(f"Starting Bookshelf API on http://{host}:{port}")
    logger.info(f"Collection file: {config.BOOKS_JSON_PATH}")
    logger.info(f"Content folder: {config.CONTENT_DIR}")

    uvicorn.run(
        create_app(config=config),
        host=host,
        port=port,
        log_level=config.LOG_LEVEL.lower()
    )
    return True


def add_book_fields(parser: argparse.ArgumentParser):
    parser.add_argument("--title", required=True, help="Book title")
    parser.add_argument("--author", required=True, help="Author name")
    parser.add_argument("--summary", required=True, help="Short summary")
    parser.add_argument("--date", required=True, help="Publish date (YYYY-MM-DD)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bookshelf - book records with content documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Add a book to the local collection
  %(prog)s add --title "Dune" --author "Frank Herbert" --summary "Desert planet" --date 1965-08-01

  # List books on a running server
  %(prog)s --server http://127.0.0.1:3000 list --format compact

  # Read two documents in parallel from the server
  %(prog)s --server http://127.0.0.1:3000 read 0 1 --mode non-blocking

  # Start the API
  %(prog)s serve --port 3000
        """
    )
    parser.add_argument("--server", help="Talk to a running API instead of the local files")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # List command
    list_parser = subparsers.add_parser("list", help="List all books")
    list_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    # Add command
    add_parser = subparsers.add_parser("add", help="Add a book")
    add_book_fields(add_parser)

    # Update command
    update_parser = subparsers.add_parser("update", help="Update the book at a position")
    update_parser.add_argument("position", type=int, help="Zero-based position")
    add_book_fields(update_parser)

    # Delete command
    delete_parser = subparsers.add_parser("delete", help="Delete the book at a position")
    delete_parser.add_argument("position", type=int, help="Zero-based position")

    # Read command
    read_parser = subparsers.add_parser("read", help="Show content documents")
    read_parser.add_argument("positions", type=int, nargs="+", help="Zero-based positions")
    read_parser.add_argument("--mode", choices=["blocking", "non-blocking"], default="non-blocking", help="Read mode")
    read_parser.add_argument("--parallel", type=int, default=5, help="Concurrent requests with --server (default: 5)")

    # Write command
    write_parser = subparsers.add_parser("write", help="Replace a content document")
    write_parser.add_argument("position", type=int, help="Zero-based position")
    write_parser.add_argument("text", nargs="?", help="New content")
    write_parser.add_argument("--file", help="Read new content from a file")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Host to bind to (default: from config)")
    serve_parser.add_argument("--port", type=int, help="Port to bind to (default: from config)")

    return parser


COMMANDS = {
    "list": list_books,
    "add": add_book,
    "update": update_book,
    "delete": delete_book,
    "read": read_content,
    "write": write_content,
    "serve": serve,
}


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()
    setup_logging(config)

    try:
        ok = COMMANDS[args.command](args, config)
    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
