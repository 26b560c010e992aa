# =============================================================================
# supportkb/cli/ingest.py - Knowledge-base management CLI
# =============================================================================
#
# Standalone CLI for the support knowledge base.  It drives the same
# services as the HTTP API, against the ChromaDB collection configured in
# the environment / .env file.
#
# Supported subcommands:
#
#   url       - Scrape a web page and store it as one record
#   document  - Chunk, embed and store a plain-text file
#   list      - List every URL and document item
#   delete    - Delete an item (all chunks, for documents)
#   search    - Run the chat assistant's knowledge search for a topic
#
# Usage examples:
#   python -m supportkb.cli.ingest url --url https://shop.example/returns \
#       --description "Return policy"
#   python -m supportkb.cli.ingest document --file faq.txt --description "FAQ"
#   python -m supportkb.cli.ingest list
#   python -m supportkb.cli.ingest delete --id doc_3f2a... --yes
#   python -m supportkb.cli.ingest search --topic "delivery times"
# =============================================================================

"""Standalone CLI for managing the supportKB knowledge base.

Usage::

    python -m supportkb.cli.ingest url --url https://example.com/faq --description "FAQ"

    python -m supportkb.cli.ingest document --file /path/to/policy.txt \\
        --description "Shipping policy"

    python -m supportkb.cli.ingest list

    python -m supportkb.cli.ingest search --topic "returns"
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from supportkb.config.settings import Settings
from supportkb.models.tool_result import TextToolResult
from supportkb.utils.errors import SupportKBError


def _build_services(app_settings: Settings) -> dict[str, Any]:
    """Construct the services the subcommands need.

    Wiring is shared with the HTTP app.  The import is deferred so
    ``--help`` does not load chromadb or openai.
    """
    from supportkb.main import _build_all

    components = _build_all(app_settings)
    return {
        "http_client": components["http_client"],
        "ingestion": components["ingestion_service"],
        "listing": components["listing_service"],
        "deletion": components["deletion_service"],
        "search": components["search_service"],
    }


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_url(args: argparse.Namespace, services: dict[str, Any]) -> int:
    print(f"Ingesting URL: {args.url}")
    item = await services["ingestion"].ingest_url(args.url, args.description)
    print("\nIngestion complete:")
    print(f"  ID:          {item.id}")
    print(f"  Created at:  {item.created_at.isoformat()}")
    return 0


async def _handle_document(args: argparse.Namespace, services: dict[str, Any]) -> int:
    """Ingest a local plain-text file."""
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    print(f"Ingesting document: {path.name}")
    item = await services["ingestion"].ingest_document(
        path.read_bytes(),
        args.mime_type,
        path.name,
        args.description,
    )
    print("\nIngestion complete:")
    print(f"  ID:          {item.id}")
    print(f"  Chunks:      {item.chunk_count}")
    return 0


async def _handle_list(args: argparse.Namespace, services: dict[str, Any]) -> int:
    items = await services["listing"].list_items()
    if not items:
        print("Knowledge base is empty.")
        return 0

    print(f"{len(items)} item(s)")
    print("=" * 40)
    for item in items:
        created = item.created_at.strftime("%Y-%m-%d %H:%M")
        if item.type == "url":
            print(f"  [url]      {item.id}  {created}  {item.url}")
        else:
            print(
                f"  [document] {item.id}  {created}  {item.filename} "
                f"({item.chunk_count} chunks)"
            )
        print(f"             {item.description}")
    return 0


async def _handle_delete(args: argparse.Namespace, services: dict[str, Any]) -> int:
    """Delete one item.  Requires confirmation unless --yes is passed."""
    if not args.yes:
        confirm = input(f"  Delete '{args.id}'? [y/N] ").strip().lower()
        if confirm not in ("y", "yes"):
            print("  Aborted.")
            return 0

    deleted = await services["deletion"].delete_item(args.id)
    print(f"Deleted {deleted} record(s).")
    return 0


async def _handle_search(args: argparse.Namespace, services: dict[str, Any]) -> int:
    result = await services["search"].search(args.topic)
    if isinstance(result, TextToolResult):
        print(result.content)
        print("\nSources:")
        for source in result.sources:
            print(f"  - {source}")
    else:
        print(result.message)
    return 0


_HANDLERS = {
    "url": _handle_url,
    "document": _handle_document,
    "list": _handle_list,
    "delete": _handle_delete,
    "search": _handle_search,
}


async def _run(args: argparse.Namespace, services: dict[str, Any]) -> int:
    """Dispatch to the subcommand handler and report service errors."""
    try:
        return await _HANDLERS[args.command](args, services)
    except SupportKBError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        http_client = services.get("http_client")
        if http_client is not None:
            await http_client.aclose()


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the knowledge-base CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m supportkb.cli.ingest",
        description="Manage the supportKB knowledge base.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Knowledge-base commands")

    url_parser = subparsers.add_parser("url", help="Scrape and store a web page")
    url_parser.add_argument("--url", required=True, help="Page URL")
    url_parser.add_argument("--description", required=True, help="What the page covers")

    doc_parser = subparsers.add_parser("document", help="Chunk and store a .txt file")
    doc_parser.add_argument("--file", required=True, help="Path to the text file")
    doc_parser.add_argument("--description", required=True, help="What the document covers")
    doc_parser.add_argument(
        "--mime-type",
        default="text/plain",
        dest="mime_type",
        help="Declared MIME type (default: text/plain)",
    )

    subparsers.add_parser("list", help="List all items")

    delete_parser = subparsers.add_parser("delete", help="Delete an item and all its records")
    delete_parser.add_argument("--id", required=True, help="Item ID (url_... or doc_...)")
    delete_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation prompt")

    search_parser = subparsers.add_parser("search", help="Search the knowledge base")
    search_parser.add_argument("--topic", required=True, help="Topic to look up")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse arguments, build services, run the subcommand."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    services = _build_services(app_settings)

    # After the build: importing the app module configures logging too.
    from supportkb.utils.logging import configure_logging

    configure_logging(log_level="WARNING")

    sys.exit(asyncio.run(_run(args, services)))


if __name__ == "__main__":
    main()
