#!/usr/bin/env python
"""
Command-line entry point for the content store.

    python main.py slug https://example.com/article
    python main.py save https://example.com/article article.md --title "An Article"
    python main.py show example-com-article-1a2b3c [--version 2024-10-20T12:00:00.000Z]
    python main.py metadata example-com-article-1a2b3c
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from curio_store.config import Config
from curio_store.errors import StorageError
from curio_store.models import ExtractedMetadata, TextDirection
from curio_store.url_utils import clean_url, generate_slug
from curio_store.version_store import VersionStore
from curio_store.version_store_factory import create_version_store

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(description='Store and read versioned item content')
    subparsers = parser.add_subparsers(dest='command', required=True)

    slug_parser = subparsers.add_parser('slug', help='Print the slug for a URL')
    slug_parser.add_argument('url')

    save_parser = subparsers.add_parser('save', help='Store extracted content for a URL')
    save_parser.add_argument('url')
    save_parser.add_argument('file', help="Markdown file with the extracted content ('-' for stdin)")
    save_parser.add_argument('--title', default=None)
    save_parser.add_argument('--description', default=None)
    save_parser.add_argument('--author', default=None)
    save_parser.add_argument('--thumbnail', default=None)
    save_parser.add_argument('--favicon', default=None)
    save_parser.add_argument('--published-at', default=None)
    save_parser.add_argument(
        '--text-direction',
        choices=[d.value for d in TextDirection],
        default=TextDirection.LTR.value
    )
    save_parser.add_argument('--text-language', default="")

    show_parser = subparsers.add_parser('show', help='Print stored content for a slug')
    show_parser.add_argument('slug')
    show_parser.add_argument('--version', default=None)

    metadata_parser = subparsers.add_parser('metadata', help='Print main metadata for a slug')
    metadata_parser.add_argument('slug')

    return parser


def _read_content(path: str) -> str:
    if path == '-':
        return sys.stdin.read()
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()


def save(store: VersionStore, args: argparse.Namespace) -> None:
    """Store content for a URL and print the outcome."""
    cleaned_url = clean_url(args.url)
    slug = generate_slug(cleaned_url)
    metadata = ExtractedMetadata(
        title=args.title,
        description=args.description,
        author=args.author,
        thumbnail=args.thumbnail,
        favicon=args.favicon,
        published_at=args.published_at,
        text_direction=TextDirection(args.text_direction),
        text_language=args.text_language,
    )
    result = store.upload_item_content(slug, _read_content(args.file), metadata)
    print(json.dumps({
        "slug": slug,
        "url": cleaned_url,
        "versionName": result.version_name,
        "status": result.status.value,
    }, indent=2))


def show(store: VersionStore, args: argparse.Namespace) -> None:
    """Print stored content for a slug."""
    item = store.get_item_content(args.slug, args.version)
    if args.version and item.version is None:
        logger.info("Version %s not found, showing main content %s", args.version, item.version_name)
    print(item.content)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    config = Config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    args = build_parser().parse_args(argv)

    if args.command == 'slug':
        print(generate_slug(clean_url(args.url)))
        return 0

    store = create_version_store(config)
    try:
        if args.command == 'save':
            save(store, args)
        elif args.command == 'show':
            show(store, args)
        elif args.command == 'metadata':
            print(json.dumps(store.get_item_metadata(args.slug).to_dict(), indent=2))
    except StorageError as exc:
        logger.error("Storage error: %s", exc)
        return 1
    return 0


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
