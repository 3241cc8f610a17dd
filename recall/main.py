"""Main Entry Point for Recall.

Saves URLs into an in-memory bookmark store, analyses attached media with
Gemini and optionally asks for a recap, then prints everything as JSON.

Usage:
    python -m recall.main https://youtu.be/dQw4w9WgXcQ        # Heuristics only, no API key needed
    python -m recall.main --file https://instagram.com/p/xyz photo.jpg
    python -m recall.main URL1 URL2 --recap                   # Add both, then recap
    python -m recall.main URL --verbose                       # Enable debug logging
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Iterable

from recall.core.analysis_client import AnalysisClient
from recall.core.bookmark import Bookmark, ConnectionReport, DailyDigest, MediaAnalysis, MediaType
from recall.core.config import get_config
from recall.core.exceptions import AnalysisError, ConfigurationError
from recall.core.logger import get_logger, setup_logging
from recall.core.media_encoder import MediaFile
from recall.core.store import Analyzer, BookmarkStore

logger = get_logger(__name__)


class OfflineAnalyzer:
    """Stand-in used when no Gemini call is needed for this run."""

    async def analyze_media(
        self, file: MediaFile, url: str, media_type: MediaType
    ) -> MediaAnalysis:
        raise AnalysisError("No analysis backend configured")

    async def find_connections(self, bookmarks: Iterable[Bookmark]) -> ConnectionReport:
        raise AnalysisError("No analysis backend configured")


def digest_to_dict(digest: DailyDigest, store: BookmarkStore) -> dict[str, Any]:
    """Serialize a recap, resolving each insight's bookmark ids to titles."""
    return {
        "generated_on": digest.generated_on.isoformat(),
        "summary": digest.summary,
        "fallback": digest.fallback,
        "insights": [
            {
                "title": insight.title,
                "description": insight.description,
                "related": [
                    {"id": bookmark.id, "title": bookmark.title}
                    for bookmark in store.related_bookmarks(insight)
                ],
            }
            for insight in digest.insights
        ],
    }


async def run(
    store: BookmarkStore,
    urls: list[str],
    files: list[tuple[str, str]],
    *,
    recap: bool = False,
) -> dict[str, Any]:
    """Add every URL to the store, wait for analyses and build the output.

    Args:
        store: The store to fill.
        urls: URLs saved without media.
        files: (url, path) pairs saved with media to analyse.
        recap: Also generate a recap of everything saved.

    Returns:
        JSON-ready dict with "bookmarks" (newest first) and optionally "recap".
    """
    for url in urls:
        store.add_bookmark(url)

    for url, path in files:
        media = MediaFile.from_path(path)
        store.add_bookmark(url, media, media.media_type)

    await store.wait_for_analyses()

    output: dict[str, Any] = {
        "bookmarks": [bookmark.to_dict() for bookmark in store.bookmarks]
    }
    if recap:
        digest = await store.generate_recap()
        output["recap"] = digest_to_dict(digest, store)
    return output


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="recall",
        description="Save bookmarks, analyse their media with Gemini and recap them.",
    )

    parser.add_argument(
        "urls",
        nargs="*",
        metavar="URL",
        help="URL to save without media",
    )

    parser.add_argument(
        "--file",
        nargs=2,
        action="append",
        default=[],
        metavar=("URL", "PATH"),
        help="Save URL with an image or video file to analyse (repeatable)",
    )

    parser.add_argument(
        "--recap",
        action="store_true",
        help="Generate a recap with connections between the saved bookmarks",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser


def main(args: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, 1 for errors).
    """
    parser = create_argument_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.urls and not parsed_args.file:
        parser.error("at least one URL or --file is required")

    # Heuristic-only runs work without GEMINI_API_KEY
    needs_model = bool(parsed_args.file) or parsed_args.recap

    try:
        config = get_config(require_api_key=needs_model)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    log_level = "DEBUG" if parsed_args.verbose else config.log_level
    setup_logging(log_level)

    analyzer: Analyzer
    if needs_model:
        analyzer = AnalysisClient(api_key=config.gemini_api_key, model=config.model)
    else:
        analyzer = OfflineAnalyzer()

    store = BookmarkStore(analyzer)
    output = asyncio.run(
        run(
            store,
            parsed_args.urls,
            [tuple(pair) for pair in parsed_args.file],
            recap=parsed_args.recap,
        )
    )

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
