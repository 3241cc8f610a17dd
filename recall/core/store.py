"""Bookmark Store for Recall.

Holds the ordered, in-memory collection of bookmarks (newest first) and
drives each bookmark's analysis lifecycle:

    pending -> analyzing -> completed | failed   (file supplied)
    pending -> completed                         (URL only)

The collection is an immutable tuple that is replaced wholesale on every
change. All mutation happens on the event loop thread, so no locking is
needed and a reader holding a snapshot never sees a half-applied update.
"""

import asyncio
import dataclasses
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, Iterator, Optional, Protocol

from recall.core.bookmark import (
    AnalysisStatus,
    Bookmark,
    ConnectionInsight,
    ConnectionReport,
    DailyDigest,
    MediaAnalysis,
    MediaType,
    Platform,
)
from recall.core.classifier import classify_url
from recall.core.exceptions import EncodingError, InvalidTransitionError
from recall.core.logger import get_bookmark_logger
from recall.core.media_encoder import MediaFile, encode_file

logger = logging.getLogger(__name__)

RECAP_FALLBACK_SUMMARY = "Could not generate recap at this time."

# Platforms whose auto-detected thumbnail means the link is a video
VIDEO_PLATFORMS = frozenset({Platform.YOUTUBE, Platform.TIKTOK})


class Analyzer(Protocol):
    """What the store needs from an analysis backend (see AnalysisClient)."""

    async def analyze_media(
        self, file: MediaFile, url: str, media_type: MediaType
    ) -> MediaAnalysis: ...

    async def find_connections(
        self, bookmarks: Iterable[Bookmark]
    ) -> ConnectionReport: ...


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_media_type(
    hint: MediaType,
    platform: Platform,
    thumbnail_url: Optional[str],
    has_file: bool,
) -> MediaType:
    """Pick the media type a new bookmark is saved with.

    With a file, the caller's hint (derived from the file's content type)
    wins. Without one, a detected thumbnail overrides the hint: video for
    YouTube/TikTok, image for anything else.
    """
    if has_file or not thumbnail_url:
        return hint
    if platform in VIDEO_PLATFORMS:
        return MediaType.VIDEO
    return MediaType.IMAGE


class BookmarkStore:
    """Ordered in-memory bookmark collection plus its analysis orchestration.

    Owned by the composition root (see recall.main) and passed to whatever
    needs it. Bookmarks are only ever added, never removed or reordered.

    Attributes:
        bookmarks: Current snapshot, most recent first.
    """

    def __init__(
        self,
        analyzer: Analyzer,
        *,
        initial: Iterable[Bookmark] = (),
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the store.

        Args:
            analyzer: Backend for media analysis and recaps.
            initial: Bookmarks to start with, already ordered newest first.
            id_factory: Produces bookmark ids (uuid4 hex by default).
            clock: Produces creation timestamps (UTC now by default).

        Raises:
            ValueError: If ``initial`` contains duplicate ids.
        """
        self._analyzer = analyzer
        self._bookmarks: tuple[Bookmark, ...] = tuple(initial)
        self._new_id = id_factory or _new_id
        self._clock = clock or _utcnow
        self._tasks: set[asyncio.Task[None]] = set()

        self._ids = {bookmark.id for bookmark in self._bookmarks}
        if len(self._ids) != len(self._bookmarks):
            raise ValueError("Initial bookmarks contain duplicate ids")

    @property
    def bookmarks(self) -> tuple[Bookmark, ...]:
        return self._bookmarks

    def get(self, bookmark_id: str) -> Optional[Bookmark]:
        for bookmark in self._bookmarks:
            if bookmark.id == bookmark_id:
                return bookmark
        return None

    def __len__(self) -> int:
        return len(self._bookmarks)

    def __iter__(self) -> Iterator[Bookmark]:
        return iter(self._bookmarks)

    def add_bookmark(
        self,
        url: str,
        file: Optional[MediaFile] = None,
        media_type: MediaType = MediaType.TEXT,
    ) -> Bookmark:
        """Save a URL, optionally with an image or video to analyse.

        The bookmark is in ``bookmarks`` when this returns. Without a file
        it is already completed with its heuristic title and description.
        With a file it is pending, and its analysis runs as a background
        task on the running event loop (see wait_for_analyses).

        Args:
            url: The URL to save.
            file: Optional media file to analyse.
            media_type: Caller's hint, normally media_type_for(file.mime_type).

        Returns:
            The bookmark as it stands when the call returns: completed
            without a file, pending with one.

        Raises:
            RuntimeError: If a file is given and no event loop is running.
        """
        classification = classify_url(url)
        bookmark = Bookmark(
            id=self._allocate_id(),
            url=url,
            platform=classification.platform,
            media_type=resolve_media_type(
                media_type,
                classification.platform,
                classification.thumbnail_url,
                has_file=file is not None,
            ),
            title=classification.title,
            summary=classification.description,
            created_at=self._clock(),
            thumbnail_url=classification.thumbnail_url,
        )

        # Fail before inserting when there is no loop to analyse on
        loop = asyncio.get_running_loop() if file is not None else None

        self._bookmarks = (bookmark, *self._bookmarks)
        log = get_bookmark_logger(__name__, bookmark.id)
        log.info(
            "Bookmark added",
            extra={"platform": bookmark.platform.value, "has_file": file is not None},
        )

        if loop is None:
            self._set_status(bookmark.id, AnalysisStatus.COMPLETED)
        else:
            task = loop.create_task(self._analyze(bookmark, file, media_type))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        return self._bookmarks[0]

    async def wait_for_analyses(self) -> None:
        """Wait until every analysis started so far has finished."""
        while self._tasks:
            await asyncio.gather(*self._tasks)

    async def generate_recap(
        self, bookmarks: Optional[Iterable[Bookmark]] = None
    ) -> DailyDigest:
        """Build a recap of the given bookmarks (all of them by default).

        Failures never reach the caller: they are logged and replaced by a
        fixed fallback summary with no insights.
        """
        selected = list(self._bookmarks if bookmarks is None else bookmarks)
        try:
            report = await self._analyzer.find_connections(selected)
        except Exception:
            logger.exception("Recap generation failed", extra={"count": len(selected)})
            return DailyDigest(summary=RECAP_FALLBACK_SUMMARY, insights=[], fallback=True)

        logger.info(
            "Recap generated",
            extra={"count": len(selected), "insights": len(report.insights)},
        )
        return DailyDigest(summary=report.summary, insights=report.insights)

    def related_bookmarks(self, insight: ConnectionInsight) -> list[Bookmark]:
        """Resolve an insight's bookmark ids, silently skipping unknown ones."""
        by_id = {bookmark.id: bookmark for bookmark in self._bookmarks}
        return [
            by_id[bookmark_id]
            for bookmark_id in insight.related_bookmark_ids
            if bookmark_id in by_id
        ]

    async def _analyze(
        self, bookmark: Bookmark, file: MediaFile, media_type: MediaType
    ) -> None:
        log = get_bookmark_logger(__name__, bookmark.id)

        try:
            media = await encode_file(file)
        except EncodingError as e:
            log.warning("Failed to read media, saving without preview: %s", e)
        else:
            self._update(bookmark.id, media_data=media.data)

        self._set_status(bookmark.id, AnalysisStatus.ANALYZING)
        try:
            analysis = await self._analyzer.analyze_media(file, bookmark.url, media_type)
        except Exception:
            log.exception("Analysis failed")
            self._set_status(bookmark.id, AnalysisStatus.FAILED)
            return

        self._set_status(
            bookmark.id,
            AnalysisStatus.COMPLETED,
            title=analysis.title,
            summary=analysis.summary,
            tags=tuple(analysis.tags),
        )
        log.info("Analysis completed", extra={"tags": list(analysis.tags)})

    def _allocate_id(self) -> str:
        bookmark_id = self._new_id()
        while bookmark_id in self._ids:
            bookmark_id = self._new_id()
        self._ids.add(bookmark_id)
        return bookmark_id

    def _set_status(
        self, bookmark_id: str, status: AnalysisStatus, **changes: object
    ) -> None:
        current = self.get(bookmark_id)
        if current is None:
            raise KeyError(bookmark_id)
        if not current.analysis_status.can_transition_to(status):
            raise InvalidTransitionError(
                f"Bookmark {bookmark_id}: cannot go from "
                f"{current.analysis_status.value} to {status.value}"
            )
        self._update(bookmark_id, analysis_status=status, **changes)

    def _update(self, bookmark_id: str, **changes: object) -> None:
        """Swap in a modified copy of one bookmark, keeping order."""
        self._bookmarks = tuple(
            dataclasses.replace(bookmark, **changes)
            if bookmark.id == bookmark_id
            else bookmark
            for bookmark in self._bookmarks
        )
