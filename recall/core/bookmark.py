"""Bookmark data model for Recall.

This module defines the core data structures shared by the classifier,
the analysis client and the store:
- Platform: Source platform detected from a URL
- MediaType: Kind of media attached to a bookmark
- AnalysisStatus: Lifecycle of the AI analysis for one bookmark
- Bookmark: Immutable record held by the BookmarkStore
- MediaAnalysis / ConnectionInsight / ConnectionReport / DailyDigest:
  validated shapes of the model's JSON replies and the recap
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Platform(str, Enum):
    """Content source a URL belongs to."""

    TWITTER = "twitter"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    WEB = "web"
    YOUTUBE = "youtube"
    FACEBOOK = "facebook"
    LINKEDIN = "linkedin"
    REDDIT = "reddit"


class MediaType(str, Enum):
    """Kind of media a bookmark carries."""

    IMAGE = "image"
    VIDEO = "video"
    TEXT = "text"


class AnalysisStatus(str, Enum):
    """Analysis state for a bookmark.

    Lifecycle:
    - PENDING -> ANALYZING -> COMPLETED | FAILED  (file supplied)
    - PENDING -> COMPLETED                        (no file, heuristics only)

    COMPLETED and FAILED are terminal.
    """

    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (AnalysisStatus.COMPLETED, AnalysisStatus.FAILED)

    def can_transition_to(self, target: "AnalysisStatus") -> bool:
        """Return True if moving from this status to ``target`` is allowed."""
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[AnalysisStatus, frozenset[AnalysisStatus]] = {
    AnalysisStatus.PENDING: frozenset(
        {AnalysisStatus.ANALYZING, AnalysisStatus.COMPLETED}
    ),
    AnalysisStatus.ANALYZING: frozenset(
        {AnalysisStatus.COMPLETED, AnalysisStatus.FAILED}
    ),
    AnalysisStatus.COMPLETED: frozenset(),
    AnalysisStatus.FAILED: frozenset(),
}


def _unique_tags(tags: Any) -> tuple[str, ...]:
    """Drop duplicate tags, keeping first-seen order."""
    return tuple(dict.fromkeys(tags))


@dataclass(frozen=True)
class Bookmark:
    """One saved item.

    Records are never mutated in place: the store swaps in a new copy
    (``dataclasses.replace``) for every status or content update.

    Required fields:
        id: Unique identifier assigned by the store
        url: The bookmarked URL
        platform: Platform detected from the URL
        media_type: Media kind, resolved at creation

    ``title`` and ``summary`` start as heuristic values and may be
    overwritten once by analysis results.
    """

    id: str
    url: str
    platform: Platform
    media_type: MediaType

    title: Optional[str] = None
    summary: Optional[str] = None
    tags: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Media
    media_data: Optional[str] = None  # base64, no data-URI header
    thumbnail_url: Optional[str] = None

    analysis_status: AnalysisStatus = AnalysisStatus.PENDING

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", _unique_tags(self.tags))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict.

        The inline media payload is left out; ``has_media`` says whether
        one exists.
        """
        return {
            "id": self.id,
            "url": self.url,
            "platform": self.platform.value,
            "media_type": self.media_type.value,
            "title": self.title,
            "summary": self.summary,
            "tags": list(self.tags),
            "created_at": self.created_at.isoformat(),
            "has_media": self.media_data is not None,
            "thumbnail_url": self.thumbnail_url,
            "analysis_status": self.analysis_status.value,
        }


class MediaAnalysis(BaseModel):
    """Model reply for a single image or video."""

    title: str
    summary: str
    tags: list[str]


class ConnectionInsight(BaseModel):
    """One thematic connection between bookmarks.

    ``related_bookmark_ids`` may contain ids that no longer (or never)
    matched a bookmark; consumers skip those.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    related_bookmark_ids: list[str] = Field(
        default_factory=list, alias="relatedBookmarkIds"
    )


class ConnectionReport(BaseModel):
    """Model reply for a recap request."""

    summary: str
    insights: list[ConnectionInsight] = Field(default_factory=list)


class DailyDigest(BaseModel):
    """Recap shown to the user. Rebuilt on every request, never stored."""

    generated_on: date = Field(default_factory=date.today)
    summary: str
    insights: list[ConnectionInsight] = Field(default_factory=list)
    fallback: bool = False
