"""Tests for Bookmark data model."""

import dataclasses
from datetime import date, datetime, timezone

import pytest

from recall.core.bookmark import (
    AnalysisStatus,
    Bookmark,
    ConnectionInsight,
    ConnectionReport,
    DailyDigest,
    MediaType,
    Platform,
)


class TestEnums:
    """Test enum values and string compatibility."""

    def test_platform_values(self):
        assert {p.value for p in Platform} == {
            "twitter", "instagram", "tiktok", "web",
            "youtube", "facebook", "linkedin", "reddit",
        }

    def test_media_type_is_string_comparable(self):
        assert MediaType.VIDEO == "video"
        assert MediaType("image") == MediaType.IMAGE

    def test_status_from_string(self):
        assert AnalysisStatus("analyzing") == AnalysisStatus.ANALYZING


class TestAnalysisStatusTransitions:
    """Test the status lifecycle."""

    @pytest.mark.parametrize(
        "source,target",
        [
            (AnalysisStatus.PENDING, AnalysisStatus.ANALYZING),
            (AnalysisStatus.PENDING, AnalysisStatus.COMPLETED),
            (AnalysisStatus.ANALYZING, AnalysisStatus.COMPLETED),
            (AnalysisStatus.ANALYZING, AnalysisStatus.FAILED),
        ],
    )
    def test_allowed(self, source, target):
        assert source.can_transition_to(target)

    @pytest.mark.parametrize(
        "source,target",
        [
            (AnalysisStatus.PENDING, AnalysisStatus.FAILED),
            (AnalysisStatus.ANALYZING, AnalysisStatus.PENDING),
            (AnalysisStatus.COMPLETED, AnalysisStatus.FAILED),
            (AnalysisStatus.FAILED, AnalysisStatus.ANALYZING),
            (AnalysisStatus.COMPLETED, AnalysisStatus.COMPLETED),
        ],
    )
    def test_forbidden(self, source, target):
        assert not source.can_transition_to(target)

    def test_terminal_statuses(self):
        assert AnalysisStatus.COMPLETED.is_terminal
        assert AnalysisStatus.FAILED.is_terminal
        assert not AnalysisStatus.PENDING.is_terminal
        assert not AnalysisStatus.ANALYZING.is_terminal


class TestBookmark:
    """Test Bookmark dataclass."""

    def _bookmark(self, **kwargs) -> Bookmark:
        defaults = {
            "id": "1",
            "url": "https://example.com",
            "platform": Platform.WEB,
            "media_type": MediaType.TEXT,
        }
        defaults.update(kwargs)
        return Bookmark(**defaults)

    def test_defaults(self):
        bookmark = self._bookmark()

        assert bookmark.tags == ()
        assert bookmark.analysis_status == AnalysisStatus.PENDING
        assert bookmark.media_data is None
        assert bookmark.thumbnail_url is None
        assert bookmark.created_at.tzinfo is not None

    def test_is_immutable(self):
        bookmark = self._bookmark()
        with pytest.raises(dataclasses.FrozenInstanceError):
            bookmark.title = "changed"  # type: ignore[misc]

    def test_tags_deduplicated_in_order(self):
        bookmark = self._bookmark(tags=["design", "code", "design", "focus"])
        assert bookmark.tags == ("design", "code", "focus")

    def test_to_dict(self):
        created = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)
        bookmark = self._bookmark(
            title="T",
            tags=["a"],
            created_at=created,
            media_data="aGVsbG8=",
            analysis_status=AnalysisStatus.COMPLETED,
        )

        data = bookmark.to_dict()

        assert data["platform"] == "web"
        assert data["analysis_status"] == "completed"
        assert data["tags"] == ["a"]
        assert data["created_at"] == "2026-10-19T08:00:00+00:00"
        assert data["has_media"] is True
        assert "media_data" not in data


class TestResultModels:
    """Test the pydantic reply models."""

    def test_insight_accepts_camel_case_alias(self):
        insight = ConnectionInsight.model_validate(
            {"title": "T", "description": "D", "relatedBookmarkIds": ["1", "2"]}
        )
        assert insight.related_bookmark_ids == ["1", "2"]

    def test_insight_accepts_field_name(self):
        insight = ConnectionInsight(title="T", description="D", related_bookmark_ids=["1"])
        assert insight.related_bookmark_ids == ["1"]

    def test_report_insights_default_empty(self):
        assert ConnectionReport(summary="S").insights == []

    def test_digest_defaults(self):
        digest = DailyDigest(summary="S")

        assert digest.generated_on == date.today()
        assert digest.insights == []
        assert digest.fallback is False
