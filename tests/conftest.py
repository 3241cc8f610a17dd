"""Shared test fixtures for Recall.

Provides media files on disk and a fake analyzer so store tests never
reach the Gemini API.
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from recall.core.bookmark import ConnectionReport, MediaAnalysis
from recall.core.config import reset_config
from recall.core.media_encoder import MediaFile

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch: pytest.MonkeyPatch):
    """Keep real API keys out of tests and reset the cached config."""
    for key in ("GEMINI_API_KEY", "API_KEY", "RECALL_MODEL", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def image_file(tmp_path: Path) -> MediaFile:
    """A small PNG on disk.

    Args:
        tmp_path: pytest's built-in temp directory fixture.
    """
    path = tmp_path / "desk.png"
    path.write_bytes(PNG_BYTES)
    return MediaFile.from_path(path)


@pytest.fixture
def missing_file(tmp_path: Path) -> MediaFile:
    """A media file whose path does not exist."""
    return MediaFile(path=tmp_path / "gone.mp4", mime_type="video/mp4", name="gone.mp4")


@pytest.fixture
def analysis() -> MediaAnalysis:
    return MediaAnalysis(
        title="Minimal Desk Setup",
        summary="A clean workspace with a mechanical keyboard and plants.",
        tags=["design", "workspace", "minimalism"],
    )


@pytest.fixture
def analyzer(analysis: MediaAnalysis) -> MagicMock:
    """Fake analyzer whose coroutines succeed by default."""
    fake = MagicMock()
    fake.analyze_media = AsyncMock(return_value=analysis)
    fake.find_connections = AsyncMock(
        return_value=ConnectionReport(summary="Great day of learning!", insights=[])
    )
    return fake
