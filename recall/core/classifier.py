"""URL classifier for Recall.

Derives everything Recall knows about a bookmark before any network call:
the source platform, a YouTube thumbnail, and a placeholder title and
description built from the URL path.

Every function here is pure and total. Malformed URLs never raise; they
fall back to ``Platform.WEB``, no thumbnail, the raw URL as title and a
generic description.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import SplitResult, parse_qs, urlsplit

from recall.core.bookmark import Platform

logger = logging.getLogger(__name__)

# Checked in order, first match wins. "x.com" is a plain substring test,
# so any host containing it (e.g. "netflix.com") classifies as twitter.
PLATFORM_HOSTS: list[tuple[Platform, tuple[str, ...]]] = [
    (Platform.TWITTER, ("twitter.com", "x.com")),
    (Platform.INSTAGRAM, ("instagram.com",)),
    (Platform.TIKTOK, ("tiktok.com",)),
    (Platform.YOUTUBE, ("youtube.com", "youtu.be")),
    (Platform.FACEBOOK, ("facebook.com", "fb.com")),
    (Platform.LINKEDIN, ("linkedin.com",)),
    (Platform.REDDIT, ("reddit.com",)),
]

YOUTUBE_THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"

PLATFORM_DISPLAY_NAMES: dict[Platform, str] = {
    Platform.WEB: "Web Article",
    Platform.TWITTER: "X / Twitter",
    Platform.INSTAGRAM: "Instagram",
    Platform.TIKTOK: "TikTok",
    Platform.YOUTUBE: "YouTube",
    Platform.FACEBOOK: "Facebook",
    Platform.LINKEDIN: "LinkedIn",
    Platform.REDDIT: "Reddit",
}

# None means "built from the domain" (see heuristic_description).
PLATFORM_DESCRIPTIONS: dict[Platform, Optional[str]] = {
    Platform.INSTAGRAM: "View this post on Instagram",
    Platform.TWITTER: "View this post on X / Twitter",
    Platform.YOUTUBE: "Watch this video on YouTube",
    Platform.TIKTOK: "Watch this video on TikTok",
    Platform.LINKEDIN: "View this post on LinkedIn",
    Platform.REDDIT: "View this discussion on Reddit",
    Platform.FACEBOOK: "View this post on Facebook",
    Platform.WEB: None,
}

FALLBACK_DESCRIPTION = "Click to view content"


@dataclass(frozen=True)
class UrlClassification:
    """Everything derived from a URL alone."""

    platform: Platform
    thumbnail_url: Optional[str]
    title: str
    description: str


def _parse(url: str) -> Optional[SplitResult]:
    """Split an absolute URL, or return None if it isn't one."""
    try:
        parts = urlsplit(url.strip())
        # .port raises ValueError for a malformed netloc
        hostname, _ = parts.hostname, parts.port
    except ValueError:
        return None
    if not parts.scheme or not hostname:
        return None
    return parts


def _hostname(parts: SplitResult) -> str:
    return (parts.hostname or "").lower()


def _segments(parts: SplitResult) -> list[str]:
    return [segment for segment in parts.path.split("/") if segment]


def _has_query_param(parts: SplitResult, name: str) -> bool:
    return name in parse_qs(parts.query, keep_blank_values=True)


def _domain(parts: SplitResult) -> str:
    return _hostname(parts).replace("www.", "", 1)


def _capitalize(text: str) -> str:
    """Upper-case the first character only; str.capitalize lowers the rest."""
    return text[:1].upper() + text[1:]


def _is_youtube_host(hostname: str) -> bool:
    return "youtube.com" in hostname or "youtu.be" in hostname


def classify_platform(url: str) -> Platform:
    """Detect the platform a URL belongs to.

    Args:
        url: Any string; unparsable input is treated as a generic web link.

    Returns:
        The first platform whose host fragment appears in the hostname,
        or Platform.WEB.
    """
    parts = _parse(url)
    if parts is None:
        return Platform.WEB

    hostname = _hostname(parts)
    for platform, hosts in PLATFORM_HOSTS:
        if any(host in hostname for host in hosts):
            return platform
    return Platform.WEB


def _segment_after(path: str, marker: str) -> str:
    if marker not in path:
        return ""
    return path.split(marker, 1)[1].split("/", 1)[0]


def _youtube_video_id(parts: SplitResult) -> str:
    """Find the video id in a YouTube URL, or return an empty string.

    Sources, first non-empty wins:
    1. youtu.be/<id>
    2. ?v=<id>
    3. /embed/<id>
    4. /v/<id>
    """
    segments = _segments(parts)
    if "youtu.be" in _hostname(parts) and segments:
        return segments[0]

    video_id = parse_qs(parts.query).get("v", [""])[0]
    if video_id:
        return video_id

    return _segment_after(parts.path, "/embed/") or _segment_after(
        parts.path, "/v/"
    )


def extract_thumbnail(url: str) -> Optional[str]:
    """Build a thumbnail URL for the bookmark, when one can be derived.

    Only YouTube is supported: the video id is turned into the canonical
    max-resolution thumbnail. Any other URL returns None.
    """
    parts = _parse(url)
    if parts is None:
        return None

    if not _is_youtube_host(_hostname(parts)):
        return None

    video_id = _youtube_video_id(parts)
    if not video_id:
        logger.debug("No YouTube video id found in %s", url)
        return None
    return YOUTUBE_THUMBNAIL_URL.format(video_id=video_id)


def _instagram_title(parts: SplitResult) -> str:
    segments = _segments(parts)
    if not segments:
        return "Instagram Link"
    if segments[0] == "p":
        return "Instagram Post"
    if segments[0] == "reel":
        return "Instagram Reel"
    return f"Instagram - {_capitalize(segments[0])}"


def _twitter_title(parts: SplitResult) -> str:
    segments = _segments(parts)
    if segments:
        return f"X - {_capitalize(segments[0])}"
    return "X / Twitter Link"


def _youtube_title(parts: SplitResult) -> str:
    segments = _segments(parts)
    if _has_query_param(parts, "v"):
        return "YouTube Video"
    if segments and segments[0] == "shorts":
        return "YouTube Short"
    if segments and segments[0] not in ("watch", "embed", "v"):
        # Most likely a channel
        return f"YouTube - {_capitalize(segments[0])}"
    return "YouTube Video"


def _tiktok_title(parts: SplitResult) -> str:
    segments = _segments(parts)
    if segments and segments[0].startswith("@"):
        return f"TikTok - {_capitalize(segments[0][1:])}"
    return "TikTok Video"


def _linkedin_title(parts: SplitResult) -> str:
    segments = _segments(parts)
    if len(segments) > 1 and segments[0] == "in":
        return f"LinkedIn - {_capitalize(segments[1])}"
    return "LinkedIn Post"


def _reddit_title(parts: SplitResult) -> str:
    segments = _segments(parts)
    if len(segments) > 1 and segments[0] == "r":
        return f"Reddit - r/{_capitalize(segments[1])}"
    return "Reddit Post"


def _facebook_title(parts: SplitResult) -> str:
    return "Facebook Post"


def _web_title(parts: SplitResult) -> str:
    domain = _domain(parts)
    segments = _segments(parts)
    if not segments:
        return domain
    segment = segments[-1].replace("-", " ").replace("_", " ")
    return f"{domain} - {_capitalize(segment)}"


_TITLE_BUILDERS = {
    Platform.INSTAGRAM: _instagram_title,
    Platform.TWITTER: _twitter_title,
    Platform.YOUTUBE: _youtube_title,
    Platform.TIKTOK: _tiktok_title,
    Platform.LINKEDIN: _linkedin_title,
    Platform.REDDIT: _reddit_title,
    Platform.FACEBOOK: _facebook_title,
    Platform.WEB: _web_title,
}


def heuristic_title(url: str, platform: Platform) -> str:
    """Generate a placeholder title from the URL path, without fetching it.

    Args:
        url: The bookmarked URL.
        platform: Platform to apply rules for (normally classify_platform(url)).

    Returns:
        A readable title such as "Instagram Reel" or "X - Naval".
        An unparsable URL is returned unchanged.
    """
    parts = _parse(url)
    if parts is None:
        return url
    return _TITLE_BUILDERS[platform](parts)


def heuristic_description(url: str, platform: Platform) -> str:
    """Generate a one-line placeholder description for the bookmark."""
    parts = _parse(url)
    if parts is None:
        return FALLBACK_DESCRIPTION

    description = PLATFORM_DESCRIPTIONS[platform]
    if description is None:
        return f"Visit {_domain(parts)} to view this content"
    return description


def platform_display_name(platform: Platform) -> str:
    return PLATFORM_DISPLAY_NAMES[platform]


def classify_url(url: str) -> UrlClassification:
    """Run every classifier step for one URL."""
    platform = classify_platform(url)
    return UrlClassification(
        platform=platform,
        thumbnail_url=extract_thumbnail(url),
        title=heuristic_title(url, platform),
        description=heuristic_description(url, platform),
    )
