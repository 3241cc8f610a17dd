"""Analysis client for Recall, backed by Google Gemini.

Two request/response operations:
- analyze_media: title, summary and tags for one image or video
- find_connections: a short recap and thematic links across bookmarks

Both ask the model for JSON and validate the reply against the pydantic
shapes in recall.core.bookmark. Any failure surfaces as AnalysisError;
there is no retry.
"""

import json
import logging
from typing import Any, Iterable, Optional, TypeVar

from google import genai
from google.genai import types
from pydantic import BaseModel, ValidationError

from recall.core.bookmark import (
    Bookmark,
    ConnectionReport,
    MediaAnalysis,
    MediaType,
)
from recall.core.config import DEFAULT_MODEL, get_config
from recall.core.exceptions import AnalysisError, ConfigurationError, EncodingError
from recall.core.media_encoder import MediaFile, encode_file

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """You are an intelligent personal knowledge assistant for a bookmarking app called "Recall".
Your goal is to analyze content saved by the user, summarize it concisely, and later find serendipitous connections between seemingly unrelated items.
Be concise, insightful, and focus on the "why" - why did the user save this?"""

MEDIA_PROMPT = """Analyze this {media_type} from {url}.
1. Give it a short, catchy title.
2. Write a 1-sentence summary of the main idea or content.
3. Generate 3-5 relevant descriptive tags (lowercase).

Return JSON format: {{ "title": string, "summary": string, "tags": string[] }}"""

CONNECTIONS_PROMPT = """Here is a list of bookmarks the user saved recently:

{bookmarks}

Task:
1. Write a friendly, "push-notification style" daily recap summary (max 2 sentences) that makes the user feel good about what they learned.
2. Find up to 3 interesting "Connections" or themes between these items. Look for subtle links (e.g., a design tutorial and a coding tool both related to productivity).

Return JSON:
{{
  "summary": "...",
  "insights": [
    {{ "title": "...", "description": "...", "relatedBookmarkIds": ["ID1", "ID2"] }}
  ]
}}"""

EMPTY_RECAP_SUMMARY = "No bookmarks to analyze yet."

_Model = TypeVar("_Model", bound=BaseModel)


def format_bookmark_line(bookmark: Bookmark) -> str:
    """Render one bookmark as a single prompt line."""
    return (
        f"ID: {bookmark.id} | Type: {bookmark.platform.value} | "
        f"Title: {bookmark.title or 'Untitled'} | "
        f"Summary: {bookmark.summary or 'No summary'}"
    )


def format_bookmarks(bookmarks: Iterable[Bookmark]) -> str:
    return "\n".join(format_bookmark_line(bookmark) for bookmark in bookmarks)


class AnalysisClient:
    """Client for the Gemini API.

    One model handles both image/video understanding and the cross-bookmark
    reasoning. Replies are requested as JSON via ``response_mime_type``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ):
        """Initialize the client.

        Args:
            api_key: Gemini API key. If not provided, read from config.
            model: Model name. If not provided, read from config.

        Raises:
            ConfigurationError: If no API key is available.
        """
        if api_key and model:
            self._api_key, self._model = api_key, model
        else:
            config = get_config(require_api_key=not api_key)
            self._api_key = api_key or config.gemini_api_key
            self._model = model or config.model or DEFAULT_MODEL

        if not self._api_key:
            raise ConfigurationError("GEMINI_API_KEY is required for analysis")

        self._client = genai.Client(api_key=self._api_key)
        self._config = types.GenerateContentConfig(
            response_mime_type="application/json",
            system_instruction=SYSTEM_INSTRUCTION,
        )

    @property
    def model(self) -> str:
        return self._model

    async def analyze_media(
        self, file: MediaFile, url: str, media_type: MediaType
    ) -> MediaAnalysis:
        """Summarize an image or video the user attached to a bookmark.

        Args:
            file: The attached media file.
            url: The bookmarked URL, given to the model as context.
            media_type: VIDEO is described as a video; anything else as an image.

        Returns:
            MediaAnalysis with title, one-sentence summary and tags.

        Raises:
            AnalysisError: If the file can't be read, the call fails, or the
                reply isn't the expected JSON.
        """
        try:
            media = await encode_file(file)
        except EncodingError as e:
            raise AnalysisError(f"Could not prepare media for analysis: {e}") from e

        kind = "video" if media_type == MediaType.VIDEO else "image"
        contents: list[Any] = [
            types.Part.from_bytes(data=media.to_bytes(), mime_type=media.mime_type),
            MEDIA_PROMPT.format(media_type=kind, url=url),
        ]

        text = await self._generate(contents)
        return _validate(MediaAnalysis, _parse_json_response(text))

    async def find_connections(
        self, bookmarks: Iterable[Bookmark]
    ) -> ConnectionReport:
        """Ask the model for a recap and up to three thematic connections.

        An empty collection short-circuits without calling the model.

        Raises:
            AnalysisError: If the call fails or the reply isn't the expected JSON.
        """
        bookmarks = list(bookmarks)
        if not bookmarks:
            return ConnectionReport(summary=EMPTY_RECAP_SUMMARY, insights=[])

        prompt = CONNECTIONS_PROMPT.format(bookmarks=format_bookmarks(bookmarks))
        text = await self._generate(prompt)
        return _validate(ConnectionReport, _parse_json_response(text))

    async def _generate(self, contents: Any) -> str:
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=contents,
                config=self._config,
            )
        except Exception as e:
            raise AnalysisError(f"Gemini API error: {e}") from e

        text = response.text
        if not text:
            raise AnalysisError("No response from Gemini")
        return text


def _parse_json_response(response_text: str) -> dict[str, Any]:
    """Parse a JSON object out of the model's reply.

    JSON wrapped in a markdown code fence is accepted.

    Raises:
        AnalysisError: If the text is not a JSON object.
    """
    text = response_text.strip()

    if text.startswith("```"):
        lines = text.split("\n")[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)

    try:
        result = json.loads(text)
    except json.JSONDecodeError as e:
        raise AnalysisError(f"Gemini response is not valid JSON: {e.msg}") from e

    if not isinstance(result, dict):
        raise AnalysisError(
            f"Gemini response is not a JSON object: {type(result).__name__}"
        )
    return result


def _validate(model: type[_Model], data: dict[str, Any]) -> _Model:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise AnalysisError(
            f"Gemini response has unexpected shape: {e.error_count()} error(s)"
        ) from e
