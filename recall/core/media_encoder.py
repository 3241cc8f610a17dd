"""Media encoder for Recall.

Turns a user-supplied image or video file into base64 text, used both as
the inline preview stored on the bookmark and as the inline part sent to
the analysis model.
"""

import asyncio
import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from recall.core.bookmark import MediaType
from recall.core.exceptions import EncodingError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

# mimetypes misses some of these depending on the platform's mime database
_EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".webm": "video/webm",
    ".m4v": "video/x-m4v",
}


@dataclass(frozen=True)
class MediaFile:
    """A file attached to a bookmark.

    Attributes:
        path: Location of the file on disk
        mime_type: Declared content type (e.g. "image/png")
        name: Display name, the file name by default
    """

    path: Path
    mime_type: str
    name: str = ""

    @classmethod
    def from_path(
        cls, path: str | Path, mime_type: Optional[str] = None
    ) -> "MediaFile":
        """Describe a file on disk, guessing its MIME type from the extension."""
        path = Path(path)
        if mime_type is None:
            mime_type, _ = mimetypes.guess_type(path.name)
        if mime_type is None:
            mime_type = _EXTENSION_MIME_TYPES.get(path.suffix.lower(), DEFAULT_MIME_TYPE)
        return cls(path=path, mime_type=mime_type, name=path.name)

    @property
    def media_type(self) -> MediaType:
        return media_type_for(self.mime_type)


@dataclass(frozen=True)
class EncodedMedia:
    """Base64 payload of a media file, without any data-URI header."""

    data: str
    mime_type: str

    def as_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


def media_type_for(mime_type: str) -> MediaType:
    """Map a declared content type onto a bookmark MediaType.

    ``video/*`` is video, ``image/*`` is image, anything else is text.
    """
    if mime_type.startswith("video/"):
        return MediaType.VIDEO
    if mime_type.startswith("image/"):
        return MediaType.IMAGE
    return MediaType.TEXT


async def encode_file(file: MediaFile) -> EncodedMedia:
    """Read a media file and base64-encode it.

    The read runs in the default executor so the event loop keeps serving
    other bookmarks meanwhile.

    Args:
        file: The file to encode.

    Returns:
        EncodedMedia with the payload and the file's MIME type.

    Raises:
        EncodingError: If the file cannot be read.
    """
    loop = asyncio.get_running_loop()
    try:
        raw = await loop.run_in_executor(None, file.path.read_bytes)
    except OSError as e:
        raise EncodingError(f"Failed to read {file.path}: {e}") from e

    logger.debug("Encoded %s (%d bytes, %s)", file.name, len(raw), file.mime_type)
    return EncodedMedia(
        data=base64.standard_b64encode(raw).decode("ascii"),
        mime_type=file.mime_type,
    )
