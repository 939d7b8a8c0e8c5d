"""Attachment classification by declared content type and URL."""

from __future__ import annotations

from enum import Enum
import mimetypes
from typing import Callable
from urllib.parse import urlparse

from media_ingestion.heads.audio_video import TRANSCODABLE_VIDEO_TYPES
from media_ingestion.normalize.documents import DOCUMENT_TYPES, base_content_type


class HandlerKind(str, Enum):
    DOCUMENT = "document"
    PLAINTEXT = "plaintext"
    AUDIO_VIDEO = "audio_video"
    IMAGE = "image"
    VIDEO = "video"
    GENERIC = "generic"


TEXT_APPLICATION_TYPES = {
    "application/json",
    "application/xml",
    "application/xhtml+xml",
    "application/javascript",
}
# too vague to mean "document"; left to the video and generic arms
OPAQUE_TYPES = {"", "application/octet-stream"}


def sniff_content_type(url: str) -> str | None:
    """Guess a content type from the URL path suffix."""
    try:
        path = urlparse(url).path or url
    except ValueError:
        return None
    guessed, _ = mimetypes.guess_type(path)
    return guessed


def classify(content_type: str | None, url: str, is_video_url: Callable[[str], bool] | None = None) -> HandlerKind:
    """Pick exactly one handler kind; the first matching arm wins."""
    kind = base_content_type(content_type)
    if kind in DOCUMENT_TYPES:
        return HandlerKind.DOCUMENT
    if kind.startswith("text/") or kind in TEXT_APPLICATION_TYPES:
        return HandlerKind.PLAINTEXT
    if kind.startswith("application/") and kind not in OPAQUE_TYPES:
        return HandlerKind.DOCUMENT
    if kind.startswith("audio/") or kind in TRANSCODABLE_VIDEO_TYPES:
        return HandlerKind.AUDIO_VIDEO
    if kind.startswith("image/"):
        return HandlerKind.IMAGE
    if kind.startswith("video/"):
        return HandlerKind.VIDEO
    if kind in OPAQUE_TYPES and is_video_url is not None and is_video_url(url):
        return HandlerKind.VIDEO
    return HandlerKind.GENERIC
