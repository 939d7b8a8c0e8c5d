"""Head interfaces and record models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
import logging
from typing import Protocol


logger = logging.getLogger(__name__)

SOURCE_AUDIO = "Audio"
SOURCE_VIDEO = "Video"
SOURCE_PDF = "PDF"
SOURCE_DOCUMENT = "Document"
SOURCE_PLAINTEXT = "Plaintext"
SOURCE_IMAGE = "Image"
SOURCE_YOUTUBE = "YouTube"
SOURCE_VIMEO = "Vimeo"
SOURCE_GENERIC = "Generic"


@dataclass(frozen=True)
class AttachmentRef:
    id: str
    url: str
    content_type: str | None = None
    name: str | None = None
    size_bytes: int | None = None

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("attachment url must be non-empty")


@dataclass(frozen=True)
class MediaRecord:
    id: str
    url: str
    title: str
    source: str
    description: str
    text: str
    degraded: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict) -> "MediaRecord":
        return cls(
            id=str(payload.get("id") or ""),
            url=str(payload.get("url") or ""),
            title=str(payload.get("title") or ""),
            source=str(payload.get("source") or ""),
            description=str(payload.get("description") or ""),
            text=str(payload.get("text") or ""),
            degraded=bool(payload.get("degraded", False)),
        )

    def for_attachment(self, attachment: AttachmentRef, **changes) -> "MediaRecord":
        return replace(self, id=attachment.id, url=attachment.url, **changes)


@dataclass(frozen=True)
class Summary:
    title: str = ""
    description: str = ""


class Head(Protocol):
    name: str

    def process(self, attachment: AttachmentRef) -> MediaRecord:
        ...


class Fetcher(Protocol):
    def fetch(self, url: str) -> bytes:
        ...

    def fetch_text(self, url: str) -> str:
        ...


class TextConverter(Protocol):
    def convert(self, data: bytes, content_type: str | None = None) -> str:
        ...


class Summarizer(Protocol):
    def summarize(self, text: str, max_input_tokens: int) -> Summary:
        ...


class Transcriber(Protocol):
    def transcribe(self, audio: bytes, filename: str = "audio.mp3") -> str:
        ...


class ImageDescriber(Protocol):
    def describe(self, image_url: str) -> Summary:
        ...


def attachment_details(attachment: AttachmentRef, label: str, include_content_type: bool = False) -> str:
    name = attachment.name or "unknown"
    size = attachment.size_bytes if attachment.size_bytes is not None else "unknown"
    text = f"This is {_article(label)} {label} attachment. File name: {name}, Size: {size} bytes"
    if include_content_type:
        text += f", Content type: {attachment.content_type or 'unknown'}"
    return text


def _article(label: str) -> str:
    return "an" if label[:1].lower() in "aeiou" else "a"


def degraded_record(
    attachment: AttachmentRef,
    *,
    title: str,
    source: str,
    description: str,
    label: str,
    include_content_type: bool = False,
) -> MediaRecord:
    return MediaRecord(
        id=attachment.id,
        url=attachment.url,
        title=title,
        source=source,
        description=description,
        text=attachment_details(attachment, label, include_content_type),
        degraded=True,
    )


def summarize_or_default(summarizer: Summarizer | None, text: str, max_input_tokens: int) -> Summary:
    """A missing or failing summarizer costs the title and description, never the extracted text."""
    if summarizer is None:
        logger.warning("No summarizer configured; using default title and description")
        return Summary()
    try:
        return summarizer.summarize(text, max_input_tokens)
    except Exception:
        logger.exception("Summarization failed")
        return Summary()
