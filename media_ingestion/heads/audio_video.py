"""Audio and uploaded-video transcription head."""

from __future__ import annotations

import logging
from typing import Protocol

from media_ingestion.errors import ConversionError, ServiceNotFoundError
from media_ingestion.heads.base import (
    SOURCE_AUDIO,
    SOURCE_VIDEO,
    AttachmentRef,
    Fetcher,
    MediaRecord,
    Summarizer,
    Summary,
    Transcriber,
    degraded_record,
    summarize_or_default,
)
from media_ingestion.normalize.documents import base_content_type


logger = logging.getLogger(__name__)

# containers whose audio track is pulled out with ffmpeg before transcription
TRANSCODABLE_VIDEO_TYPES = {
    "video/mp4": ".mp4",
    "video/webm": ".webm",
    "video/quicktime": ".mov",
}


class AudioExtractor(Protocol):
    def extract_audio(self, data: bytes, suffix: str = ".mp4") -> bytes:
        ...


class AudioVideoHead:
    name = "audio_video"

    def __init__(
        self,
        fetcher: Fetcher,
        transcoder: AudioExtractor | None,
        transcriber: Transcriber | None,
        summarizer: Summarizer | None,
        max_input_tokens: int = 100000,
    ) -> None:
        self.fetcher = fetcher
        self.transcoder = transcoder
        self.transcriber = transcriber
        self.summarizer = summarizer
        self.max_input_tokens = max_input_tokens

    def process(self, attachment: AttachmentRef) -> MediaRecord:
        kind = base_content_type(attachment.content_type)
        source = SOURCE_AUDIO if kind.startswith("audio/") else SOURCE_VIDEO
        try:
            if self.transcriber is None:
                raise ServiceNotFoundError("Transcription")
            audio = self._audio_bytes(attachment, kind)
            transcript = self.transcriber.transcribe(audio, filename=_audio_filename(attachment, kind))
        except Exception:
            logger.exception("Error processing audio/video attachment %s", attachment.url)
            return degraded_record(
                attachment,
                title="Audio/Video Attachment",
                source=source,
                description="An audio/video attachment (transcription failed)",
                label="audio/video",
                include_content_type=True,
            )
        summary = Summary()
        if transcript:
            summary = summarize_or_default(self.summarizer, transcript, self.max_input_tokens)
        return MediaRecord(
            id=attachment.id,
            url=attachment.url,
            title=summary.title or "Audio/Video Attachment",
            source=source,
            description=summary.description or "User-uploaded audio/video attachment which has been transcribed",
            text=transcript or "Audio/video content not available",
        )

    def _audio_bytes(self, attachment: AttachmentRef, kind: str) -> bytes:
        if kind.startswith("audio/"):
            return self.fetcher.fetch(attachment.url)
        suffix = TRANSCODABLE_VIDEO_TYPES.get(kind)
        if suffix is None:
            raise ConversionError(f"Unsupported audio/video format: {kind or 'unknown'}")
        if self.transcoder is None:
            raise ServiceNotFoundError("Transcoding")
        data = self.fetcher.fetch(attachment.url)
        return self.transcoder.extract_audio(data, suffix=suffix)


def _audio_filename(attachment: AttachmentRef, kind: str) -> str:
    if kind.startswith("audio/") and attachment.name:
        return attachment.name
    if kind.startswith("audio/"):
        subtype = kind.split("/", 1)[1] or "mpeg"
        return f"audio.{'mp3' if subtype == 'mpeg' else subtype}"
    return "audio.mp3"
