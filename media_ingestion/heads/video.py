"""Hosted-video head: hands recognized video URLs to the video service."""

from __future__ import annotations

import logging
from typing import Protocol

from media_ingestion.errors import ServiceNotFoundError
from media_ingestion.heads.base import (
    SOURCE_VIDEO,
    AttachmentRef,
    MediaRecord,
    degraded_record,
)


logger = logging.getLogger(__name__)


class VideoProcessor(Protocol):
    def is_video_url(self, url: str) -> bool:
        ...

    def source_for(self, url: str) -> str:
        ...

    def process_video(self, url: str, timeout: float | None = None) -> MediaRecord:
        ...


class VideoHead:
    name = "video"

    def __init__(self, video_service: VideoProcessor | None, timeout: float | None = None) -> None:
        self.video_service = video_service
        self.timeout = timeout

    def process(self, attachment: AttachmentRef) -> MediaRecord:
        if self.video_service is None:
            raise ServiceNotFoundError("Video")
        if not self.video_service.is_video_url(attachment.url):
            return placeholder_record(attachment)
        try:
            record = self.video_service.process_video(attachment.url, timeout=self.timeout)
        except Exception:
            logger.exception("Error processing video %s", attachment.url)
            return self.fallback(attachment)
        return record.for_attachment(attachment, source=self.video_service.source_for(attachment.url))

    def fallback(self, attachment: AttachmentRef) -> MediaRecord:
        return degraded_record(
            attachment,
            title="Video Attachment",
            source=SOURCE_VIDEO,
            description="A video attachment (transcription failed)",
            label="video",
        )


def placeholder_record(attachment: AttachmentRef) -> MediaRecord:
    return MediaRecord(
        id=attachment.id,
        url=attachment.url,
        title="Video Attachment",
        source=SOURCE_VIDEO,
        description="A video attachment",
        text="Video content not available",
    )
