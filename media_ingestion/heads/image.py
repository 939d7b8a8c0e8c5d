"""Image processing head backed by a vision-description service."""

from __future__ import annotations

import logging

from media_ingestion.errors import ServiceNotFoundError
from media_ingestion.heads.base import (
    SOURCE_IMAGE,
    AttachmentRef,
    ImageDescriber,
    MediaRecord,
    degraded_record,
)


logger = logging.getLogger(__name__)


class ImageHead:
    name = "image"

    def __init__(self, describer: ImageDescriber | None) -> None:
        self.describer = describer

    def process(self, attachment: AttachmentRef) -> MediaRecord:
        try:
            if self.describer is None:
                raise ServiceNotFoundError("Image description")
            summary = self.describer.describe(attachment.url)
        except Exception:
            logger.exception("Error processing image attachment %s", attachment.url)
            return self.fallback(attachment)
        return MediaRecord(
            id=attachment.id,
            url=attachment.url,
            title=summary.title or "Image Attachment",
            source=SOURCE_IMAGE,
            description=summary.description or "An image attachment",
            text=summary.description or "Image content not available",
        )

    def fallback(self, attachment: AttachmentRef) -> MediaRecord:
        return degraded_record(
            attachment,
            title="Image Attachment",
            source=SOURCE_IMAGE,
            description="An image attachment (recognition failed)",
            label="image",
            include_content_type=True,
        )
