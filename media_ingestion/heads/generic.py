"""Fallback head for attachments no other head claims."""

from __future__ import annotations

from media_ingestion.heads.base import SOURCE_GENERIC, AttachmentRef, MediaRecord


class GenericHead:
    name = "generic"

    def process(self, attachment: AttachmentRef) -> MediaRecord:
        return MediaRecord(
            id=attachment.id,
            url=attachment.url,
            title="Generic Attachment",
            source=SOURCE_GENERIC,
            description="A generic attachment",
            text="Attachment content not available",
        )
