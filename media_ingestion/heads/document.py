"""Document (PDF, DOCX, PPTX) processing head."""

from __future__ import annotations

import logging

from media_ingestion.errors import ServiceNotFoundError
from media_ingestion.heads.base import (
    SOURCE_DOCUMENT,
    SOURCE_PDF,
    AttachmentRef,
    Fetcher,
    MediaRecord,
    Summarizer,
    TextConverter,
    degraded_record,
    summarize_or_default,
)
from media_ingestion.normalize.documents import PDF_TYPES, base_content_type


logger = logging.getLogger(__name__)


class DocumentHead:
    name = "document"

    def __init__(
        self,
        fetcher: Fetcher,
        converter: TextConverter | None,
        summarizer: Summarizer | None,
        max_input_tokens: int = 100000,
    ) -> None:
        self.fetcher = fetcher
        self.converter = converter
        self.summarizer = summarizer
        self.max_input_tokens = max_input_tokens

    def process(self, attachment: AttachmentRef) -> MediaRecord:
        is_pdf = base_content_type(attachment.content_type) in PDF_TYPES or not attachment.content_type
        source = SOURCE_PDF if is_pdf else SOURCE_DOCUMENT
        label = "PDF" if is_pdf else "document"
        heading = "PDF" if is_pdf else "Document"
        try:
            if self.converter is None:
                raise ServiceNotFoundError("Document conversion")
            data = self.fetcher.fetch(attachment.url)
            text = self.converter.convert(data, attachment.content_type)
        except Exception:
            logger.exception("Error processing %s attachment %s", label, attachment.url)
            return degraded_record(
                attachment,
                title=f"{heading} Attachment (conversion failed)",
                source=source,
                description=f"A {label} document that could not be converted to text",
                label=label,
            )
        summary = summarize_or_default(self.summarizer, text, self.max_input_tokens)
        return MediaRecord(
            id=attachment.id,
            url=attachment.url,
            title=summary.title or f"{heading} Attachment",
            source=source,
            description=summary.description or f"A {label} document",
            text=text,
        )
