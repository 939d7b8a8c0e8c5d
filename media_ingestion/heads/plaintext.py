"""Plain text processing head."""

from __future__ import annotations

import logging

from media_ingestion.heads.base import (
    SOURCE_PLAINTEXT,
    AttachmentRef,
    Fetcher,
    MediaRecord,
    Summarizer,
    degraded_record,
    summarize_or_default,
)
from media_ingestion.normalize.documents import base_content_type
from media_ingestion.normalize.html import html_to_text


logger = logging.getLogger(__name__)

HTML_TYPES = {"text/html", "application/xhtml+xml"}


class PlaintextHead:
    name = "plaintext"

    def __init__(self, fetcher: Fetcher, summarizer: Summarizer | None, max_input_tokens: int = 100000) -> None:
        self.fetcher = fetcher
        self.summarizer = summarizer
        self.max_input_tokens = max_input_tokens

    def process(self, attachment: AttachmentRef) -> MediaRecord:
        try:
            text = self.fetcher.fetch_text(attachment.url)
            if base_content_type(attachment.content_type) in HTML_TYPES:
                text = html_to_text(text) or ""
        except Exception:
            logger.exception("Error processing plaintext attachment %s", attachment.url)
            return degraded_record(
                attachment,
                title="Plaintext Attachment (retrieval failed)",
                source=SOURCE_PLAINTEXT,
                description="A plaintext document that could not be retrieved",
                label="plaintext",
            )
        if not text.strip():
            return MediaRecord(
                id=attachment.id,
                url=attachment.url,
                title="Plaintext Attachment",
                source=SOURCE_PLAINTEXT,
                description="An empty plaintext document",
                text="(empty document)",
            )
        summary = summarize_or_default(self.summarizer, text, self.max_input_tokens)
        return MediaRecord(
            id=attachment.id,
            url=attachment.url,
            title=summary.title or "Plaintext Attachment",
            source=SOURCE_PLAINTEXT,
            description=summary.description or "A plaintext document",
            text=text,
        )
