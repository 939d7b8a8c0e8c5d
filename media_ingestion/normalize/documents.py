"""Document-to-text converters (PDF, DOCX, PPTX)."""

from __future__ import annotations

import io
import logging

from media_ingestion.errors import ConversionError


logger = logging.getLogger(__name__)

PDF_TYPES = {"application/pdf"}
DOCX_TYPES = {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}
PPTX_TYPES = {"application/vnd.openxmlformats-officedocument.presentationml.presentation"}
DOCUMENT_TYPES = PDF_TYPES | DOCX_TYPES | PPTX_TYPES


def pdf_to_text(data: bytes) -> str:
    try:
        from pypdf import PdfReader  # type: ignore
    except Exception as exc:  # pragma: no cover - import guard
        raise RuntimeError("Missing dependency: pypdf") from exc
    reader = PdfReader(io.BytesIO(data))
    chunks = []
    for page in reader.pages:
        text = page.extract_text() or ""
        if text:
            chunks.append(text)
    logger.debug("Extracted %d of %d PDF pages", len(chunks), len(reader.pages))
    return "\n".join(chunks).strip()


def docx_to_text(data: bytes) -> str:
    try:
        from docx import Document  # type: ignore
    except Exception as exc:  # pragma: no cover - import guard
        raise RuntimeError("Missing dependency: python-docx") from exc
    doc = Document(io.BytesIO(data))
    paragraphs = [para.text for para in doc.paragraphs if para.text]
    table_text = []
    for table in doc.tables:
        for row in table.rows:
            table_text.append("\t".join(cell.text for cell in row.cells))
    return "\n".join(paragraphs + table_text).strip()


def pptx_to_text(data: bytes) -> str:
    try:
        from pptx import Presentation  # type: ignore
    except Exception as exc:  # pragma: no cover - import guard
        raise RuntimeError("Missing dependency: python-pptx") from exc
    pres = Presentation(io.BytesIO(data))
    chunks = []
    for slide in pres.slides:
        for shape in slide.shapes:
            if hasattr(shape, "text") and shape.text:
                chunks.append(shape.text)
        if slide.has_notes_slide and slide.notes_slide:
            notes = slide.notes_slide.notes_text_frame
            if notes and notes.text:
                chunks.append(notes.text)
    return "\n".join(chunks).strip()


def base_content_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


class DocumentConverter:
    """Picks a converter by content type; an empty result is a conversion failure."""

    def convert(self, data: bytes, content_type: str | None = None) -> str:
        kind = base_content_type(content_type) or "application/pdf"
        if kind in PDF_TYPES:
            converter = pdf_to_text
        elif kind in DOCX_TYPES:
            converter = docx_to_text
        elif kind in PPTX_TYPES:
            converter = pptx_to_text
        else:
            raise ConversionError(f"Unsupported document type: {kind}")
        try:
            text = converter(data)
        except Exception as exc:
            raise ConversionError(f"Failed to convert {kind}: {exc}") from exc
        if not text:
            raise ConversionError(f"No extractable text in {kind} document")
        return text
