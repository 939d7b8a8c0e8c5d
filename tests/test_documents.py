import io

import pytest

from media_ingestion.errors import ConversionError
from media_ingestion.normalize.documents import DocumentConverter, base_content_type
from media_ingestion.normalize.html import html_to_text

DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PPTX = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


def test_docx_converter_extracts_text():
    docx = pytest.importorskip("docx")
    doc = docx.Document()
    doc.add_paragraph("Hello Docx")
    buf = io.BytesIO()
    doc.save(buf)
    text = DocumentConverter().convert(buf.getvalue(), DOCX)
    assert "Hello Docx" in text


def test_pptx_converter_extracts_text():
    pptx = pytest.importorskip("pptx")
    pres = pptx.Presentation()
    slide = pres.slides.add_slide(pres.slide_layouts[5])
    slide.shapes.title.text = "Hello Slides"
    buf = io.BytesIO()
    pres.save(buf)
    text = DocumentConverter().convert(buf.getvalue(), PPTX)
    assert "Hello Slides" in text


def test_converter_rejects_unsupported_type():
    with pytest.raises(ConversionError):
        DocumentConverter().convert(b"data", "application/zip")


def test_converter_wraps_parse_errors():
    with pytest.raises(ConversionError):
        DocumentConverter().convert(b"not a pdf", "application/pdf")


def test_base_content_type():
    assert base_content_type("Application/PDF; name=x.pdf") == "application/pdf"
    assert base_content_type(None) == ""


def test_html_to_text_drops_scripts():
    html = "<html><head><script>var x = 1;</script></head><body><p>Hello</p><p>World</p></body></html>"
    text = html_to_text(html)
    assert "Hello" in text and "World" in text
    assert "var x" not in text
