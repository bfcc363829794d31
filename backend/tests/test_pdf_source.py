import pytest

from conftest import build_pdf
from intelliread.exceptions import PDFProcessingError
from intelliread.services.pdf_source import PyMuPDFSource


def test_extracts_text_items_and_images():
    data = build_pdf([
        {"title": "Field Guide", "text": "Birds of the northern coast are listed below."},
        {"image": True},
    ])

    source = PyMuPDFSource(data)
    try:
        assert source.page_count == 2

        first = source.extract_page(1)
        assert "Field Guide" in first.text
        assert "Birds of the northern coast" in first.text
        assert first.image_count == 0
        title = next(item for item in first.items if "Field Guide" in item.text)
        body = next(item for item in first.items if "Birds" in item.text)
        assert title.height > body.height
        # Bottom-left origin: the title sits above the body
        assert title.y > body.y

        second = source.extract_page(2)
        assert second.text.strip() == ""
        assert second.image_count == 1

        image = source.render_page(2, scale=0.5)
        assert image.mode == "RGB"
        assert image.width > 0
    finally:
        source.close()


def test_invalid_bytes_raise_processing_error():
    with pytest.raises(PDFProcessingError):
        PyMuPDFSource(b"this is not a pdf")
