import dataclasses

import fitz
import pytest

from resumind.models.submission import Document
from resumind.services.conversion_service import PdfToImageConverter, image_filename


def _pdf_bytes() -> bytes:
    pdf = fitz.open()
    page = pdf.new_page(width=200, height=300)
    page.insert_text((20, 40), "Jane Doe - Engineer")
    data = pdf.tobytes()
    pdf.close()
    return data


def test_image_filename():
    assert image_filename("resume.pdf") == "resume.png"
    assert image_filename("CV.PDF") == "CV.png"
    assert image_filename("notes") == "notes.png"


@pytest.mark.asyncio
async def test_convert_renders_first_page():
    result = await PdfToImageConverter(scale=1.0).convert(Document("resume.pdf", _pdf_bytes()))
    assert result.error is None
    assert result.file is not None
    assert result.file.filename == "resume.png"
    assert result.file.content_type == "image/png"
    assert result.file.content.startswith(b"\x89PNG")
    assert [f.name for f in dataclasses.fields(result)] == ["file", "error"]


@pytest.mark.asyncio
async def test_convert_scale_changes_resolution():
    doc = Document("resume.pdf", _pdf_bytes())
    small = await PdfToImageConverter(scale=1.0).convert(doc)
    large = await PdfToImageConverter(scale=2.0).convert(doc)
    assert len(large.file.content) > len(small.file.content)


@pytest.mark.asyncio
async def test_convert_invalid_pdf_reports_error():
    result = await PdfToImageConverter().convert(Document("resume.pdf", b"not a pdf"))
    assert result.file is None
    assert result.error.startswith("Failed to convert PDF")
