import asyncio
import logging
import re
from abc import ABC, abstractmethod

import fitz  # PyMuPDF

from resumind.models.submission import ConversionResult, Document

logger = logging.getLogger(__name__)


def image_filename(pdf_filename: str) -> str:
    """resume.pdf -> resume.png"""
    stem = re.sub(r"\.pdf$", "", pdf_filename, flags=re.IGNORECASE)
    return f"{stem}.png"


class DocumentConverter(ABC):
    @abstractmethod
    async def convert(self, document: Document) -> ConversionResult:
        """Render a document to an image. A result with file=None signals failure."""


class PdfToImageConverter(DocumentConverter):
    def __init__(self, scale: float = 4.0) -> None:
        self._scale = scale

    def render_first_page(self, document: Document) -> bytes:
        """Rasterize page 1 of a PDF to PNG bytes. Raises on unreadable input."""
        with fitz.open(stream=document.content, filetype="pdf") as pdf:
            if pdf.page_count == 0:
                raise ValueError("PDF has no pages")
            pixmap = pdf[0].get_pixmap(matrix=fitz.Matrix(self._scale, self._scale))
            return pixmap.tobytes("png")

    async def convert(self, document: Document) -> ConversionResult:
        """Never raises; failures are reported through ConversionResult.error."""
        try:
            png = await asyncio.to_thread(self.render_first_page, document)
        except Exception as exc:
            logger.error("[convert] failed | file=%s | error=%s", document.filename, exc)
            return ConversionResult(file=None, error=f"Failed to convert PDF: {exc}")

        name = image_filename(document.filename)
        logger.info("[convert] rendered | file=%s | bytes=%d", name, len(png))
        return ConversionResult(
            file=Document(filename=name, content=png, content_type="image/png")
        )
