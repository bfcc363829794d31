"""PDF page source using PyMuPDF"""
import fitz  # PyMuPDF
from PIL import Image
import io
import logging
from typing import List, Protocol
from pydantic import BaseModel, Field
from ..exceptions import PDFProcessingError
from ..models.document import TextItem

logger = logging.getLogger(__name__)


class RawPage(BaseModel):
    """Unclassified page content as read from the PDF"""
    page_number: int
    text: str
    items: List[TextItem] = Field(default_factory=list)
    image_count: int = 0


class PDFSource(Protocol):
    """Black-box page source consumed by the ingestion pipeline"""

    @property
    def page_count(self) -> int: ...

    def extract_page(self, page_number: int) -> RawPage: ...

    def render_page(self, page_number: int, scale: float = 2.0) -> Image.Image: ...

    def close(self) -> None: ...


class PyMuPDFSource:
    """Read positioned text, image counts and bitmaps from a PDF byte blob"""

    def __init__(self, pdf_bytes: bytes):
        """
        Open a PDF from memory

        Args:
            pdf_bytes: Raw PDF file content

        Raises:
            PDFProcessingError: If the bytes are not a readable PDF
        """
        try:
            self.doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        except Exception as e:
            logger.error(f"Failed to open PDF: {e}")
            raise PDFProcessingError(f"Unable to read PDF: {e}") from e

        if self.doc.needs_pass:
            self.doc.close()
            raise PDFProcessingError("PDF is encrypted and cannot be read")
        if len(self.doc) == 0:
            self.doc.close()
            raise PDFProcessingError("PDF contains no pages")

        logger.debug(f"Opened PDF with {len(self.doc)} pages")

    @property
    def page_count(self) -> int:
        return len(self.doc)

    def extract_page(self, page_number: int) -> RawPage:
        """
        Extract text, positioned items and image count for a page

        Item coordinates are converted to a bottom-left origin so that larger
        y means higher on the page.

        Args:
            page_number: 1-based page number

        Returns:
            RawPage for the requested page
        """
        try:
            page = self.doc[page_number - 1]
            page_height = page.rect.height
            page_dict = page.get_text("dict", flags=fitz.TEXT_PRESERVE_WHITESPACE)

            items: List[TextItem] = []
            block_texts: List[str] = []

            for block in page_dict.get("blocks", []):
                if block.get("type") != 0:  # Text blocks only
                    continue

                line_texts = []
                for line in block.get("lines", []):
                    span_texts = []
                    for span in line.get("spans", []):
                        text = span.get("text", "")
                        span_texts.append(text)
                        if not text.strip():
                            continue
                        x, y = span.get("origin", (0.0, 0.0))
                        items.append(TextItem(
                            text=text,
                            x=x,
                            y=page_height - y,
                            height=span.get("size", 0.0)
                        ))
                    line_text = "".join(span_texts).strip()
                    if line_text:
                        line_texts.append(line_text)

                if line_texts:
                    block_texts.append("\n".join(line_texts))

            image_count = len(page.get_image_info())
        except PDFProcessingError:
            raise
        except Exception as e:
            logger.error(f"Error reading page {page_number}: {e}")
            raise PDFProcessingError(f"Unable to read page {page_number}: {e}") from e

        return RawPage(
            page_number=page_number,
            text="\n\n".join(block_texts),
            items=items,
            image_count=image_count
        )

    def render_page(self, page_number: int, scale: float = 2.0) -> Image.Image:
        """
        Render a page to a PIL image

        Args:
            page_number: 1-based page number
            scale: Zoom factor applied to both axes

        Returns:
            RGB PIL image of the page
        """
        page = self.doc[page_number - 1]
        pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale))
        image = Image.open(io.BytesIO(pix.tobytes("png")))
        return image.convert("RGB")

    def close(self) -> None:
        self.doc.close()
