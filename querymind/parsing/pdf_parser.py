"""PDF text extraction using pypdf.

Turns an uploaded PDF into a single plain-text string for use as chat context.
"""

import io
import logging

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
PDF_MAGIC_BYTES = b"%PDF"


class PDFText(BaseModel):
    """Text extracted from a PDF file.

    Attributes:
        text: Page texts joined by single spaces.
        pages: Total number of pages in the document.
    """

    text: str
    pages: int = Field(ge=0)


class PDFParseError(Exception):
    """Raised when PDF text extraction fails."""

    pass


def _validate_pdf_bytes(file_content: bytes) -> None:
    """Reject input that cannot be a PDF before handing it to pypdf.

    Raises:
        PDFParseError: If validation fails.
    """
    if not file_content:
        raise PDFParseError("Empty file provided")

    if len(file_content) > MAX_FILE_SIZE:
        size_mb = len(file_content) / (1024 * 1024)
        raise PDFParseError(f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)")

    if not file_content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise PDFParseError("Invalid PDF: file does not start with PDF header")


def extract_pdf_text(file_content: bytes) -> PDFText:
    """Extract the text of every page of a PDF.

    Pages that fail to extract are logged and skipped.

    Args:
        file_content: Raw bytes of the PDF file.

    Returns:
        PDFText with the combined text and page count.

    Raises:
        PDFParseError: If the file is invalid, too large, empty, or corrupt.
    """
    _validate_pdf_bytes(file_content)

    try:
        reader = PdfReader(io.BytesIO(file_content))
        pages = len(reader.pages)
    except PdfReadError as e:
        raise PDFParseError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise PDFParseError(f"Failed to read PDF: {e}") from e

    text_parts: list[str] = []
    for i, page in enumerate(reader.pages):
        try:
            text_parts.append(page.extract_text() or "")
        except Exception as e:
            logger.warning(f"Failed to extract text from page {i + 1}: {e}")

    text = " ".join(text_parts).strip()
    if not text:
        logger.warning("PDF contains no extractable text (may be scanned/image-based)")

    return PDFText(text=text, pages=pages)
