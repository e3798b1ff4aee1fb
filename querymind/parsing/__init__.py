"""PDF text extraction for document uploads.

Extracts plain text with pypdf so that uploaded documents can be attached
to the conversation as context.
"""

from querymind.parsing.pdf_parser import MAX_FILE_SIZE, PDFParseError, PDFText, extract_pdf_text

__all__ = ["MAX_FILE_SIZE", "PDFParseError", "PDFText", "extract_pdf_text"]
