"""Document text extraction endpoint.

Accepts a PDF upload and returns its plain text. Nothing is stored.
"""

import logging

from fastapi import APIRouter, File, UploadFile, status
from fastapi.responses import JSONResponse

from querymind.models.schemas import ErrorResponse, ExtractTextResponse
from querymind.parsing.pdf_parser import MAX_FILE_SIZE, PDFParseError, extract_pdf_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@router.post(
    "/parse-pdf",
    response_model=ExtractTextResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def parse_pdf(file: UploadFile | None = File(None)) -> ExtractTextResponse | JSONResponse:
    """Extract the text of an uploaded PDF.

    Args:
        file: The uploaded PDF file (multipart/form-data field ``file``).

    Returns:
        ExtractTextResponse with the document text.

    Raises:
        400: No file provided.
        413: File exceeds 10MB limit.
        500: The file could not be parsed.
    """
    if file is None:
        return _error(status.HTTP_400_BAD_REQUEST, "No file provided")

    content = await file.read()

    if len(content) > MAX_FILE_SIZE:
        size_mb = len(content) / (1024 * 1024)
        return _error(
            status.HTTP_413_CONTENT_TOO_LARGE,
            f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)",
        )

    try:
        extracted = extract_pdf_text(content)
    except PDFParseError as e:
        logger.warning(f"Error parsing PDF {file.filename}: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to parse PDF")

    logger.info(f"Extracted text from {file.filename} ({extracted.pages} pages)")
    return ExtractTextResponse(text=extracted.text)
