"""Client-side document processing.

PDFs are sent to the extraction endpoint; anything else is read as UTF-8
text. The content is then cut into fixed-size chunks. Chunks carry an empty
embedding: nothing here performs retrieval.
"""

import logging
import uuid
from datetime import datetime

import httpx
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

PARSE_PDF_PATH = "/api/parse-pdf"
PDF_CONTENT_TYPE = "application/pdf"
CHUNK_SIZE = 1000


class DocumentError(Exception):
    """Raised when a document cannot be turned into text."""

    pass


class DocumentChunk(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    document_id: str = ""
    content: str
    embedding: list[float] = Field(default_factory=list)


class Document(BaseModel):
    """An uploaded document and its chunks.

    Attributes:
        id: Unique identifier.
        name: Original filename.
        content: Full extracted text.
        chunks: Fixed-size slices of the content.
        created_at: Processing timestamp.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    content: str
    chunks: list[DocumentChunk] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)


def chunk_content(content: str, chunk_size: int = CHUNK_SIZE) -> list[DocumentChunk]:
    """Split text into consecutive slices of at most ``chunk_size`` characters."""
    return [
        DocumentChunk(content=content[i : i + chunk_size])
        for i in range(0, len(content), chunk_size)
    ]


async def extract_content(
    name: str,
    data: bytes,
    content_type: str | None,
    client: httpx.AsyncClient,
) -> str:
    """Get the plain text of an uploaded file.

    Raises:
        DocumentError: If the extraction endpoint fails or the text is not UTF-8.
    """
    if content_type == PDF_CONTENT_TYPE or name.lower().endswith(".pdf"):
        try:
            response = await client.post(
                PARSE_PDF_PATH,
                files={"file": (name, data, PDF_CONTENT_TYPE)},
            )
        except httpx.RequestError as e:
            raise DocumentError(f"Failed to parse PDF: {e}") from e
        if not response.is_success:
            logger.warning(f"PDF extraction failed for {name}: {response.status_code}")
            raise DocumentError("Failed to parse PDF")
        return response.json()["text"]

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DocumentError(f"Unsupported file encoding: {name}") from e


async def process_document(
    name: str,
    data: bytes,
    content_type: str | None,
    client: httpx.AsyncClient,
) -> Document:
    """Extract and chunk an uploaded file.

    Args:
        name: Original filename.
        data: Raw file bytes.
        content_type: MIME type reported by the browser, if any.
        client: HTTP client pointed at the QueryMind API.

    Returns:
        Document whose chunks reference it by id.
    """
    content = await extract_content(name, data, content_type, client)
    document = Document(name=name, content=content, chunks=chunk_content(content))
    for chunk in document.chunks:
        chunk.document_id = document.id
    logger.info(f"Processed document {name} ({len(document.chunks)} chunks)")
    return document
