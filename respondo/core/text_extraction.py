"""
Text extraction and normalization for uploaded documents.

Turns stored file bytes into clean text ready for chunking. PDFs are parsed
with LangChain's PyPDFLoader; every other declared type must decode as UTF-8.

Dependencies: langchain_community.document_loaders
System role: Extraction stage of the document ingestion pipeline
"""

import logging
import os
import re
import tempfile
import unicodedata

from langchain_community.document_loaders import PyPDFLoader

from respondo.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)

EXTRACTION_FAILED_MESSAGE = "Could not extract text from document"

_CONTROL_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffd\ufffe\uffff]")
_SHORT_UNICODE_ESCAPE = re.compile(r"\\u[0-9A-Fa-f]{0,3}([^0-9A-Fa-f]|$)")
_LONG_UNICODE_ESCAPE = re.compile(r"\\u[0-9A-Fa-f]{5,}")
_SHORT_HEX_ESCAPE = re.compile(r"\\x[0-9A-Fa-f]?([^0-9A-Fa-f]|$)")
_LONG_HEX_ESCAPE = re.compile(r"\\x[0-9A-Fa-f]{3,}")
_COMBINING_MARKS = re.compile("[\u0300-\u036f]")


def normalize_text(text: str) -> str:
    """
    Strip characters that break downstream embedding requests.

    Removes control characters and replacement code points, drops malformed
    literal \\u and \\x escape sequences, applies NFKD normalization and
    removes the combining diacritical marks it decomposes out.

    Args:
        text: Raw extracted text

    Returns:
        str: Normalized text
    """
    text = _CONTROL_CHARS.sub("", text)
    text = _SHORT_UNICODE_ESCAPE.sub(r"\1", text)
    text = _LONG_UNICODE_ESCAPE.sub("", text)
    text = _SHORT_HEX_ESCAPE.sub(r"\1", text)
    text = _LONG_HEX_ESCAPE.sub("", text)
    text = unicodedata.normalize("NFKD", text)
    return _COMBINING_MARKS.sub("", text)


class DocumentTextExtractor:
    """Extract normalized text from document bytes by declared type."""

    def __init__(self, max_chars: int = 10_000) -> None:
        """
        Args:
            max_chars: Raw text is cut to this many characters before
                normalization (0 disables the limit)
        """
        self._max_chars = max_chars

    def extract(
        self,
        data: bytes,
        file_type: str,
        document_id: str | None = None,
    ) -> str:
        """
        Extract and normalize text.

        Args:
            data: File content
            file_type: Declared type (file extension without the dot)
            document_id: Used for error context only

        Returns:
            str: Normalized text (may be empty)

        Raises:
            ExtractionError: When the bytes cannot be read as text
        """
        file_type = (file_type or "").lower().lstrip(".")
        try:
            if file_type == "pdf":
                raw = self._extract_pdf(data)
            else:
                raw = data.decode("utf-8-sig")
        except Exception as e:
            logger.warning(
                f"{__name__}:extract - Extraction failed",
                extra={
                    "document_id": document_id,
                    "file_type": file_type,
                    "error": str(e),
                },
            )
            raise ExtractionError(
                EXTRACTION_FAILED_MESSAGE,
                document_id=document_id,
                file_type=file_type,
                details={"cause": type(e).__name__},
            ) from e

        if self._max_chars > 0:
            raw = raw[: self._max_chars]
        return normalize_text(raw)

    @staticmethod
    def _extract_pdf(data: bytes) -> str:
        # PyPDFLoader only reads from a path
        fd, path = tempfile.mkstemp(prefix="respondo_", suffix=".pdf")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            pages = PyPDFLoader(path).load()
        finally:
            os.unlink(path)

        if not pages:
            raise ValueError("PDF document contains no pages")
        return "\n\n".join(page.page_content for page in pages)
