"""Chart PDF to text, one "Página N" marker line before each page."""

import io
import logging
from pathlib import Path
from typing import BinaryIO

from pypdf import PdfReader

logger = logging.getLogger(__name__)


def extract_pdf_text(source: str | Path | bytes | BinaryIO) -> str:
    """Extract the text layer of a PDF (no OCR).

    Args:
        source: File path, raw bytes or a binary file object.
    """
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    elif isinstance(source, Path):
        source = str(source)

    reader = PdfReader(source)
    parts: list[str] = []
    for idx, page in enumerate(reader.pages):
        text = page.extract_text() or ""
        parts.append(f"Página {idx + 1}\n{text}")

    logger.debug(f"Extracted {len(reader.pages)} page(s) from PDF")
    return "\n".join(parts)
