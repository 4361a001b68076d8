"""
File Processor
--------------
Purpose: Extract plain text from uploaded files, dispatched by extension.
"""

import io
import os
import logging
from typing import Callable, Dict, List

import pandas as pd
import PyPDF2

from .exceptions import ExtractionError, UnsupportedFileTypeError

logger = logging.getLogger(__name__)


def get_extension(filename: str) -> str:
    """Lower-cased extension without the dot ("" if there is none)."""
    return os.path.splitext(filename)[1].lstrip(".").lower()


def extract_text_plain(data: bytes) -> str:
    """Decode UTF-8 text, tolerating a BOM and replacing undecodable bytes."""
    return data.decode("utf-8-sig", errors="replace")


def extract_text_pdf(data: bytes) -> str:
    """
    Extract text from PDF bytes using PyPDF2.

    Pages are separated by a blank line.

    Note: PyPDF2 works okay for text-based PDFs.
          Scanned PDFs yield little or no text.
    """
    reader = PyPDF2.PdfReader(io.BytesIO(data))
    page_texts = []

    for page in reader.pages:
        page_texts.append((page.extract_text() or "") + "\n\n")

    logger.debug(f"Extracted {len(reader.pages)} PDF pages")
    return "".join(page_texts)


def _cell_to_text(value) -> str:
    if value is None or pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def extract_text_xlsx(data: bytes) -> str:
    """
    Extract text from every sheet of a workbook.

    Each row becomes one line of comma-separated cell values; each sheet
    ends with a blank line.
    """
    sheets = pd.read_excel(io.BytesIO(data), sheet_name=None, header=None, engine="openpyxl")
    lines: List[str] = []

    for sheet_name, df in sheets.items():
        for row in df.itertuples(index=False):
            cells = [_cell_to_text(value) for value in row]
            while cells and cells[-1] == "":
                cells.pop()
            lines.append(", ".join(cells) + "\n")
        lines.append("\n")
        logger.debug(f"Extracted sheet {sheet_name} ({len(df)} rows)")

    return "".join(lines)


EXTRACTORS: Dict[str, Callable[[bytes], str]] = {
    "txt": extract_text_plain,
    "md": extract_text_plain,
    "pdf": extract_text_pdf,
    "xlsx": extract_text_xlsx,
}

SUPPORTED_EXTENSIONS = tuple(f".{ext}" for ext in EXTRACTORS)


def extract_text(filename: str, data: bytes) -> str:
    """
    Extract text from an uploaded file.

    Args:
        filename: Original file name, used for dispatch
        data: Raw file bytes

    Returns:
        Extracted text

    Raises:
        UnsupportedFileTypeError: Extension has no extractor
        ExtractionError: The file could not be parsed

    Example:
        >>> extract_text("notes.txt", b"Hello world.")
        'Hello world.'
    """
    extension = get_extension(filename)
    extractor = EXTRACTORS.get(extension)
    if extractor is None:
        raise UnsupportedFileTypeError(extension)

    logger.info(f"Extracting text from {filename}")
    try:
        text = extractor(data)
    except Exception as e:
        logger.error(f"Failed to extract text from {filename}: {e}")
        raise ExtractionError(f"Could not read {filename}: {e}") from e

    logger.info(f"✓ Extracted {len(text)} chars from {filename}")
    return text
