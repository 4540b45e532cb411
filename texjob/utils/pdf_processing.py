"""PDF inspection helpers for compiled artifacts."""

from pathlib import Path
from typing import Optional

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError


def page_count(pdf_path: Path) -> Optional[int]:
    """Get page count from PDF, or None if missing or unreadable."""
    if pdf_path is None or not Path(pdf_path).exists():
        return None
    try:
        reader = PdfReader(str(pdf_path))
        return len(reader.pages)
    except (PdfReadError, OSError, ValueError):
        return None
