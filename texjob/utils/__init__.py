"""
Shared utilities for texjob.

Common functionality used across contexts:
- Logger setup with provenance
- Timestamps
- PDF inspection
"""

from texjob.utils.pdf_processing import page_count
from texjob.utils.timestamp import now

__all__ = ["now", "page_count"]
