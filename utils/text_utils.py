"""
Text utilities for spreadsheet headers and free-text cells.

Used by the CSV parser for header matching and by the import service
when turning drafts into product records.
"""

import re
from typing import Optional

# Zero-width space, non-joiner, joiner, and the BOM character
_INVISIBLE_CHARS = re.compile("[\u200b-\u200d\ufeff]")
_SEPARATOR_CHARS = re.compile("[_-]")


def normalize_column_name(name: str) -> str:
    """
    Normalize a spreadsheet header for comparison.

    Examples:
    - "\\ufeffProduct_Name" → "product name"
    - "  UNIT-PRICE " → "unit price"
    - "Image URL" → "image url"

    Each underscore or hyphen becomes one space; runs are not merged.

    Args:
        name: Raw header cell

    Returns:
        Lowercase, trimmed header with separators replaced by spaces
    """
    if name.startswith("\ufeff"):
        name = name[1:]

    cleaned = _INVISIBLE_CHARS.sub("", name)
    cleaned = cleaned.lower().strip()

    return _SEPARATOR_CHARS.sub(" ", cleaned)


def clean_optional_text(value: Optional[str]) -> Optional[str]:
    """
    Trim a free-text value for storage.

    - Strips whitespace
    - Returns None for empty/whitespace-only strings

    Args:
        value: Raw cell or form value

    Returns:
        Trimmed text or None
    """
    if not value:
        return None

    value = value.strip()

    return value or None
