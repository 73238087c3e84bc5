"""
CSV parser for inventory imports.

Parses spreadsheet exports (Excel, Google Sheets, Numbers) into product rows.
Column names vary between exports, so the name/price/description/image
columns are auto-detected from the header row.

Parsing never raises on bad data: file-level problems come back in
CsvParseResult.errors and row-level problems in ParsedProduct.errors.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional
import codecs
import math
import re
import structlog

from utils.text_utils import normalize_column_name

logger = structlog.get_logger(__name__)


# ===================
# COLUMN CANDIDATES
# ===================

NAME_COLUMNS = [
    "name", "product", "product name", "item", "item name", "title", "product_name",
]
PRICE_COLUMNS = [
    "price", "cost", "amount", "unit price", "unit_price",
    "retail price", "selling price", "sale price",
]
DESCRIPTION_COLUMNS = [
    "description", "desc", "details", "product description",
    "product_description", "notes", "info",
]
IMAGE_COLUMNS = [
    "image", "image url", "image_url", "imageurl", "picture",
    "photo", "img", "thumbnail", "picture url",
]

# UTF-8 BOM, byte-swapped BOM, then UTF-8 BOM again
BYTE_ORDER_MARKS = ("\ufeff", "\ufffe", "\ufeff")

TOO_FEW_LINES_ERROR = "File must have at least a header row and one data row"
NAME_FALLBACK_WARNING = "Could not auto-detect product name column. Using first column."
MISSING_NAME_ERROR = "Missing product name"

_LINE_BREAK = re.compile(r"\r?\n")
_PRICE_NOISE = re.compile(r"[$€£¥,\s]")
# Leading decimal number; trailing text such as a currency code is ignored
_LEADING_NUMBER = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


# ===================
# RESULT TYPES
# ===================

@dataclass
class ParsedProduct:
    """One data row of the uploaded file. Never mutated after parsing."""
    name: str
    price: Optional[float]
    description: Optional[str]
    image_url: Optional[str]
    raw_row: dict[str, str]
    row_index: int
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "image_url": self.image_url,
            "raw_row": dict(self.raw_row),
            "row_index": self.row_index,
            "errors": list(self.errors),
        }


@dataclass
class DetectedColumns:
    """Header matched for each product field, or None when not found."""
    name: Optional[str] = None
    price: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "image_url": self.image_url,
        }


@dataclass
class CsvParseResult:
    """Result of parsing a CSV file."""
    success: bool
    products: list[ParsedProduct] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    detected_columns: DetectedColumns = field(default_factory=DetectedColumns)

    @property
    def valid_count(self) -> int:
        return sum(1 for p in self.products if p.is_valid)

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "success": self.success,
            "products": [p.to_dict() for p in self.products],
            "errors": list(self.errors),
            "detected_columns": self.detected_columns.to_dict(),
        }


# ===================
# HELPERS
# ===================

def detect_file_type(filename: str) -> Literal["csv", "unsupported"]:
    """Classify an uploaded file by its extension."""
    return "csv" if filename.lower().endswith(".csv") else "unsupported"


def decode_upload(content: bytes) -> str:
    """
    Decode uploaded bytes to text.

    UTF-16 exports are recognised by their byte-order mark. Everything else
    is read as UTF-8; the leading BOM is kept for parse_inventory_csv to strip.
    """
    if content.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return content.decode("utf-16", errors="replace")
    return content.decode("utf-8", errors="replace")


def strip_byte_order_marks(content: str) -> str:
    for bom in BYTE_ORDER_MARKS:
        if content.startswith(bom):
            content = content[len(bom):]
    return content


def detect_delimiter(header_line: str) -> str:
    """
    Pick the delimiter from the header line.

    Tab or semicolon only win when they strictly outnumber both other
    candidates; ties and headers with no delimiter at all fall back to comma.
    """
    comma_count = header_line.count(",")
    tab_count = header_line.count("\t")
    semicolon_count = header_line.count(";")

    if tab_count > comma_count and tab_count > semicolon_count:
        return "\t"
    if semicolon_count > comma_count and semicolon_count > tab_count:
        return ";"
    return ","


def split_line(line: str, delimiter: str) -> list[str]:
    """
    Split one line into trimmed fields, honouring double-quoted values.

    Inside quotes "" is a literal quote and the delimiter is ordinary text.
    An unterminated quote runs to the end of the line.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0

    while i < len(line):
        char = line[i]

        if in_quotes:
            if char == '"' and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            elif char == '"':
                in_quotes = False
            else:
                current.append(char)
        elif char == '"':
            in_quotes = True
        elif char == delimiter:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

        i += 1

    fields.append("".join(current).strip())
    return fields


def find_matching_column(headers: list[str], candidates: list[str]) -> Optional[str]:
    """Return the first header (in file order) whose normalized form is a candidate."""
    for header in headers:
        if normalize_column_name(header) in candidates:
            return header
    return None


def parse_price(value: Optional[str]) -> Optional[float]:
    """
    Parse a price cell such as "$1,234.56", "€ 12" or "12.99 USD".

    Only the leading ASCII decimal number counts, so "12.99 USD" is 12.99
    and "1_000" is 1.

    Returns:
        The numeric price, or None when the text is empty or does not start
        with a number
    """
    if not value:
        return None

    cleaned = _PRICE_NOISE.sub("", value)
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return None

    price = float(match.group())
    return price if math.isfinite(price) else None


def _price_is_blank(value: str) -> bool:
    return not _PRICE_NOISE.sub("", value)


# ===================
# MAIN PARSER
# ===================

def parse_inventory_csv(content: str) -> CsvParseResult:
    """
    Parse an inventory CSV export.

    Args:
        content: Full file content as text

    Returns:
        CsvParseResult. success is False only when the file has fewer than
        two non-blank lines; every data row is returned, with its own errors.
    """
    content = strip_byte_order_marks(content)
    lines = [line for line in _LINE_BREAK.split(content) if line.strip()]

    if len(lines) < 2:
        logger.warning("csv_too_few_lines", line_count=len(lines))
        return CsvParseResult(success=False, errors=[TOO_FEW_LINES_ERROR])

    delimiter = detect_delimiter(lines[0])
    headers = split_line(lines[0], delimiter)

    name_col = find_matching_column(headers, NAME_COLUMNS)
    price_col = find_matching_column(headers, PRICE_COLUMNS)
    desc_col = find_matching_column(headers, DESCRIPTION_COLUMNS)
    image_col = find_matching_column(headers, IMAGE_COLUMNS)

    errors: list[str] = []
    if name_col is None:
        errors.append(NAME_FALLBACK_WARNING)

    detected = DetectedColumns(
        name=name_col if name_col is not None else headers[0],
        price=price_col,
        description=desc_col,
        image_url=image_col,
    )

    logger.info(
        "csv_columns_detected",
        delimiter=repr(delimiter),
        header_count=len(headers),
        row_count=len(lines) - 1,
        **detected.to_dict()
    )

    products = [
        _parse_row(line, row_index, delimiter, headers, detected)
        for row_index, line in enumerate(lines[1:], start=1)
    ]

    logger.info(
        "csv_parsed",
        products=len(products),
        invalid_rows=sum(1 for p in products if not p.is_valid),
        warnings=len(errors)
    )

    return CsvParseResult(
        success=True,
        products=products,
        errors=errors,
        detected_columns=detected,
    )


def _parse_row(
    line: str,
    row_index: int,
    delimiter: str,
    headers: list[str],
    detected: DetectedColumns,
) -> ParsedProduct:
    """Extract and validate a single data line."""
    values = split_line(line, delimiter)
    row_errors: list[str] = []

    # Short rows are padded; cells past the last header are dropped
    raw_row = {
        header: values[idx] if idx < len(values) else ""
        for idx, header in enumerate(headers)
    }

    name_value = _cell(raw_row, detected.name) if detected.name is not None else values[0]
    price_value = _cell(raw_row, detected.price)
    desc_value = _cell(raw_row, detected.description)
    image_value = _cell(raw_row, detected.image_url)

    if not name_value.strip():
        row_errors.append(MISSING_NAME_ERROR)

    price = parse_price(price_value)
    if price is None and not _price_is_blank(price_value):
        row_errors.append(f'Invalid price format: "{price_value}"')

    return ParsedProduct(
        name=name_value.strip(),
        price=price,
        description=desc_value.strip() or None,
        image_url=image_value.strip() or None,
        raw_row=raw_row,
        row_index=row_index,
        errors=row_errors,
    )


def _cell(raw_row: dict[str, str], column: Optional[str]) -> str:
    if column is None:
        return ""
    return raw_row.get(column, "")
