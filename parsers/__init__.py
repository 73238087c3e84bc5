"""
File parsers module.

CSV inventory exports are the only supported upload format.
"""

from parsers.csv_parser import (
    parse_inventory_csv,
    detect_file_type,
    decode_upload,
    CsvParseResult,
    ParsedProduct,
    DetectedColumns,
)

__all__ = [
    "parse_inventory_csv",
    "detect_file_type",
    "decode_upload",
    "CsvParseResult",
    "ParsedProduct",
    "DetectedColumns",
]
