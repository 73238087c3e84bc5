"""
Unit tests for the inventory CSV parser.

Run: pytest tests/unit/test_csv_parser.py -v
"""

import codecs
import pytest

from parsers.csv_parser import (
    parse_inventory_csv,
    detect_delimiter,
    detect_file_type,
    decode_upload,
    split_line,
    find_matching_column,
    parse_price,
    NAME_COLUMNS,
    PRICE_COLUMNS,
    DESCRIPTION_COLUMNS,
    IMAGE_COLUMNS,
    NAME_FALLBACK_WARNING,
    TOO_FEW_LINES_ERROR,
)
from utils.text_utils import normalize_column_name
from tests.factories import build_csv


# ===================
# VALID FILE TESTS
# ===================

class TestValidFileParsing:
    """Tests for well-formed exports."""

    def test_valid_file_parses_all_rows(self):
        """Every data row becomes a product with no errors."""
        content = build_csv([
            ["Sourdough Loaf", "$12.50", "Naturally leavened", "https://img.example/loaf.jpg"],
            ["Croissant", "3.25", "Butter", ""],
            ["Cake", "\"$1,234.56\"", "Wedding tier", ""],
        ])

        result = parse_inventory_csv(content)

        assert result.success is True
        assert result.errors == []
        assert len(result.products) == 3
        assert all(p.errors == [] for p in result.products)
        assert [p.price for p in result.products] == [12.5, 3.25, 1234.56]

    def test_fields_are_extracted_and_trimmed(self):
        """Name, description and image are trimmed; blanks become None."""
        content = build_csv([
            ["  Rye  ", "6", "  Dark  ", "  https://img.example/rye.jpg "],
            ["Bagel", "2", "", ""],
        ])

        result = parse_inventory_csv(content)

        rye, bagel = result.products
        assert rye.name == "Rye"
        assert rye.description == "Dark"
        assert rye.image_url == "https://img.example/rye.jpg"
        assert bagel.description is None
        assert bagel.image_url is None

    def test_row_index_and_raw_row(self):
        """Rows are numbered from 1 after the header and keep every raw cell."""
        content = build_csv(
            [["Rye", "6", "SKU-1"], ["Bagel", "2", "SKU-2"]],
            header=["name", "price", "sku"],
        )

        result = parse_inventory_csv(content)

        assert [p.row_index for p in result.products] == [1, 2]
        assert result.products[1].raw_row == {"name": "Bagel", "price": "2", "sku": "SKU-2"}

    def test_crlf_and_blank_lines(self):
        """Windows line endings and blank lines are handled."""
        content = "name,price\r\n\r\nRye,6\r\n   \r\nBagel,2\r\n"

        result = parse_inventory_csv(content)

        assert result.success is True
        assert [p.name for p in result.products] == ["Rye", "Bagel"]
        assert [p.row_index for p in result.products] == [1, 2]

    def test_detected_columns(self):
        """Matched headers are reported with their original spelling."""
        content = build_csv(
            [["Rye", "6", "Dark", "x.jpg"]],
            header=["Product Name", "UNIT PRICE", "Notes", "Photo"],
        )

        result = parse_inventory_csv(content)

        assert result.detected_columns.to_dict() == {
            "name": "Product Name",
            "price": "UNIT PRICE",
            "description": "Notes",
            "image_url": "Photo",
        }


# ===================
# BYTE ORDER MARKS
# ===================

class TestByteOrderMarks:
    """Exports that start with a BOM still detect their first column."""

    @pytest.mark.parametrize("bom", ["\ufeff", "\ufffe", "\ufeff\ufeff"])
    def test_leading_bom_is_stripped(self, bom):
        result = parse_inventory_csv(bom + "name,price\nRye,6\n")

        assert result.detected_columns.name == "name"
        assert result.errors == []
        assert result.products[0].name == "Rye"

    def test_decode_utf16_upload(self):
        """UTF-16 exports are decoded using their BOM."""
        content = codecs.BOM_UTF16_LE + "name,price\nRye,6\n".encode("utf-16-le")

        result = parse_inventory_csv(decode_upload(content))

        assert result.success is True
        assert result.products[0].name == "Rye"

    def test_decode_utf8_sig_upload(self):
        """UTF-8 BOM survives decoding and is stripped by the parser."""
        content = codecs.BOM_UTF8 + b"name,price\nRye,6\n"

        text = decode_upload(content)
        result = parse_inventory_csv(text)

        assert text.startswith("\ufeff")
        assert result.detected_columns.name == "name"


# ===================
# DELIMITER TESTS
# ===================

class TestDelimiterDetection:
    """Tests for delimiter inference."""

    @pytest.mark.parametrize("header,expected", [
        ("name,price,description", ","),
        ("name\tprice\tdescription", "\t"),
        ("name;price;description", ";"),
        ("name", ","),
        ("a,b;c;d", ";"),
        ("a,b;c", ","),          # tie resolves to comma
        ("a\tb;c", ","),         # tie between tab and semicolon
        ("a\tb\tc,d;e", "\t"),
    ])
    def test_detect_delimiter(self, header, expected):
        assert detect_delimiter(header) == expected

    @pytest.mark.parametrize("delimiter", [",", "\t", ";"])
    def test_same_data_any_delimiter(self, delimiter):
        """Identical data parses the same whichever delimiter is used."""
        content = build_csv(
            [["Rye", "6.00", "Dark", ""], ["Bagel", "2.50", "Plain", ""]],
            delimiter=delimiter,
        )

        result = parse_inventory_csv(content)

        assert [(p.name, p.price) for p in result.products] == [("Rye", 6.0), ("Bagel", 2.5)]

    def test_delimiter_taken_from_header_only(self):
        """Semicolons in data rows do not change the delimiter."""
        content = "name,price\nRye;Dark,6\n"

        result = parse_inventory_csv(content)

        assert result.products[0].name == "Rye;Dark"


# ===================
# TOKENIZER TESTS
# ===================

class TestSplitLine:
    """Tests for quote-aware field splitting."""

    def test_quoted_field_with_delimiter_and_escaped_quotes(self):
        line = '"Smith, ""Premium"" Widget",12'

        assert split_line(line, ",") == ['Smith, "Premium" Widget', "12"]

    def test_fields_are_trimmed(self):
        assert split_line("  a ,  b  ,c", ",") == ["a", "b", "c"]

    def test_empty_fields_kept(self):
        assert split_line("a,,c,", ",") == ["a", "", "c", ""]

    def test_unterminated_quote_runs_to_end(self):
        assert split_line('a,"b,c', ",") == ["a", "b,c"]

    def test_quote_inside_unquoted_field_opens_quotes(self):
        assert split_line('ab"c,d"e,f', ",") == ["abc,de", "f"]

    def test_other_delimiter_is_plain_text(self):
        assert split_line("a,b;c", ";") == ["a,b", "c"]

    def test_quoted_field_parses_as_one_cell(self):
        content = 'name,price\n"Smith, ""Premium"" Widget",12\n'

        result = parse_inventory_csv(content)

        assert result.products[0].name == 'Smith, "Premium" Widget'
        assert result.products[0].price == 12.0


# ===================
# COLUMN DETECTION TESTS
# ===================

class TestColumnDetection:
    """Tests for header matching."""

    @pytest.mark.parametrize("header,normalized", [
        ("Product Name", "product name"),
        ("product_name", "product name"),
        ("UNIT-PRICE", "unit price"),
        ("  Image URL  ", "image url"),
        ("\ufeffName", "name"),
        ("Na\u200bme", "name"),
        ("item__name", "item  name"),
    ])
    def test_normalize_column_name(self, header, normalized):
        assert normalize_column_name(header) == normalized

    @pytest.mark.parametrize("header,candidates", [
        ("Product Name", NAME_COLUMNS),
        ("ITEM_NAME", NAME_COLUMNS),
        ("UNIT PRICE", PRICE_COLUMNS),
        ("unit-price", PRICE_COLUMNS),
        ("Selling Price", PRICE_COLUMNS),
        ("Notes", DESCRIPTION_COLUMNS),
        ("Product-Description", DESCRIPTION_COLUMNS),
        ("Picture_URL", IMAGE_COLUMNS),
        ("ImageURL", IMAGE_COLUMNS),
    ])
    def test_header_variants_match(self, header, candidates):
        assert find_matching_column(["id", header], candidates) == header

    def test_first_match_in_file_order_wins(self):
        headers = ["Title", "Name", "Product"]

        assert find_matching_column(headers, NAME_COLUMNS) == "Title"

    def test_no_fuzzy_matching(self):
        """Near misses are not matched."""
        headers = ["Product Names", "Prices", "Descr"]

        assert find_matching_column(headers, NAME_COLUMNS) is None
        assert find_matching_column(headers, PRICE_COLUMNS) is None
        assert find_matching_column(headers, DESCRIPTION_COLUMNS) is None

    def test_missing_name_column_falls_back_to_first(self):
        """First column is used as name and a warning is returned."""
        content = build_csv(
            [["Rye", "6"], ["Bagel", "2"]],
            header=["Bezeichnung", "Price"],
        )

        result = parse_inventory_csv(content)

        assert result.success is True
        assert result.errors == [NAME_FALLBACK_WARNING]
        assert result.detected_columns.name == "Bezeichnung"
        assert [p.name for p in result.products] == ["Rye", "Bagel"]
        assert all(p.errors == [] for p in result.products)

    def test_undetected_optional_columns_left_empty(self):
        """No description/image column means those fields stay None."""
        content = build_csv([["Rye", "6"]], header=["name", "price"])

        result = parse_inventory_csv(content)

        assert result.detected_columns.description is None
        assert result.detected_columns.image_url is None
        assert result.products[0].description is None
        assert result.products[0].image_url is None
        assert result.errors == []


# ===================
# ROW VALIDATION TESTS
# ===================

class TestRowValidation:
    """Tests for per-row errors."""

    def test_invalid_price_is_isolated_to_its_row(self):
        content = build_csv([
            ["Rye", "6", "", ""],
            ["Bagel", "N/A", "", ""],
            ["Scone", "3", "", ""],
        ])

        result = parse_inventory_csv(content)

        rye, bagel, scone = result.products
        assert result.success is True
        assert bagel.price is None
        assert bagel.errors == ['Invalid price format: "N/A"']
        assert rye.errors == [] and scone.errors == []

    def test_missing_name(self):
        content = build_csv([["   ", "6", "", ""]])

        result = parse_inventory_csv(content)

        assert result.products[0].name == ""
        assert result.products[0].errors == ["Missing product name"]

    def test_missing_name_and_bad_price_both_reported(self):
        content = build_csv([["", "abc", "", ""]])

        result = parse_inventory_csv(content)

        assert result.products[0].errors == [
            "Missing product name",
            'Invalid price format: "abc"',
        ]

    def test_price_with_currency_code_is_valid(self):
        content = "name,price\nRye,12.99 USD\n"

        result = parse_inventory_csv(content)

        assert result.products[0].price == 12.99
        assert result.products[0].errors == []

    def test_empty_price_is_not_an_error(self):
        content = build_csv([["Rye", "", "", ""]])

        result = parse_inventory_csv(content)

        assert result.products[0].price is None
        assert result.products[0].errors == []

    def test_short_rows_are_padded(self):
        content = "name,price,description\nRye\n"

        result = parse_inventory_csv(content)

        product = result.products[0]
        assert product.raw_row == {"name": "Rye", "price": "", "description": ""}
        assert product.price is None
        assert product.description is None
        assert product.errors == []

    def test_extra_cells_are_dropped(self):
        content = "name,price\nRye,6,surplus\n"

        result = parse_inventory_csv(content)

        assert result.products[0].raw_row == {"name": "Rye", "price": "6"}


# ===================
# PRICE PARSING TESTS
# ===================

class TestParsePrice:
    """Tests for currency-aware price parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("12.50", 12.5),
        ("$12.50", 12.5),
        ("$1,234.56", 1234.56),
        ("€ 9", 9.0),
        ("£0.99", 0.99),
        ("¥1000", 1000.0),
        ("-5", -5.0),
        (" 7 ", 7.0),
        (".5", 0.5),
        ("1.5e2", 150.0),
    ])
    def test_parses_numbers(self, text, expected):
        assert parse_price(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "$", ",", None])
    def test_blank_is_none(self, text):
        assert parse_price(text) is None

    @pytest.mark.parametrize("text", ["N/A", "abc", "nan", "inf", "Infinity", "1e999", "USD 5", "\u0661\u0662"])
    def test_unparseable_is_none(self, text):
        assert parse_price(text) is None

    @pytest.mark.parametrize("text,expected", [
        ("12.99 USD", 12.99),
        ("12abc", 12.0),
        ("1_000", 1.0),
        ("1.2.3", 1.2),
        ("3e", 3.0),
    ])
    def test_trailing_text_is_ignored(self, text, expected):
        """Only the leading number is read; anything after it is dropped."""
        assert parse_price(text) == expected


# ===================
# FILE-LEVEL TESTS
# ===================

class TestFileLevelErrors:
    """Tests for files that cannot be staged at all."""

    @pytest.mark.parametrize("content", [
        "",
        "name,price\n",
        "name,price\n\n   \n",
        "\ufeff\r\n",
    ])
    def test_too_few_lines(self, content):
        result = parse_inventory_csv(content)

        assert result.success is False
        assert result.products == []
        assert result.errors == [TOO_FEW_LINES_ERROR]

    def test_row_errors_do_not_fail_the_parse(self):
        content = build_csv([["", "bad", "", ""], ["", "", "", ""]])

        result = parse_inventory_csv(content)

        assert result.success is True
        assert len(result.products) == 2
        assert result.valid_count == 0

    @pytest.mark.parametrize("filename,expected", [
        ("inventory.csv", "csv"),
        ("INVENTORY.CSV", "csv"),
        ("inventory.xlsx", "unsupported"),
        ("inventory.csv.txt", "unsupported"),
        ("csv", "unsupported"),
    ])
    def test_detect_file_type(self, filename, expected):
        assert detect_file_type(filename) == expected

    def test_to_dict(self):
        result = parse_inventory_csv("name,price\nRye,6\n")

        data = result.to_dict()

        assert data["success"] is True
        assert data["products"][0]["name"] == "Rye"
        assert data["products"][0]["raw_row"] == {"name": "Rye", "price": "6"}
        assert data["detected_columns"]["price"] == "price"
