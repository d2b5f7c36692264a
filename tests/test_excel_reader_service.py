"""Tests for turning uploaded bytes into a ParsedTable."""

import io
from datetime import datetime

import pandas as pd
import pytest

from models.common_models import FileKind
from services.errors import DecodeError, EmptyTableError, ParseError
from services.excel_reader_service import parse_table


def _workbook_bytes(grid, sheet_name="Sheet1") -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(grid).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return buffer.getvalue()


class TestDelimited:
    def test_sales_csv(self):
        table = parse_table(b"Region,Sales\nEast,100\nWest,50\nEast,30\n", FileKind.DELIMITED)

        assert table.headers == ["Region", "Sales"]
        assert table.rows == [
            {"Region": "East", "Sales": 100},
            {"Region": "West", "Sales": 50},
            {"Region": "East", "Sales": 30},
        ]
        assert table.sheet_name == "Sheet1"

    def test_every_row_has_every_header(self):
        table = parse_table(b"a,b,c\n1\n1,2\n1,2,3\n", FileKind.DELIMITED)

        for row in table.rows:
            assert list(row) == table.headers
        assert table.rows[0] == {"a": 1, "b": None, "c": None}

    def test_cells_beyond_header_are_dropped(self):
        table = parse_table(b"Region,Sales\nEast,100,extra\nWest\n", FileKind.DELIMITED)

        assert table.rows == [
            {"Region": "East", "Sales": 100},
            {"Region": "West", "Sales": None},
        ]

    def test_quoted_fields_keep_their_commas(self):
        table = parse_table(b'City,Sales\n"Portland, OR",12\n', FileKind.DELIMITED)

        assert table.rows == [{"City": "Portland, OR", "Sales": 12}]

    def test_cell_coercion(self):
        table = parse_table(b"name,flag,ratio,note\nx,TRUE,1.5,007 Agent\ny,false,,1_000\n", FileKind.DELIMITED)

        assert table.rows[0] == {"name": "x", "flag": True, "ratio": 1.5, "note": "007 Agent"}
        assert table.rows[1] == {"name": "y", "flag": False, "ratio": None, "note": "1_000"}

    def test_blank_header_cell_gets_a_position_label(self):
        table = parse_table(b"Region,,Sales\nEast,x,1\n", FileKind.DELIMITED)

        assert table.headers == ["Region", "Column 2", "Sales"]

    def test_integer_too_wide_for_a_float_stays_text(self):
        huge = "9" * 400

        table = parse_table(f"Region,Sales\nEast,{huge}\nWest,50\n".encode(), FileKind.DELIMITED)

        assert table.rows[0]["Sales"] == huge
        assert table.rows[1]["Sales"] == 50

    def test_header_row_is_not_coerced(self):
        table = parse_table(b"2023,2024\n1,2\n", FileKind.DELIMITED)

        assert table.headers == ["2023", "2024"]
        assert table.rows == [{"2023": 1, "2024": 2}]

    def test_byte_order_mark_is_ignored(self):
        table = parse_table(b"\xef\xbb\xbfRegion,Sales\nEast,1\n", FileKind.DELIMITED)

        assert table.headers == ["Region", "Sales"]

    def test_header_only_file_is_rejected(self):
        with pytest.raises(EmptyTableError):
            parse_table(b"Region,Sales\n", FileKind.DELIMITED)

    def test_empty_file_is_rejected(self):
        with pytest.raises(EmptyTableError):
            parse_table(b"", FileKind.DELIMITED)

    def test_blank_rows_do_not_count_as_data(self):
        with pytest.raises(EmptyTableError):
            parse_table(b"Region,Sales\n,\n\n", FileKind.DELIMITED)

    def test_undecodable_bytes(self):
        with pytest.raises(DecodeError):
            parse_table(b"Region,Sales\n\xff\xfe\xfa,1\n", FileKind.DELIMITED)

    def test_errors_share_a_base(self):
        assert issubclass(EmptyTableError, ParseError)
        assert issubclass(DecodeError, ParseError)


class TestWorkbook:
    def test_first_sheet_is_parsed(self):
        data = _workbook_bytes([["Region", "Sales"], ["East", 100], ["West", 50]], sheet_name="Q1")

        table = parse_table(data, FileKind.WORKBOOK)

        assert table.sheet_name == "Q1"
        assert table.headers == ["Region", "Sales"]
        assert [r["Region"] for r in table.rows] == ["East", "West"]
        assert [r["Sales"] for r in table.rows] == [100, 50]

    def test_missing_cells_are_none(self):
        data = _workbook_bytes([["Region", "Sales", "Owner"], ["East", None, "Ann"], ["West", 5, None]])

        table = parse_table(data, FileKind.WORKBOOK)

        assert table.rows[0]["Sales"] is None
        assert table.rows[1]["Owner"] is None

    def test_dates_become_iso_strings(self):
        data = _workbook_bytes([["Day", "Sales"], [datetime(2024, 1, 5), 3]])

        table = parse_table(data, FileKind.WORKBOOK)

        assert isinstance(table.rows[0]["Day"], str)
        assert table.rows[0]["Day"].startswith("2024-01-05")

    def test_booleans_stay_booleans(self):
        data = _workbook_bytes([["Item", "Active"], ["a", True], ["b", False]])

        table = parse_table(data, FileKind.WORKBOOK)

        assert table.rows[0]["Active"] is True
        assert table.rows[1]["Active"] is False

    def test_header_only_workbook_is_rejected(self):
        with pytest.raises(EmptyTableError):
            parse_table(_workbook_bytes([["Region", "Sales"]]), FileKind.WORKBOOK)

    def test_garbage_bytes(self):
        with pytest.raises(DecodeError):
            parse_table(b"this is not a workbook", FileKind.WORKBOOK)
