import csv
import io
import logging
import math
from datetime import date, datetime, time
from typing import Callable, Dict, List, Optional

import numpy as np
import pandas as pd

from models.common_models import CellValue, FileKind, ParsedTable
from services.errors import DecodeError, EmptyTableError

logger = logging.getLogger(__name__)

# CSV input has no sheets; name it the way spreadsheet apps do
DELIMITED_SHEET_NAME = "Sheet1"

# In-memory cache of parsed tables per uploaded file id
_TABLE_CACHE: Dict[str, ParsedTable] = {}


def _normalize_workbook_cell(value) -> CellValue:
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, np.datetime64):
        value = pd.Timestamp(value)
    elif isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, (datetime, date, time, pd.Timestamp)):
        if pd.isna(value):
            return None
        return value.isoformat()
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def _coerce_text(text: Optional[str]) -> CellValue:
    """Turn a CSV field into a bool, int, float or string. Blank is None."""
    if text is None:
        return None
    stripped = text.strip()
    if not stripped:
        return None

    lowered = stripped.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False

    # int()/float() accept "1_000"; a spreadsheet would not
    if "_" in stripped:
        return text
    try:
        integer = int(stripped)
    except ValueError:
        pass
    else:
        try:
            float(integer)
        except OverflowError:
            return text
        return integer
    try:
        number = float(stripped)
    except ValueError:
        return text
    return number if math.isfinite(number) else text


def _header_label(value: CellValue, position: int) -> str:
    if value is None:
        return f"Column {position + 1}"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    label = str(value).strip()
    return label or f"Column {position + 1}"


def _read_workbook(data: bytes):
    try:
        with pd.ExcelFile(io.BytesIO(data)) as xls:
            sheet_name = xls.sheet_names[0]
            df = xls.parse(sheet_name, header=None)
    except Exception as exc:
        raise DecodeError(f"Failed to parse Excel file: {exc}") from exc

    grid = [
        [_normalize_workbook_cell(v) for v in row]
        for row in df.itertuples(index=False, name=None)
    ]
    return sheet_name, grid


def _read_delimited(data: bytes):
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Failed to decode CSV file: {exc}") from exc

    try:
        records = list(csv.reader(io.StringIO(text)))
    except csv.Error as exc:
        raise DecodeError(f"Failed to parse CSV file: {exc}") from exc

    grid = [[field if field.strip() else None for field in record] for record in records]
    return DELIMITED_SHEET_NAME, grid


def _build_table(
    grid: List[List[CellValue]],
    sheet_name: str,
    coerce: Optional[Callable[[CellValue], CellValue]] = None,
) -> ParsedTable:
    """
    Row 0 is the header row. Data rows are zipped against it by position:
    short rows are padded with None, extra cells are dropped.
    """
    physical = [row for row in grid if any(cell is not None for cell in row)]
    if len(physical) < 2:
        raise EmptyTableError("File must have headers and at least one row of data.")

    header_cells = list(physical[0])
    while header_cells and header_cells[-1] is None:
        header_cells.pop()
    if not header_cells:
        raise EmptyTableError("The header row is empty.")

    headers = [_header_label(cell, i) for i, cell in enumerate(header_cells)]

    rows = []
    for cells in physical[1:]:
        record = {}
        for index, header in enumerate(headers):
            value = cells[index] if index < len(cells) else None
            record[header] = coerce(value) if coerce else value
        rows.append(record)

    return ParsedTable(headers=headers, rows=rows, sheet_name=sheet_name)


def parse_table(data: bytes, file_kind: FileKind) -> ParsedTable:
    """
    Convert raw upload bytes into a ParsedTable.

    Workbooks are read from their first sheet; CSV files are read as a
    single table with every field coerced from text.
    Raises EmptyTableError or DecodeError.
    """
    if file_kind == FileKind.WORKBOOK:
        sheet_name, grid = _read_workbook(data)
        table = _build_table(grid, sheet_name)
    elif file_kind == FileKind.DELIMITED:
        sheet_name, grid = _read_delimited(data)
        table = _build_table(grid, sheet_name, coerce=_coerce_text)
    else:
        raise DecodeError(f"Unsupported file kind: {file_kind}")

    logger.debug(
        "Parsed %s table '%s': %d rows x %d cols",
        file_kind.value, table.sheet_name, table.n_rows, table.n_cols,
    )
    return table


def cache_table(file_id: str, table: ParsedTable) -> None:
    _TABLE_CACHE[file_id] = table


def get_cached_table(file_id: str) -> Optional[ParsedTable]:
    return _TABLE_CACHE.get(file_id)


def evict_table(file_id: str) -> None:
    _TABLE_CACHE.pop(file_id, None)
