import math
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from config import PREVIEW_ROWS

# Cell values after parsing. bool is listed first so True stays a bool.
CellValue = Optional[Union[bool, int, float, str]]
Row = Dict[str, CellValue]


class CellKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"


def classify_cell(value) -> CellKind:
    """Tag a parsed cell value with its kind. NaN counts as NULL."""
    if value is None:
        return CellKind.NULL
    # bool is a subclass of int, check it before numbers
    if isinstance(value, bool):
        return CellKind.BOOLEAN
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return CellKind.NULL
        return CellKind.NUMBER
    if isinstance(value, str):
        return CellKind.STRING
    raise TypeError(f"Unsupported cell value: {value!r}")


class FileKind(str, Enum):
    WORKBOOK = "workbook"
    DELIMITED = "delimited"


class ParsedTable(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    headers: List[str] = Field(min_length=1)
    rows: List[Row]
    sheet_name: str = Field(default="", alias="sheetName")

    @model_validator(mode="after")
    def _every_row_has_every_header(self):
        expected = set(self.headers)
        for index, row in enumerate(self.rows):
            if set(row) != expected:
                raise ValueError(f"Row {index} does not match the header row.")
        return self

    @property
    def n_rows(self) -> int:
        return len(self.rows)

    @property
    def n_cols(self) -> int:
        return len(self.headers)

    def has_column(self, name: str) -> bool:
        return name in self.headers


class TableSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    headers: List[str]
    sheet_name: str = Field(alias="sheetName")
    n_rows: int
    n_cols: int
    data_points: int

    @classmethod
    def from_table(cls, table: ParsedTable) -> "TableSummary":
        return cls(
            headers=table.headers,
            sheet_name=table.sheet_name,
            n_rows=table.n_rows,
            n_cols=table.n_cols,
            data_points=table.n_rows * table.n_cols,
        )


class AggregatedPoint(BaseModel):
    key: str
    value: float
    count: int


class ColumnProfile(BaseModel):
    kind: str                 # "numeric", "categorical", "boolean", "empty"
    count: int
    missing: int
    unique: int
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None


class PreviewRequest(BaseModel):
    file_id: str
    n_rows: int = PREVIEW_ROWS


class SuggestionRequest(BaseModel):
    file_id: str
