from typing import Dict

import pandas as pd

from models.common_models import CellKind, ColumnProfile, ParsedTable, classify_cell


def _column_kind(series: pd.Series) -> str:
    kinds = {classify_cell(v) for v in series.dropna().tolist()}
    kinds.discard(CellKind.NULL)
    if not kinds:
        return "empty"
    if kinds == {CellKind.NUMBER}:
        return "numeric"
    if kinds == {CellKind.BOOLEAN}:
        return "boolean"
    return "categorical"


def profile_columns(table: ParsedTable) -> Dict[str, ColumnProfile]:
    """
    Classify every column by the kinds of its non-null cells.
    A column is numeric only when all of its non-null cells are numbers.
    """
    df = pd.DataFrame(table.rows, columns=list(dict.fromkeys(table.headers)))
    missing_counts = df.isna().sum().to_dict()

    summary = {}
    for col in df.columns:
        series = df[col]
        kind = _column_kind(series)
        count = int(series.count())
        missing = int(missing_counts[col])

        # -------------- EMPTY ----------------
        if kind == "empty":
            summary[col] = ColumnProfile(kind=kind, count=0, missing=missing, unique=0)
            continue

        unique = int(series.nunique())

        # -------------- NUMERICAL ----------------
        if kind == "numeric":
            try:
                numbers = series.astype("float64")
            except (OverflowError, TypeError, ValueError):
                # values a float cannot hold have no numeric summary
                kind = "categorical"
            else:
                summary[col] = ColumnProfile(
                    kind=kind,
                    count=count,
                    missing=missing,
                    unique=unique,
                    min=float(numbers.min()),
                    max=float(numbers.max()),
                    mean=float(numbers.mean()),
                )
                continue

        # -------------- BOOLEAN / CATEGORICAL ----------------
        summary[col] = ColumnProfile(kind=kind, count=count, missing=missing, unique=unique)

    return summary
