import logging
import math
from typing import Dict, List

from config import SEQUENTIAL_WINDOW
from models.chart_models import ChartSeries, ChartSpec
from models.common_models import AggregatedPoint, CellKind, CellValue, ParsedTable, Row, classify_cell

logger = logging.getLogger(__name__)

UNKNOWN_KEY = "Unknown"


def _stringify(value: CellValue) -> str:
    kind = classify_cell(value)
    if kind == CellKind.NULL:
        return UNKNOWN_KEY
    if kind == CellKind.BOOLEAN:
        return "true" if value else "false"
    if kind == CellKind.NUMBER:
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    return value


def to_number(value: CellValue) -> float:
    """Numeric reading of a cell; 0 when it has none."""
    kind = classify_cell(value)
    if kind == CellKind.NUMBER:
        try:
            number = float(value)
        except OverflowError:
            return 0.0
        return number if math.isfinite(number) else 0.0
    if kind == CellKind.BOOLEAN:
        return 1.0 if value else 0.0
    if kind == CellKind.STRING:
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
        return number if math.isfinite(number) else 0.0
    return 0.0


def _is_genuine_nonzero_number(value: CellValue) -> bool:
    return classify_cell(value) == CellKind.NUMBER and value != 0


def aggregate_categorical(table: ParsedTable, x_axis: str, y_axis: str) -> List[AggregatedPoint]:
    """
    Group rows by the x column, in first-seen order.

    If any row carries a real non-zero number in the y column, each point's
    value is the per-key sum; otherwise it is the per-key row count. The
    choice is made once for the whole table.
    """
    totals: Dict[str, Dict[str, float]] = {}

    for row in table.rows:
        key = _stringify(row.get(x_axis))
        bucket = totals.setdefault(key, {"sum": 0.0, "count": 0})
        bucket["sum"] += to_number(row.get(y_axis))
        bucket["count"] += 1

    use_sum = any(_is_genuine_nonzero_number(row.get(y_axis)) for row in table.rows)

    return [
        AggregatedPoint(
            key=key,
            value=bucket["sum"] if use_sum else bucket["count"],
            count=bucket["count"],
        )
        for key, bucket in totals.items()
    ]


def window_sequential(table: ParsedTable, limit: int = SEQUENTIAL_WINDOW) -> List[Row]:
    """First `limit` rows, untouched, in table order."""
    return [dict(row) for row in table.rows[: max(limit, 0)]]


def stale_axes(table: ParsedTable, chart: ChartSpec) -> List[str]:
    return [axis for axis in (chart.x_axis, chart.y_axis) if not table.has_column(axis)]


def build_chart_series(table: ParsedTable, chart: ChartSpec, limit: int = SEQUENTIAL_WINDOW) -> ChartSeries:
    missing = stale_axes(table, chart)
    if missing:
        logger.warning(
            "Chart %s references columns not in the table: %s", chart.id, ", ".join(missing)
        )

    series = ChartSeries(
        chart_id=chart.id,
        type=chart.type,
        title=chart.title,
        x_axis=chart.x_axis,
        y_axis=chart.y_axis,
        stale_axes=missing,
    )
    if chart.type.is_categorical:
        series.points = aggregate_categorical(table, chart.x_axis, chart.y_axis)
    else:
        series.rows = window_sequential(table, limit)
    return series
