"""Tests for drawing chart series to PNG."""

import base64

import pytest

from models.chart_models import ChartSeries, ChartSpec, ChartType
from services.viz_service import render_dashboard, render_series

PNG_MAGIC = b"\x89PNG"


@pytest.mark.parametrize("chart_type", list(ChartType))
def test_every_chart_type_renders(sales_table, chart_type):
    chart = ChartSpec(id="c1", type=chart_type, title="Sales", x_axis="Region", y_axis="Sales")

    [rendered] = render_dashboard(sales_table, [chart])

    assert rendered.series.chart_id == "c1"
    assert base64.b64decode(rendered.image_base64).startswith(PNG_MAGIC)


def test_empty_series_is_not_drawn():
    series = ChartSeries(chart_id="c1", type=ChartType.BAR, title="t", x_axis="a", y_axis="b")

    assert render_series(series) is None
