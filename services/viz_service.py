import base64
import io
import logging
import warnings
from typing import List, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from models.chart_models import ChartSeries, ChartType, RenderedChart
from models.common_models import ParsedTable
from services.aggregation_service import build_chart_series, to_number

logger = logging.getLogger(__name__)

warnings.filterwarnings("ignore", category=UserWarning)

CHART_COLORS = ["#1ae6d4", "#17a7cf", "#268bd9", "#3d6bdb", "#7a45d1", "#cc33cc"]


def _sequential_frame(series: ChartSeries) -> pd.DataFrame:
    """Rows for line/area charts: x kept as text, y read as a number."""
    return pd.DataFrame(
        {
            "x": [str(row.get(series.x_axis)) for row in series.rows],
            "y": [to_number(row.get(series.y_axis)) for row in series.rows],
        }
    )


def _draw(series: ChartSeries, ax) -> None:
    if series.type == ChartType.BAR:
        frame = pd.DataFrame([p.model_dump() for p in series.points])
        sns.barplot(data=frame, x="key", y="value", color=CHART_COLORS[0], ax=ax)
        ax.set_xlabel(series.x_axis)
        ax.set_ylabel(series.y_axis)

    elif series.type == ChartType.PIE:
        values = [p.value for p in series.points]
        labels = [f"{p.key}: {p.value:g}" for p in series.points]
        colors = [CHART_COLORS[i % len(CHART_COLORS)] for i in range(len(values))]
        ax.pie(values, labels=labels, colors=colors)
        ax.axis("equal")

    elif series.type == ChartType.LINE:
        frame = _sequential_frame(series)
        positions = list(range(len(frame)))
        sns.lineplot(x=positions, y=frame["y"].tolist(), marker="o", color=CHART_COLORS[0], ax=ax)
        ax.set_xticks(positions)
        ax.set_xticklabels(frame["x"])
        ax.set_xlabel(series.x_axis)
        ax.set_ylabel(series.y_axis)

    elif series.type == ChartType.AREA:
        frame = _sequential_frame(series)
        positions = range(len(frame))
        ax.fill_between(positions, frame["y"], color=CHART_COLORS[0], alpha=0.3)
        ax.plot(positions, frame["y"], color=CHART_COLORS[0])
        ax.set_xticks(list(positions))
        ax.set_xticklabels(frame["x"])
        ax.set_xlabel(series.x_axis)
        ax.set_ylabel(series.y_axis)


def render_series(series: ChartSeries) -> Optional[str]:
    """
    Draw one series and return a base64-encoded PNG string.
    Returns None for empty series or if drawing fails.
    """
    if series.is_empty:
        logger.info("Nothing to draw for chart %s", series.chart_id)
        return None

    fig, ax = plt.subplots(figsize=(8, 5))
    try:
        _draw(series, ax)
        ax.set_title(series.title)
        ax.tick_params(axis="x", labelrotation=45)

        buffer = io.BytesIO()
        fig.tight_layout()
        fig.savefig(buffer, format="png")
        buffer.seek(0)
        return base64.b64encode(buffer.read()).decode("utf-8")

    except Exception:
        logger.exception("Failed to render chart %s", series.chart_id)
        return None
    finally:
        plt.close(fig)


def render_dashboard(table: ParsedTable, charts) -> List[RenderedChart]:
    """Aggregate and draw every chart against the current table."""
    rendered = []
    for chart in charts:
        series = build_chart_series(table, chart)
        rendered.append(RenderedChart(series=series, image_base64=render_series(series)))
    return rendered
