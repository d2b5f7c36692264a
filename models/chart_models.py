from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.common_models import AggregatedPoint, Row


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    AREA = "area"

    @property
    def is_categorical(self) -> bool:
        return self in (ChartType.BAR, ChartType.PIE)


class ChartSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: ChartType
    title: str
    x_axis: str = Field(alias="xAxis")
    y_axis: str = Field(alias="yAxis")


class Suggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: ChartType
    title: str
    x_axis: str = Field(alias="xAxis")
    y_axis: str = Field(alias="yAxis")
    reason: str = ""


class ChartSeries(BaseModel):
    """Declarative series handed to the renderer."""

    model_config = ConfigDict(populate_by_name=True)

    chart_id: str
    type: ChartType
    title: str
    x_axis: str = Field(alias="xAxis")
    y_axis: str = Field(alias="yAxis")
    points: List[AggregatedPoint] = []
    rows: List[Row] = []
    stale_axes: List[str] = []

    @property
    def is_empty(self) -> bool:
        return not self.points and not self.rows


class SeriesRequest(BaseModel):
    file_id: str
    chart: ChartSpec


class RenderedChart(BaseModel):
    series: ChartSeries
    image_base64: Optional[str] = None
