from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.chart_models import ChartSpec
from models.common_models import TableSummary


class UploadedFile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    file_name: str
    file_path: str
    file_size: int
    mime_type: Optional[str] = None
    created_at: datetime


class UploadResult(BaseModel):
    file: UploadedFile
    table: TableSummary


class Dashboard(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    file_id: Optional[str] = None
    chart_config: List[ChartSpec] = []
    created_at: datetime
    updated_at: datetime


class DashboardCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    file_id: Optional[str] = None


class DashboardUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    chart_config: Optional[List[ChartSpec]] = None


class Overview(BaseModel):
    uploads: int
    dashboards: int
    charts: int
