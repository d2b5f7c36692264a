from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from database import get_db
from models.chart_models import ChartSeries, SeriesRequest
from models.common_models import PreviewRequest, SuggestionRequest
from routers.deps import get_suggestion_adapter, get_user_id
from services.aggregation_service import build_chart_series
from services.file_service import load_table
from services.preview_service import get_preview_rows
from services.stats_service import profile_columns
from services.suggestion_service import SuggestionAdapter

router = APIRouter(prefix="/data", tags=["data"])


@router.post("/preview")
def preview_data(req: PreviewRequest, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    table = load_table(db, req.file_id, user_id)
    return get_preview_rows(table, req.n_rows)


@router.post("/series", response_model=ChartSeries)
def chart_series(req: SeriesRequest, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    table = load_table(db, req.file_id, user_id)
    return build_chart_series(table, req.chart)


@router.post("/suggestions")
async def chart_suggestions(
    req: SuggestionRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
    adapter: SuggestionAdapter = Depends(get_suggestion_adapter),
):
    table = await run_in_threadpool(load_table, db, req.file_id, user_id)
    profiles = await run_in_threadpool(profile_columns, table)
    kinds = {name: profile.kind for name, profile in profiles.items()}

    suggestions = await adapter.request_suggestions(table.headers, table.rows, kinds)
    return {"suggestions": [s.model_dump(mode="json", by_alias=True) for s in suggestions]}
