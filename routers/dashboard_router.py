from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.chart_models import RenderedChart
from models.dashboard_models import Dashboard, DashboardCreate, DashboardUpdate
from routers.deps import get_user_id
from services import dashboard_service
from services.file_service import get_file, load_table
from services.viz_service import render_dashboard

router = APIRouter(prefix="/dashboards", tags=["dashboards"])


@router.get("", response_model=List[Dashboard])
def list_dashboards(db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    return [dashboard_service.to_dashboard(d) for d in dashboard_service.list_dashboards(db, user_id)]


@router.post("", response_model=Dashboard, status_code=201)
def create_dashboard(req: DashboardCreate, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    if req.file_id:
        get_file(db, req.file_id, user_id)
    record = dashboard_service.create_dashboard(db, user_id, req.name, req.description, req.file_id)
    return dashboard_service.to_dashboard(record)


@router.get("/{dashboard_id}", response_model=Dashboard)
def get_dashboard(dashboard_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    return dashboard_service.to_dashboard(dashboard_service.get_dashboard(db, dashboard_id, user_id))


@router.put("/{dashboard_id}", response_model=Dashboard)
def save_dashboard(
    dashboard_id: str,
    req: DashboardUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    record = dashboard_service.update_dashboard(
        db,
        dashboard_id,
        user_id,
        name=req.name,
        description=req.description,
        chart_config=req.chart_config,
    )
    return dashboard_service.to_dashboard(record)


@router.delete("/{dashboard_id}")
def delete_dashboard(dashboard_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    dashboard_service.delete_dashboard(db, dashboard_id, user_id)
    return {"deleted": dashboard_id}


@router.post("/{dashboard_id}/render", response_model=List[RenderedChart])
def render_saved_dashboard(dashboard_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    dashboard = dashboard_service.to_dashboard(dashboard_service.get_dashboard(db, dashboard_id, user_id))
    if not dashboard.file_id:
        return []
    table = load_table(db, dashboard.file_id, user_id)
    return render_dashboard(table, dashboard.chart_config)
