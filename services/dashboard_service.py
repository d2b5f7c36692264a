import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.chart_models import ChartSpec
from models.dashboard_db_model import DashboardDB, UploadedFileDB
from models.dashboard_models import Dashboard, Overview
from services.chart_model_service import ChartModel
from services.errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


def to_dashboard(record: DashboardDB) -> Dashboard:
    """DB row -> API model, dropping chart entries that no longer validate."""
    charts = ChartModel.from_config(record.chart_config).charts
    return Dashboard(
        id=record.id,
        user_id=record.user_id,
        name=record.name,
        description=record.description,
        file_id=record.file_id,
        chart_config=list(charts),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(f"Could not {action}: {exc}") from exc


def create_dashboard(
    db: Session, user_id: str, name: str, description: Optional[str] = None, file_id: Optional[str] = None
) -> DashboardDB:
    record = DashboardDB(
        user_id=user_id,
        name=name,
        description=description or None,
        file_id=file_id or None,
        chart_config=[],
    )
    db.add(record)
    _commit(db, "create dashboard")
    db.refresh(record)
    logger.info("Created dashboard %s (%s)", record.id, name)
    return record


def list_dashboards(db: Session, user_id: str) -> List[DashboardDB]:
    try:
        return (
            db.query(DashboardDB)
            .filter(DashboardDB.user_id == user_id)
            .order_by(DashboardDB.updated_at.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Failed to fetch dashboards: {exc}") from exc


def get_dashboard(db: Session, dashboard_id: str, user_id: str) -> DashboardDB:
    try:
        record = (
            db.query(DashboardDB)
            .filter(DashboardDB.id == dashboard_id, DashboardDB.user_id == user_id)
            .first()
        )
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Failed to fetch dashboard: {exc}") from exc
    if record is None:
        raise NotFoundError("Dashboard not found")
    return record


def update_dashboard(
    db: Session,
    dashboard_id: str,
    user_id: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
    chart_config: Optional[List[ChartSpec]] = None,
) -> DashboardDB:
    """Write only the supplied fields; this is the editor's Save step."""
    record = get_dashboard(db, dashboard_id, user_id)
    if name is not None:
        record.name = name
    if description is not None:
        record.description = description
    if chart_config is not None:
        record.chart_config = ChartModel(chart_config).to_config()
    _commit(db, "save changes")
    db.refresh(record)
    logger.info("Saved dashboard %s", dashboard_id)
    return record


def delete_dashboard(db: Session, dashboard_id: str, user_id: str) -> None:
    record = get_dashboard(db, dashboard_id, user_id)
    db.delete(record)
    _commit(db, "delete the dashboard")
    logger.info("Deleted dashboard %s", dashboard_id)


def get_overview(db: Session, user_id: str) -> Overview:
    try:
        uploads = db.query(func.count(UploadedFileDB.id)).filter(UploadedFileDB.user_id == user_id).scalar()
        dashboards = list_dashboards(db, user_id)
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Failed to load overview: {exc}") from exc
    charts = sum(len(ChartModel.from_config(d.chart_config)) for d in dashboards)
    return Overview(uploads=uploads or 0, dashboards=len(dashboards), charts=charts)
