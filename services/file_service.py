import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.common_models import ParsedTable
from models.dashboard_db_model import DashboardDB, UploadedFileDB
from services.errors import NotFoundError, PersistenceError
from services.excel_reader_service import cache_table, evict_table, get_cached_table, parse_table
from services.file_upload_service import infer_file_kind
from services.storage_service import delete_blob, read_blob

logger = logging.getLogger(__name__)


def create_file_record(
    db: Session, user_id: str, file_name: str, file_path: str, file_size: int, mime_type: str = None
) -> UploadedFileDB:
    record = UploadedFileDB(
        user_id=user_id,
        file_name=file_name,
        file_path=file_path,
        file_size=file_size,
        mime_type=mime_type,
    )
    try:
        db.add(record)
        db.commit()
        db.refresh(record)
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(f"Could not save file record: {exc}") from exc
    return record


def list_files(db: Session, user_id: str) -> List[UploadedFileDB]:
    try:
        return (
            db.query(UploadedFileDB)
            .filter(UploadedFileDB.user_id == user_id)
            .order_by(UploadedFileDB.created_at.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Failed to fetch files: {exc}") from exc


def get_file(db: Session, file_id: str, user_id: str) -> UploadedFileDB:
    try:
        record = (
            db.query(UploadedFileDB)
            .filter(UploadedFileDB.id == file_id, UploadedFileDB.user_id == user_id)
            .first()
        )
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Failed to fetch file: {exc}") from exc
    if record is None:
        raise NotFoundError(f"File {file_id} not found.")
    return record


def delete_file(db: Session, file_id: str, user_id: str) -> None:
    """Remove the record, then the stored blob."""
    record = get_file(db, file_id, user_id)
    file_path, file_name = record.file_path, record.file_name
    try:
        # dashboards built on this file keep their charts but lose the data
        db.query(DashboardDB).filter(DashboardDB.file_id == record.id).update({DashboardDB.file_id: None})
        db.delete(record)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(f"Could not delete the file: {exc}") from exc
    evict_table(file_id)

    try:
        delete_blob(file_path)
    except PersistenceError as exc:
        logger.warning("File %s deleted but its blob remains: %s", file_id, exc.detail)
    logger.info("Deleted file %s (%s)", file_id, file_name)


def load_table(db: Session, file_id: str, user_id: str) -> ParsedTable:
    """Parsed table behind an uploaded file, re-read from storage on a cache miss."""
    record = get_file(db, file_id, user_id)
    table = get_cached_table(record.id)
    if table is not None:
        return table

    data = read_blob(record.file_path)
    table = parse_table(data, infer_file_kind(record.file_name, record.mime_type))
    cache_table(record.id, table)
    return table
