import logging
import os
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from config import MAX_UPLOAD_MB
from models.common_models import FileKind, ParsedTable
from models.dashboard_db_model import UploadedFileDB
from services.errors import FileTooLargeError, InvalidFileTypeError, PersistenceError
from services.excel_reader_service import cache_table, parse_table
from services.storage_service import build_blob_path, delete_blob, save_blob

logger = logging.getLogger(__name__)

WORKBOOK_EXTENSIONS = {".xlsx", ".xls"}
DELIMITED_EXTENSIONS = {".csv"}

WORKBOOK_MIME_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
}
DELIMITED_MIME_TYPES = {"text/csv"}


def infer_file_kind(file_name: str, mime_type: Optional[str] = None) -> FileKind:
    """Extension wins over MIME type; browsers often send CSV as vnd.ms-excel."""
    ext = os.path.splitext(file_name or "")[1].lower()
    if ext in WORKBOOK_EXTENSIONS:
        return FileKind.WORKBOOK
    if ext in DELIMITED_EXTENSIONS:
        return FileKind.DELIMITED
    if mime_type in WORKBOOK_MIME_TYPES:
        return FileKind.WORKBOOK
    if mime_type in DELIMITED_MIME_TYPES:
        return FileKind.DELIMITED
    raise InvalidFileTypeError("Please upload an Excel (.xlsx, .xls) or CSV file.")


def validate_upload(file_name: str, mime_type: Optional[str], size: int) -> FileKind:
    kind = infer_file_kind(file_name, mime_type)
    if size > MAX_UPLOAD_MB * 1024 * 1024:
        raise FileTooLargeError(f"Maximum file size is {MAX_UPLOAD_MB}MB.")
    return kind


def save_uploaded_file(
    db: Session, user_id: str, file_name: str, mime_type: Optional[str], data: bytes
) -> Tuple[UploadedFileDB, ParsedTable]:
    """
    Validate, parse, store and register an upload.

    Nothing is stored when parsing fails, and the blob is removed again if
    the file record cannot be written.
    """
    # Imported here: file_service imports infer_file_kind from this module
    from services.file_service import create_file_record

    kind = validate_upload(file_name, mime_type, len(data))
    table = parse_table(data, kind)

    file_path = build_blob_path(user_id, file_name)
    save_blob(file_path, data)
    try:
        record = create_file_record(
            db,
            user_id=user_id,
            file_name=file_name,
            file_path=file_path,
            file_size=len(data),
            mime_type=mime_type,
        )
    except PersistenceError:
        delete_blob(file_path)
        raise

    cache_table(record.id, table)
    logger.info("Uploaded %s as %s: %d rows", file_name, record.id, table.n_rows)
    return record, table
