from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from database import get_db
from models.common_models import TableSummary
from models.dashboard_models import UploadedFile, UploadResult
from routers.deps import get_user_id
from services.file_upload_service import save_uploaded_file

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("/file", response_model=UploadResult)
async def upload_file(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_user_id),
):
    data = await file.read()
    record, table = await run_in_threadpool(
        save_uploaded_file, db, user_id, file.filename, file.content_type, data
    )

    return UploadResult(
        file=UploadedFile.model_validate(record),
        table=TableSummary.from_table(table),
    )
