from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.common_models import ParsedTable
from models.dashboard_models import UploadedFile
from routers.deps import get_user_id
from services.file_service import delete_file, list_files, load_table

router = APIRouter(prefix="/files", tags=["files"])


@router.get("", response_model=List[UploadedFile])
def get_files(db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    return list_files(db, user_id)


@router.get("/{file_id}/table", response_model=ParsedTable)
def get_file_table(file_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    return load_table(db, file_id, user_id)


@router.delete("/{file_id}")
def remove_file(file_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    delete_file(db, file_id, user_id)
    return {"deleted": file_id}
