import logging
import os
import time
import uuid

from config import UPLOAD_DIR
from services.errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


def build_blob_path(user_id: str, file_name: str) -> str:
    """Relative path of a new blob: <user_id>/<epoch_ms>-<hex8>-<file_name>."""
    safe_name = os.path.basename(file_name) or "upload"
    return f"{user_id}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{safe_name}"


def _absolute(file_path: str) -> str:
    root = os.path.abspath(UPLOAD_DIR)
    full = os.path.abspath(os.path.join(root, file_path))
    if os.path.commonpath([root, full]) != root:
        raise PersistenceError(f"Invalid blob path: {file_path}")
    return full


def save_blob(file_path: str, data: bytes) -> None:
    full = _absolute(file_path)
    try:
        os.makedirs(os.path.dirname(full), exist_ok=True)
        with open(full, "wb") as f:
            f.write(data)
    except OSError as exc:
        raise PersistenceError(f"Could not store {file_path}: {exc}") from exc
    logger.info("Stored blob %s (%d bytes)", file_path, len(data))


def read_blob(file_path: str) -> bytes:
    full = _absolute(file_path)
    if not os.path.exists(full):
        raise NotFoundError(f"Stored file {file_path} is missing.")
    try:
        with open(full, "rb") as f:
            return f.read()
    except OSError as exc:
        raise PersistenceError(f"Could not read {file_path}: {exc}") from exc


def delete_blob(file_path: str) -> None:
    full = _absolute(file_path)
    try:
        os.remove(full)
    except FileNotFoundError:
        logger.warning("Blob %s already gone", file_path)
    except OSError as exc:
        raise PersistenceError(f"Could not delete {file_path}: {exc}") from exc
