"""Tests for the upload blob store."""

import os

import pytest

from services import storage_service
from services.errors import NotFoundError, PersistenceError
from services.storage_service import build_blob_path, delete_blob, read_blob, save_blob


def test_blob_paths_are_unique_per_upload(monkeypatch):
    monkeypatch.setattr(storage_service.time, "time", lambda: 1700000000.5)

    first = build_blob_path("user-1", "sales.csv")
    second = build_blob_path("user-1", "sales.csv")

    assert first != second
    assert first.startswith("user-1/1700000000500-")
    assert first.endswith("-sales.csv")


def test_directories_in_the_name_are_dropped():
    path = build_blob_path("user-1", "../../etc/passwd")

    assert path.startswith("user-1/")
    assert path.endswith("-passwd")


def test_save_read_delete(upload_dir):
    save_blob("user-1/a.csv", b"Region,Sales\n")

    assert read_blob("user-1/a.csv") == b"Region,Sales\n"
    assert os.path.exists(os.path.join(str(upload_dir), "user-1", "a.csv"))

    delete_blob("user-1/a.csv")
    with pytest.raises(NotFoundError):
        read_blob("user-1/a.csv")

    # a second delete only logs
    delete_blob("user-1/a.csv")


def test_paths_outside_the_upload_dir_are_refused():
    with pytest.raises(PersistenceError):
        save_blob("../outside.csv", b"x")
