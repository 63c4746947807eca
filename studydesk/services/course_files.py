"""Upload and delete of course files.

A course file lives in two places: the object in the private bucket and the
``course_files`` row that points at it. Both operations walk an explicit state
machine so every partial failure has a defined outcome:

upload:  PENDING -> STORAGE_COMMITTED -> METADATA_COMMITTED
    storage write fails      -> nothing written, error raised
    metadata insert fails    -> rollback, the new object is removed again
delete:  PENDING -> STORAGE_REMOVED -> METADATA_REMOVED
    storage removal fails    -> row kept, error raised (nothing dangles)
    metadata removal fails   -> rollback, error raised; retrying completes it
                                because removing a missing object is a no-op
"""
import enum

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import CourseFile
from . import storage
from .filters import build_storage_path
from .records import OwnershipError


class UploadState(enum.Enum):
    PENDING = "pending"
    STORAGE_COMMITTED = "storage-committed"
    METADATA_COMMITTED = "metadata-committed"


class DeleteState(enum.Enum):
    PENDING = "pending"
    STORAGE_REMOVED = "storage-removed"
    METADATA_REMOVED = "metadata-removed"


class FileOperationError(Exception):
    def __init__(self, message, state, cause=None):
        super().__init__(message)
        self.state = state
        self.cause = cause


def upload_course_file(owner_id, course, filename, data: bytes, mime_type=None, now_ms=None):
    """Store ``data`` for ``course`` and record it; returns the new CourseFile row."""
    if course is None or course.user_id != owner_id:
        raise OwnershipError(f"course {getattr(course, 'id', None)} is not owned by user {owner_id}")

    state = UploadState.PENDING
    path = build_storage_path(owner_id, course.id, filename, now_ms=now_ms)

    try:
        storage.upload_object(owner_id, path, data, content_type=mime_type)
    except storage.StorageError as e:
        raise FileOperationError(f"could not store {filename!r}", state, e) from e
    state = UploadState.STORAGE_COMMITTED

    row = CourseFile(
        user_id=owner_id,
        course_id=course.id,
        filename=filename,
        storage_path=path,
        size_bytes=len(data),
        mime_type=mime_type or None,
    )
    try:
        db.session.add(row)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        try:
            storage.remove_objects(owner_id, [path])
        except storage.StorageError:
            current_app.logger.exception('orphaned storage object left behind: %s', path)
        raise FileOperationError(f"could not record {filename!r}", state, e) from e
    return row


def delete_course_file(owner_id, file_row):
    """Remove the storage object first, then the metadata row."""
    if file_row is None or file_row.user_id != owner_id:
        raise OwnershipError(f"file {getattr(file_row, 'id', None)} is not owned by user {owner_id}")

    state = DeleteState.PENDING
    try:
        storage.remove_objects(owner_id, [file_row.storage_path])
    except storage.StorageError as e:
        raise FileOperationError(f"could not remove {file_row.storage_path!r}", state, e) from e
    state = DeleteState.STORAGE_REMOVED

    try:
        db.session.delete(file_row)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise FileOperationError(f"could not delete record {file_row.id}", state, e) from e
    return DeleteState.METADATA_REMOVED


def read_course_file(owner_id, file_row) -> bytes:
    if file_row is None or file_row.user_id != owner_id:
        raise OwnershipError(f"file {getattr(file_row, 'id', None)} is not owned by user {owner_id}")
    return storage.download_object(owner_id, file_row.storage_path)
