"""Owner-scoped data access.

Every read and write below filters on ``user_id``; a row belonging to another
user behaves exactly like a missing row. Views never query models directly.
"""
from typing import Optional

from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import Course, Note, CourseFile, COURSE_STATUSES, DEFAULT_COURSE_COLOR
from . import storage


class OwnershipError(Exception):
    """Raised when a write would reference a row the caller does not own."""


def owned(model, owner_id):
    return model.query.filter_by(user_id=owner_id)


def _require_owner(row, owner_id):
    if row is None or row.user_id != owner_id:
        raise OwnershipError(f"{row!r} is not owned by user {owner_id}")


# courses

def list_courses(owner_id, limit=None):
    q = owned(Course, owner_id).order_by(Course.updated_at.desc(), Course.id.desc())
    if limit:
        q = q.limit(limit)
    return q.all()


def list_course_choices(owner_id):
    return owned(Course, owner_id).order_by(Course.title.asc()).all()


def get_course(owner_id, course_id) -> Optional[Course]:
    return owned(Course, owner_id).filter_by(id=course_id).first()


def create_course(owner_id, title, description=None, color=None):
    c = Course(
        user_id=owner_id,
        title=title.strip(),
        description=(description or '').strip() or None,
        color=color or DEFAULT_COURSE_COLOR,
        status='active',
    )
    db.session.add(c)
    db.session.commit()
    return c


def update_course(owner_id, course, **fields):
    _require_owner(course, owner_id)
    if 'status' in fields and fields['status'] not in COURSE_STATUSES:
        raise ValueError(f"unknown course status {fields['status']!r}")
    for k, v in fields.items():
        setattr(course, k, v)
    db.session.commit()
    return course


def delete_course(owner_id, course):
    """Remove the course's storage objects, then the course row (notes and files cascade)."""
    _require_owner(course, owner_id)
    paths = [f.storage_path for f in course.files]
    storage.remove_objects(owner_id, paths)
    db.session.delete(course)
    db.session.commit()


# notes

def count_notes(owner_id):
    return owned(Note, owner_id).count()


def list_course_notes(owner_id, course_id):
    return (
        owned(Note, owner_id)
        .filter_by(course_id=course_id)
        .order_by(Note.updated_at.desc(), Note.id.desc())
        .all()
    )


def list_notes_with_courses(owner_id):
    return (
        owned(Note, owner_id)
        .options(joinedload(Note.course))
        .order_by(Note.updated_at.desc(), Note.id.desc())
        .all()
    )


def get_note(owner_id, note_id, course_id=None) -> Optional[Note]:
    q = owned(Note, owner_id).filter_by(id=note_id)
    if course_id is not None:
        q = q.filter_by(course_id=course_id)
    return q.first()


def create_note(owner_id, course, title, content=None):
    _require_owner(course, owner_id)
    n = Note(
        user_id=owner_id,
        course_id=course.id,
        title=title.strip(),
        content=content or None,
    )
    db.session.add(n)
    db.session.commit()
    return n


def update_note(owner_id, note, title, content=None):
    _require_owner(note, owner_id)
    note.title = title.strip()
    note.content = content or None
    db.session.commit()
    return note


def delete_note(owner_id, note):
    _require_owner(note, owner_id)
    db.session.delete(note)
    db.session.commit()


# files

def list_course_files(owner_id, course_id):
    return (
        owned(CourseFile, owner_id)
        .filter_by(course_id=course_id)
        .order_by(CourseFile.created_at.desc(), CourseFile.id.desc())
        .all()
    )


def get_file(owner_id, file_id, course_id=None) -> Optional[CourseFile]:
    q = owned(CourseFile, owner_id).filter_by(id=file_id)
    if course_id is not None:
        q = q.filter_by(course_id=course_id)
    return q.first()
