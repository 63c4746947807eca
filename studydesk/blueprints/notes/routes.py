from flask import render_template, request, redirect, url_for, flash, current_app
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError
from . import bp
from ...extensions import db
from ...services import records
from ...services.filters import ALL, filter_notes
from ...utils.decorators import session_required


@bp.get("")
@session_required
def list_notes():
    q = request.args.get("q", "")
    course = request.args.get("course", ALL) or ALL

    notes, courses = [], []
    try:
        notes = records.list_notes_with_courses(current_user.id)
        courses = records.list_course_choices(current_user.id)
    except SQLAlchemyError as e:
        current_app.logger.warning("notes fetch failed: %s", e)
        flash("Could not load your notes", "danger")

    items = filter_notes(notes, search=q, course_id=course)
    return render_template(
        "notes/list.html",
        items=items,
        has_notes=bool(notes),
        courses=courses,
        filters={"q": q, "course": str(course)},
    )


@bp.post("/<int:note_id>/delete")
@session_required
def delete_note(note_id):
    note = records.get_note(current_user.id, note_id)
    if note is None:
        return ("Note not found", 404)
    try:
        records.delete_note(current_user.id, note)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.warning("delete note %s failed: %s", note_id, e)
        flash("Could not delete the note", "danger")
    else:
        flash("Note deleted", "success")
    next_url = request.form.get("next")
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return redirect(next_url)
    return redirect(url_for("notes.list_notes"))
