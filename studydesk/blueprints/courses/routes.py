from flask import render_template, request, redirect, url_for, flash, current_app, jsonify, send_file
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError
from io import BytesIO
from . import bp
from ...extensions import db
from .forms import CourseForm, CourseEditForm, NoteForm, UploadForm
from ...models.course import COURSE_STATUSES
from ...services import records
from ...services import storage
from ...services.course_files import upload_course_file, delete_course_file, read_course_file, FileOperationError
from ...services.filters import COURSE_COLORS, ALL, filter_courses, next_status, format_file_size
from ...utils.decorators import session_required


def _first_error(form):
    for errors in form.errors.values():
        if errors:
            return errors[0]
    return "Invalid input"


def _back(default):
    target = request.form.get("next") or request.args.get("next")
    if target and target.startswith("/") and not target.startswith("//"):
        return redirect(target)
    return redirect(default)


def _load_course(course_id):
    """Return the caller's course, or None after flashing; a missing row is not an error."""
    course = records.get_course(current_user.id, course_id)
    if course is None:
        flash("Course not found", "danger")
    return course


@bp.get("")
@session_required
def list_courses():
    q = request.args.get("q", "")
    status = request.args.get("status", ALL)
    if status != ALL and status not in COURSE_STATUSES:
        status = ALL
    view = "list" if request.args.get("view") == "list" else "grid"

    courses = []
    try:
        courses = records.list_courses(current_user.id)
    except SQLAlchemyError as e:
        current_app.logger.warning("course list failed: %s", e)
        flash("Could not load your courses", "danger")

    items = filter_courses(courses, search=q, status=status)
    return render_template(
        "courses/list.html",
        items=items,
        has_courses=bool(courses),
        filters={"q": q, "status": status, "view": view},
        statuses=COURSE_STATUSES,
    )


@bp.route("/new", methods=["GET", "POST"])
@session_required
def create_course():
    form = CourseForm()
    if request.method == "POST":
        if not form.validate_on_submit():
            flash(_first_error(form), "danger")
        else:
            try:
                c = records.create_course(
                    current_user.id,
                    title=form.title.data,
                    description=form.description.data,
                    color=form.color.data or COURSE_COLORS[0],
                )
            except SQLAlchemyError as e:
                db.session.rollback()
                current_app.logger.warning("create course failed: %s", e)
                flash("Could not create the course", "danger")
            else:
                flash("Course created", "success")
                return redirect(url_for("courses.detail", course_id=c.id))
    return render_template("courses/new.html", form=form, colors=COURSE_COLORS)


@bp.get("/<int:course_id>")
@session_required
def detail(course_id):
    course = _load_course(course_id)
    if course is None:
        return redirect(url_for("courses.list_courses"))

    notes, files = [], []
    try:
        notes = records.list_course_notes(current_user.id, course.id)
        files = records.list_course_files(current_user.id, course.id)
    except SQLAlchemyError as e:
        current_app.logger.warning("course detail fetch failed: %s", e)
        flash("Could not load the course data", "danger")

    edit_form = CourseEditForm(obj=course)
    return render_template(
        "courses/detail.html",
        course=course,
        notes=notes,
        files=files,
        edit_form=edit_form,
        note_form=NoteForm(formdata=None),
        upload_form=UploadForm(formdata=None),
        tab="files" if request.args.get("tab") == "files" else "notes",
        format_file_size=format_file_size,
    )


@bp.post("/<int:course_id>/edit")
@session_required
def edit_course(course_id):
    course = _load_course(course_id)
    if course is None:
        return redirect(url_for("courses.list_courses"))
    form = CourseEditForm()
    if not form.validate_on_submit():
        flash(_first_error(form), "danger")
        return redirect(url_for("courses.detail", course_id=course.id))
    try:
        records.update_course(
            current_user.id, course,
            title=form.title.data,
            description=(form.description.data or "").strip() or None,
        )
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.warning("update course %s failed: %s", course.id, e)
        flash("Could not save the changes", "danger")
    else:
        flash("Course updated", "success")
    return redirect(url_for("courses.detail", course_id=course.id))


@bp.post("/<int:course_id>/status")
@session_required
def cycle_status(course_id):
    wants_json = request.is_json or request.accept_mimetypes.best == "application/json"
    course = records.get_course(current_user.id, course_id)
    if course is None:
        if wants_json:
            return jsonify({"error": "not found"}), 404
        flash("Course not found", "danger")
        return redirect(url_for("courses.list_courses"))

    status = next_status(course.status)
    try:
        records.update_course(current_user.id, course, status=status)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.warning("status update for course %s failed: %s", course.id, e)
        if wants_json:
            return jsonify({"error": "could not update status"}), 500
        flash("Could not change the status", "danger")
    else:
        if wants_json:
            return jsonify({"id": course.id, "status": status})
        flash("Status updated", "success")
    return _back(url_for("courses.list_courses"))


@bp.post("/<int:course_id>/delete")
@session_required
def delete_course(course_id):
    course = _load_course(course_id)
    if course is None:
        return redirect(url_for("courses.list_courses"))
    try:
        records.delete_course(current_user.id, course)
    except (SQLAlchemyError, storage.StorageError) as e:
        db.session.rollback()
        current_app.logger.warning("delete course %s failed: %s", course_id, e)
        flash("Could not delete the course", "danger")
        return redirect(url_for("courses.detail", course_id=course_id))
    flash("Course deleted", "success")
    return redirect(url_for("courses.list_courses"))


# notes

@bp.post("/<int:course_id>/notes")
@session_required
def create_note(course_id):
    course = _load_course(course_id)
    if course is None:
        return redirect(url_for("courses.list_courses"))
    form = NoteForm()
    if not form.validate_on_submit():
        flash(_first_error(form), "danger")
        return redirect(url_for("courses.detail", course_id=course.id))
    try:
        records.create_note(current_user.id, course, form.title.data, form.content.data)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.warning("create note failed: %s", e)
        flash("Could not create the note", "danger")
    else:
        flash("Note created", "success")
    return redirect(url_for("courses.detail", course_id=course.id))


@bp.post("/<int:course_id>/notes/<int:note_id>/edit")
@session_required
def edit_note(course_id, note_id):
    note = records.get_note(current_user.id, note_id, course_id=course_id)
    if note is None:
        return ("Note not found", 404)
    form = NoteForm()
    if not form.validate_on_submit():
        flash(_first_error(form), "danger")
        return redirect(url_for("courses.detail", course_id=course_id))
    try:
        records.update_note(current_user.id, note, form.title.data, form.content.data)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.warning("update note %s failed: %s", note_id, e)
        flash("Could not save the note", "danger")
    else:
        flash("Note updated", "success")
    return redirect(url_for("courses.detail", course_id=course_id))


@bp.post("/<int:course_id>/notes/<int:note_id>/delete")
@session_required
def delete_note(course_id, note_id):
    note = records.get_note(current_user.id, note_id, course_id=course_id)
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
    return _back(url_for("courses.detail", course_id=course_id))


# files

@bp.post("/<int:course_id>/files")
@session_required
def upload_file(course_id):
    course = _load_course(course_id)
    if course is None:
        return redirect(url_for("courses.list_courses"))
    form = UploadForm()
    if not form.validate_on_submit():
        flash(_first_error(form), "warning")
        return redirect(url_for("courses.detail", course_id=course.id, tab="files"))

    f = form.file.data
    try:
        upload_course_file(
            current_user.id, course,
            filename=f.filename,
            data=f.read(),
            mime_type=f.mimetype,
        )
    except FileOperationError as e:
        current_app.logger.warning("upload failed at %s: %s (%s)", e.state.value, e, e.cause)
        flash("Could not upload the file", "danger")
    else:
        flash("File uploaded", "success")
    return redirect(url_for("courses.detail", course_id=course.id, tab="files"))


@bp.get("/<int:course_id>/files/<int:file_id>/download")
@session_required
def download_file(course_id, file_id):
    f = records.get_file(current_user.id, file_id, course_id=course_id)
    if f is None:
        return ("File not found", 404)
    try:
        data = read_course_file(current_user.id, f)
    except storage.StorageError as e:
        current_app.logger.warning("download of %s failed: %s", f.storage_path, e)
        flash("Could not download the file", "danger")
        return redirect(url_for("courses.detail", course_id=course_id, tab="files"))
    return send_file(
        BytesIO(data),
        as_attachment=True,
        download_name=f.filename,
        mimetype=f.mime_type or "application/octet-stream",
    )


@bp.post("/<int:course_id>/files/<int:file_id>/delete")
@session_required
def delete_file(course_id, file_id):
    f = records.get_file(current_user.id, file_id, course_id=course_id)
    if f is None:
        return ("File not found", 404)
    try:
        delete_course_file(current_user.id, f)
    except FileOperationError as e:
        current_app.logger.warning("delete of file %s failed at %s: %s (%s)", file_id, e.state.value, e, e.cause)
        flash("Could not delete the file", "danger")
    else:
        flash("File deleted", "success")
    return redirect(url_for("courses.detail", course_id=course_id, tab="files"))
