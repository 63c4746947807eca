import io

import pytest

from studydesk.extensions import db
from studydesk.models import Course, Note, CourseFile
from studydesk.services import records


def _make_course(app, owner_id, title, **fields):
    with app.app_context():
        c = records.create_course(owner_id, title, fields.get("description"), fields.get("color"))
        if "status" in fields:
            records.update_course(owner_id, c, status=fields["status"])
        return c.id


def test_blank_title_is_rejected_before_any_insert(app, client, monkeypatch):
    def must_not_run(*a, **kw):
        raise AssertionError("create_course was called")

    monkeypatch.setattr(records, "create_course", must_not_run)
    resp = client.post("/courses/new", data={"title": "   ", "description": "kept"})
    assert resp.status_code == 200
    assert b"Title is required" in resp.data
    # form stays populated for a retry
    assert b"kept" in resp.data
    with app.app_context():
        assert Course.query.count() == 0


def test_create_course_normalizes_fields_and_opens_detail(app, client, users):
    resp = client.post("/courses/new", data={"title": "  Linear algebra  ", "description": "   "})
    assert resp.status_code == 302
    with app.app_context():
        c = Course.query.one()
        assert resp.headers["Location"].endswith(f"/courses/{c.id}")
        assert c.title == "Linear algebra"
        assert c.description is None
        assert c.color == "#6c5ce7"
        assert c.status == "active"
        assert c.user_id == users["alice"]


def test_create_course_keeps_chosen_color(app, client):
    client.post("/courses/new", data={"title": "Art", "color": "#fd79a8"})
    with app.app_context():
        assert Course.query.one().color == "#fd79a8"


def test_create_course_failure_keeps_form(app, client, monkeypatch):
    from sqlalchemy.exc import SQLAlchemyError

    def boom(*a, **kw):
        raise SQLAlchemyError("insert rejected")

    monkeypatch.setattr(records, "create_course", boom)
    resp = client.post("/courses/new", data={"title": "Statistics"})
    assert resp.status_code == 200
    assert b"Could not create the course" in resp.data
    assert b"Statistics" in resp.data


def test_courses_are_visible_only_to_their_owner(app, client, other_client, users):
    cid = _make_course(app, users["alice"], "Alice private course")

    assert b"Alice private course" in client.get("/courses").data
    assert b"Alice private course" not in other_client.get("/courses").data

    resp = other_client.get(f"/courses/{cid}")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/courses")

    other_client.post(f"/courses/{cid}/status")
    other_client.post(f"/courses/{cid}/edit", data={"title": "hijacked"})
    other_client.post(f"/courses/{cid}/delete")
    with app.app_context():
        c = db.session.get(Course, cid)
        assert c.title == "Alice private course"
        assert c.status == "active"


def test_missing_course_redirects_with_notice(client):
    resp = client.get("/courses/9999", follow_redirects=True)
    assert resp.status_code == 200
    assert b"Course not found" in resp.data


def test_status_cycles_through_all_three_values(app, client, users):
    cid = _make_course(app, users["alice"], "Cycling")
    seen = []
    for _ in range(3):
        resp = client.post(f"/courses/{cid}/status", json={})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["id"] == cid
        seen.append(body["status"])
    assert seen == ["completed", "archived", "active"]
    with app.app_context():
        assert db.session.get(Course, cid).status == "active"


def test_status_form_post_returns_to_filtered_list(app, client, users):
    cid = _make_course(app, users["alice"], "Form cycling")
    resp = client.post(f"/courses/{cid}/status", data={"next": "/courses?status=completed"})
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/courses?status=completed")
    assert b"Form cycling" in client.get("/courses?status=completed").data


def test_list_filters_by_search_and_status(app, client, users):
    _make_course(app, users["alice"], "Advanced Mathematics")
    _make_course(app, users["alice"], "Poetry", description="rhyme and MATHEMATICAL meter")
    _make_course(app, users["alice"], "Biology", status="completed")

    data = client.get("/courses?q=math").data
    assert b"Advanced Mathematics" in data and b"Poetry" in data and b"Biology" not in data

    data = client.get("/courses?status=completed").data
    assert b"Biology" in data and b"Poetry" not in data

    data = client.get("/courses?q=nothing-like-this").data
    assert b"No course found" in data

    assert client.get("/courses?view=list").status_code == 200


def test_edit_course_replaces_title_and_description(app, client, users):
    cid = _make_course(app, users["alice"], "Old title", description="old")
    resp = client.post(f"/courses/{cid}/edit", data={"title": "New title", "description": ""})
    assert resp.status_code == 302
    with app.app_context():
        c = db.session.get(Course, cid)
        assert c.title == "New title"
        assert c.description is None

    client.post(f"/courses/{cid}/edit", data={"title": " "})
    with app.app_context():
        assert db.session.get(Course, cid).title == "New title"


def test_deleting_a_course_cascades_to_notes_files_and_storage(app, client, users, tmp_path):
    cid = _make_course(app, users["alice"], "Doomed")
    client.post(f"/courses/{cid}/notes", data={"title": "n1", "content": "c"})
    client.post(
        f"/courses/{cid}/files",
        data={"file": (io.BytesIO(b"%PDF-1.4"), "syllabus.pdf", "application/pdf")},
        content_type="multipart/form-data",
    )
    with app.app_context():
        path = CourseFile.query.one().storage_path
    local = tmp_path / "storage" / "course-files" / path
    assert local.exists()

    resp = client.post(f"/courses/{cid}/delete")
    assert resp.status_code == 302
    with app.app_context():
        assert db.session.get(Course, cid) is None
        assert Note.query.filter_by(course_id=cid).count() == 0
        assert CourseFile.query.filter_by(course_id=cid).count() == 0
    assert not local.exists()


def test_update_course_rejects_unknown_status(app, users):
    cid = _make_course(app, users["alice"], "Strict")
    with app.app_context():
        c = db.session.get(Course, cid)
        with pytest.raises(ValueError):
            records.update_course(users["alice"], c, status="paused")


def test_writes_on_foreign_rows_raise(app, users):
    cid = _make_course(app, users["alice"], "Not yours")
    with app.app_context():
        c = db.session.get(Course, cid)
        with pytest.raises(records.OwnershipError):
            records.create_note(users["bob"], c, "sneaky")
        with pytest.raises(records.OwnershipError):
            records.delete_course(users["bob"], c)
        assert Note.query.count() == 0
