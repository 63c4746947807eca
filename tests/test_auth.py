from studydesk.extensions import db
from studydesk.models import User


def test_signup_creates_account_and_signs_in(app):
    c = app.test_client()
    resp = c.post("/auth/signup", data={
        "email": "Carol@StudyDesk.dev",
        "password": "carol-password",
        "confirm": "carol-password",
    })
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")
    with app.app_context():
        user = User.query.filter_by(email="carol@studydesk.dev").one()
        assert user.check_password("carol-password")
    assert c.get("/").status_code == 200


def test_signup_rejects_short_password_and_duplicates(app, users):
    c = app.test_client()
    c.post("/auth/signup", data={"email": "dan@studydesk.dev", "password": "short", "confirm": "short"})
    resp = c.post("/auth/signup", data={
        "email": "alice@studydesk.dev",
        "password": "another-password",
        "confirm": "another-password",
    })
    assert b"already exists" in resp.data
    with app.app_context():
        assert User.query.filter_by(email="dan@studydesk.dev").first() is None
        assert User.query.count() == 2


def test_login_with_wrong_password_stays_anonymous(app, users):
    c = app.test_client()
    resp = c.post("/auth/login", data={"email": "alice@studydesk.dev", "password": "nope-nope"})
    assert resp.status_code == 200
    assert b"Invalid email or password" in resp.data
    assert c.get("/").status_code == 302


def test_login_returns_to_the_requested_page(app, users):
    c = app.test_client()
    resp = c.post("/auth/login?next=/notes", data={"email": "alice@studydesk.dev", "password": "alice-password"})
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/notes")


def test_login_ignores_offsite_next(app, users):
    c = app.test_client()
    resp = c.post("/auth/login?next=//evil.example/", data={"email": "alice@studydesk.dev", "password": "alice-password"})
    assert resp.headers["Location"].endswith("/")
    assert "evil" not in resp.headers["Location"]


def test_deleting_a_user_removes_their_courses(app, client, users):
    client.post("/courses/new", data={"title": "Chemistry"})
    with app.app_context():
        from studydesk.models import Course
        assert Course.query.count() == 1
        db.session.delete(db.session.get(User, users["alice"]))
        db.session.commit()
        assert Course.query.count() == 0
