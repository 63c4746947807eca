import os
import sys

import boto3
import pytest
from botocore.stub import Stubber

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from studydesk import create_app
from studydesk.extensions import db
from studydesk.models import User
from studydesk.services import storage

PASSWORDS = {
    "alice@studydesk.dev": "alice-password",
    "bob@studydesk.dev": "bob-password",
}


@pytest.fixture()
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
        "WTF_CSRF_ENABLED": False,
        "AUTO_CREATE_TABLES": True,
        "STORAGE_BACKEND": "local",
        "STORAGE_BUCKET": "course-files",
        "LOCAL_STORAGE_DIR": str(tmp_path / "storage"),
        "DASHBOARD_RECENT_LIMIT": 6,
        "DASHBOARD_STATS_SCOPE": "recent",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
    app.extensions["auth_context"].stop()


@pytest.fixture()
def users(app):
    """Two accounts; returns {"alice": id, "bob": id}."""
    ids = {}
    with app.app_context():
        for email, password in PASSWORDS.items():
            u = User(email=email)
            u.set_password(password)
            db.session.add(u)
            db.session.commit()
            ids[email.split("@")[0]] = u.id
    return ids


def login(client, email):
    return client.post("/auth/login", data={"email": email, "password": PASSWORDS[email]})


@pytest.fixture()
def client(app, users):
    c = app.test_client()
    login(c, "alice@studydesk.dev")
    return c


@pytest.fixture()
def other_client(app, users):
    c = app.test_client()
    login(c, "bob@studydesk.dev")
    return c


@pytest.fixture()
def s3(app, monkeypatch):
    """Switch storage to S3 against a stubbed client; yields the botocore Stubber."""
    app.config.update(STORAGE_BACKEND="s3", STORAGE_BUCKET="course-files")
    s3_client = boto3.client(
        "s3", region_name="us-east-1",
        aws_access_key_id="test", aws_secret_access_key="test",
    )
    monkeypatch.setattr(storage, "_s3_client", lambda: s3_client)
    with Stubber(s3_client) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()
