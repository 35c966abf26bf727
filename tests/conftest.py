from __future__ import annotations

import io
import os
from dataclasses import dataclass
from typing import Optional

# must be set before `models` is imported: DBStorage reads it at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"

import pytest

from api import create_app
from models import storage
from models.identity_store import ANY, StoreError
from models.user import User
from utils.exceptions import UploadError

PASSWORD = "correct-horse-battery"


class FakeUploader:
    def __init__(self):
        self.fail = False
        self.uploads = []

    def upload(self, file, folder):
        if self.fail:
            raise UploadError(f"Error while uploading {folder}")
        self.uploads.append((folder, file.filename, file.read()))
        return f"https://media.test/{folder}/{file.filename}"


@dataclass
class Identity:
    id: str
    username: str = ""
    email: str = ""
    fullname: str = ""
    refresh_token: Optional[str] = None


class InMemoryIdentityStore:
    """IdentityStore backed by a dict; `fail_writes` simulates a broken database."""

    def __init__(self):
        self.records = {}
        self.fail_writes = False

    def add(self, identity_id, **fields):
        self.records[identity_id] = Identity(id=identity_id, **fields)
        return self.records[identity_id]

    def find_by_id(self, identity_id):
        return self.records.get(identity_id)

    def find_one(self, **criteria):
        for rec in self.records.values():
            if all(getattr(rec, k, None) == v for k, v in criteria.items()):
                return rec
        return None

    def update_current_refresh_token(self, identity_id, value, expected=ANY):
        if self.fail_writes:
            raise StoreError("disk full")
        rec = self.records.get(identity_id)
        if rec is None:
            return False
        if expected is not ANY and rec.refresh_token != expected:
            return False
        rec.refresh_token = value
        return True


@pytest.fixture()
def uploader():
    return FakeUploader()


@pytest.fixture()
def app(uploader):
    app = create_app("test", media_uploader=uploader)
    yield app
    session = storage.get_session()
    session.query(User).delete()
    storage.save()
    storage.close()


@pytest.fixture()
def client(app):
    # explicit tokens only; cookie behaviour is covered by cookie_client
    return app.test_client(use_cookies=False)


@pytest.fixture()
def cookie_client(app):
    return app.test_client()


def register_form(username="ada", email="ada@example.com", fullname="Ada Lovelace",
                  password=PASSWORD, avatar=True, cover=False):
    form = {"fullname": fullname, "username": username, "email": email, "password": password}
    if avatar:
        form["avatar"] = (io.BytesIO(b"\x89PNG avatar"), "ada.png")
    if cover:
        form["coverImage"] = (io.BytesIO(b"\x89PNG cover"), "cover.png")
    return form


@pytest.fixture()
def register(client):
    def _register(**kwargs):
        return client.post(
            "/api/v1/users/register",
            data=register_form(**kwargs),
            content_type="multipart/form-data",
        )
    return _register


@pytest.fixture()
def login(client, register):
    """Register (once per username) and log in; returns the login payload's data."""
    def _login(username="ada", email=None, password=PASSWORD):
        email = email or f"{username}@example.com"
        resp = register(username=username, email=email)
        assert resp.status_code in (201, 409)
        resp = client.post("/api/v1/users/login", json={"username": username, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()["data"]
    return _login


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
