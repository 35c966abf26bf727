import io

import pytest

from conftest import PASSWORD, bearer


@pytest.fixture()
def session(login):
    return login()


def test_current_user(client, session):
    resp = client.get("/api/v1/users/current-user", headers=bearer(session["accessToken"]))
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["username"] == "ada"
    assert "refresh_token" not in data


def test_current_user_rejects_refresh_token(client, session):
    resp = client.get("/api/v1/users/current-user", headers=bearer(session["refreshToken"]))
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "invalid access token"


def test_current_user_requires_auth(client):
    resp = client.get("/api/v1/users/current-user")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "UNAUTHORIZED"


def test_change_password(client, session):
    headers = bearer(session["accessToken"])
    resp = client.post(
        "/api/v1/users/change-password",
        json={"oldPassword": "not-my-password", "newPassword": "a-brand-new-one"},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid old password"

    resp = client.post(
        "/api/v1/users/change-password",
        json={"oldPassword": PASSWORD, "newPassword": "a-brand-new-one"},
        headers=headers,
    )
    assert resp.status_code == 200

    old = client.post("/api/v1/users/login", json={"username": "ada", "password": PASSWORD})
    assert old.status_code == 401
    new = client.post("/api/v1/users/login", json={"username": "ada", "password": "a-brand-new-one"})
    assert new.status_code == 200


def test_change_password_validates_body(client, session):
    resp = client.post(
        "/api/v1/users/change-password",
        json={"oldPassword": PASSWORD, "newPassword": "short"},
        headers=bearer(session["accessToken"]),
    )
    assert resp.status_code == 422
    assert "newPassword" in resp.get_json()["details"]


def test_update_account(client, session):
    resp = client.patch(
        "/api/v1/users/update-account",
        json={"fullname": "Augusta Ada King", "email": "Countess@Example.com"},
        headers=bearer(session["accessToken"]),
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["fullname"] == "Augusta Ada King"
    assert data["email"] == "countess@example.com"


def test_update_account_requires_both_fields(client, session):
    resp = client.patch(
        "/api/v1/users/update-account",
        json={"fullname": "Only Name"},
        headers=bearer(session["accessToken"]),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "All fields are required"


def test_update_account_email_taken(client, login, session):
    login(username="grace")
    resp = client.patch(
        "/api/v1/users/update-account",
        json={"fullname": "Ada", "email": "grace@example.com"},
        headers=bearer(session["accessToken"]),
    )
    assert resp.status_code == 409


def test_update_avatar(client, session, uploader):
    resp = client.patch(
        "/api/v1/users/avatar",
        data={"avatar": (io.BytesIO(b"new avatar"), "portrait.jpg")},
        content_type="multipart/form-data",
        headers=bearer(session["accessToken"]),
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["avatar"] == "https://media.test/avatars/portrait.jpg"
    assert uploader.uploads[-1] == ("avatars", "portrait.jpg", b"new avatar")


def test_update_avatar_missing_file(client, session):
    resp = client.patch(
        "/api/v1/users/avatar",
        data={},
        content_type="multipart/form-data",
        headers=bearer(session["accessToken"]),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Avatar file is missing"


def test_update_avatar_upload_failure(client, session, uploader):
    uploader.fail = True
    resp = client.patch(
        "/api/v1/users/avatar",
        data={"avatar": (io.BytesIO(b"x"), "portrait.jpg")},
        content_type="multipart/form-data",
        headers=bearer(session["accessToken"]),
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "UPLOAD_ERROR"


def test_update_cover_image(client, session):
    headers = bearer(session["accessToken"])
    resp = client.patch(
        "/api/v1/users/cover-image",
        data={"coverImage": (io.BytesIO(b"banner"), "banner.webp")},
        content_type="multipart/form-data",
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["coverImage"] == "https://media.test/covers/banner.webp"

    current = client.get("/api/v1/users/current-user", headers=headers).get_json()["data"]
    assert current["coverImage"] == "https://media.test/covers/banner.webp"


def test_update_cover_image_missing_file(client, session):
    resp = client.patch(
        "/api/v1/users/cover-image",
        data={},
        content_type="multipart/form-data",
        headers=bearer(session["accessToken"]),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Cover image file is missing"
