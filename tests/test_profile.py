"""Profile endpoint tests."""

import pytest

from src.errors import BadRequestError
from src.models.user import User
from src.services.auth import update_user_fields

TEST_PASSWORD = "testpass123"  # noqa: S105


def _login(client, password):
    return client.post("/api/v1/users/login", json={"username": "alice", "password": password})


def test_get_current_user(client, auth_headers):
    """Test getting current user information."""
    response = client.get("/api/v1/users/current-user", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == auth_headers.username
    assert data["email"] == auth_headers.email
    assert "refreshToken" not in data


def test_get_current_user_requires_token(client):
    """Test current user without credentials."""
    response = client.get("/api/v1/users/current-user")
    assert response.status_code == 401


def test_get_current_user_invalid_token(client):
    """Test current user with a garbage bearer token."""
    response = client.get(
        "/api/v1/users/current-user", headers={"Authorization": "Bearer garbage"}
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid access token"


def test_change_password(client, auth_headers):
    """Test changing the password with the correct old password."""
    response = client.post(
        "/api/v1/users/change-password",
        headers=auth_headers,
        json={"oldPassword": TEST_PASSWORD, "newPassword": "brand-new-pass"},
    )
    assert response.status_code == 200

    assert _login(client, TEST_PASSWORD).status_code == 401
    assert _login(client, "brand-new-pass").status_code == 200


def test_change_password_wrong_old_password(client, auth_headers):
    """Test changing the password with a wrong old password."""
    response = client.post(
        "/api/v1/users/change-password",
        headers=auth_headers,
        json={"oldPassword": "wrong", "newPassword": "brand-new-pass"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid old password"
    assert _login(client, TEST_PASSWORD).status_code == 200


def test_update_account(client, auth_headers, db):
    """Test updating full name and email."""
    response = client.patch(
        "/api/v1/users/update-account",
        headers=auth_headers,
        json={"fullname": "Alice Updated", "email": "alice@new.com"},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["fullname"] == "Alice Updated"
    assert data["email"] == "alice@new.com"

    user = db.query(User).filter_by(id=auth_headers.user_id).first()
    assert user.email == "alice@new.com"


def test_update_account_requires_both_fields(client, auth_headers):
    """Test that fullname and email are both required."""
    response = client.patch(
        "/api/v1/users/update-account", headers=auth_headers, json={"fullname": "Only Name"}
    )
    assert response.status_code == 400

    response = client.patch(
        "/api/v1/users/update-account",
        headers=auth_headers,
        json={"fullname": "  ", "email": "alice@new.com"},
    )
    assert response.status_code == 400


def test_update_account_email_taken(client, auth_headers, register):
    """Test updating to an email owned by another user."""
    register(username="bob", email="bob@x.com")
    response = client.patch(
        "/api/v1/users/update-account",
        headers=auth_headers,
        json={"fullname": "Alice", "email": "bob@x.com"},
    )
    assert response.status_code == 400


def test_update_avatar(client, auth_headers, db):
    """Test replacing the avatar."""
    response = client.patch(
        "/api/v1/users/avatar",
        headers=auth_headers,
        files={"avatar": ("new-avatar.jpg", b"jpeg-bytes", "image/jpeg")},
    )
    assert response.status_code == 200
    assert response.json()["data"]["avatar"] == "https://media.test/new-avatar.jpg"

    user = db.query(User).filter_by(id=auth_headers.user_id).first()
    assert user.avatar == "https://media.test/new-avatar.jpg"


def test_update_avatar_missing_file(client, auth_headers):
    """Test avatar update without a file."""
    response = client.patch("/api/v1/users/avatar", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Avatar file is missing"


def test_update_avatar_upload_failure(client, auth_headers, media, db):
    """Test avatar update when storage yields no URL."""
    media.fail = True
    response = client.patch(
        "/api/v1/users/avatar",
        headers=auth_headers,
        files={"avatar": ("new-avatar.jpg", b"jpeg-bytes", "image/jpeg")},
    )
    assert response.status_code == 500

    user = db.query(User).filter_by(id=auth_headers.user_id).first()
    assert user.avatar == "https://media.test/avatar.png"


def test_update_cover_image(client, auth_headers):
    """Test replacing the cover image."""
    response = client.patch(
        "/api/v1/users/cover-image",
        headers=auth_headers,
        files={"coverImage": ("banner.png", b"png-bytes", "image/png")},
    )
    assert response.status_code == 200
    assert response.json()["data"]["coverImage"] == "https://media.test/banner.png"


def test_update_cover_image_missing_file(client, auth_headers):
    """Test cover image update without a file."""
    response = client.patch("/api/v1/users/cover-image", headers=auth_headers)
    assert response.status_code == 400


def test_change_password_with_surrounding_spaces(client, auth_headers):
    """Test that a padded new password still works for login afterwards."""
    response = client.post(
        "/api/v1/users/change-password",
        headers=auth_headers,
        json={"oldPassword": f" {TEST_PASSWORD} ", "newPassword": " new-pass "},
    )
    assert response.status_code == 200

    assert _login(client, " new-pass ").status_code == 200
    assert _login(client, "new-pass").status_code == 200


def test_update_user_fields_conflict_message(client, auth_headers, register, db):
    """Test that a unique constraint violation reports the caller's message."""
    register(username="bob", email="bob@x.com")
    user = db.query(User).filter_by(id=auth_headers.user_id).first()

    with pytest.raises(BadRequestError) as exc_info:
        update_user_fields(db, user, conflict_message="Email is already in use", email="bob@x.com")
    assert exc_info.value.message == "Email is already in use"

    with pytest.raises(BadRequestError) as exc_info:
        update_user_fields(db, user, username="bob")
    assert exc_info.value.message == "Account details conflict with another user"

    db.refresh(user)
    assert user.email == "a@x.com"
    assert user.username == "alice"
