"""Profile read/update and profile picture upload."""
from pathlib import Path

import pytest

from app.core.config import settings


@pytest.fixture
def headers(test_user, auth_headers):
    return auth_headers(test_user)


@pytest.fixture
def profile_url(test_user):
    return f"/api/profile/{test_user.id}"


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


def test_get_profile(client, profile_url, headers, test_user):
    response = client.get(profile_url, headers=headers)

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["id"] == str(test_user.id)
    assert user["email"] == "test@example.com"
    assert user["profile_visibility"] == "public"
    assert user["profile"] == {"crime_thriller": 0, "horror": 0, "fantasy": 0, "philosophy": 0}
    assert user["joined_date"] is not None
    assert "password_hash" not in user


def test_update_profile_is_partial_and_merges_preferences(client, profile_url, headers, test_user, db):
    test_user.fantasy = 30
    db.commit()

    response = client.put(
        profile_url,
        json={"bio": "Reads on trains", "profile_visibility": "private", "profile": {"horror": 12}},
        headers=headers,
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert response.json()["message"] == "Profile updated successfully"
    assert user["bio"] == "Reads on trains"
    assert user["name"] == "Test User"
    assert user["profile_visibility"] == "private"
    assert user["profile"]["horror"] == 12
    assert user["profile"]["fantasy"] == 30


def test_update_profile_via_post(client, profile_url, headers):
    response = client.post(profile_url, json={"location": "Lisbon"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["user"]["location"] == "Lisbon"


def test_bio_length_is_limited(client, profile_url, headers):
    response = client.put(profile_url, json={"bio": "b" * 501}, headers=headers)

    assert response.status_code == 400
    assert "bio" in response.json()["errors"]


def test_invalid_visibility_is_rejected(client, profile_url, headers):
    response = client.put(profile_url, json={"profile_visibility": "friends-only"}, headers=headers)

    assert response.status_code == 400


def test_upload_profile_picture(client, profile_url, headers, upload_dir, test_user, db):
    response = client.post(
        f"{profile_url}/picture",
        files={"profile_picture": ("me.png", b"\x89PNG fake image bytes", "image/png")},
        headers=headers,
    )

    assert response.status_code == 200, response.text
    url = response.json()["profile_picture"]
    assert url.startswith("/uploads/profiles/")
    assert url.endswith(".png")
    stored = upload_dir / "profiles" / Path(url).name
    assert stored.read_bytes() == b"\x89PNG fake image bytes"
    db.refresh(test_user)
    assert test_user.profile_picture == url


def test_replacing_picture_removes_old_file(client, profile_url, headers, upload_dir):
    first = client.post(
        f"{profile_url}/picture",
        files={"profile_picture": ("a.jpg", b"first", "image/jpeg")},
        headers=headers,
    ).json()["profile_picture"]
    second = client.post(
        f"{profile_url}/picture",
        files={"profile_picture": ("b.jpg", b"second-picture", "image/jpeg")},
        headers=headers,
    ).json()["profile_picture"]

    pictures = upload_dir / "profiles"
    assert first != second
    assert not (pictures / Path(first).name).exists()
    assert (pictures / Path(second).name).read_bytes() == b"second-picture"


@pytest.mark.parametrize(
    "filename, content_type, suffix",
    [("page.html", "image/png", ".png"), ("photo", "image/jpeg", ".jpg"), ("drawing.svg", "image/svg+xml", "")],
)
def test_stored_extension_follows_content_type(client, profile_url, headers, upload_dir, filename, content_type, suffix):
    response = client.post(
        f"{profile_url}/picture",
        files={"profile_picture": (filename, b"image bytes", content_type)},
        headers=headers,
    )

    assert response.status_code == 200
    name = Path(response.json()["profile_picture"]).name
    assert Path(name).suffix == suffix
    assert (upload_dir / "profiles" / name).exists()


def test_upload_rejects_non_images(client, profile_url, headers, upload_dir):
    response = client.post(
        f"{profile_url}/picture",
        files={"profile_picture": ("notes.txt", b"hello", "text/plain")},
        headers=headers,
    )

    assert response.status_code == 400


def test_upload_rejects_large_files(client, profile_url, headers, upload_dir, monkeypatch):
    monkeypatch.setattr(settings, "MAX_PROFILE_PICTURE_BYTES", 10)

    response = client.post(
        f"{profile_url}/picture",
        files={"profile_picture": ("big.png", b"x" * 11, "image/png")},
        headers=headers,
    )

    assert response.status_code == 413
    assert not (upload_dir / "profiles").exists() or not any((upload_dir / "profiles").iterdir())


def test_upload_requires_file(client, profile_url, headers, upload_dir):
    response = client.post(f"{profile_url}/picture", headers=headers)

    assert response.status_code == 400


def test_delete_profile_picture(client, profile_url, headers, upload_dir, test_user, db):
    url = client.post(
        f"{profile_url}/picture",
        files={"profile_picture": ("me.gif", b"GIF89a", "image/gif")},
        headers=headers,
    ).json()["profile_picture"]

    response = client.delete(f"{profile_url}/picture", headers=headers)

    assert response.status_code == 200
    assert response.json()["profile_picture"] is None
    assert not (upload_dir / "profiles" / Path(url).name).exists()
    db.refresh(test_user)
    assert test_user.profile_picture is None


def test_profile_of_another_user_is_forbidden(client, make_user, headers):
    other = make_user(email="other@example.com")

    assert client.get(f"/api/profile/{other.id}", headers=headers).status_code == 403
