import hashlib

import pytest

from app.clients.storage_client import content_key
from app.config import settings

PNG = b"\x89PNG\r\n\x1a\nnot really an image"


@pytest.fixture()
def storage(monkeypatch):
    monkeypatch.setattr(settings, "s3_endpoint", "https://s3.example.com")
    monkeypatch.setattr(settings, "s3_bucket", "blog")
    monkeypatch.setattr(settings, "s3_folder", "images")
    monkeypatch.setattr(settings, "s3_access_host", "https://cdn.example.com")
    monkeypatch.setattr(settings, "s3_access_key_id", "key")
    monkeypatch.setattr(settings, "s3_secret_access_key", "secret")

    puts = []

    def fake_put(key, data, content_type=None):
        puts.append({"key": key, "data": data, "content_type": content_type})
        return {"ETag": '"abc"'}

    monkeypatch.setattr("app.routers.storage.put_object", fake_put)
    return puts


def _upload(client, headers, data=PNG, key="photo.png"):
    return client.post(
        "/storage",
        headers=headers,
        data={"key": key},
        files={"file": (key, data, "image/png")},
    )


def test_content_key_is_hash_plus_extension():
    digest = hashlib.sha1(PNG).hexdigest()
    assert content_key(PNG, "photo.png") == f"{digest}.png"
    assert content_key(PNG, "photo.png", "images") == f"images/{digest}.png"
    assert content_key(PNG, "archive.tar.gz", "x") == f"x/{digest}.gz"
    assert content_key(PNG, "README") == f"{digest}."


def test_content_key_depends_only_on_bytes_and_extension():
    assert content_key(PNG, "a.png", "f") == content_key(PNG, "b.png", "f")
    assert content_key(PNG, "a.png", "f") != content_key(PNG, "a.jpg", "f")
    assert content_key(PNG, "a.png", "f") != content_key(PNG + b"!", "a.png", "f")


def test_upload_requires_storage_config(client, seed):
    _, headers = seed.user("alice")
    resp = _upload(client, headers)
    assert resp.status_code == 500
    assert resp.text == "S3_ENDPOINT is not defined"


def test_upload_reports_first_missing_setting(client, seed, storage, monkeypatch):
    _, headers = seed.user("alice")
    monkeypatch.setattr(settings, "s3_bucket", None)
    resp = _upload(client, headers)
    assert resp.status_code == 500
    assert resp.text == "S3_BUCKET is not defined"


def test_upload_requires_auth(client, storage):
    resp = _upload(client, {})
    assert resp.status_code == 401
    assert storage == []


def test_upload_returns_public_url(client, seed, storage):
    _, headers = seed.user("alice")
    resp = _upload(client, headers)
    digest = hashlib.sha1(PNG).hexdigest()
    assert resp.status_code == 200
    assert resp.text == f"https://cdn.example.com/images/{digest}.png"
    assert storage[0]["key"] == f"images/{digest}.png"
    assert storage[0]["data"] == PNG
    assert storage[0]["content_type"] == "image/png"


def test_same_bytes_upload_to_same_key(client, seed, storage):
    _, headers = seed.user("alice")
    first = _upload(client, headers, key="one.png").text
    second = _upload(client, headers, key="two.png").text
    assert first == second
    assert storage[0]["key"] == storage[1]["key"]


def test_access_host_defaults_to_endpoint(client, seed, storage, monkeypatch):
    _, headers = seed.user("alice")
    monkeypatch.setattr(settings, "s3_access_host", None)
    resp = _upload(client, headers)
    assert resp.text.startswith("https://s3.example.com/images/")


def test_upload_failure_returns_message(client, seed, storage, monkeypatch):
    _, headers = seed.user("alice")

    def broken_put(key, data, content_type=None):
        raise RuntimeError("bucket is on fire")

    monkeypatch.setattr("app.routers.storage.put_object", broken_put)
    resp = _upload(client, headers)
    assert resp.status_code == 400
    assert resp.text == "bucket is on fire"
