import io
import os

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.config import Settings
from app.image_encoding import encode
from app.main import create_app


def png_bytes(size=(120, 80)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, (255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def client(tmp_path):
    settings = Settings(UPLOAD_DIR=str(tmp_path), BASE_URL="http://testserver", PERSISTENCE_MODE="remote")
    with TestClient(create_app(settings)) as c:
        yield c


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["uploads"]["persistence_mode"] == "remote"


def test_upload_list_delete_flow(client):
    resp = client.post("/api/uploads/images", files={"file": ("pizza.png", png_bytes(), "image/png")})
    assert resp.status_code == 200
    ref = resp.json()["ref"]
    assert ref.startswith("http://testserver/uploads/images/")

    served = client.get(ref.replace("http://testserver", ""))
    assert served.status_code == 200

    meta = client.get("/api/uploads/metadata").json()
    assert meta["count"] == 1
    assert meta["images"][ref]["source_ref"] == "pizza.png"

    resp = client.post("/api/uploads/images/delete", json={"ref": ref})
    assert resp.status_code == 200
    assert resp.json() == {"deleted": True}
    assert client.get("/api/uploads/metadata").json()["count"] == 0


def test_upload_rejects_unsupported_type(client):
    resp = client.post("/api/uploads/images", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 415
    body = resp.json()
    assert body["success"] is False
    assert body["kind"] == "invalid_type"


def test_upload_rejects_oversized_file(client):
    resp = client.post("/api/uploads/images", files={"file": ("big.jpg", b"\xff" * (3 * 1024 * 1024), "image/jpeg")})
    assert resp.status_code == 413
    assert resp.json()["kind"] == "too_large"
    assert client.get("/api/uploads/metadata").json()["count"] == 0


def test_upload_undecodable_image(client):
    resp = client.post("/api/uploads/images", files={"file": ("broken.png", b"garbage", "image/png")})
    assert resp.status_code == 422
    assert resp.json()["kind"] == "decode_error"


def test_delete_unknown_ref_is_404(client):
    resp = client.post("/api/uploads/images/delete", json={"ref": "http://testserver/uploads/images/missing.png"})
    assert resp.status_code == 404
    assert resp.json()["kind"] == "not_found"


def test_base64_upload(client):
    resp = client.post("/api/uploads/images/base64", json={"image": "data:image/png;base64," + encode(png_bytes()), "filename": "logo.png"})
    assert resp.status_code == 200
    assert resp.json()["content_type"] == "image/png"


def test_base64_upload_malformed(client):
    resp = client.post("/api/uploads/images/base64", json={"image": "data:image/png;base64,!!!"})
    assert resp.status_code == 400
    assert resp.json()["kind"] == "malformed_encoding"


def test_preview(client):
    resp = client.post("/api/uploads/preview", files={"file": ("wide.png", png_bytes((1000, 500)), "image/png")})
    assert resp.status_code == 200
    assert resp.json()["preview"].startswith("data:image/png;base64,")
    assert client.get("/api/uploads/metadata").json()["count"] == 0


def test_clear_cache(client):
    client.post("/api/uploads/images", files={"file": ("a.png", png_bytes(), "image/png")})
    resp = client.delete("/api/uploads/cache")
    assert resp.status_code == 200
    assert client.get("/api/uploads/metadata").json() == {"images": {}, "count": 0}


def test_inline_upload_can_be_deleted(tmp_path):
    settings = Settings(UPLOAD_DIR=str(tmp_path), PERSISTENCE_MODE="inline")
    with TestClient(create_app(settings)) as c:
        noisy = Image.frombytes("RGB", (150, 150), os.urandom(150 * 150 * 3))
        buf = io.BytesIO()
        noisy.save(buf, format="PNG")
        resp = c.post("/api/uploads/images", files={"file": ("salad.png", buf.getvalue(), "image/png")})
        assert resp.status_code == 200
        ref = resp.json()["ref"]
        assert ref.startswith("data:image/png;base64,")
        assert len(ref) > 20000

        resp = c.post("/api/uploads/images/delete", json={"ref": ref})
        assert resp.status_code == 200
        assert resp.json() == {"deleted": True}
        assert c.get("/api/uploads/metadata").json()["count"] == 0


def test_request_size_cap_comes_from_app_settings(tmp_path):
    settings = Settings(UPLOAD_DIR=str(tmp_path), MAX_REQUEST_SIZE=1000)
    with TestClient(create_app(settings)) as c:
        resp = c.post("/api/uploads/images", files={"file": ("a.png", png_bytes((200, 200)) + b"\x00" * 4000, "image/png")})
        assert resp.status_code == 413
        assert resp.json()["error"] == "Request entity too large"
        assert c.get("/api/uploads/metadata").json()["count"] == 0


def test_debug_flag_comes_from_app_settings(tmp_path):
    app = create_app(Settings(UPLOAD_DIR=str(tmp_path), DEBUG=True))

    @app.get("/explode")
    def explode():
        raise RuntimeError("kitchen on fire")

    with TestClient(app) as c:
        resp = c.get("/explode")
        assert resp.status_code == 500
        assert "kitchen on fire" in resp.json()["error"]
