import pytest

from matatu.core.config_env import settings
from matatu.core.errors import DependencyError
from matatu.services import lost_items_service

from conftest import png_bytes


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


def _form(**overrides):
    form = {
        "lostitem": "Black backpack",
        "route": "CBD - Rongai",
        "date": "2025-09-30",
        "sacco": "Rongai Ma3",
        "description": "Left on the back seat",
    }
    form.update(overrides)
    return {k: v for k, v in form.items() if v is not None}


def _report(client, headers, files=None, **overrides):
    return client.post("/api/v1/lost-items", data=_form(**overrides), files=files, headers=headers)


def test_report_without_image(client, commuter_headers):
    resp = _report(client, commuter_headers)
    assert resp.status_code == 201, resp.text
    item = resp.json()["item"]
    assert item["lostitem"] == "Black backpack"
    assert item["date"] == "2025-09-30"
    assert item["image_url"] is None

    assert client.get(f"/api/v1/lost-items/{item['id']}").status_code == 200
    assert [i["id"] for i in client.get("/api/v1/lost-items").json()] == [item["id"]]


def test_report_with_image_is_served(client, commuter_headers, upload_dir):
    data = png_bytes()
    resp = _report(client, commuter_headers, files={"image": ("bag.png", data, "image/png")})
    assert resp.status_code == 201, resp.text
    url = resp.json()["item"]["image_url"]
    assert url.startswith("/uploads/lost-item-") and url.endswith(".png")
    saved = upload_dir / url.rsplit("/", 1)[1]
    assert saved.read_bytes() == data


def test_requires_auth(client):
    assert client.post("/api/v1/lost-items", data=_form()).status_code == 401


def test_missing_fields(client, commuter_headers):
    resp = _report(client, commuter_headers, sacco=None)
    assert resp.status_code == 400
    assert "Missing required fields" in resp.json()["error"]


def test_bad_date_removes_uploaded_file(client, commuter_headers, upload_dir):
    resp = _report(client, commuter_headers, date="30/09/2025",
                   files={"image": ("bag.png", png_bytes(), "image/png")})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid date format. Use YYYY-MM-DD"}
    assert list(upload_dir.iterdir()) == []

    resp = _report(client, commuter_headers, date="2025-02-30",
                   files={"image": ("bag.png", png_bytes(), "image/png")})
    assert resp.status_code == 400
    assert list(upload_dir.iterdir()) == []


def test_datastore_failure_removes_uploaded_file(client, commuter_headers, upload_dir, monkeypatch):
    def boom(db):
        db.rollback()
        raise DependencyError("Database operation failed")

    monkeypatch.setattr(lost_items_service, "commit", boom)
    resp = _report(client, commuter_headers, files={"image": ("bag.png", png_bytes(), "image/png")})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Database operation failed"}
    assert list(upload_dir.iterdir()) == []


def test_non_image_rejected_before_write(client, commuter_headers, upload_dir):
    resp = _report(client, commuter_headers, files={"image": ("bag.pdf", b"%PDF-1.4", "application/pdf")})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Only image files are allowed!"}
    assert list(upload_dir.iterdir()) == []


def test_oversized_image_rejected(client, commuter_headers, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 1024 * 1024)
    big = b"\x89PNG" + b"0" * (1024 * 1024 + 1)
    resp = _report(client, commuter_headers, files={"image": ("big.png", big, "image/png")})
    assert resp.status_code == 400
    assert resp.json() == {"error": "File too large. Maximum size is 1MB."}


def test_mark_found(client, commuter_headers):
    item_id = _report(client, commuter_headers).json()["item"]["id"]
    resp = client.post(f"/api/v1/lost-items/{item_id}/found", headers=commuter_headers)
    assert resp.status_code == 200
    assert resp.json()["item"]["description"] == "Left on the back seat [FOUND] Item has been found"

    again = client.post(f"/api/v1/lost-items/{item_id}/found", headers=commuter_headers)
    assert again.json()["item"]["description"].count("[FOUND]") == 1


def test_delete_removes_row_and_file(client, commuter_headers, admin_headers, upload_dir):
    resp = _report(client, commuter_headers, files={"image": ("bag.png", png_bytes(), "image/png")})
    item = resp.json()["item"]
    assert len(list(upload_dir.iterdir())) == 1

    assert client.delete(f"/api/v1/lost-items/{item['id']}", headers=commuter_headers).status_code == 403
    resp = client.delete(f"/api/v1/lost-items/{item['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert list(upload_dir.iterdir()) == []
    assert client.get(f"/api/v1/lost-items/{item['id']}").status_code == 404
