import io
from urllib.parse import quote

from helpers import API_KEY_HEADER, fake_pdf_bytes


def _ensure_categories(client) -> list:
    r = client.post("/hr-categories/ensure")
    assert r.status_code == 200
    return r.json()["categories"]


def _upload(client, category_id: int, name="handbook.pdf", mime="application/pdf", data=None):
    files = {"file": (name, io.BytesIO(data or fake_pdf_bytes()), mime)}
    return client.post(
        "/hr-manuals/upload",
        files=files,
        data={"category_id": str(category_id)},
        headers=API_KEY_HEADER,
    )


def test_categories_not_seeded_until_ensured(test_client):
    assert test_client.get("/hr-categories").json()["categories"] == []

    cats = _ensure_categories(test_client)
    assert len(cats) == 16
    assert cats[0]["name"] == "Company Description"

    # idempotent
    assert len(_ensure_categories(test_client)) == 16


def test_upload_list_download_delete(test_client):
    cat = _ensure_categories(test_client)[1]

    r = _upload(test_client, cat["id"])
    assert r.status_code == 201, r.text
    manual = r.json()
    assert manual["file_name"] == "handbook.pdf"
    assert manual["category_name"] == cat["name"]
    assert manual["size_bytes"] == len(fake_pdf_bytes())
    assert manual["pages"] >= 0

    r = test_client.get("/hr-manuals")
    assert [m["id"] for m in r.json()["manuals"]] == [manual["id"]]

    r = test_client.get(f"/hr-manuals/{cat['id']}")
    assert len(r.json()["manuals"]) == 1

    r = test_client.get(f"/hr-manual/{manual['id']}/download")
    assert r.status_code == 200
    assert r.content == fake_pdf_bytes()
    assert r.headers["content-type"] == "application/pdf"

    r = test_client.delete(f"/hr-manual/{manual['id']}", headers=API_KEY_HEADER)
    assert r.status_code == 200
    assert test_client.get(f"/hr-manual/{manual['id']}/download").status_code == 404


def test_upload_checks(test_client):
    cat = _ensure_categories(test_client)[1]

    r = test_client.post(
        "/hr-manuals/upload",
        files={"file": ("handbook.pdf", io.BytesIO(fake_pdf_bytes()), "application/pdf")},
        data={"category_id": str(cat["id"])},
    )
    assert r.status_code == 401

    assert _upload(test_client, 9999).status_code == 404
    assert _upload(test_client, cat["id"], name="notes.txt", mime="text/plain").status_code == 415
    assert _upload(test_client, cat["id"], data=b"0" * (1024 * 1024 + 1)).status_code == 413

    # MIME alone is enough
    assert _upload(test_client, cat["id"], name="handbook", mime="application/pdf").status_code == 201


def test_unknown_category_manuals(test_client):
    assert test_client.get("/hr-manuals/9999").status_code == 404


def test_extract_policies_fallback(test_client):
    cat = _ensure_categories(test_client)[1]
    manual_id = _upload(test_client, cat["id"]).json()["id"]

    r = test_client.post("/extract-policies", json={"manualId": manual_id}, headers=API_KEY_HEADER)
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["source"] == "fallback"
    assert len(data["policies"]) == 4
    assert all(p["title"] and p["content"] for p in data["policies"])

    stored = test_client.get(f"/hr-manuals/{cat['id']}").json()["manuals"][0]
    assert stored["extracted_policies"] == data["policies"]

    assert test_client.post("/extract-policies", json={"manualId": 9999}, headers=API_KEY_HEADER).status_code == 404


def test_download_non_ascii_manual_name(test_client):
    cat = _ensure_categories(test_client)[1]
    r = _upload(test_client, cat["id"], name="नीति पुस्तिका.pdf")
    assert r.status_code == 201, r.text
    manual = r.json()

    r = test_client.get(f"/hr-manual/{manual['id']}/download")
    assert r.status_code == 200
    assert r.content == fake_pdf_bytes()
    disposition = r.headers["content-disposition"]
    assert disposition.startswith("inline; ")
    assert "filename*=UTF-8''" + quote(manual["file_name"], safe="") in disposition
