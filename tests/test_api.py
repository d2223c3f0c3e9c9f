"""Tests for the page-builder HTTP endpoints."""

from __future__ import annotations

import io

import pytest
from flask_jwt_extended import create_access_token

from pagebuilder.domain.document import SiteDocument
from pagebuilder.domain.registry import get_defaults
from pagebuilder.domain.schema import SectionType
from pagebuilder.domain.templates import build_site_template
from pagebuilder.models.audit_log import AuditLog

CLINIC_ID = "clinic-1"
PAGES_URL = f"/api/v1/pages/{CLINIC_ID}"


def _put(client, headers, site: SiteDocument | dict, revision: int = 0):
    payload = site.to_dict() if isinstance(site, SiteDocument) else site
    return client.put(PAGES_URL, json={"site": payload, "revision": revision}, headers=headers)


@pytest.fixture()
def headers(auth_headers) -> dict[str, str]:
    return auth_headers()


@pytest.fixture()
def classic() -> SiteDocument:
    return build_site_template("classic", CLINIC_ID)


def test_health_is_public(client) -> None:
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_requests_without_token_are_rejected(client) -> None:
    assert client.get(PAGES_URL).status_code == 401


def test_other_clinic_is_forbidden(client, auth_headers) -> None:
    response = client.get(PAGES_URL, headers=auth_headers(clinic_id="clinic-2"))
    assert response.status_code == 403


def test_token_without_clinic_claim_is_rejected(client, app) -> None:
    token = create_access_token(identity="user-1")
    response = client.get(PAGES_URL, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 400


def test_first_load_returns_empty_site(client, headers) -> None:
    response = client.get(PAGES_URL, headers=headers)

    body = response.get_json()
    assert response.status_code == 200
    assert body["revision"] == 0
    assert [p["slug"] for p in body["site"]["pages"]] == [None]
    assert client.get(f"{PAGES_URL}/revision", headers=headers).get_json() == {"revision": 0}


def test_save_increments_revision_and_is_audited(client, headers, classic) -> None:
    response = _put(client, headers, classic)

    assert response.status_code == 200
    assert response.get_json() == {"revision": 1}

    loaded = client.get(PAGES_URL, headers=headers).get_json()
    assert loaded["revision"] == 1
    assert loaded["site"]["template_id"] == "classic"
    assert AuditLog.query.filter_by(clinic_id=CLINIC_ID, action="site.save").count() == 1


def test_stale_save_is_a_conflict(client, headers, classic) -> None:
    _put(client, headers, classic)

    response = _put(client, headers, classic, revision=0)

    assert response.status_code == 409
    assert response.get_json()["revision"] == 1
    assert client.get(f"{PAGES_URL}/revision", headers=headers).get_json() == {"revision": 1}


@pytest.mark.parametrize(
    "body",
    [None, {"revision": 0}, {"site": [], "revision": 0}, {"site": {"pages": []}, "revision": "1"}],
)
def test_malformed_bodies_are_rejected(client, headers, body) -> None:
    response = client.put(PAGES_URL, json=body, headers=headers)
    assert response.status_code == 400


@pytest.mark.parametrize(
    "site",
    [
        {"pages": [1]},
        {"pages": [], "navbar": ["x"]},
        {"pages": [], "footer": "x"},
        {"pages": [{"sections": ["x"]}]},
        {"pages": [{"sections": [{"type": "hero", "style": ["x"]}]}]},
        {"pages": [{"sections": [{"type": ["hero"]}]}]},
        {"version": 1, "sections": [{"type": "hero", "data": ["x"]}]},
    ],
)
def test_non_object_records_are_schema_errors(client, headers, site) -> None:
    response = _put(client, headers, site)

    assert response.status_code == 400
    assert response.get_json()["error"] == "SchemaError"


def test_structural_violations_are_rejected(client, headers, classic) -> None:
    payload = classic.to_dict()
    second_home = dict(payload["pages"][0], id="other-home", sections=[])
    payload["pages"].append(second_home)

    response = _put(client, headers, payload)

    assert response.status_code == 400
    assert response.get_json()["error"] == "InvariantViolation"


def test_unknown_section_type_is_a_schema_error(client, headers, classic) -> None:
    payload = classic.to_dict()
    payload["pages"][0]["sections"][0]["type"] = "carousel"

    response = _put(client, headers, payload)

    assert response.status_code == 400
    assert response.get_json()["error"] == "SchemaError"


def test_document_for_another_clinic_is_rejected(client, headers) -> None:
    response = _put(client, headers, SiteDocument.empty("clinic-2"))
    assert response.status_code == 400


def test_viewer_cannot_save(client, auth_headers, classic) -> None:
    viewer = auth_headers(role="viewer")

    assert _put(client, viewer, classic).status_code == 403
    assert client.get(PAGES_URL, headers=viewer).status_code == 200


def test_publish_is_idempotent(client, headers, classic) -> None:
    _put(client, headers, classic)

    first = client.post(f"{PAGES_URL}/publish", headers=headers)
    second = client.post(f"{PAGES_URL}/publish", headers=headers)

    assert first.status_code == 200
    assert first.get_json() == {"revision": 1, "version": 1}
    assert second.get_json() == {"revision": 1, "version": 1}

    versions = client.get(f"{PAGES_URL}/versions", headers=headers).get_json()
    assert [(v["version"], v["revision"]) for v in versions] == [(1, 1)]


def test_republish_after_save_creates_new_version(client, headers, classic) -> None:
    _put(client, headers, classic)
    client.post(f"{PAGES_URL}/publish", headers=headers)
    _put(client, headers, classic, revision=1)

    response = client.post(f"{PAGES_URL}/publish", headers=headers)

    assert response.get_json() == {"revision": 2, "version": 2}


def test_publish_without_saved_site_is_not_found(client, headers) -> None:
    assert client.post(f"{PAGES_URL}/publish", headers=headers).status_code == 404


def test_publish_reports_incomplete_sections(client, headers, classic) -> None:
    image = get_defaults(SectionType.IMAGE)
    image.order = len(classic.home.sections)
    classic.home.sections.append(image)
    assert _put(client, headers, classic).status_code == 200

    response = client.post(f"{PAGES_URL}/publish", headers=headers)

    body = response.get_json()
    assert response.status_code == 422
    assert [f["field"] for f in body["fields"]] == [f"{classic.home.id}.{image.id}.src"]


def test_publish_rejects_enabled_empty_page(client, headers) -> None:
    assert _put(client, headers, SiteDocument.empty(CLINIC_ID)).status_code == 200

    response = client.post(f"{PAGES_URL}/publish", headers=headers)

    assert response.status_code == 400


def test_live_site_hides_hidden_sections_and_disabled_pages(client, headers, classic) -> None:
    assert client.get(f"{PAGES_URL}/live", headers=headers).status_code == 404

    hidden = classic.home.sections[1]
    hidden.visible = False
    classic.enabled = True
    payload = classic.to_dict()
    payload["pages"].append(
        {"id": "draft-page", "slug": "news", "title_en": "News", "title_ne": "समाचार",
         "enabled": False, "sections": []}
    )
    _put(client, headers, payload)

    preview = client.get(f"{PAGES_URL}/live?preview=true", headers=headers).get_json()
    preview_home = preview["site"]["pages"][0]
    assert hidden.id in [s["id"] for s in preview_home["sections"]]
    assert [p["slug"] for p in preview["site"]["pages"]] == [None, "news"]
    assert client.get(f"{PAGES_URL}/live", headers=headers).status_code == 404

    client.post(f"{PAGES_URL}/publish", headers=headers)
    live = client.get(f"{PAGES_URL}/live", headers=headers).get_json()
    live_home = live["site"]["pages"][0]
    assert hidden.id not in [s["id"] for s in live_home["sections"]]
    assert [p["slug"] for p in live["site"]["pages"]] == [None]
    assert live["revision"] == 1


def test_disabled_site_is_only_served_as_preview(client, headers, classic) -> None:
    _put(client, headers, classic)
    client.post(f"{PAGES_URL}/publish", headers=headers)

    assert client.get(f"{PAGES_URL}/live", headers=headers).status_code == 404
    assert client.get(f"{PAGES_URL}/live?preview=true", headers=headers).status_code == 200

    classic.enabled = True
    _put(client, headers, classic, revision=1)
    client.post(f"{PAGES_URL}/publish", headers=headers)

    assert client.get(f"{PAGES_URL}/live", headers=headers).status_code == 200


def test_legacy_payload_is_upgraded_on_save(client, headers) -> None:
    legacy = {
        "version": 1,
        "sections": [
            {"id": "s1", "type": "services_grid", "order": 0, "data": {"heading": "Services", "source": "auto"}},
        ],
    }

    assert _put(client, headers, legacy).status_code == 200

    site = client.get(PAGES_URL, headers=headers).get_json()["site"]
    section = site["pages"][0]["sections"][0]
    assert site["version"] == 2
    assert section["type"] == "services"
    assert section["content"]["heading_en"] == "Services"


def test_upload_accepts_images(client, headers) -> None:
    response = client.post(
        "/api/v1/uploads",
        data={"file": (io.BytesIO(b"\x89PNG\r\n\x1a\n"), "Logo.PNG")},
        headers=headers,
        content_type="multipart/form-data",
    )

    assert response.status_code == 201
    url = response.get_json()["url"]
    assert url.startswith("/uploads/") and url.endswith(".png")
    assert client.get(url).status_code == 200
    assert AuditLog.query.filter_by(clinic_id=CLINIC_ID, action="media.upload").count() == 1


def test_upload_rejects_other_files(client, headers) -> None:
    gif = client.post(
        "/api/v1/uploads",
        data={"file": (io.BytesIO(b"GIF89a"), "anim.gif")},
        headers=headers,
        content_type="multipart/form-data",
    )
    missing = client.post("/api/v1/uploads", data={}, headers=headers, content_type="multipart/form-data")

    assert gif.status_code == 422
    assert gif.get_json()["fields"][0]["field"] == "file"
    assert missing.status_code == 400


def test_upload_rejects_oversized_images(client, headers, app) -> None:
    app.config["MAX_UPLOAD_BYTES"] = 16

    response = client.post(
        "/api/v1/uploads",
        data={"file": (io.BytesIO(b"0" * 64), "big.jpg")},
        headers=headers,
        content_type="multipart/form-data",
    )

    assert response.status_code == 422
