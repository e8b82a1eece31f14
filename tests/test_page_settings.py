# tests/test_page_settings.py
from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from reflet.services.page_settings_service import (
    DEFAULT_NAV,
    header_nav,
    list_page_settings,
    seed_default_pages,
    set_page_visibility,
    visible_pages,
)


def test_seed_is_idempotent(db: Session):
    assert seed_default_pages(db) == len(DEFAULT_NAV)
    assert seed_default_pages(db) == 0
    rows = list_page_settings(db)
    assert [r.page_key for r in rows] == [e.page_key for e in DEFAULT_NAV]


def test_header_nav_defaults_when_empty(db: Session):
    assert header_nav(db) == list(DEFAULT_NAV)


def test_hidden_page_leaves_nav(db: Session):
    seed_default_pages(db)
    culture = next(r for r in list_page_settings(db) if r.page_key == "culture")
    assert set_page_visibility(db, culture.id, False).is_visible is False
    assert "culture" not in [e.page_key for e in header_nav(db)]
    assert "culture" not in [p.page_key for p in visible_pages(db)]
    assert set_page_visibility(db, 999, True) is None


def test_admin_pages_toggle(admin_client: TestClient, db: Session):
    seed_default_pages(db)
    contact = next(r for r in list_page_settings(db) if r.page_key == "contact")

    r = admin_client.get("/admin/pages")
    assert r.status_code == 200
    assert "Contact" in r.text

    r = admin_client.post(f"/admin/pages/{contact.id}/visibility", data={"visible": "false"}, follow_redirects=False)
    assert r.status_code == 302
    db.refresh(contact)
    assert contact.is_visible is False


def test_admin_pages_toggle_missing(admin_client: TestClient):
    r = admin_client.post("/admin/pages/404/visibility", data={"visible": "true"})
    assert r.status_code == 200
    assert "Page introuvable" in r.text
