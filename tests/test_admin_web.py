# tests/test_admin_web.py
# Consola /admin: redirect sin sesión, editor de contenido, visibilidad, permisos por rol
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from reflet.core.errors import BulkSaveError
from reflet.models import UserRole
from reflet.services import content_service
from reflet.services.content_service import fetch_overrides
from reflet.web.deps import safe_next


# ---------- AuthRequired -> /login ----------
def test_admin_without_session_redirects_to_login(client: TestClient):
    r = client.get("/admin/content/accueil", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/login?next=/admin/content/accueil"


def test_admin_redirect_keeps_query(client: TestClient):
    r = client.get("/admin/content/accueil?section=mission", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/login?next=/admin/content/accueil%3Fsection%3Dmission"


def test_login_returns_to_next(client: TestClient, admin_user):
    r = client.post(
        "/login",
        data={"email": "ADMIN@refletdugabon.org", "password": "motdepasse123", "next": "/admin/messages"},
        follow_redirects=False,
    )
    assert r.status_code == 302
    assert r.headers["location"] == "/admin/messages"


def test_login_rejects_offsite_next(client: TestClient, admin_user):
    r = client.post(
        "/login",
        data={"email": "admin@refletdugabon.org", "password": "motdepasse123", "next": "//evil.example.com"},
        follow_redirects=False,
    )
    assert r.headers["location"] == "/admin"


@pytest.mark.parametrize("target", ["/\\evil.example.com", "https://evil.example.com", "", None])
def test_safe_next_keeps_only_local_paths(target):
    assert safe_next(target) == "/admin"
    assert safe_next("/admin/media?folder=gallery") == "/admin/media?folder=gallery"


def test_login_wrong_password(client: TestClient, admin_user):
    r = client.post("/login", data={"email": "admin@refletdugabon.org", "password": "mauvais!!"})
    assert r.status_code == 401
    assert "Email ou mot de passe incorrect." in r.text


def test_logout_ends_session(admin_client: TestClient):
    r = admin_client.post("/logout", follow_redirects=False)
    assert r.headers["location"] == "/login"
    r = admin_client.get("/admin/content/accueil", follow_redirects=False)
    assert r.status_code == 302


def test_deactivated_user_loses_access(admin_client: TestClient, admin_user, db: Session):
    admin_user.is_active = False
    db.commit()
    r = admin_client.get("/admin/content/accueil", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"].startswith("/login")


# ---------- Content editor ----------
def test_admin_home_opens_first_page(admin_client: TestClient):
    r = admin_client.get("/admin", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "/admin/content/accueil"


def test_editor_shows_defaults(admin_client: TestClient):
    r = admin_client.get("/admin/content/accueil")
    assert r.status_code == 200
    assert 'name="hero.title"' in r.text
    assert "Ensemble, cultivons" in r.text
    assert 'data-pick="hero.image"' in r.text
    assert 'id="media-picker"' in r.text


def test_editor_unknown_page_404(admin_client: TestClient):
    assert admin_client.get("/admin/content/inconnue").status_code == 404


def test_end_to_end_override_reaches_public_page(admin_client: TestClient, db: Session):
    r = admin_client.get("/")
    assert "Ensemble, cultivons" in r.text

    r = admin_client.post(
        "/admin/content/accueil",
        data={"hero.title": "Nouveau Titre", "hero.badge": "", "_section": "hero"},
        follow_redirects=False,
    )
    assert r.status_code == 302
    assert r.headers["location"] == "/admin/content/accueil?section=hero"

    r = admin_client.get(r.headers["location"])
    assert "Contenu enregistré !" in r.text

    rows = fetch_overrides(db, "accueil")
    assert [(x.section, x.content_key, x.content_value) for x in rows] == [("hero", "title", "Nouveau Titre")]

    r = admin_client.get("/")
    assert "Nouveau Titre" in r.text
    assert "Ensemble, cultivons" not in r.text


def test_bulk_failure_is_flashed(admin_client: TestClient, monkeypatch):
    def _fail(db, items):
        raise BulkSaveError(0, items[0], RuntimeError("réseau indisponible"))

    monkeypatch.setattr(content_service, "save_overrides_bulk", _fail)
    r = admin_client.post("/admin/content/accueil", data={"hero.title": "X"})
    assert r.status_code == 200
    assert "réseau indisponible" in r.text
    assert "Contenu enregistré !" not in r.text


def test_visibility_toggle_hides_public_section(admin_client: TestClient):
    assert "Un engagement pour" in admin_client.get("/").text

    r = admin_client.post(
        "/admin/content/accueil/mission/visibility",
        data={"visible": "false"},
        follow_redirects=False,
    )
    assert r.status_code == 302
    assert r.headers["location"] == "/admin/content/accueil?section=mission"
    assert "Un engagement pour" not in admin_client.get("/").text

    admin_client.post("/admin/content/accueil/mission/visibility", data={"visible": "true"})
    assert "Un engagement pour" in admin_client.get("/").text


def test_visibility_unknown_section_404(admin_client: TestClient):
    r = admin_client.post("/admin/content/accueil/inconnue/visibility", data={"visible": "false"})
    assert r.status_code == 404


# ---------- Roles ----------
def test_users_tab_admin_only(editor_client: TestClient):
    assert editor_client.get("/admin/users").status_code == 403
    assert editor_client.get("/admin/content/accueil").status_code == 200


def test_users_tab_lists_accounts(admin_client: TestClient, admin_user):
    r = admin_client.get("/admin/users")
    assert r.status_code == 200
    assert admin_user.email in r.text


def test_users_tab_db_failure_is_shown(admin_client: TestClient, db: Session, monkeypatch):
    def _boom(*a, **kw):
        raise SQLAlchemyError("connexion perdue")

    monkeypatch.setattr(db, "scalars", _boom)
    r = admin_client.get("/admin/users")
    assert r.status_code == 200
    assert "Impossible de charger les utilisateurs." in r.text


def test_role_change_is_picked_up(editor_client: TestClient, editor_user, db: Session):
    editor_user.role = UserRole.admin
    db.commit()
    assert editor_client.get("/admin/users").status_code == 200
