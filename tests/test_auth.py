# tests/test_auth.py
# Sesión admin explícita (AuthContext + SessionEvents), JWT de la API y reset de contraseña
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from jose import JWTError
from sqlalchemy.orm import Session

from reflet.core.errors import AuthRequired, RefletError
from reflet.core.settings import settings
from reflet.main import app
from reflet.models import User, UserRole
from reflet.security.jwt import create_access_token, create_reset_token, decode_token
from reflet.services import auth_service, mailer
from reflet.services.auth_service import (
    SESSION_USER_KEY,
    AuthContext,
    InvalidResetToken,
    SessionEvent,
    SessionEvents,
    SessionUser,
    authenticate,
    request_password_reset,
    reset_password,
    sign_in,
    sign_out,
)
from reflet.services.passwords import password_problem, verify_password

API = settings.API_V1_STR


# ---------- credentials ----------
def test_authenticate(db: Session, admin_user: User):
    assert authenticate(db, " Admin@RefletDuGabon.org ", "motdepasse123").id == admin_user.id
    assert authenticate(db, "admin@refletdugabon.org", "faux") is None
    assert authenticate(db, "personne@gmail.com", "motdepasse123") is None
    admin_user.is_active = False
    db.commit()
    assert authenticate(db, "admin@refletdugabon.org", "motdepasse123") is None


def test_password_problem():
    assert password_problem("court") is not None
    assert password_problem("assezlong1", "different1") is not None
    assert password_problem("assezlong1", "assezlong1") is None


# ---------- session events ----------
def test_subscription_receives_until_disposed():
    hub = SessionEvents()
    seen = []
    sub = hub.subscribe(lambda event, email: seen.append((event, email)))
    hub.publish(SessionEvent.SIGNED_IN, "a@gmail.com")
    sub.unsubscribe()
    sub.unsubscribe()  # idempotent
    hub.publish(SessionEvent.SIGNED_OUT, "a@gmail.com")
    assert seen == [(SessionEvent.SIGNED_IN, "a@gmail.com")]
    assert len(hub) == 0


def test_subscription_as_context_manager():
    hub = SessionEvents()
    seen = []
    with hub.subscribe(lambda e, m: seen.append(e)):
        assert len(hub) == 1
        hub.publish(SessionEvent.SIGNED_IN, "a@gmail.com")
    hub.publish(SessionEvent.SIGNED_IN, "a@gmail.com")
    assert seen == [SessionEvent.SIGNED_IN]


def test_failing_listener_does_not_block_others():
    hub = SessionEvents()
    seen = []

    def _broken(event, email):
        raise RuntimeError("listener cassé")

    hub.subscribe(_broken)
    hub.subscribe(lambda e, m: seen.append(m))
    hub.publish(SessionEvent.SIGNED_IN, "a@gmail.com")
    assert seen == ["a@gmail.com"]


def test_sign_in_and_out_publish(db: Session, admin_user: User):
    hub = SessionEvents()
    seen = []
    hub.subscribe(lambda e, m: seen.append((e, m)))
    session: dict = {}

    su = sign_in(session, admin_user, hub)
    assert su.is_admin
    assert session[SESSION_USER_KEY]["email"] == admin_user.email
    sign_out(session, hub)
    assert session == {}
    sign_out(session, hub)  # nobody signed in: no event
    assert seen == [
        (SessionEvent.SIGNED_IN, admin_user.email),
        (SessionEvent.SIGNED_OUT, admin_user.email),
    ]


def test_web_login_notifies_app_hub(client: TestClient, admin_user: User):
    seen = []
    with app.state.session_events.subscribe(lambda e, m: seen.append(e)):
        client.post("/login", data={"email": admin_user.email, "password": "motdepasse123"})
        client.post("/logout")
    assert seen == [SessionEvent.SIGNED_IN, SessionEvent.SIGNED_OUT]


# ---------- AuthContext ----------
def test_auth_context_require():
    anon = AuthContext(path="/admin/media")
    assert not anon.is_authenticated
    with pytest.raises(AuthRequired) as exc:
        anon.require()
    assert exc.value.next_path == "/admin/media"

    editor = AuthContext(user=SessionUser(id=1, email="e@gmail.com", role=UserRole.editor.value))
    assert editor.require().email == "e@gmail.com"
    assert editor.is_authenticated and not editor.is_admin


def test_session_user_from_bad_session_data():
    assert SessionUser.from_session(None) is None
    assert SessionUser.from_session({"email": "x"}) is None
    assert SessionUser.from_session({"id": "abc", "email": "x"}) is None


# ---------- JWT ----------
def test_token_types_are_checked():
    access = create_access_token(7)
    assert decode_token(access, expected_type="access")["sub"] == "7"
    with pytest.raises(JWTError):
        decode_token(access, expected_type="refresh")
    with pytest.raises(JWTError):
        decode_token("pas.un.jeton")


def test_api_login_me_refresh(client: TestClient, admin_user: User):
    r = client.post(f"{API}/auth/login", json={"email": admin_user.email, "password": "motdepasse123"})
    assert r.status_code == 200
    tokens = r.json()

    r = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert r.status_code == 200
    assert r.json()["email"] == admin_user.email
    assert r.json()["is_admin"] is True

    r = client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 200
    assert decode_token(r.json()["access_token"], expected_type="access")["email"] == admin_user.email

    # a refresh token is not accepted as an access token
    r = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert r.status_code == 401


def test_api_login_wrong_password(client: TestClient, admin_user: User):
    r = client.post(f"{API}/auth/login", json={"email": admin_user.email, "password": "mauvais"})
    assert r.status_code == 401


def test_api_bulk_save_requires_token(client: TestClient):
    r = client.put(f"{API}/content/bulk", json={"items": []})
    assert r.status_code == 401


def test_api_bulk_save_and_read(client: TestClient, admin_user: User):
    headers = {"Authorization": f"Bearer {create_access_token(admin_user.id)}"}
    r = client.put(
        f"{API}/content/bulk",
        json={"items": [{"page": "accueil", "section": "hero", "content_key": "title", "content_value": "Nouveau Titre"}]},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json() == {"saved": 1}

    body = client.get(f"{API}/content/accueil").json()
    assert body["degraded"] is False
    assert body["values"]["hero.title"] == "Nouveau Titre"
    assert body["visibility"]["hero"] is True

    r = client.post(
        f"{API}/content/visibility",
        json={"page": "accueil", "section": "hero", "visible": False},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["content_value"] == "false"
    assert client.get(f"{API}/content/accueil").json()["visibility"]["hero"] is False


def test_api_structure_lists_pages(client: TestClient):
    body = client.get(f"{API}/content/structure").json()
    assert "accueil" in body and "presidente" in body


# ---------- password reset ----------
@pytest.fixture
def sent_links(monkeypatch):
    links = []
    monkeypatch.setattr(auth_service, "send_password_reset_email", lambda to, url: links.append((to, url)) or True)
    return links


def test_reset_request_unknown_email_sends_nothing(db: Session, sent_links):
    assert request_password_reset(db, "inconnu@gmail.com") is None
    assert sent_links == []


def test_reset_flow(db: Session, admin_user: User, sent_links):
    hub = SessionEvents()
    seen = []
    hub.subscribe(lambda e, m: seen.append(e))

    token = request_password_reset(db, admin_user.email, hub)
    assert token
    assert sent_links[0][0] == admin_user.email
    assert sent_links[0][1].endswith(f"/reset-password?token={token}")
    assert seen == [SessionEvent.PASSWORD_RECOVERY]

    with pytest.raises(RefletError):
        reset_password(db, token, "court", "court")
    reset_password(db, token, "nouveaumotdepasse", "nouveaumotdepasse")
    db.refresh(admin_user)
    assert verify_password("nouveaumotdepasse", admin_user.hashed_password)


def test_reset_link_works_only_once(db: Session, admin_user: User, sent_links):
    token = request_password_reset(db, admin_user.email)
    reset_password(db, token, "nouveaumotdepasse", "nouveaumotdepasse")
    with pytest.raises(InvalidResetToken):
        reset_password(db, token, "encoreunautre1", "encoreunautre1")
    db.refresh(admin_user)
    assert verify_password("nouveaumotdepasse", admin_user.hashed_password)


def test_reset_token_rejects_other_types(db: Session, admin_user: User):
    with pytest.raises(InvalidResetToken):
        reset_password(db, create_access_token(admin_user.id), "nouveaumotdepasse")
    with pytest.raises(InvalidResetToken):
        reset_password(db, create_reset_token(admin_user.id, "autre@gmail.com", admin_user.hashed_password), "nouveaumotdepasse")


def test_reset_pages(client: TestClient, admin_user: User, sent_links):
    r = client.post("/forgot-password", data={"email": admin_user.email})
    assert r.status_code == 200
    assert 'id="reset-sent"' in r.text
    token = sent_links[0][1].split("token=", 1)[1]

    assert client.get("/reset-password", params={"token": "invalide"}).status_code == 400
    assert client.get("/reset-password", params={"token": token}).status_code == 200

    r = client.post(
        "/reset-password",
        data={"token": token, "password": "nouveaumotdepasse", "password_confirm": "nouveaumotdepasse"},
        follow_redirects=False,
    )
    assert r.status_code == 302
    assert r.headers["location"] == "/login"

    r = client.post(
        "/login",
        data={"email": admin_user.email, "password": "nouveaumotdepasse"},
        follow_redirects=False,
    )
    assert r.status_code == 302


def test_forgot_password_same_answer_for_unknown(client: TestClient, sent_links):
    r = client.post("/forgot-password", data={"email": "inconnu@gmail.com"})
    assert r.status_code == 200
    assert 'id="reset-sent"' in r.text
    assert sent_links == []


def test_undelivered_reset_link_not_logged_in_production(monkeypatch, caplog):
    monkeypatch.setattr(settings, "DEBUG", False)
    monkeypatch.setattr(settings, "MAIL_API_KEY", "re_cle_de_test")
    monkeypatch.setattr(mailer, "send_email", lambda to, subject, html: False)

    with caplog.at_level("WARNING", logger="reflet.services.mailer"):
        assert mailer.send_password_reset_email("a@gmail.com", "https://site/reset-password?token=secret") is False
    assert "token=secret" not in caplog.text
    assert "not delivered" in caplog.text

    caplog.clear()
    monkeypatch.setattr(settings, "MAIL_API_KEY", None)
    with caplog.at_level("WARNING", logger="reflet.services.mailer"):
        mailer.send_password_reset_email("a@gmail.com", "https://site/reset-password?token=secret")
    assert "token=secret" in caplog.text
