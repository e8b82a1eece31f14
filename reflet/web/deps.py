# reflet/web/deps.py
# Piezas compartidas por los routers web: templates, sesión, flash, auth
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi import Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from reflet.core.errors import AuthRequired
from reflet.db.session import get_db
from reflet.models.auth import User
from reflet.services.auth_service import (
    SESSION_USER_KEY,
    AuthContext,
    SessionEvents,
    SessionUser,
)

PACKAGE_DIR = Path(__file__).resolve().parent.parent
templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))

FLASH_KEY = "flash"


# --------------------------- Flash ---------------------------
def flash(request: Request, message: str, kind: str = "success") -> None:
    msgs = list(request.session.get(FLASH_KEY) or [])
    msgs.append({"kind": kind, "message": message})
    request.session[FLASH_KEY] = msgs


def pop_flashes(request: Request) -> list:
    return request.session.pop(FLASH_KEY, None) or []


def render(request: Request, name: str, ctx: Optional[Dict[str, Any]] = None, status_code: int = 200):
    context = dict(ctx or {})
    context.setdefault("flashes", pop_flashes(request))
    return templates.TemplateResponse(request, name, context, status_code=status_code)


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=302)


def safe_next(target: Optional[str], default: str = "/admin") -> str:
    # only relative paths: no "//host", and no backslash (browsers read "/\host" as "//host")
    # only relative paths, never "//host" (browsers read "\\" as "/")
    if not target or not target.startswith("/") or target.startswith("//") or "\\" in target:
        return default
    return target


# --------------------------- Auth ---------------------------
def get_session_events(request: Request) -> SessionEvents:
    events = getattr(request.app.state, "session_events", None)
    if events is None:
        events = SessionEvents()
        request.app.state.session_events = events
    return events


def get_auth_context(request: Request) -> AuthContext:
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    return AuthContext(user=SessionUser.from_session(request.session.get(SESSION_USER_KEY)), path=path)


def require_admin(
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> AuthContext:
    """Signed-in, still-active user; otherwise AuthRequired (redirect to /login)."""
    su = auth.require()
    user = db.get(User, su.id)
    if user is None or not user.is_active:
        request.session.pop(SESSION_USER_KEY, None)
        raise AuthRequired(auth.path)
    fresh = SessionUser.from_user(user)
    if fresh != su:
        # role or name changed since sign-in
        request.session[SESSION_USER_KEY] = fresh.to_session()
        return AuthContext(user=fresh, path=auth.path)
    return auth


def require_admin_role(auth: AuthContext = Depends(require_admin)) -> AuthContext:
    if not auth.is_admin:
        raise HTTPException(status_code=403, detail="Réservé aux administrateurs")
    return auth


def auth_required_handler(request: Request, exc: AuthRequired):
    """AuthRequired is never an error page: it is a redirect to the login form."""
    target = "/login"
    if exc.next_path:
        target = f"/login?next={quote(exc.next_path, safe='/')}"
    return redirect(target)
