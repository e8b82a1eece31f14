# reflet/web/auth/router.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Query, Request
from sqlalchemy.orm import Session

from reflet.core.errors import RefletError
from reflet.db.session import get_db
from reflet.services.auth_service import (
    SESSION_USER_KEY,
    InvalidResetToken,
    authenticate,
    request_password_reset,
    reset_password,
    sign_in,
    sign_out,
    user_for_reset_token,
)
from reflet.web.deps import flash, get_session_events, redirect, render, safe_next

log = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)

RESET_CONFIRMATION = (
    "Si un compte existe pour cette adresse, un email contenant un lien de "
    "réinitialisation vient d'être envoyé."
)


@router.get("/login")
def login_get(request: Request, next: str | None = Query(default=None)):
    # already signed in: straight to the console (or ?next=)
    if request.session.get(SESSION_USER_KEY):
        return redirect(safe_next(next))
    return render(request, "auth/login.html", {"next": next or ""})


@router.post("/login")
def login_post(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    next: str | None = Form(default=None),
    db: Session = Depends(get_db),
):
    user = authenticate(db, email, password)
    if user is None:
        log.info("failed sign-in for %s", (email or "").strip().lower())
        ctx = {
            "error": "Email ou mot de passe incorrect.",
            "next": next or "",
            "email": email,
        }
        return render(request, "auth/login.html", ctx, status_code=401)

    sign_in(request.session, user, get_session_events(request))
    return redirect(safe_next(next))


@router.post("/logout")
def logout_post(request: Request):
    sign_out(request.session, get_session_events(request))
    return redirect("/login")


@router.get("/logout")
def logout_get(request: Request):
    sign_out(request.session, get_session_events(request))
    return redirect("/login")


# ---------- Password reset ----------
@router.get("/forgot-password")
def forgot_password_get(request: Request):
    return render(request, "auth/forgot_password.html", {"sent": False})


@router.post("/forgot-password")
def forgot_password_post(request: Request, email: str = Form(...), db: Session = Depends(get_db)):
    # same answer whether or not the account exists
    request_password_reset(db, email, get_session_events(request))
    return render(request, "auth/forgot_password.html", {"sent": True, "message": RESET_CONFIRMATION})


@router.get("/reset-password")
def reset_password_get(request: Request, token: str = Query(default=""), db: Session = Depends(get_db)):
    try:
        user_for_reset_token(db, token)
    except InvalidResetToken as e:
        return render(request, "auth/reset_password.html", {"token": "", "error": e.message}, status_code=400)
    return render(request, "auth/reset_password.html", {"token": token})


@router.post("/reset-password")
def reset_password_post(
    request: Request,
    token: str = Form(...),
    password: str = Form(...),
    password_confirm: str = Form(...),
    db: Session = Depends(get_db),
):
    try:
        reset_password(db, token, password, password_confirm)
    except InvalidResetToken as e:
        return render(request, "auth/reset_password.html", {"token": "", "error": e.message}, status_code=400)
    except RefletError as e:
        return render(request, "auth/reset_password.html", {"token": token, "error": e.message}, status_code=400)
    flash(request, "Mot de passe mis à jour. Vous pouvez vous connecter.")
    return redirect("/login")
