# reflet/api/v1/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from jose import JWTError
from sqlalchemy.orm import Session

from reflet.api.deps import get_current_user
from reflet.db.session import get_db
from reflet.models.auth import User
from reflet.schemas.auth import LoginIn, MeOut, RefreshIn, TokenOut
from reflet.security.jwt import create_access_token, create_refresh_token, decode_token
from reflet.services.auth_service import SessionEvent, authenticate
from reflet.web.deps import get_session_events

router = APIRouter(tags=["auth"])  # el prefix lo pone api/v1/router.py


def _tokens_for(user_id, extra: dict) -> TokenOut:
    return TokenOut(
        access_token=create_access_token(user_id, extra),
        refresh_token=create_refresh_token(user_id, extra),
    )


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, request: Request, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    get_session_events(request).publish(SessionEvent.SIGNED_IN, user.email)
    return _tokens_for(user.id, {"email": user.email, "role": user.role.value})


@router.post("/refresh", response_model=TokenOut)
def refresh(body: RefreshIn):
    try:
        payload = decode_token(body.refresh_token, expected_type="refresh")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    extra = {k: v for k, v in payload.items() if k not in {"sub", "iat", "exp", "type"}}
    return _tokens_for(payload.get("sub"), extra)


@router.get("/me", response_model=MeOut)
def me(current_user: User = Depends(get_current_user)):
    return MeOut(
        id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        role=current_user.role.value,
        is_admin=current_user.is_admin,
    )


@router.post("/logout", status_code=204)
def logout(_: Response):
    # JWT stateless: client-side logout
    return Response(status_code=204)
