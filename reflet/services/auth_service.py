# reflet/services/auth_service.py
# Sesión de administración: credenciales, contexto explícito por request, eventos
from __future__ import annotations

import hmac
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from jose import JWTError
from sqlalchemy import select
from sqlalchemy.orm import Session

from reflet.core.errors import AuthRequired, RefletError
from reflet.core.settings import settings
from reflet.models.auth import User, UserRole
from reflet.security.jwt import create_reset_token, decode_token, password_fingerprint
from reflet.services.mailer import send_password_reset_email
from reflet.services.passwords import hash_password, password_problem, verify_password

log = logging.getLogger(__name__)

# Web session key (must match web routers)
SESSION_USER_KEY = "user"


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


# ---------- Credentials ----------
def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.scalar(select(User).where(User.email == normalize_email(email)))


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password or "", user.hashed_password or ""):
        return None
    if not bool(user.is_active):
        return None
    return user


def create_user(
    db: Session,
    *,
    email: str,
    password: str,
    full_name: str | None = None,
    role: UserRole = UserRole.editor,
) -> User:
    user = User(
        email=normalize_email(email),
        hashed_password=hash_password(password),
        full_name=full_name,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# ---------- Session events ----------
class SessionEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


Listener = Callable[[SessionEvent, str], Any]


class Subscription:
    """Handle returned by SessionEvents.subscribe; dispose it (or use `with`) to stop listening."""

    def __init__(self, hub: "SessionEvents", callback: Listener):
        self._hub = hub
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._hub._remove(self)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.unsubscribe()


class SessionEvents:
    """
    Explicit hub for sign-in / sign-out / recovery notifications. One instance
    lives on the app (app.state.session_events); listeners own their Subscription.
    """

    def __init__(self):
        self._subs: List[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Listener) -> Subscription:
        sub = Subscription(self, callback)
        with self._lock:
            self._subs.append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subs:
                self._subs.remove(sub)

    def __len__(self) -> int:
        return len(self._subs)

    def publish(self, event: SessionEvent, user_email: str) -> None:
        with self._lock:
            subs = list(self._subs)
        for sub in subs:
            try:
                sub.callback(event, user_email)
            except Exception:
                # a broken listener must not break sign-in for everyone else
                log.exception("session listener failed on %s", event.value)


def log_session_event(event: SessionEvent, user_email: str) -> None:
    log.info("auth event %s for %s", event.value, user_email)


# ---------- Per-request context ----------
@dataclass(frozen=True)
class SessionUser:
    id: int
    email: str
    full_name: str = ""
    role: str = UserRole.editor.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin.value

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        role = user.role.value if hasattr(user.role, "value") else str(user.role)
        return cls(id=int(user.id), email=user.email, full_name=user.full_name or "", role=role)

    @classmethod
    def from_session(cls, data: Mapping[str, Any] | None) -> Optional["SessionUser"]:
        if not data:
            return None
        try:
            return cls(
                id=int(data["id"]),
                email=str(data["email"]),
                full_name=str(data.get("full_name") or ""),
                role=str(data.get("role") or UserRole.editor.value),
            )
        except (KeyError, TypeError, ValueError):
            return None

    def to_session(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "full_name": self.full_name, "role": self.role}


@dataclass(frozen=True)
class AuthContext:
    """Who is signed in for this request. Built by a dependency and passed down explicitly."""

    user: Optional[SessionUser] = None
    path: str = "/admin"

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin

    def require(self) -> SessionUser:
        if self.user is None:
            raise AuthRequired(self.path)
        return self.user


def sign_in(session: Dict[str, Any], user: User, events: SessionEvents | None = None) -> SessionUser:
    su = SessionUser.from_user(user)
    session[SESSION_USER_KEY] = su.to_session()
    if events is not None:
        events.publish(SessionEvent.SIGNED_IN, su.email)
    return su


def sign_out(session: Dict[str, Any], events: SessionEvents | None = None) -> None:
    su = SessionUser.from_session(session.get(SESSION_USER_KEY))
    session.clear()
    if su is not None and events is not None:
        events.publish(SessionEvent.SIGNED_OUT, su.email)


# ---------- Password reset ----------
class InvalidResetToken(RefletError):
    def __init__(self):
        super().__init__("Ce lien de réinitialisation est invalide ou a expiré.")


def reset_url_for(token: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/reset-password?token={token}"


def request_password_reset(db: Session, email: str, events: SessionEvents | None = None) -> Optional[str]:
    """
    Emails a reset link when an active account exists. Returns the token (None
    for unknown emails); callers show the same confirmation either way.
    """
    user = get_user_by_email(db, email)
    if user is None or not user.is_active:
        log.info("password reset requested for unknown or inactive account")
        return None
    token = create_reset_token(int(user.id), user.email, user.hashed_password)
    send_password_reset_email(user.email, reset_url_for(token))
    if events is not None:
        events.publish(SessionEvent.PASSWORD_RECOVERY, user.email)
    return token


def user_for_reset_token(db: Session, token: str) -> User:
    try:
        payload = decode_token(token or "", expected_type="reset")
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise InvalidResetToken()
    user = db.get(User, user_id)
    if user is None or not user.is_active or user.email != payload.get("email"):
        raise InvalidResetToken()
    if not hmac.compare_digest(str(payload.get("pwd") or ""), password_fingerprint(user.hashed_password)):
        # ya usado: la contraseña cambió desde que se emitió el enlace
        raise InvalidResetToken()
    return user


def reset_password(db: Session, token: str, new_password: str, confirm: str | None = None) -> User:
    """Raises InvalidResetToken, or RefletError with a user-facing message for a weak password."""
    user = user_for_reset_token(db, token)
    problem = password_problem(new_password, confirm)
    if problem:
        raise RefletError(problem)
    user.hashed_password = hash_password(new_password)
    db.commit()
    log.info("password reset completed for user id=%s", user.id)
    return user
