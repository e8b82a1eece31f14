# reflet/security/jwt.py
from __future__ import annotations
import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt

from reflet.core.settings import settings

ALGO = settings.JWT_ALGORITHM or "HS256"
SECRET = settings.JWT_SECRET_KEY or "dev-secret"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _exp_ts(minutes: int) -> int:
    # exp como entero UNIX (segundos)
    return int((_utcnow() + timedelta(minutes=minutes)).timestamp())


def _iat_ts() -> int:
    return int(_utcnow().timestamp())


def _create(subject: int | str, token_type: str, minutes: int, extra: Dict[str, Any] | None = None) -> str:
    payload: Dict[str, Any] = {
        "sub": str(subject),
        "type": token_type,
        "iat": _iat_ts(),
        "exp": _exp_ts(minutes),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, SECRET, algorithm=ALGO)


def create_access_token(subject: int | str, extra: Dict[str, Any] | None = None) -> str:
    return _create(subject, "access", settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES, extra)


def create_refresh_token(subject: int | str, extra: Dict[str, Any] | None = None) -> str:
    return _create(subject, "refresh", settings.JWT_REFRESH_TOKEN_EXPIRE_MINUTES, extra)


def password_fingerprint(hashed_password: str) -> str:
    return hmac.new(SECRET.encode(), (hashed_password or "").encode(), hashlib.sha256).hexdigest()[:16]


def create_reset_token(user_id: int, email: str, hashed_password: str) -> str:
    # email + huella del hash: el token deja de valer al cambiar email o contraseña
    claims = {"email": email, "pwd": password_fingerprint(hashed_password)}
    return _create(user_id, "reset", settings.PASSWORD_RESET_EXPIRE_MINUTES, claims)


def decode_token(token: str, expected_type: str | None = None) -> Dict[str, Any]:
    """Raises JWTError (incl. ExpiredSignatureError) for bad tokens or a wrong `type`."""
    payload = jwt.decode(
        token,
        SECRET,
        algorithms=[ALGO],
        options={"verify_aud": False, "verify_iss": False},
    )
    if expected_type is not None and payload.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    return payload
