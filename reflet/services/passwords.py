# reflet/services/passwords.py
from __future__ import annotations

from passlib.context import CryptContext

_pwd = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__truncate_error=False,
)

MIN_PASSWORD_LENGTH = 8


def hash_password(plain: str) -> str:
    return _pwd.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Constant-time check against a stored bcrypt hash; empty hash never matches."""
    if not hashed:
        return False
    return _pwd.verify(plain, hashed)


def password_problem(plain: str, confirm: str | None = None) -> str | None:
    """French message for the reset form, or None when the password is acceptable."""
    if len(plain or "") < MIN_PASSWORD_LENGTH:
        return f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères."
    if confirm is not None and plain != confirm:
        return "Les mots de passe ne correspondent pas."
    return None
