# scripts/create_admin_user.py
# Uso: python -m scripts.create_admin_user admin@refletdugabon.org 'S3cret!pass' --role admin --name "Annie Pichon"
from __future__ import annotations

import argparse

from sqlalchemy.orm import Session

from reflet.db.session import SessionLocal
from reflet.models.auth import UserRole
from reflet.services.auth_service import create_user, get_user_by_email
from reflet.services.passwords import hash_password, password_problem


def run(email: str, password: str, role: str = "admin", full_name: str | None = None) -> None:
    problem = password_problem(password)
    if problem:
        raise SystemExit(problem)

    db: Session = SessionLocal()
    try:
        user = get_user_by_email(db, email)
        if user:
            user.hashed_password = hash_password(password)
            user.role = UserRole(role)
            user.is_active = True
            if full_name:
                user.full_name = full_name
            db.commit()
            print(f"[OK] Updated {user.email} ({role})")
        else:
            user = create_user(db, email=email, password=password, full_name=full_name, role=UserRole(role))
            print(f"[OK] Created {user.email} ({role})")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or update an admin console user")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--role", choices=[r.value for r in UserRole], default="admin")
    parser.add_argument("--name", default=None)
    args = parser.parse_args()
    run(args.email, args.password, args.role, args.name)
