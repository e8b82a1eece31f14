# scripts/seed_page_settings.py
from sqlalchemy.orm import Session

from reflet.db.session import SessionLocal
from reflet.services.page_settings_service import seed_default_pages


def run() -> None:
    db: Session = SessionLocal()
    try:
        created = seed_default_pages(db)
        print(f"[OK] page_settings: {created} entrée(s) créée(s)")
    finally:
        db.close()


if __name__ == "__main__":
    run()
