# reflet/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from reflet.core.settings import settings

ENGINE_URL = settings.SQLALCHEMY_DATABASE_URL


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # local runs: one file shared by the request threads
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_recycle": 1800,  # keep connections fresh on Heroku
    }


engine = create_engine(ENGINE_URL, **_engine_kwargs(ENGINE_URL))

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
