# tests/conftest.py
from __future__ import annotations

import io
import os

# SQLite en memoria para toda la suite; debe fijarse antes de importar reflet.*
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from reflet.db.base import Base
from reflet.db.session import get_db
from reflet.main import app
from reflet.models import User, UserRole
from reflet.services.auth_service import create_user
from reflet.services.storage import InMemoryStorage, get_storage

ADMIN_EMAIL = "admin@refletdugabon.org"
EDITOR_EMAIL = "editrice@refletdugabon.org"
PASSWORD = "motdepasse123"

# Una sola conexión compartida: los commits de la prueba son visibles para los endpoints
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture(scope="function")
def db() -> Session:
    """
    Esquema nuevo por prueba (create_all / drop_all). No se usa una transacción
    externa: el bulk save hace commit por elemento y las pruebas lo verifican.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture(autouse=True)
def _override_deps(db: Session, storage: InMemoryStorage):
    """Todos los endpoints usan la sesión y el storage de la prueba en curso."""
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage] = lambda: storage
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_storage, None)


@pytest.fixture
def client() -> TestClient:
    # cliente nuevo por prueba: la cookie de sesión no se arrastra
    return TestClient(app)


@pytest.fixture
def admin_user(db: Session) -> User:
    return create_user(db, email=ADMIN_EMAIL, password=PASSWORD, full_name="Admin", role=UserRole.admin)


@pytest.fixture
def editor_user(db: Session) -> User:
    return create_user(db, email=EDITOR_EMAIL, password=PASSWORD, full_name="Éditrice", role=UserRole.editor)


def _login(client: TestClient, email: str, password: str = PASSWORD):
    return client.post(
        "/login",
        data={"email": email, "password": password},
        follow_redirects=False,
    )


@pytest.fixture
def admin_client(client: TestClient, admin_user: User) -> TestClient:
    r = _login(client, ADMIN_EMAIL)
    assert r.status_code == 302, r.text
    return client


@pytest.fixture
def editor_client(client: TestClient, editor_user: User) -> TestClient:
    r = _login(client, EDITOR_EMAIL)
    assert r.status_code == 302, r.text
    return client


def _make_image(width: int, height: int, fmt: str = "PNG", mode: str = "RGB", noise: bool = False) -> bytes:
    """Imagen sintética; `noise=True` produce contenido que casi no se comprime."""
    if noise:
        img = Image.frombytes(mode, (width, height), os.urandom(width * height * len(mode)))
    else:
        color = (200, 120, 40, 255)[: len(mode)] if mode != "L" else 128
        img = Image.new(mode, (width, height), color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_image():
    return _make_image
