"""
Fixtures compartidos: base de datos SQLite en memoria y cliente HTTP.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.database.database import Base, SessionLocal, engine, get_db
import app.modules.subscriptions.models  # noqa: F401
import app.modules.tenants.models  # noqa: F401


@pytest.fixture
def db_session():
    """Sesión sobre un esquema recién creado para cada test"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """TestClient con la sesión del test inyectada en los endpoints"""
    from app.main import app as fastapi_app

    def override_get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()
