from __future__ import annotations

import base64
import os
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# Ensure the project root (which exposes the ``backend`` package) is on ``sys.path``
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("ENABLE_STARTUP_MIGRATIONS", "0")

from backend.app.database import Base, get_db
from backend.app.main import app
from backend.app import models
from backend.app.security import CurrentUser, create_access_token, generate_password_hash


@pytest.fixture(scope="session")
def security_settings() -> dict:
    password = "Adm1nS3cret!"

    os.environ["ADMIN_USERNAME"] = "admin@example.com"
    os.environ["ADMIN_JWT_SECRET"] = base64.urlsafe_b64encode(os.urandom(32)).decode()
    os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "60"
    os.environ["ADMIN_PASSWORD_HASH"] = generate_password_hash(password)

    return {
        "username": os.environ["ADMIN_USERNAME"],
        "password": password,
    }


@pytest.fixture(scope="session", autouse=True)
def _ensure_security_settings(security_settings: dict) -> Generator[None, None, None]:
    yield


@pytest.fixture(autouse=True)
def _default_projection_settings(monkeypatch) -> None:
    for name in (
        "DEFAULT_ALIVE_TREND_WINDOW_WEEKS",
        "DEFAULT_ALIVE_MIN_WEEKLY_IMPROVEMENT",
        "DEFAULT_ALIVE_MAX_HORIZON_WEEKS",
        "DEFAULT_ALIVE_FUNDING_BUFFER",
    ):
        monkeypatch.delenv(name, raising=False)


SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope="session", autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def client(db_session: Session, security_settings: dict) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            db_session.expire_all()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        response = test_client.post(
            "/auth/token",
            json={
                "username": security_settings["username"],
                "password": security_settings["password"],
            },
        )
        assert response.status_code == 200
        token = response.json()["access_token"]
        test_client.headers.update({"Authorization": f"Bearer {token}"})
        yield test_client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def member_headers(security_settings: dict) -> dict:
    token = create_access_token(CurrentUser(user_id="member-42", is_admin=False))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def add_payment(db_session: Session) -> Callable[..., models.Payment]:
    def _add(amount: str, paid_at: datetime, user_id: str = "member-1") -> models.Payment:
        payment = models.Payment(
            user_id=user_id,
            amount=Decimal(amount),
            payment_date=paid_at,
            payment_method=models.PaymentMethod.CASH,
            recorded_by="admin@example.com",
        )
        db_session.add(payment)
        db_session.commit()
        return payment

    return _add
