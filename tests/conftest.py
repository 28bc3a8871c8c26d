import io
import os
import sys
import tempfile
from datetime import datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.orm import Session

# must be in place before matatu.core.config_env builds its settings
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "TEST_JWT_SECRET_CHANGE_ME")
os.environ.setdefault("JWT_ALG", "HS256")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="matatu-uploads-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

sys.path.append(os.getcwd())

from matatu.core.security import hash_password
from matatu.core.tokens import create_access_token
from matatu.db.session import Base, SessionLocal, engine
from matatu.main import create_app
from matatu.models import registry  # noqa: F401
from matatu.models.enums import UserRole
from matatu.models.user import User
from matatu.utils.clock import local_zone, utcnow

PASSWORD = "secret123"


@pytest.fixture(scope="function", autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function")
def db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session")
def app_instance() -> FastAPI:
    return create_app()


@pytest.fixture(scope="function")
def client(app_instance) -> TestClient:
    with TestClient(app_instance) as c:
        yield c


def make_user(db: Session, username: str, role: UserRole, password: str = PASSWORD) -> User:
    user = User(
        firstname=username.capitalize(),
        lastname="Test",
        username=username,
        email=f"{username}@matatu.co.ke",
        password_hash=hash_password(password),
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    return user


def bearer(user: User) -> dict:
    token = create_access_token(sub=str(user.id), role=user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def driver(db) -> User:
    return make_user(db, "driver", UserRole.driver)


@pytest.fixture(scope="function")
def other_driver(db) -> User:
    return make_user(db, "otherdriver", UserRole.driver)


@pytest.fixture(scope="function")
def commuter(db) -> User:
    return make_user(db, "commuter", UserRole.commuter)


@pytest.fixture(scope="function")
def admin(db) -> User:
    return make_user(db, "admin", UserRole.admin)


@pytest.fixture(scope="function")
def driver_headers(driver) -> dict:
    return bearer(driver)


@pytest.fixture(scope="function")
def commuter_headers(commuter) -> dict:
    return bearer(commuter)


@pytest.fixture(scope="function")
def admin_headers(admin) -> dict:
    return bearer(admin)


def png_bytes(size=(4, 4), color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def alert_form(**overrides) -> dict:
    form = {
        "alertType": "accident",
        "title": "Crash near Globe roundabout",
        "description": "Two lanes blocked",
        "locationName": "Globe Roundabout",
        "severityLevel": "high",
    }
    form.update(overrides)
    return {k: v for k, v in form.items() if v is not None}


@pytest.fixture
def post_alert(client, driver_headers):
    def _post(headers=None, files=None, **overrides):
        return client.post(
            "/api/v1/alerts",
            data=alert_form(**overrides),
            files=files,
            headers=headers or driver_headers,
        )

    return _post


def utc_iso(delta) -> str:
    """ISO timestamp ``delta`` from now with an explicit UTC offset."""
    return (utcnow() + delta).isoformat() + "+00:00"


def local_iso(delta) -> str:
    """Naive wall-clock timestamp in the configured zone, as a datetime-local input sends it."""
    return (datetime.now(local_zone()) + delta).replace(tzinfo=None).isoformat(timespec="seconds")
