import os
import shutil
import tempfile
from pathlib import Path

import pytest

# Настройки должны быть заданы до импорта config
_TMP_DIR = Path(tempfile.mkdtemp(prefix="conference-registration-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(_TMP_DIR / "uploads")
os.environ["DASHBOARD_PASSWORD"] = "organizer-secret"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["MAX_BODY_SIZE"] = str(64 * 1024)

from fastapi.testclient import TestClient  # noqa: E402

from api.main import app  # noqa: E402
from config import settings  # noqa: E402
from database.database import engine, SessionLocal  # noqa: E402
from database.models import Base  # noqa: E402

ORGANIZER_PASSWORD = "organizer-secret"


@pytest.fixture(autouse=True)
def clean_state():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    shutil.rmtree(settings.upload_path, ignore_errors=True)
    settings.upload_path.mkdir(parents=True, exist_ok=True)
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def auth_headers(client):
    response = client.post("/api/auth/login", json={"password": ORGANIZER_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def make_payload():
    def _make(**overrides):
        payload = {
            "name": "A",
            "college_name": "X",
            "email": "a@x.com",
            "course_of_study": "CS",
            "whatsapp_number": "9876543210",
            "selected_events": ["Quiz"],
            "transaction_id": "TXN1",
            "payment_proof_url": "http://h/u/f.pdf",
        }
        payload.update(overrides)
        return payload
    return _make
