import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Settings are read at import time, so the environment must be ready first
_TMP = tempfile.mkdtemp(prefix="helpdesk-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/helpdesk.db"
os.environ["STORAGE_DIR"] = os.path.join(_TMP, "storage")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["API_BASE_URL"] = "http://testserver/api"
os.environ["RATE_LIMIT"] = "10000/minute"
os.environ["ENABLE_METRICS"] = "false"
os.environ["JWT_SECRET"] = "test-secret"

from fastapi.testclient import TestClient  # noqa: E402

from helpdesk.db import make_engine  # noqa: E402
from helpdesk.main import create_app  # noqa: E402
from helpdesk.services.api_client import ApiClient  # noqa: E402
from helpdesk.services.credentials import CredentialStore, LocalStorage  # noqa: E402
from helpdesk.store.app_store import AppStore  # noqa: E402
from helpdesk.store.data_sources import FixtureDataSource  # noqa: E402


ADMIN_EMAIL = "truong.minh.f@example.com"
REQUESTER_EMAIL = "nguyen.van.a@example.com"
AGENT_EMAIL = "tran.thi.b@example.com"
PASSWORD = "password"


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 4, 14, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def toasts():
    return []


@pytest.fixture
def store(clock, toasts):
    s = AppStore(FixtureDataSource(), notifier=toasts.append, clock=clock)
    s.login(ADMIN_EMAIL, PASSWORD)
    toasts.clear()
    return s


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def login_as(client):
    """Bearer headers for a seeded account."""
    def _login(email: str = ADMIN_EMAIL, password: str = PASSWORD) -> dict:
        response = client.post("/api/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login


@pytest.fixture
def admin_headers(login_as):
    return login_as()


@pytest.fixture
def credentials(tmp_path):
    return CredentialStore(LocalStorage(make_engine(f"sqlite:///{tmp_path}/credentials.db")))


@pytest.fixture
def navigations():
    return []


@pytest.fixture
def api_client(client, credentials, navigations):
    """Gateway client wired to the in-process backend."""
    return ApiClient(
        base_url="http://testserver/api",
        credentials=credentials,
        navigator=navigations.append,
        http_client=client,
    )
