import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from leadbook.app import create_app
from leadbook.auth.tokens import TokenIssuer
from leadbook.auth.users import UserStore
from leadbook.config import Settings
from leadbook.infra.leads_repo import LeadRepo

SECRET = "test-secret-key-for-leadbook-only"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    data_dir = tmp_path / "data"
    return Settings(
        secret_key=SECRET,
        data_dir=data_dir,
        users_path=data_dir / "users.yml",
        leads_path=data_dir / "leads.xlsx",
    )


@pytest.fixture()
def issuer() -> TokenIssuer:
    return TokenIssuer(SECRET)


@pytest.fixture()
def user_store(settings):
    with UserStore(settings.users_path) as store:
        yield store


@pytest.fixture()
def lead_repo(settings):
    with LeadRepo(settings.leads_path) as repo:
        yield repo


@pytest.fixture()
def client(settings):
    """TestClient over a fresh app; the context manager runs the lifespan."""
    with TestClient(create_app(settings)) as c:
        yield c


def signup(client, name="Jane", email="jane@x.com", password="password1"):
    return client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})


@pytest.fixture()
def auth_headers(client):
    r = signup(client)
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['token']}"}
