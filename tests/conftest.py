"""
Shared fixtures: an in-memory SQLite database per test, the app built around
it, and an email service that records codes instead of sending them.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from digital_menu.core.database import Database
from digital_menu.main import create_app
from digital_menu.routes.auth import get_email_service


class FakeEmailService:
    """Stands in for EmailService; remembers every code it was asked to send."""

    def __init__(self, result=None):
        self.result = result or {"success": True, "dev_mode": True}
        self.sent = []

    async def send_verification_code(self, email, code):
        self.sent.append((email, code))
        return dict(self.result)

    def last_code(self, email):
        for sent_email, code in reversed(self.sent):
            if sent_email == email:
                return code
        raise AssertionError(f"No code sent to {email}")


@pytest.fixture
def database():
    database = Database("sqlite://", poolclass=StaticPool)
    database.init_db()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def app(database, email_service):
    app = create_app(database)
    app.dependency_overrides[get_email_service] = lambda: email_service
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


def _sign_in(client, email):
    """Log in through the API and return Authorization headers."""
    response = client.post("/api/auth/send-code", json={"email": email})
    assert response.status_code == 200
    code = response.json()["code"]

    response = client.post("/api/auth/verify-login", json={"email": email, "code": code})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def sign_in(client):
    return lambda email: _sign_in(client, email)


@pytest.fixture
def owner_headers(client):
    return _sign_in(client, "owner@example.com")


@pytest.fixture
def other_headers(client):
    return _sign_in(client, "intruder@example.com")
