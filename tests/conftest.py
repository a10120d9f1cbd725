import os
import uuid

import pytest

# Must be set before the app module is imported: it configures the DB at import.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENROUTER_API_KEY"] = ""

from scattered_lights.app import app  # noqa: E402
from scattered_lights.models import db  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db():
    with app.app_context():
        db.drop_all()
        db.create_all()
    yield


@pytest.fixture()
def client():
    app.config["TESTING"] = True
    return app.test_client()


def make_user(client, **overrides):
    suffix = uuid.uuid4().hex[:8]
    payload = {
        "username": f"user-{suffix}",
        "email": f"user-{suffix}@example.com",
        "name": "Test User",
        "password": "supersecret",
        **overrides,
    }
    response = client.post("/api/users", json=payload)
    assert response.status_code == 201
    return response.get_json()


@pytest.fixture()
def user(client):
    return make_user(client)


@pytest.fixture()
def other_user(client):
    return make_user(client, name="Other User")
