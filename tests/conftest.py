import asyncio
import json
import uuid

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from contactbook.config import Settings
from contactbook.application import create_app

ADMIN_USER = "admin"
ADMIN_PASSWORD = "s3cret"


def run(coro):
    """Run a mock-store coroutine from a sync test."""
    return asyncio.run(coro)


def contact_form(name="Ada", email=(), phone=(), address=(), **extra):
    """Form fields the way clients send them: every value JSON-encoded."""
    form = {
        "name": json.dumps(name),
        "email": json.dumps(list(email)),
        "phone": json.dumps(list(phone)),
        "address": json.dumps(list(address)),
    }
    for key, value in extra.items():
        form[key] = json.dumps(value)
    return form


@pytest.fixture
def settings(tmp_path):
    return Settings(
        mongo_db="contactbook_test",
        admin_user=ADMIN_USER,
        admin_password=ADMIN_PASSWORD,
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def db():
    # Unique name so no data leaks between tests through the shared mock server
    return AsyncMongoMockClient()[f"contactbook_test_{uuid.uuid4().hex}"]


@pytest.fixture
def app(settings, db):
    return create_app(settings, db=db)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        c.auth = (ADMIN_USER, ADMIN_PASSWORD)
        yield c


@pytest.fixture
def anon_client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def create_contact(client):
    """Create a contact through the API and return its stored JSON."""

    def _create(**kwargs):
        files = kwargs.pop("files", None)
        resp = client.post("/api/contacts", data=contact_form(**kwargs), files=files)
        assert resp.status_code == 200, resp.text
        # Newest first, so the contact just created is at the head of the list
        return client.get("/api/contacts").json()[0]

    return _create
