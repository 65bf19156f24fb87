"""Tests for how store failures reach the client."""

import pytest
from pymongo.errors import PyMongoError

from contactbook.db.mongo import contacts_collection
from tests.conftest import contact_form

SOME_ID = "5f2b6c1e9d3a4b0012345678"
LEAKY = "connection refused: db-internal.example:27017"


class BrokenCollection:
    """Stands in for a collection whose every call fails."""

    async def insert_one(self, *args, **kwargs):
        raise PyMongoError(LEAKY)

    find_one = insert_one
    find_one_and_update = insert_one
    find_one_and_delete = insert_one

    def find(self, *args, **kwargs):
        raise PyMongoError(LEAKY)


@pytest.fixture
def broken_client(app, client):
    app.dependency_overrides[contacts_collection] = BrokenCollection
    yield client
    app.dependency_overrides.clear()


class TestStoreErrors:

    def test_create_is_internal_error(self, broken_client):
        resp = broken_client.post("/api/contacts", data=contact_form())

        assert resp.status_code == 500
        assert resp.json()["error"] == "internal_error"
        assert LEAKY not in resp.text

    def test_create_failure_discards_avatar(self, broken_client, settings, tmp_path):
        broken_client.post(
            "/api/contacts",
            data=contact_form(),
            files={"avatar": ("a.png", b"png", "image/png")},
        )

        assert list((tmp_path / "uploads").iterdir()) == []

    def test_list_is_not_found(self, broken_client):
        resp = broken_client.get("/api/contacts")

        assert resp.status_code == 404

    @pytest.mark.parametrize("method", ["get", "delete"])
    def test_read_and_delete_are_bad_request(self, broken_client, method):
        resp = getattr(broken_client, method)(f"/api/contacts/{SOME_ID}")

        assert resp.status_code == 400
        assert resp.json()["error"] == "store_error"
        assert LEAKY not in resp.text

    def test_update_is_bad_request(self, broken_client):
        resp = broken_client.put(f"/api/contacts/{SOME_ID}", data=contact_form())

        assert resp.status_code == 400
        assert resp.json()["error"] == "store_error"
