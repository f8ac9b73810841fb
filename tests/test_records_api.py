"""
Record CRUD endpoints through the full FastAPI stack
"""

import uuid

import pytest

from database.connection import RecordStore
from models.email import EmailResult


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_always_ok(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert "timestamp" in body


class TestCreateAndRead:

    @pytest.mark.asyncio
    async def test_create_then_get_returns_same_fields(self, client, record_payload):
        created = await client.post("/api/data", json=record_payload)

        assert created.status_code == 201
        body = created.json()
        assert body["success"] is True
        assert body["message"] == "Data created successfully"
        record_id = body["data"]["id"]

        fetched = await client.get(f"/api/data/{record_id}")
        assert fetched.status_code == 200
        record = fetched.json()["data"]
        assert record["_id"] == record_id
        assert record["name"] == record_payload["name"]
        assert record["email"] == record_payload["email"]
        assert record["age"] == record_payload["age"]
        assert record["createdAt"]

    @pytest.mark.asyncio
    async def test_ids_are_distinct_per_create(self, client, record_payload):
        first = await client.post("/api/data", json=record_payload)
        second = await client.post("/api/data", json=record_payload)

        assert first.json()["data"]["id"] != second.json()["data"]["id"]

    @pytest.mark.asyncio
    async def test_client_supplied_id_is_ignored(self, client, collection, record_payload):
        response = await client.post("/api/data", json={**record_payload, "_id": "client-chosen"})

        record_id = response.json()["data"]["id"]
        assert record_id != "client-chosen"
        assert collection.documents[record_id]["_id"] == record_id

    @pytest.mark.asyncio
    async def test_answers_are_stored_with_the_record(self, client, collection, record_payload):
        answers = [{"label": "Revenu", "value": "1000"}]
        response = await client.post("/api/data", json={**record_payload, "answers": answers})

        stored = collection.documents[response.json()["data"]["id"]]
        assert stored["answers"] == answers

    @pytest.mark.asyncio
    @pytest.mark.parametrize("answers,stored", [
        (None, []),
        ([{"label": "Revenu", "value": {"min": 1, "max": 2}}], [{"label": "Revenu", "value": {"min": 1, "max": 2}}]),
        ([{"label": 3, "value": "x"}], [{"label": 3, "value": "x"}]),
        (["free text", 42], ["free text", 42]),
    ])
    async def test_free_form_answers_are_accepted(self, client, collection, gateway, record_payload, answers, stored):
        response = await client.post("/api/data", json={**record_payload, "answers": answers})

        assert response.status_code == 201
        assert response.json()["success"] is True
        assert collection.documents[response.json()["data"]["id"]]["answers"] == stored
        assert len(gateway.sent) == 1

    @pytest.mark.asyncio
    async def test_list_returns_all_records(self, client, record_payload):
        empty = await client.get("/api/data")
        assert empty.status_code == 200
        assert empty.json() == {"success": True, "data": []}

        await client.post("/api/data", json=record_payload)
        await client.post("/api/data", json={**record_payload, "name": "Bruno"})

        listed = await client.get("/api/data")
        names = sorted(record["name"] for record in listed.json()["data"])
        assert names == ["Alice Martin", "Bruno"]

    @pytest.mark.asyncio
    async def test_get_missing_record_is_404(self, client):
        response = await client.get(f"/api/data/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Data not found"}

    @pytest.mark.asyncio
    async def test_malformed_id_goes_through_generic_error_path(self, client):
        response = await client.get("/api/data/not-an-id")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Failed to fetch data"}

    @pytest.mark.asyncio
    async def test_create_missing_fields_is_rejected(self, client):
        response = await client.post("/api/data", json={"name": "No Email"})

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert "data" not in body


class TestUpdate:

    @pytest.mark.asyncio
    async def test_partial_update_changes_only_given_field(self, client, record_payload):
        record_id = (await client.post("/api/data", json=record_payload)).json()["data"]["id"]

        response = await client.put(f"/api/data/{record_id}", json={"name": "X"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Data updated successfully"}
        record = (await client.get(f"/api/data/{record_id}")).json()["data"]
        assert record["name"] == "X"
        assert record["email"] == record_payload["email"]
        assert record["age"] == record_payload["age"]

    @pytest.mark.asyncio
    async def test_falsy_fields_are_silently_dropped(self, client, record_payload):
        record_id = (await client.post("/api/data", json=record_payload)).json()["data"]["id"]

        response = await client.put(f"/api/data/{record_id}", json={"name": "", "age": 0})

        assert response.status_code == 200
        record = (await client.get(f"/api/data/{record_id}")).json()["data"]
        assert record["name"] == record_payload["name"]
        assert record["age"] == record_payload["age"]

    @pytest.mark.asyncio
    async def test_numeric_string_age_is_coerced(self, client, record_payload):
        record_id = (await client.post("/api/data", json=record_payload)).json()["data"]["id"]

        await client.put(f"/api/data/{record_id}", json={"age": "52"})

        record = (await client.get(f"/api/data/{record_id}")).json()["data"]
        assert record["age"] == 52

    @pytest.mark.asyncio
    async def test_update_missing_record_is_404(self, client):
        response = await client.put(f"/api/data/{uuid.uuid4()}", json={"name": "X"})

        assert response.status_code == 404
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_update_malformed_id_is_500(self, client):
        response = await client.put("/api/data/12345", json={"name": "X"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Failed to update data"}


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_twice_yields_200_then_404(self, client, record_payload):
        record_id = (await client.post("/api/data", json=record_payload)).json()["data"]["id"]

        first = await client.delete(f"/api/data/{record_id}")
        second = await client.delete(f"/api/data/{record_id}")

        assert first.status_code == 200
        assert first.json() == {"success": True, "message": "Data deleted successfully"}
        assert second.status_code == 404
        assert second.json() == {"success": False, "message": "Data not found"}


class TestSeed:

    @pytest.mark.asyncio
    async def test_seed_always_inserts_three(self, client, collection):
        for expected_total in (3, 6):
            response = await client.post("/api/seed")

            assert response.status_code == 201
            assert response.json()["data"] == {"insertedCount": 3}
            assert len(collection.documents) == expected_total

        names = {document["name"] for document in collection.documents.values()}
        assert names == {"John Doe", "Jane Smith", "Bob Johnson"}


class TestNotification:

    @pytest.mark.asyncio
    async def test_create_sends_formatted_answers(self, client, gateway, record_payload):
        answers = [
            {"label": "A", "value": "b"},
            {"label": "", "value": "c"},
            {"label": "D", "value": ["e", "f"]},
        ]
        await client.post("/api/data", json={**record_payload, "answers": answers})

        assert len(gateway.sent) == 1
        sent = gateway.sent[0]
        assert sent["to"] == "inbox@example.com"
        assert sent["type"] == "custom"
        assert sent["data"]["subject"] == "Data Retrieved From Simulator"
        assert " A </span>  :  <i> b </i>" in sent["data"]["message"]
        assert " D </span>  :  <i> e, f </i>" in sent["data"]["message"]
        assert "<i> c </i>" not in sent["data"]["message"]

    @pytest.mark.asyncio
    async def test_gateway_not_ready_skips_send(self, client, gateway, record_payload):
        gateway.ready = False

        response = await client.post("/api/data", json=record_payload)

        assert response.status_code == 201
        assert gateway.sent == []

    @pytest.mark.asyncio
    async def test_failed_send_does_not_change_response(self, client, gateway, record_payload):
        gateway.result = EmailResult(success=False, error="550 rejected")

        response = await client.post("/api/data", json=record_payload)

        assert response.status_code == 201
        assert response.json()["success"] is True
        assert len(gateway.sent) == 1


class TestStoreNotConnected:

    @pytest.fixture
    def app(self, app):
        app.state.record_store = RecordStore("postgresql://unused")
        return app

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,path,message", [
        ("GET", "/api/data", "Failed to fetch data"),
        ("GET", f"/api/data/{uuid.uuid4()}", "Failed to fetch data"),
        ("DELETE", f"/api/data/{uuid.uuid4()}", "Failed to delete data"),
        ("POST", "/api/seed", "Failed to seed data"),
    ])
    async def test_generic_500_without_details(self, client, method, path, message):
        response = await client.request(method, path)

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": message}

    @pytest.mark.asyncio
    async def test_create_fails_before_notifying(self, client, gateway, record_payload):
        response = await client.post("/api/data", json=record_payload)

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Failed to create data"}
        assert gateway.sent == []
