"""
pytest configuration and fixtures for the records API test suite
In-memory doubles stand in for the database collection and mail transport.
"""

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from app import app as fastapi_app
from database.connection import RecordStore
from models.email import EmailResult


class InMemoryCollection:
    """Mirrors RecordCollection semantics over a dict"""

    def __init__(self):
        self.documents: Dict[str, Dict[str, Any]] = {}

    def _stored(self, record_id: str) -> Optional[Dict[str, Any]]:
        # Same parse failure as the real collection for malformed ids
        return self.documents.get(str(uuid.UUID(record_id)))

    async def find_all(self) -> List[Dict[str, Any]]:
        return [copy.deepcopy(document) for document in self.documents.values()]

    async def find_one(self, record_id: str) -> Optional[Dict[str, Any]]:
        document = self._stored(record_id)
        return copy.deepcopy(document) if document else None

    async def insert_one(self, document: Dict[str, Any]) -> str:
        record_id = str(uuid.uuid4())
        self.documents[record_id] = {
            **copy.deepcopy(document),
            "_id": record_id,
            "createdAt": datetime.now(timezone.utc),
        }
        return record_id

    async def insert_many(self, documents: List[Dict[str, Any]]) -> int:
        for document in documents:
            await self.insert_one(document)
        return len(documents)

    async def update_one(self, record_id: str, fields: Dict[str, Any]) -> int:
        document = self._stored(record_id)
        if document is None:
            return 0
        document.update(copy.deepcopy(fields))
        return 1

    async def delete_one(self, record_id: str) -> int:
        if self._stored(record_id) is None:
            return 0
        del self.documents[str(uuid.UUID(record_id))]
        return 1


class ConnectedStore(RecordStore):
    """RecordStore already bound to an in-memory collection"""

    def __init__(self, collection: InMemoryCollection):
        super().__init__("postgresql://unused")
        self.collection = collection


class RecordingGateway:
    """Notification gateway double that records every send"""

    def __init__(self, ready: bool = True, result: Optional[EmailResult] = None):
        self.ready = ready
        self.result = result or EmailResult(success=True, message_id="<test@example.com>")
        self.sent: List[Dict[str, Any]] = []

    def is_ready(self) -> bool:
        return self.ready

    async def send_email(self, to: str, mail_type: str, data: Dict[str, Any]) -> EmailResult:
        self.sent.append({"to": to, "type": mail_type, "data": data})
        return self.result


@pytest.fixture
def collection():
    return InMemoryCollection()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def app(collection, gateway):
    """FastAPI app with test doubles installed on app.state"""
    fastapi_app.state.record_store = ConnectedStore(collection)
    fastapi_app.state.notification_gateway = gateway
    fastapi_app.state.recipient_email = "inbox@example.com"
    yield fastapi_app
    for name in ("record_store", "notification_gateway", "recipient_email"):
        if hasattr(fastapi_app.state, name):
            delattr(fastapi_app.state, name)


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def record_payload():
    return {"name": "Alice Martin", "email": "alice@example.com", "age": 41}
