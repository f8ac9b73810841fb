"""
Record CRUD API routes

Every handler guards its store access: failures are logged server-side and
returned as a generic envelope with HTTP 500.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends

from api.dependencies import get_notification_gateway, get_recipient_email, get_record_store
from database.connection import RecordStore
from models.record import CreatedRecord, Record, RecordCreateRequest, RecordUpdateRequest, SeedResult
from models.response import Envelope
from services.email_service import NotificationGateway
from services.records_service import SAMPLE_RECORDS, build_update_fields, notify_record_created

router = APIRouter()
logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Data not found"

@router.get("/data")
async def list_records(store: RecordStore = Depends(get_record_store)):
    """List all records"""
    try:
        collection = store.get_collection()
        documents = await collection.find_all()
        records = [Record.model_validate(document) for document in documents]
        return Envelope.ok(data=records).to_response()

    except Exception as e:
        logger.error(f"Error fetching data: {e}")
        return Envelope.fail("Failed to fetch data").to_response(500)

@router.get("/data/{record_id}")
async def get_record(record_id: str, store: RecordStore = Depends(get_record_store)):
    """Get a single record"""
    try:
        collection = store.get_collection()
        document = await collection.find_one(record_id)

        if not document:
            return Envelope.fail(NOT_FOUND_MESSAGE).to_response(404)

        return Envelope.ok(data=Record.model_validate(document)).to_response()

    except Exception as e:
        logger.error(f"Error fetching data by ID: {e}")
        return Envelope.fail("Failed to fetch data").to_response(500)

@router.post("/data")
async def create_record(
    request: RecordCreateRequest,
    background_tasks: BackgroundTasks,
    store: RecordStore = Depends(get_record_store),
    gateway: NotificationGateway = Depends(get_notification_gateway),
    recipient: Optional[str] = Depends(get_recipient_email)
):
    """Create a record, then notify the configured recipient"""
    try:
        document = request.model_dump(mode="json", exclude={"id", "_id", "createdAt"})

        collection = store.get_collection()
        record_id = await collection.insert_one(document)

        # Runs after the response is sent; its outcome never changes the status
        background_tasks.add_task(notify_record_created, gateway, recipient, request.answers)

        return Envelope.ok(
            data=CreatedRecord(id=record_id),
            message="Data created successfully"
        ).to_response(201)

    except Exception as e:
        logger.error(f"Error creating data: {e}")
        return Envelope.fail("Failed to create data").to_response(500)

@router.put("/data/{record_id}")
async def update_record(
    record_id: str,
    request: RecordUpdateRequest,
    store: RecordStore = Depends(get_record_store)
):
    """Update name/email/age of a record"""
    try:
        updates = build_update_fields(request.name, request.email, request.age)

        collection = store.get_collection()
        matched = await collection.update_one(record_id, updates)

        if matched == 0:
            return Envelope.fail(NOT_FOUND_MESSAGE).to_response(404)

        return Envelope.ok(message="Data updated successfully").to_response()

    except Exception as e:
        logger.error(f"Error updating data: {e}")
        return Envelope.fail("Failed to update data").to_response(500)

@router.delete("/data/{record_id}")
async def delete_record(record_id: str, store: RecordStore = Depends(get_record_store)):
    """Delete a record"""
    try:
        collection = store.get_collection()
        deleted = await collection.delete_one(record_id)

        if deleted == 0:
            return Envelope.fail(NOT_FOUND_MESSAGE).to_response(404)

        return Envelope.ok(message="Data deleted successfully").to_response()

    except Exception as e:
        logger.error(f"Error deleting data: {e}")
        return Envelope.fail("Failed to delete data").to_response(500)

@router.post("/seed")
async def seed_records(store: RecordStore = Depends(get_record_store)):
    """Insert the three sample records"""
    try:
        collection = store.get_collection()
        inserted = await collection.insert_many([dict(sample) for sample in SAMPLE_RECORDS])

        return Envelope.ok(
            data=SeedResult(insertedCount=inserted),
            message="Sample data seeded successfully"
        ).to_response(201)

    except Exception as e:
        logger.error(f"Error seeding data: {e}")
        return Envelope.fail("Failed to seed data").to_response(500)
