"""
Request-scoped access to the process-wide gateways

Both gateways are built once in the application lifespan and stored on
app.state; handlers receive them through Depends.
"""

from fastapi import Request

from database.connection import RecordStore
from services.email_service import NotificationGateway


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store


def get_notification_gateway(request: Request) -> NotificationGateway:
    return request.app.state.notification_gateway


def get_recipient_email(request: Request):
    """Default recipient for creation notifications"""
    return getattr(request.app.state, "recipient_email", None)
