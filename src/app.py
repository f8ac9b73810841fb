"""
Simulator Records API
Core functionality: record CRUD over the users collection, creation
notifications by email
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import ALLOWED_ORIGINS, DATABASE_URL, RECIPIENT_EMAIL
from database.connection import RecordStore
from services.email_service import NotificationGateway
from api.routes import health, records
from utils.error_handling import setup_error_handling

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the lifecycle of the shared record store and mail gateway"""
    record_store = RecordStore(DATABASE_URL)
    notification_gateway = NotificationGateway()

    # A store connection failure aborts startup
    await record_store.connect()
    try:
        await notification_gateway.initialize()

        app.state.record_store = record_store
        app.state.notification_gateway = notification_gateway
        app.state.recipient_email = RECIPIENT_EMAIL
        yield
    finally:
        await record_store.disconnect()

# FastAPI app initialization
app = FastAPI(
    title="Simulator Records API",
    description="Record CRUD API with email notifications on creation",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization", "X-API-Key"],
    max_age=86400,
)

# Setup centralized error handling
setup_error_handling(app)

# Include API routes
app.include_router(health.router, tags=["Health"])
app.include_router(records.router, prefix="/api", tags=["Records"])

# Server startup is handled by main.py at the project root
