"""
Record store gateway: connection lifecycle and the users document collection
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

import asyncpg

logger = logging.getLogger(__name__)

# Fixed logical database (schema) and collection (table)
DATABASE_NAME = "simulator"
COLLECTION_NAME = "users"


class ConnectionNotEstablished(RuntimeError):
    """Raised when the collection is requested before connect() succeeded"""


def _row_to_document(row: asyncpg.Record) -> Dict[str, Any]:
    document = json.loads(row["document"]) if isinstance(row["document"], str) else dict(row["document"])
    document["_id"] = str(row["id"])
    document["createdAt"] = row["created_at"]
    return document


class RecordCollection:
    """Document-style access to the users collection"""

    def __init__(self, pool: asyncpg.Pool, table: str):
        self.pool = pool
        self.table = table

    async def find_all(self) -> List[Dict[str, Any]]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT id, created_at, document FROM {self.table} ORDER BY created_at"
            )
        return [_row_to_document(row) for row in rows]

    async def find_one(self, record_id: str) -> Optional[Dict[str, Any]]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT id, created_at, document FROM {self.table} WHERE id = $1",
                UUID(record_id)
            )
        return _row_to_document(row) if row else None

    async def insert_one(self, document: Dict[str, Any]) -> str:
        """Insert a document and return the store-assigned id"""
        async with self.pool.acquire() as conn:
            record_id = await conn.fetchval(
                f"INSERT INTO {self.table} (created_at, document) VALUES ($1, $2::jsonb) RETURNING id",
                datetime.now(timezone.utc), json.dumps(document, default=str)
            )
        return str(record_id)

    async def insert_many(self, documents: List[Dict[str, Any]]) -> int:
        created_at = datetime.now(timezone.utc)
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.executemany(
                    f"INSERT INTO {self.table} (created_at, document) VALUES ($1, $2::jsonb)",
                    [(created_at, json.dumps(document, default=str)) for document in documents]
                )
        return len(documents)

    async def update_one(self, record_id: str, fields: Dict[str, Any]) -> int:
        """Merge fields into the stored document; returns the matched count"""
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                f"UPDATE {self.table} SET document = document || $2::jsonb WHERE id = $1",
                UUID(record_id), json.dumps(fields, default=str)
            )
        return int(result.split()[-1])

    async def delete_one(self, record_id: str) -> int:
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                f"DELETE FROM {self.table} WHERE id = $1",
                UUID(record_id)
            )
        return int(result.split()[-1])


class RecordStore:
    """Owns the database pool and the bound users collection"""

    def __init__(self, connection_string: str):
        self.connection_string = connection_string
        self.pool: Optional[asyncpg.Pool] = None
        self.collection: Optional[RecordCollection] = None

    async def connect(self) -> None:
        """Initialize the pool and bind the users collection"""
        try:
            self.pool = await asyncpg.create_pool(
                self.connection_string,
                min_size=2,
                max_size=10,
                command_timeout=60,
                statement_cache_size=0  # pgbouncer compatibility
            )
            table = f"{DATABASE_NAME}.{COLLECTION_NAME}"
            async with self.pool.acquire() as conn:
                await conn.execute(f"CREATE SCHEMA IF NOT EXISTS {DATABASE_NAME}")
                await conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS {table} (
                        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                        document JSONB NOT NULL DEFAULT '{{}}'::jsonb
                    )
                """)
            self.collection = RecordCollection(self.pool, table)
            logger.info("Connected to database successfully")
        except Exception as e:
            logger.error(f"Database connection error: {e}")
            raise

    async def disconnect(self) -> None:
        """Close the pool"""
        if self.pool:
            await self.pool.close()
        self.pool = None
        self.collection = None
        logger.info("Database connections closed")

    def get_collection(self) -> RecordCollection:
        if self.collection is None:
            raise ConnectionNotEstablished("Database not connected")
        return self.collection
