from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

import structlog
from bson import ObjectId
from bson.errors import BSONError
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from .errors import StartupConnectionError, StoreOperationError, UnavailableError
from .models import TodoEntity
from .schemas import TodoCreate
from .settings import ConnectionDescriptor

logger = structlog.get_logger(__name__)


# PUBLIC_INTERFACE
class Gateway(ABC):
    """
    Abstract contract for the shared document store connection.

    Connection state only moves from disconnected to connected. A connection
    lost later is noticed by the next failing operation or by ``ping``.
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """True once ``connect`` succeeded."""

    @property
    def enabled(self) -> bool:
        """False when configuration switched the database off."""
        return True

    @abstractmethod
    async def connect(self) -> None:
        """Try to connect once. Failures are logged and leave the gateway disconnected."""

    @abstractmethod
    async def ping(self) -> None:
        """Round trip to the store. Raises UnavailableError or StoreOperationError."""

    @abstractmethod
    async def find_all(self, collection: str) -> List[TodoEntity]:
        """Return every record of ``collection``."""

    @abstractmethod
    async def insert_one(self, collection: str, record: Mapping[str, Any]) -> str:
        """Insert ``record`` and return the identifier assigned by the store."""

    async def close(self) -> None:
        return None

    async def connect_with_retry(self, attempts: int = 1, backoff: float = 0.0) -> bool:
        """
        Call ``connect`` up to ``attempts`` times, sleeping ``backoff * 2**n``
        seconds between tries. Returns the final connection state.
        """
        if not self.enabled:
            await self.connect()
            return self.is_connected

        attempts = max(attempts, 1)
        for attempt in range(1, attempts + 1):
            await self.connect()
            if self.is_connected:
                return True
            if attempt < attempts:
                delay = backoff * (2 ** (attempt - 1))
                logger.warning(
                    "database_connect_retry",
                    attempt=attempt,
                    max_attempts=attempts,
                    delay_seconds=delay,
                )
                if delay > 0:
                    await asyncio.sleep(delay)
        logger.warning("database_degraded_mode", attempts=attempts)
        return False


def document_to_entity(doc: Mapping[str, Any]) -> TodoEntity:
    """
    Map a raw store document onto a TodoEntity.

    Fields are coerced with the same lenient rules as create requests, so
    legacy or hand-edited records always produce a valid entity.
    """
    raw_id = doc.get("_id")
    created = doc.get("createdAt")
    if not isinstance(created, datetime):
        if isinstance(raw_id, ObjectId):
            created = raw_id.generation_time
        else:
            created = datetime.now(timezone.utc)
    fields = TodoCreate.model_validate(
        {key: doc[key] for key in ("task", "user", "completed") if key in doc}
    )
    return {
        "id": str(raw_id),
        "task": fields.task,
        "user": fields.user,
        "completed": fields.completed,
        "created_at": created,
    }


class MongoGateway(Gateway):
    """
    Gateway backed by a single shared motor client.

    The client is created lazily inside ``connect`` so it binds to the running
    event loop.
    """

    def __init__(
        self,
        descriptor: ConnectionDescriptor,
        timeout_ms: int = 5000,
        client_factory: Callable[..., AsyncIOMotorClient] = AsyncIOMotorClient,
    ) -> None:
        self._descriptor = descriptor
        self._timeout_ms = timeout_ms
        self._client_factory = client_factory
        self._client: Optional[AsyncIOMotorClient] = None
        self._db: Optional[AsyncIOMotorDatabase] = None

    @property
    def is_connected(self) -> bool:
        return self._db is not None

    @property
    def enabled(self) -> bool:
        return self._descriptor.enabled

    async def connect(self) -> None:
        if self.is_connected:
            return
        if not self._descriptor.enabled:
            logger.info("database_disabled")
            return

        target = self._descriptor.masked_uri()
        logger.info("database_connecting", uri=target)
        client: Optional[AsyncIOMotorClient] = None
        try:
            client = self._client_factory(
                self._descriptor.to_uri(),
                serverSelectionTimeoutMS=self._timeout_ms,
                tz_aware=True,
            )
            await client.admin.command("ping")
        except (PyMongoError, ValueError) as exc:
            if client is not None:
                client.close()
            err = StartupConnectionError(str(exc))
            logger.error("database_connect_failed", uri=target, error=str(err))
            return

        self._client = client
        self._db = client[self._descriptor.database]
        logger.info("database_connected", uri=target, database=self._descriptor.database)

    def _require(self) -> AsyncIOMotorDatabase:
        if self._db is None:
            raise UnavailableError()
        return self._db

    async def ping(self) -> None:
        db = self._require()
        try:
            await db.client.admin.command("ping")
        except PyMongoError as exc:
            raise StoreOperationError("ping", str(exc)) from exc

    async def find_all(self, collection: str) -> List[TodoEntity]:
        db = self._require()
        try:
            docs = await db[collection].find({}).to_list(length=None)
        except (PyMongoError, BSONError) as exc:
            raise StoreOperationError("find", str(exc)) from exc
        return [document_to_entity(d) for d in docs]

    async def insert_one(self, collection: str, record: Mapping[str, Any]) -> str:
        db = self._require()
        doc: Dict[str, Any] = dict(record)
        try:
            result = await db[collection].insert_one(doc)
        except (PyMongoError, BSONError) as exc:
            raise StoreOperationError("insert", str(exc)) from exc
        return str(result.inserted_id)

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("database_closed")
