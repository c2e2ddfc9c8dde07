from collections import defaultdict
from datetime import timezone
from typing import Any, Dict, List, Mapping

import bson
import pytest
from bson import ObjectId
from bson.codec_options import CodecOptions
from fastapi.testclient import TestClient

from todo_demo.errors import StoreOperationError, UnavailableError
from todo_demo.gateway import Gateway, document_to_entity
from todo_demo.main import create_app
from todo_demo.models import TodoEntity
from todo_demo.settings import Settings, get_settings

ENV_KEYS = [
    "APP_NAME",
    "APP_VERSION",
    "APP_ENV",
    "HOST",
    "PORT",
    "MONGODB_URI",
    "MONGO_HOST",
    "MONGO_PORT",
    "MONGO_USERNAME",
    "MONGO_PASSWORD",
    "MONGO_DATABASE",
    "MONGO_COLLECTION",
    "MONGO_TIMEOUT_MS",
    "DB_CONNECT_ATTEMPTS",
    "DB_CONNECT_BACKOFF",
    "MARKER_FILE_PATH",
    "MARKER_EXPECTED",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
]


BSON_OPTIONS = CodecOptions(tz_aware=True, tzinfo=timezone.utc)


class FakeGateway(Gateway):
    """In-memory stand-in for MongoGateway. ``fail_ops`` names operations that should fail."""

    def __init__(self, reachable: bool = True, enabled: bool = True) -> None:
        self.reachable = reachable
        self._enabled = enabled
        self._connected = False
        self.collections: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.fail_ops: set = set()
        self.connect_calls = 0
        self.closed = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def connect(self) -> None:
        self.connect_calls += 1
        if self._enabled and self.reachable:
            self._connected = True

    def _check(self, operation: str) -> None:
        if not self._connected:
            raise UnavailableError()
        if operation in self.fail_ops:
            raise StoreOperationError(operation, "connection reset by peer 10.0.0.7")

    async def ping(self) -> None:
        self._check("ping")

    async def find_all(self, collection: str) -> List[TodoEntity]:
        self._check("find")
        return [document_to_entity(d) for d in self.collections[collection]]

    async def insert_one(self, collection: str, record: Mapping[str, Any]) -> str:
        self._check("insert")
        doc = dict(record)
        doc["_id"] = ObjectId()
        # Store what the server would: the BSON encoding of the document
        stored = bson.decode(bson.encode(doc), codec_options=BSON_OPTIONS)
        self.collections[collection].append(stored)
        return str(doc["_id"])

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_settings(monkeypatch):
    """Return a factory building Settings from a clean environment plus overrides."""

    def _make(**env: str) -> Settings:
        for key in ENV_KEYS:
            monkeypatch.delenv(key, raising=False)
        env.setdefault("DB_CONNECT_BACKOFF", "0")
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return get_settings()

    return _make


@pytest.fixture
def make_client(make_settings):
    """Return a factory for started TestClients; all are shut down after the test."""
    started: List[TestClient] = []

    def _make(gateway: Gateway = None, **env: str) -> TestClient:
        settings = make_settings(**env)
        app = create_app(settings, gateway if gateway is not None else FakeGateway())
        client = TestClient(app)
        client.__enter__()
        started.append(client)
        return client

    yield _make
    for client in started:
        client.__exit__(None, None, None)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(make_client, gateway) -> TestClient:
    return make_client(gateway)


@pytest.fixture
def down_gateway() -> FakeGateway:
    return FakeGateway(reachable=False)


@pytest.fixture
def down_client(make_client, down_gateway) -> TestClient:
    return make_client(down_gateway)
