"""
Pytest configuration and fixtures.

This file is automatically discovered by pytest and provides
shared fixtures for all test modules.

External collaborators are replaced with in-memory fakes:
- FakeRecordStore evaluates the geo_distance / range / term queries the
  service builds, using haversine distance
- FakeBlobStore keeps written bytes in a dict
- FakeScorer returns a fixed confidence

References:
-----------
- Pytest Fixtures: https://docs.pytest.org/en/stable/fixture.html
- FastAPI Testing: https://fastapi.tiangolo.com/advanced/async-tests/
"""

import math
import os
import time
from datetime import timedelta
from typing import AsyncGenerator, Dict, List, Optional, Tuple

os.environ.setdefault("JWT_SECRET_KEY", "test-signing-secret-0123456789abcdef")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from around.core.errors import BlobStoreError, ConflictError, RecordStoreError, ScoringError
from around.core.security import create_access_token
from around.db.search import get_record_store
from around.main import app
from around.services.blob_store import get_blob_store
from around.services.ingestion import IngestionPipeline
from around.services.vision import get_face_scorer

EARTH_RADIUS_KM = 6371.0088


# ================================
# Fakes
# ================================

def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def _parse_km(distance: str) -> float:
    assert distance.endswith("km"), distance
    return float(distance[:-2])


def _matches(query: dict, doc: dict) -> bool:
    (kind, clause), = query.items()

    if kind == "match_all":
        return True

    if kind == "term":
        (field, value), = clause.items()
        return doc.get(field) == value

    if kind == "range":
        (field, bounds), = clause.items()
        value = doc.get(field)
        if not isinstance(value, (int, float)):
            return False
        return value >= bounds["gte"]

    if kind == "geo_distance":
        location = doc.get("location")
        if not isinstance(location, dict):
            return False
        center = clause["location"]
        distance = haversine_km(center["lat"], center["lon"], location["lat"], location["lon"])
        return distance <= _parse_km(clause["distance"])

    raise AssertionError(f"Unsupported query: {query}")


class FakeRecordStore:
    """In-memory stand-in for RecordStore."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}
        self.mappings: Dict[str, dict] = {}
        self.fail_on: set = set()
        self.searches: List[Tuple[str, dict]] = []
        self.put_delay = 0.0

    def _check(self, op: str) -> None:
        if op in self.fail_on:
            raise RecordStoreError(f"{op} failed")

    def exists(self, collection: str) -> bool:
        self._check("exists")
        return collection in self.collections

    def create_collection(self, collection: str, mapping: dict) -> None:
        self._check("create_collection")
        self.collections.setdefault(collection, {})
        self.mappings[collection] = mapping

    def put(self, collection: str, doc_id: str, document: dict, create_only: bool = False) -> None:
        if self.put_delay:
            time.sleep(self.put_delay)
        self._check("put")
        docs = self.collections.setdefault(collection, {})
        if create_only and doc_id in docs:
            raise ConflictError(f"Document {doc_id} already exists in {collection}")
        docs[doc_id] = dict(document)

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        self._check("get")
        return self.collections.get(collection, {}).get(doc_id)

    def search(self, collection: str, query: dict, size: Optional[int] = None) -> List[Tuple[str, dict]]:
        self._check("search")
        self.searches.append((collection, query))
        hits = [
            (doc_id, doc)
            for doc_id, doc in self.collections.get(collection, {}).items()
            if _matches(query, doc)
        ]
        return hits if size is None else hits[:size]

    def count(self, collection: str, query: dict) -> int:
        self._check("count")
        return sum(1 for doc in self.collections.get(collection, {}).values() if _matches(query, doc))

    def ping(self) -> bool:
        return "ping" not in self.fail_on


class FakeBlobStore:
    """In-memory stand-in for BlobStore."""

    bucket = "around-media"

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, Optional[str]] = {}
        self.fail = False
        # Store the bytes, then report a client timeout
        self.timeout_after_write = False

    def write(self, object_name: str, stream, content_type: Optional[str] = None) -> str:
        if self.fail:
            raise BlobStoreError(f"Failed to write {object_name}")
        self.objects[object_name] = stream.read()
        self.content_types[object_name] = content_type
        if self.timeout_after_write:
            raise BlobStoreError(f"Read timed out writing {object_name}", timed_out=True)
        return f"http://media.test/{self.bucket}/{object_name}"


class FakeScorer:
    """Stand-in for FaceScorer returning a fixed confidence."""

    def __init__(self, confidence: float = 0.95):
        self.confidence = confidence
        self.fail = False
        self.delay = 0.0
        self.calls: List[str] = []

    def score(self, image_url: str) -> float:
        self.calls.append(image_url)
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise ScoringError(f"Cloud Vision error for {image_url}")
        return self.confidence


# ================================
# Adapter Fixtures
# ================================

@pytest.fixture
def record_store() -> FakeRecordStore:
    store = FakeRecordStore()
    store.create_collection("post", {})
    store.create_collection("user", {})
    return store


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def scorer() -> FakeScorer:
    return FakeScorer()


@pytest.fixture
def pipeline(record_store, blob_store, scorer) -> IngestionPipeline:
    return IngestionPipeline(record_store, blob_store, scorer, post_index="post")


# ================================
# FastAPI Client Fixtures
# ================================

@pytest_asyncio.fixture
async def client(record_store, blob_store, scorer) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for the FastAPI app with fake adapters.

    Usage:
        async def test_something(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    app.dependency_overrides[get_record_store] = lambda: record_store
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_face_scorer] = lambda: scorer

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ================================
# Authentication Fixtures
# ================================

@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Bearer header for user "alice"."""
    token = create_access_token("alice")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def expired_token() -> str:
    """Token that expired an hour ago."""
    return create_access_token("alice", expires_delta=timedelta(hours=-1))


@pytest.fixture
def sample_user_data() -> dict:
    return {
        "username": "alice",
        "password": "pw1",
        "age": 30,
        "gender": "f",
    }
