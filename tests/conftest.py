# shared fixtures for backend api tests
# provides mock db, test users, auth tokens, and httpx test client

import pytest
import pytest_asyncio
from unittest.mock import MagicMock
from bson import ObjectId

from httpx import AsyncClient, ASGITransport

from tranquili.main import app
from tranquili.services.db import get_db
from tranquili.services.auth_service import create_access_token
from tranquili.dependencies import get_current_user


# test ids (auth provider uuids)
USER_ID = "8f14e45f-ceea-467a-9f6b-2c1f3a0b5d11"
OTHER_USER_ID = "c9f0f895-fb98-4ab2-8a3b-7d9e5c2f1a22"

USER = {"id": USER_ID, "email": "ana.souza@email.com", "name": "Ana Souza"}


def mood_doc(date: str, mood: str, user_id: str = USER_ID) -> dict:
    """mood_history document as stored in mongodb"""
    return {
        "_id": ObjectId(),
        "user_id": user_id,
        "date": date,
        "mood": mood,
        "created_at": f"{date}T09:00:00+00:00",
    }


def chat_doc(text: str, timestamp: int, role: str = "user", user_id: str = USER_ID) -> dict:
    """chat_messages document as stored in mongodb"""
    return {
        "_id": ObjectId(),
        "message_id": str(ObjectId()),
        "user_id": user_id,
        "role": role,
        "text": text,
        "timestamp": timestamp,
    }


# sample data

SAMPLE_MOODS = [
    mood_doc("2024-01-02", "calm"),
    mood_doc("2024-01-01", "sad"),
    mood_doc("2024-01-05", "happy", user_id=OTHER_USER_ID),
]

GREETING = chat_doc("Olá! Eu sou a Tranquilinha. Como você está se sentindo hoje?", 1704096000000, role="model")


# async cursor mock

class AsyncCursorMock:
    """mock for motor's async cursor — supports async for and chained methods"""

    def __init__(self, data=None):
        self._data = data or []
        self._index = 0

    def sort(self, key, direction=1):
        self._data = sorted(self._data, key=lambda d: d.get(key), reverse=direction == -1)
        return self

    def skip(self, n):
        self._data = self._data[n:]
        return self

    def limit(self, n):
        self._data = self._data[:n]
        return self

    def __aiter__(self):
        self._index = 0
        return self

    async def __anext__(self):
        if self._index >= len(self._data):
            raise StopAsyncIteration
        item = self._data[self._index]
        self._index += 1
        return item

    async def to_list(self, length=None):
        if length is not None:
            return self._data[:length]
        return self._data


class MockCollection:
    """mock for a motor collection with async methods"""

    def __init__(self, data=None):
        self._data = data or []
        self.inserted = []

    def find(self, query=None, projection=None):
        # basic query filtering
        results = self._data
        if query:
            results = [d for d in results if self._matches(d, query)]
        return AsyncCursorMock(list(results))

    async def find_one(self, query=None, projection=None):
        if not query:
            return self._data[0] if self._data else None
        for doc in self._data:
            if self._matches(doc, query):
                return doc
        return None

    async def insert_one(self, doc):
        oid = doc.get("_id", ObjectId())
        doc["_id"] = oid
        self._data.append(doc)
        self.inserted.append(doc)
        result = MagicMock()
        result.inserted_id = oid
        return result

    async def count_documents(self, query=None):
        if not query:
            return len(self._data)
        return len([d for d in self._data if self._matches(d, query)])

    async def update_one(self, query, update, upsert=False):
        result = MagicMock()
        result.matched_count = 0
        result.modified_count = 0
        result.upserted_id = None
        for doc in self._data:
            if self._matches(doc, query):
                self._apply(doc, update)
                result.matched_count = 1
                result.modified_count = 1
                return result
        if upsert:
            doc = {"_id": ObjectId(), **query}
            self._apply(doc, update)
            self._data.append(doc)
            result.upserted_id = doc["_id"]
        return result

    @staticmethod
    def _apply(doc, update):
        """apply the update operators the routers use"""
        if "$set" in update:
            doc.update(update["$set"])
        for key, value in update.get("$push", {}).items():
            items = value["$each"] if isinstance(value, dict) and "$each" in value else [value]
            doc.setdefault(key, []).extend(items)
        for key, end in update.get("$pop", {}).items():
            if doc.get(key):
                doc[key].pop(0 if end == -1 else -1)

    async def delete_one(self, query):
        result = MagicMock()
        result.deleted_count = 0
        for i, doc in enumerate(self._data):
            if self._matches(doc, query):
                del self._data[i]
                result.deleted_count = 1
                break
        return result

    async def create_index(self, *args, **kwargs):
        return "mock_index"

    @staticmethod
    def _resolve(doc, key):
        """follow a dotted path like 'pending.0' through dicts and lists"""
        value = doc
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            elif isinstance(value, list) and part.isdigit():
                index = int(part)
                value = value[index] if index < len(value) else None
            else:
                return None
        return value

    def _matches(self, doc, query):
        """basic mongodb query matching for tests"""
        for key, value in query.items():
            doc_val = self._resolve(doc, key)
            if isinstance(value, dict):
                if "$exists" in value:
                    if (doc_val is not None) != value["$exists"]:
                        return False
                elif "$in" in value:
                    if doc_val not in value["$in"]:
                        return False
                elif "$gte" in value:
                    if doc_val is None or doc_val < value["$gte"]:
                        return False
            elif doc_val != value:
                return False
        return True


class MockDatabase:
    """mock database that mimics the Database class"""

    def __init__(self):
        self.mood_history = MockCollection([doc.copy() for doc in SAMPLE_MOODS])
        self.chat_messages = MockCollection([GREETING.copy()])
        self.achievement_state = MockCollection([])

    async def connect(self):
        pass

    async def close(self):
        pass


@pytest.fixture
def mock_db():
    """create a fresh mock database for each test"""
    return MockDatabase()


@pytest.fixture
def user_token():
    """jwt access token for the test user"""
    return create_access_token({"sub": USER_ID, "email": USER["email"]})


@pytest_asyncio.fixture
async def client(mock_db):
    """httpx async test client with only the database mocked"""

    async def override_get_db():
        return mock_db

    app.dependency_overrides[get_db] = override_get_db
    # don't override get_current_user, tests send real tokens

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def user_client(mock_db):
    """client authenticated as the test user"""

    async def override_get_db():
        return mock_db

    async def override_get_current_user():
        return dict(USER)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
