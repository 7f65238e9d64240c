"""
Pytest fixtures for the test suite.

Services and routes run against ``InMemoryStore``, a dict-backed
``ExerciseStore``. ``MongoStore`` itself is covered in test_database.py
with mongomock-motor.
"""

import asyncio
from datetime import datetime, timezone

import pytest
from bson import ObjectId

from errors import StorageError, UniqueConstraintViolation
from models import ExerciseRecord, UserRecord
from services import ExerciseLogService, UserService


class InMemoryStore:
    """Dict-backed store with the same error contract as MongoStore.

    Every method yields to the event loop once, so concurrent callers
    interleave the way they would around real I/O.
    """

    def __init__(self):
        self.users: list[UserRecord] = []
        self.exercises: list[ExerciseRecord] = []
        self.fail = False

    async def _io(self):
        await asyncio.sleep(0)
        if self.fail:
            raise StorageError("connection reset")

    async def find_user_by_username(self, username):
        await self._io()
        return next((u for u in self.users if u.username == username), None)

    async def find_user_by_id(self, user_id):
        await self._io()
        return next((u for u in self.users if u.id == user_id), None)

    async def insert_user(self, username):
        await self._io()
        if any(u.username == username for u in self.users):
            raise UniqueConstraintViolation(f"duplicate username {username!r}")
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        user = UserRecord(id=ObjectId(), username=username, created_at=now, updated_at=now)
        self.users.append(user)
        return user

    async def list_users(self):
        await self._io()
        return list(self.users)

    async def insert_exercise(self, user_id, description, duration, date):
        await self._io()
        exercise = ExerciseRecord(
            id=ObjectId(), user_id=user_id, description=description, duration=duration, date=date
        )
        self.exercises.append(exercise)
        return exercise

    async def find_exercises(self, user_id, date_from=None, date_to=None, limit=None):
        await self._io()
        found = [
            ex
            for ex in self.exercises
            if ex.user_id == user_id
            and (date_from is None or ex.date >= date_from)
            and (date_to is None or ex.date <= date_to)
        ]
        return found[:limit] if limit else found


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def user_service(store):
    return UserService(store)


@pytest.fixture
def exercise_service(store):
    return ExerciseLogService(store)


@pytest.fixture
def api_client(store):
    """TestClient wired to the in-memory store (startup hooks are not run)."""
    from fastapi.testclient import TestClient

    from deps import get_store
    from main import app

    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
