import logging
import os
from datetime import datetime, timezone
from typing import List, Optional, Protocol

from bson import ObjectId
from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import StorageError, UniqueConstraintViolation
from models import ExerciseRecord, UserRecord


load_dotenv()

logger = logging.getLogger(__name__)

# Defaults work for local MongoDB.
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "exercise_tracker")

client = AsyncIOMotorClient(MONGODB_URL)
db = client[DB_NAME]


async def check_db() -> None:
    """Fail-fast check so you instantly know Mongo is reachable."""
    await client.admin.command("ping")
    logger.info("MongoDB connection successful (%s)", DB_NAME)


async def create_indexes(database: AsyncIOMotorDatabase = db) -> None:
    await database.users.create_index("username", unique=True)
    await database.exercises.create_index("user_id")
    await database.exercises.create_index([("user_id", ASCENDING), ("date", ASCENDING)])
    logger.info("Indexes created.")


class ExerciseStore(Protocol):
    """What the services need from storage.

    Implementations raise ``UniqueConstraintViolation`` when a username is
    already taken and ``StorageError`` for every other failure.
    """

    async def find_user_by_username(self, username: str) -> Optional[UserRecord]: ...

    async def find_user_by_id(self, user_id: ObjectId) -> Optional[UserRecord]: ...

    async def insert_user(self, username: str) -> UserRecord: ...

    async def list_users(self) -> List[UserRecord]: ...

    async def insert_exercise(
        self, user_id: ObjectId, description: str, duration: int, date: datetime
    ) -> ExerciseRecord: ...

    async def find_exercises(
        self,
        user_id: ObjectId,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[ExerciseRecord]: ...


def build_exercise_filter(
    user_id: ObjectId,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> dict:
    query: dict = {"user_id": user_id}
    if date_from is not None or date_to is not None:
        query["date"] = {}
        if date_from is not None:
            query["date"]["$gte"] = date_from
        if date_to is not None:
            query["date"]["$lte"] = date_to
    return query


class MongoStore:
    """``ExerciseStore`` over the ``users`` and ``exercises`` collections."""

    def __init__(self, database: AsyncIOMotorDatabase):
        self.users = database.users
        self.exercises = database.exercises

    async def find_user_by_username(self, username: str) -> Optional[UserRecord]:
        try:
            doc = await self.users.find_one({"username": username})
        except PyMongoError as exc:
            raise StorageError(str(exc)) from exc
        return UserRecord.model_validate(doc) if doc else None

    async def find_user_by_id(self, user_id: ObjectId) -> Optional[UserRecord]:
        try:
            doc = await self.users.find_one({"_id": user_id})
        except PyMongoError as exc:
            raise StorageError(str(exc)) from exc
        return UserRecord.model_validate(doc) if doc else None

    async def insert_user(self, username: str) -> UserRecord:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        user_dict = {"username": username, "created_at": now, "updated_at": now}
        try:
            result = await self.users.insert_one(user_dict)
        except DuplicateKeyError as exc:
            raise UniqueConstraintViolation(str(exc)) from exc
        except PyMongoError as exc:
            raise StorageError(str(exc)) from exc
        user_dict["_id"] = result.inserted_id
        return UserRecord.model_validate(user_dict)

    async def list_users(self) -> List[UserRecord]:
        try:
            cursor = self.users.find({}, {"username": 1}).sort("_id", ASCENDING)
            docs = await cursor.to_list(length=None)
        except PyMongoError as exc:
            raise StorageError(str(exc)) from exc
        return [UserRecord.model_validate(doc) for doc in docs]

    async def insert_exercise(
        self, user_id: ObjectId, description: str, duration: int, date: datetime
    ) -> ExerciseRecord:
        exercise_dict = {
            "user_id": user_id,  # reference to users collection
            "description": description,
            "duration": duration,
            "date": date,
        }
        try:
            result = await self.exercises.insert_one(exercise_dict)
        except PyMongoError as exc:
            raise StorageError(str(exc)) from exc
        exercise_dict["_id"] = result.inserted_id
        return ExerciseRecord.model_validate(exercise_dict)

    async def find_exercises(
        self,
        user_id: ObjectId,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[ExerciseRecord]:
        query = build_exercise_filter(user_id, date_from, date_to)
        try:
            cursor = self.exercises.find(query).sort("_id", ASCENDING)
            if limit:
                cursor = cursor.limit(limit)
            docs = await cursor.to_list(length=None)
        except PyMongoError as exc:
            raise StorageError(str(exc)) from exc
        return [ExerciseRecord.model_validate(doc) for doc in docs]
