"""User and exercise-log operations.

Both services take an ``ExerciseStore`` so tests can hand them an
in-memory store instead of MongoDB.
"""

import logging
from typing import Any, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from database import ExerciseStore
from errors import NotFoundError, ServerError, StorageError, UniqueConstraintViolation
from models import ExerciseOut, LogEntry, LogOut, UserRecord
from validation import (
    format_date_for_display,
    normalize_date,
    parse_date_bound,
    parse_limit,
    to_storage_datetime,
    validate_exercise_input,
    validate_username,
)


logger = logging.getLogger(__name__)


def parse_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


class UserService:
    def __init__(self, store: ExerciseStore):
        self.store = store

    async def create_or_get_user(self, username: Any) -> UserRecord:
        """Return the user called ``username``, creating it on first use.

        Two requests racing to create the same username both end up with
        the single stored record: the loser's insert hits the unique index
        and it re-reads the winner.
        """
        username = validate_username(username)
        try:
            user = await self.store.find_user_by_username(username)
            if user:
                return user
            try:
                user = await self.store.insert_user(username)
            except UniqueConstraintViolation:
                logger.info("Username %r created concurrently, using existing record", username)
                user = await self.store.find_user_by_username(username)
                if user is None:
                    raise StorageError(f"user {username!r} vanished after duplicate key")
                return user
        except StorageError as exc:
            logger.exception("Could not create user %r", username)
            raise ServerError() from exc

        logger.info("Created user %s (%s)", user.username, user.id)
        return user

    async def list_users(self) -> List[UserRecord]:
        try:
            return await self.store.list_users()
        except StorageError as exc:
            logger.exception("Could not list users")
            raise ServerError() from exc


class ExerciseLogService:
    def __init__(self, store: ExerciseStore):
        self.store = store

    async def _get_user(self, user_id: str) -> UserRecord:
        oid = parse_object_id(user_id)
        if oid is None:
            raise NotFoundError("user not found")
        user = await self.store.find_user_by_id(oid)
        if user is None:
            raise NotFoundError("user not found")
        return user

    async def append_exercise(
        self,
        user_id: str,
        description: Any,
        duration: Any,
        raw_date: Optional[str] = None,
    ) -> ExerciseOut:
        description, minutes = validate_exercise_input(description, duration)
        try:
            user = await self._get_user(user_id)
            day = normalize_date(raw_date)
            exercise = await self.store.insert_exercise(
                user.id, description, minutes, to_storage_datetime(day)
            )
        except StorageError as exc:
            logger.exception("Could not add exercise for user %s", user_id)
            raise ServerError() from exc

        logger.debug("Logged %d min %r for %s", minutes, description, user.username)
        return ExerciseOut(
            id=str(user.id),
            username=user.username,
            description=exercise.description,
            duration=exercise.duration,
            date=format_date_for_display(exercise.date),
        )

    async def get_logs(
        self,
        user_id: str,
        from_: Optional[str] = None,
        to: Optional[str] = None,
        limit: Any = None,
    ) -> LogOut:
        try:
            user = await self._get_user(user_id)
            exercises = await self.store.find_exercises(
                user.id,
                date_from=parse_date_bound(from_),
                date_to=parse_date_bound(to),
                limit=parse_limit(limit),
            )
        except StorageError as exc:
            logger.exception("Could not read logs for user %s", user_id)
            raise ServerError() from exc

        log = [
            LogEntry(
                description=ex.description,
                duration=ex.duration,
                date=format_date_for_display(ex.date),
            )
            for ex in exercises
        ]
        return LogOut(username=user.username, count=len(log), id=str(user.id), log=log)
