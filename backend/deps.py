from fastapi import Depends

from database import ExerciseStore, MongoStore, db
from services import ExerciseLogService, UserService


def get_store() -> ExerciseStore:
    """Storage used by the request handlers.

    Tests swap it out via ``app.dependency_overrides[get_store]``.
    """
    return MongoStore(db)


def get_user_service(store: ExerciseStore = Depends(get_store)) -> UserService:
    return UserService(store)


def get_exercise_service(store: ExerciseStore = Depends(get_store)) -> ExerciseLogService:
    return ExerciseLogService(store)
