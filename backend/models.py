from datetime import datetime
from typing import List

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field


# Stored documents. ``id`` maps to Mongo's ``_id``.
class UserRecord(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    id: ObjectId = Field(alias="_id")
    username: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ExerciseRecord(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    id: ObjectId = Field(alias="_id")
    user_id: ObjectId
    description: str
    duration: int  # minutes
    date: datetime  # UTC midnight of the calendar date


# What clients get back. Dates are display-formatted strings.
class UserOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    id: str = Field(alias="_id")


class ExerciseOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    username: str
    description: str
    duration: int
    date: str


class LogEntry(BaseModel):
    description: str
    duration: int
    date: str


class LogOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    count: int
    id: str = Field(alias="_id")
    log: List[LogEntry] = []
