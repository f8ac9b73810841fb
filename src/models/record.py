"""
Record-related Pydantic models
"""

from typing import Any, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

class Answer(BaseModel):
    """One questionnaire answer attached to a record creation"""
    label: Any = None
    value: Any = None

class Record(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None
    created_at: datetime = Field(alias="createdAt")


class RecordCreateRequest(BaseModel):
    # Unknown body fields are persisted with the record
    model_config = ConfigDict(extra="allow")

    name: str
    email: str
    age: int
    # Free-form; entries are interpreted only when formatting the notification
    answers: List[Any] = []

    @field_validator("answers", mode="before")
    @classmethod
    def null_answers_to_empty(cls, value):
        return [] if value is None else value

class RecordUpdateRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None

class CreatedRecord(BaseModel):
    id: str

class SeedResult(BaseModel):
    insertedCount: int
