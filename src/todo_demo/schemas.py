from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER = "anonymous"

_TRUTHY = {"1", "true", "yes", "on"}


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    Parsing is deliberately lenient: a create request never fails validation.
    Missing or unusable values fall back to their defaults.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "task": "buy milk",
                "user": "devon",
                "completed": False,
            }
        }
    )

    task: str = Field(default="", description="Free text describing the task; may be empty")
    user: str = Field(default=DEFAULT_USER, description="Owner of the task")
    completed: bool = Field(default=False, description="Completion status flag")

    @field_validator("task", mode="before")
    @classmethod
    def coerce_task(cls, v: Any) -> str:
        """
        Accept strings as-is, stringify numbers, and map anything else to ''.
        """
        if isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return ""

    @field_validator("user", mode="before")
    @classmethod
    def coerce_user(cls, v: Any) -> str:
        if isinstance(v, str) and v.strip():
            return v.strip()
        return DEFAULT_USER

    @field_validator("completed", mode="before")
    @classmethod
    def coerce_completed(cls, v: Any) -> bool:
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.strip().lower() in _TRUTHY
        if isinstance(v, int):
            return v == 1
        return False

    @classmethod
    def from_body(cls, body: Any) -> "TodoCreate":
        """Build a create payload from an arbitrary decoded JSON body."""
        if not isinstance(body, dict):
            body = {}
        return cls.model_validate(body)


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "66f1c2a9e4b0a1b2c3d4e5f6",
                "task": "buy milk",
                "user": "anonymous",
                "completed": False,
                "createdAt": "2025-01-25T10:15:30.123456+00:00",
            }
        },
    )

    id: str = Field(..., description="Identifier assigned by the store")
    task: str = Field(..., description="Free text describing the task")
    user: str = Field(..., description="Owner of the task")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")
