"""
Domain entities for the task collection engine.

Records are exchanged with the backing stores and the export file as plain
dicts with camelCase keys (``createdAt``, ``userId``); the pydantic models
accept both the camelCase alias and the Python field name.
"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from backend.utils.helpers import new_id, now_ms


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"  # reserved, never produced by toggle
    COMPLETED = "COMPLETED"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    TOGGLE = "TOGGLE"
    DELETE = "DELETE"
    UPDATE = "UPDATE"
    REORDER = "REORDER"
    IMPORT = "IMPORT"
    CLEAR = "CLEAR"
    AUTH = "AUTH"
    SESSION_CLEAR = "SESSION_CLEAR"
    ASSIGN = "ASSIGN"
    UNASSIGN = "UNASSIGN"


class StatusFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


class Task(BaseModel):
    """A single unit of work"""
    id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    created_at: int = Field(default_factory=now_ms, alias="createdAt")

    class Config:
        populate_by_name = True

    @field_validator("description", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Task":
        return cls.model_validate(record)


class AuditEntry(BaseModel):
    """Immutable record of one mutation"""
    id: str = Field(default_factory=new_id)
    action: AuditAction
    timestamp: int = Field(default_factory=now_ms)
    details: str = ""
    user_id: Optional[str] = Field(default=None, alias="userId")

    class Config:
        populate_by_name = True
        frozen = True

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "AuditEntry":
        return cls.model_validate(record)


class AuthMetadata(BaseModel):
    """Local passcode credentials, overwritten wholesale on re-setup"""
    passcode_hash: str = Field(alias="passcodeHash")
    salt: str
    is_setup: bool = Field(default=True, alias="isSetup")

    class Config:
        populate_by_name = True

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
