from backend.models.user import User
from backend.models.task import TaskRecord
from backend.models.audit import AuditLogRecord

__all__ = [
    "User",
    "TaskRecord",
    "AuditLogRecord",
]
