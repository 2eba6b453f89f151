"""
Task model - per-user task records
"""
from sqlalchemy import Column, Integer, String, Text, BigInteger, ForeignKey
from backend.database import Base
from backend.utils.helpers import new_id, now_ms


class TaskRecord(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="PENDING")
    # Milliseconds since epoch, newest first by default
    created_at = Column(BigInteger, nullable=False, default=now_ms, index=True)
