"""
Audit log model - one row per recorded mutation
"""
from sqlalchemy import Column, Integer, String, Text, BigInteger, ForeignKey
from backend.database import Base
from backend.utils.helpers import new_id, now_ms


class AuditLogRecord(Base):
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    action = Column(String, nullable=False)
    details = Column(Text, nullable=False, default="")
    timestamp = Column(BigInteger, nullable=False, default=now_ms, index=True)
