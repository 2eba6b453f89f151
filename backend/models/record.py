"""
Local document store model - one JSON document per (collection, key)
"""
from sqlalchemy import Column, String, JSON
from sqlalchemy.orm import declarative_base

# Separate metadata: the local store never shares a schema with the server
LocalBase = declarative_base()


class StoredRecord(LocalBase):
    __tablename__ = "records"

    collection = Column(String, primary_key=True)
    key = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
