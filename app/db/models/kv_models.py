# /classroom-ai-backend/app/db/models/kv_models.py

"""
The single table behind the SQL flavour of the Persistent Store.

Every top-level collection (classrooms, sessions, the last-user snapshot) is one
row whose `value` holds the whole serialized blob. A write replaces the row.
"""

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func

from ..database import Base


class KVEntry(Base):
    __tablename__ = "kv_entries"

    key = Column(String, primary_key=True, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
