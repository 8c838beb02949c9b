"""Key-value entry model backing the sql store."""

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from ..database import Base


class KVEntry(Base):
    """One string key and its string value."""

    __tablename__ = "kv_entries"

    # "fileSystem" for metadata, "file_<id>" for user records
    key = Column(String(255), primary_key=True)

    # JSON text; never interpreted by the store
    value = Column(Text, nullable=False)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
