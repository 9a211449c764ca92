"""
Cached Profile Document Model - Local copy of a candidate's edited profile.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, String, JSON, DateTime
from ..database import Base


class CachedProfileDocument(Base):
    """
    One row per profile slug. `data` holds the serialized ProfileDocument
    so an editing session can resume without a remote fetch.
    """
    __tablename__ = "cached_profile_documents"

    slug = Column(String(255), primary_key=True, index=True)
    data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )
