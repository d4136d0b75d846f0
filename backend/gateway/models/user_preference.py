"""
UserPreference model - the preference store.
One JSON document per user; object storage credentials live under "s3Config".
"""
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, JSON

from gateway.models.base import Base


class UserPreference(Base):
    """Per-user preferences document."""

    __tablename__ = "user_preferences"

    user_id = Column(String, primary_key=True)  # Identity provider uid
    preferences = Column(JSON, nullable=False, default=dict)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f"<UserPreference(user_id={self.user_id})>"
