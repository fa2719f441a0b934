"""Poll model."""
import uuid
from datetime import datetime, timezone as tz
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.base import Base


class Poll(Base):
    __tablename__ = "polls"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(Uuid, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz.utc),
        onupdate=lambda: datetime.now(tz.utc),
    )
    expires_at = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    allow_multiple_votes = Column(Boolean, nullable=False, default=False)
    is_anonymous = Column(Boolean, nullable=False, default=False)
    max_votes_per_user = Column(Integer, nullable=False, default=1)

    # Relationships
    options = relationship(
        "PollOption",
        back_populates="poll",
        cascade="all, delete-orphan",
        order_by="PollOption.order_index",
    )
    votes = relationship("Vote", back_populates="poll", cascade="all, delete-orphan")
    views = relationship("PollView", back_populates="poll", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("length(title) >= 3", name="ck_polls_title_length"),
        CheckConstraint("max_votes_per_user > 0", name="ck_polls_max_votes_positive"),
        Index("idx_polls_created_by", "created_by"),
        Index("idx_polls_active", "is_active", "created_at"),
        Index("idx_polls_expires_at", "expires_at"),
    )
