"""Vote model."""
import uuid
from datetime import datetime, timezone as tz
from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


class Vote(Base):
    __tablename__ = "votes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    poll_id = Column(Uuid, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    option_id = Column(Uuid, ForeignKey("poll_options.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, nullable=True)  # NULL for anonymous voters
    voter_ip = Column(String(45), nullable=True)  # Long enough for IPv6
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    poll = relationship("Poll", back_populates="votes")
    option = relationship("PollOption")

    __table_args__ = (
        # A user may vote for each option at most once; NULL user ids never collide
        UniqueConstraint("poll_id", "user_id", "option_id", name="uq_votes_poll_user_option"),
        Index("idx_votes_poll", "poll_id"),
        Index("idx_votes_user", "user_id"),
        Index("idx_votes_option", "option_id"),
    )
