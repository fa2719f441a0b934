"""PollView model (analytics)."""
import uuid
from datetime import datetime, timezone as tz
from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


class PollView(Base):
    __tablename__ = "poll_views"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    poll_id = Column(Uuid, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, nullable=True)
    viewer_ip = Column(String(45), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    poll = relationship("Poll", back_populates="views")

    __table_args__ = (Index("idx_poll_views_poll", "poll_id", "created_at"),)
