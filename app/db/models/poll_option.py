"""PollOption model."""
import uuid
from datetime import datetime, timezone as tz
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


class PollOption(Base):
    __tablename__ = "poll_options"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    poll_id = Column(Uuid, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    option_text = Column(String(500), nullable=False)
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    poll = relationship("Poll", back_populates="options")

    __table_args__ = (
        CheckConstraint("length(option_text) >= 1", name="ck_poll_options_text_length"),
        UniqueConstraint("poll_id", "order_index", name="uq_poll_options_poll_order"),
        Index("idx_poll_options_poll", "poll_id", "order_index"),
    )
