"""Database models."""
from app.db.models.poll import Poll
from app.db.models.poll_option import PollOption
from app.db.models.vote import Vote
from app.db.models.poll_view import PollView

__all__ = ["Poll", "PollOption", "Vote", "PollView"]
