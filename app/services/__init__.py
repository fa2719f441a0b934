"""Business logic, written against the PollStore interface."""
from .eligibility import Eligibility, PollState, can_vote, check_eligibility, evaluate_eligibility, poll_state
from .poll import (
    create_poll,
    delete_poll,
    get_poll_with_options,
    list_active_polls,
    list_user_polls,
    record_view,
    update_poll,
)
from .stats import get_poll_results, get_poll_stats, vote_percentage
from .vote import list_user_votes, retract_vote, submit_vote

__all__ = [
    # eligibility
    "Eligibility",
    "PollState",
    "can_vote",
    "check_eligibility",
    "evaluate_eligibility",
    "poll_state",
    # polls
    "create_poll",
    "delete_poll",
    "get_poll_with_options",
    "list_active_polls",
    "list_user_polls",
    "record_view",
    "update_poll",
    # stats
    "get_poll_results",
    "get_poll_stats",
    "vote_percentage",
    # votes
    "list_user_votes",
    "retract_vote",
    "submit_vote",
]
