"""Results aggregation.

Statistics are computed at read time from raw vote rows; no counters are
stored anywhere.
"""
import uuid
from typing import Optional

from app.core.exceptions import PollNotFoundError
from app.schemas.stats import OptionResult, OptionStats, PollResults, PollStats
from app.services.poll import is_visible_to
from app.store import PollStore


def vote_percentage(vote_count: int, total_votes: int) -> float:
    """
    Share of the votes that went to one option.

    Returns:
        float: Percentage rounded to 2 decimal places, 0.0 when nobody voted yet
    """
    if total_votes <= 0:
        return 0.0
    return round(vote_count / total_votes * 100, 2)


async def get_poll_stats(
    store: PollStore, poll_id: uuid.UUID, viewer_id: Optional[uuid.UUID] = None
) -> PollStats:
    """
    Aggregate votes, views and voters for a poll.

    Every option is listed, in order, including the ones without votes.
    ``total_votes`` is summed from the same grouped read as the per-option
    counts, so the two always agree.

    Raises:
        PollNotFoundError: If the poll does not exist or the viewer may not
            see it (inactive and not theirs)
    """
    if not is_visible_to(await store.get_poll(poll_id), viewer_id):
        raise PollNotFoundError()

    options = await store.list_options(poll_id)
    counts = await store.count_votes_by_option(poll_id)
    total_views = await store.count_views(poll_id)
    unique_voters = await store.count_unique_voters(poll_id)

    option_stats = [
        OptionStats(option_id=option.id, option_text=option.option_text, vote_count=counts.get(option.id, 0))
        for option in options
    ]
    return PollStats(
        total_votes=sum(stat.vote_count for stat in option_stats),
        total_views=total_views,
        unique_voters=unique_voters,
        options=option_stats,
    )


async def get_poll_results(
    store: PollStore, poll_id: uuid.UUID, viewer_id: Optional[uuid.UUID] = None
) -> PollResults:
    """Poll metadata with each option's vote count and percentage, for polls the viewer may see."""
    poll = await store.get_poll(poll_id)
    if not is_visible_to(poll, viewer_id):
        raise PollNotFoundError()

    options = await store.list_options(poll_id)
    counts = await store.count_votes_by_option(poll_id)
    total_votes = sum(counts.get(option.id, 0) for option in options)

    return PollResults(
        poll_id=poll.id,
        title=poll.title,
        description=poll.description,
        created_by=poll.created_by,
        created_at=poll.created_at,
        expires_at=poll.expires_at,
        is_active=poll.is_active,
        total_votes=total_votes,
        options=[
            OptionResult(
                option_id=option.id,
                option_text=option.option_text,
                vote_count=counts.get(option.id, 0),
                vote_percentage=vote_percentage(counts.get(option.id, 0), total_votes),
            )
            for option in options
        ],
    )
