"""
Leaderboard module for the Scorer Watcher pipeline.

Finds the players tied at the top of the reconciled roster.
"""

from typing import List, Sequence

from scorer_watcher.models import PlayerRecord
from scorer_watcher.utils import get_logger


# Module logger
logger = get_logger("leaderboard")


class EmptyRosterError(Exception):
    """Raised when leaders are requested from an empty roster."""


def select_leaders(roster: Sequence[PlayerRecord]) -> List[PlayerRecord]:
    """
    Return every record tied at the roster's maximum goal count.

    Ties are never broken: all joint leaders are returned, in roster order.

    Args:
        roster: Reconciled list of scorer records.

    Returns:
        Non-empty list of leading records.

    Raises:
        EmptyRosterError: If the roster is empty.
    """
    if not roster:
        raise EmptyRosterError("Cannot select leaders from an empty roster")

    top = max(record.goal_count for record in roster)
    leaders = [record for record in roster if record.goal_count == top]

    logger.info(f"{len(leaders)} leader(s) at {top} goal(s)")

    return leaders
