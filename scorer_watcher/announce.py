"""
Announce module for the Scorer Watcher pipeline.

Renders the public announcement text from the reconciled roster.
"""

from typing import List, Sequence

from scorer_watcher.models import PlayerRecord


# Announcement layout
ANNOUNCEMENT_HEADER = "❌ No.\n\nClosest players in {period} :\n\n"
GOAL_MARKER = "⚽️"
MAX_ANNOUNCED_PLAYERS = 5


def format_player_line(record: PlayerRecord) -> str:
    """
    Format one roster entry, e.g. ``"Erling Haaland - 30 ⚽️\\n"``.

    Args:
        record: Scorer record to render.

    Returns:
        The line, newline-terminated.
    """
    return f"{record.full_name} - {record.goal_count} {GOAL_MARKER}\n"


def format_announcement(roster: Sequence[PlayerRecord], period_label: str) -> str:
    """
    Build the announcement text for a reconciled roster.

    The header embeds the reporting period. Players follow in roster order,
    which is the primary source's ranking; the roster is not re-sorted here.
    Only the first MAX_ANNOUNCED_PLAYERS entries are listed and the rest are
    dropped without any marker. Names are emitted verbatim.

    Args:
        roster: Reconciled scorer records, in ranking order.
        period_label: Reporting period shown in the header, e.g. "2024".

    Returns:
        The announcement text.
    """
    parts: List[str] = [ANNOUNCEMENT_HEADER.format(period=period_label)]

    for record in roster[:MAX_ANNOUNCED_PLAYERS]:
        parts.append(format_player_line(record))

    return "".join(parts)
