"""
Data model for the Scorer Watcher pipeline.

Holds the scorer record produced by extraction and the name normalizer
used to match players across sources. Players carry no shared identifier
between the two sites, so the lower-cased last name is the only key.
"""

from dataclasses import dataclass
from typing import Optional


class MalformedNameError(ValueError):
    """Raised when no last name can be derived from a display name."""

    def __init__(self, full_name: Optional[str]):
        super().__init__(f"Cannot derive a last name from {full_name!r}")
        self.full_name = full_name


def last_name_of(full_name: Optional[str]) -> str:
    """
    Return the last whitespace-delimited token of a display name.

    Args:
        full_name: Raw display name, e.g. "Erling Haaland".

    Returns:
        The last token with its original casing, e.g. "Haaland".

    Raises:
        MalformedNameError: If the name is None, empty or whitespace only.
    """
    tokens = full_name.split() if full_name else []
    if not tokens:
        raise MalformedNameError(full_name)
    return tokens[-1]


def normalize_name(full_name: Optional[str]) -> str:
    """
    Map a display name to its comparison key.

    The key is the last token lower-cased. Diacritics and punctuation are
    kept as they are.

    Args:
        full_name: Raw display name.

    Returns:
        Lower-cased last name.

    Raises:
        MalformedNameError: If the name has no tokens.
    """
    return last_name_of(full_name).lower()


@dataclass(frozen=True)
class PlayerRecord:
    """
    One scorer entry from the primary source.

    Attributes:
        full_name: Display name as scraped, passed through verbatim.
        last_name: Last token of full_name.
        goal_count: Goals scored in the reporting period.
        country: Optional country name from the source, unchanged.
    """
    full_name: str
    last_name: str
    goal_count: int
    country: Optional[str] = None

    @classmethod
    def from_full_name(
        cls,
        full_name: str,
        goal_count: int,
        country: Optional[str] = None
    ) -> "PlayerRecord":
        """
        Build a record, deriving the last name from the display name.

        Raises:
            MalformedNameError: If full_name has no tokens.
            ValueError: If goal_count is negative.
        """
        last_name = last_name_of(full_name)

        if goal_count < 0:
            raise ValueError(f"Goal count must be >= 0, got {goal_count} for {full_name!r}")

        return cls(
            full_name=full_name.strip(),
            last_name=last_name,
            goal_count=goal_count,
            country=country
        )

    @property
    def key(self) -> str:
        """Comparison key used for cross-source matching."""
        return normalize_name(self.full_name)
