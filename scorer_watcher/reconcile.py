"""
Reconcile module for the Scorer Watcher pipeline.

This module cross-checks the ranked scorer list from the primary source
against the names published by the secondary source. A primary record is
kept when its lower-cased last name appears in the secondary list.
"""

from typing import Iterable, List, Sequence, Set

from scorer_watcher.models import MalformedNameError, PlayerRecord, normalize_name
from scorer_watcher.utils import get_logger


# Module logger
logger = get_logger("reconcile")


def build_valid_keys(names: Iterable[str]) -> Set[str]:
    """
    Build the set of validity keys from raw secondary-source names.

    Blank names are skipped; duplicate last names collapse into one key.

    Args:
        names: Display names as scraped from the secondary source.

    Returns:
        Set of lower-cased last names.
    """
    keys: Set[str] = set()

    for name in names:
        try:
            keys.add(normalize_name(name))
        except MalformedNameError:
            logger.debug(f"Skipping blank secondary name: {name!r}")

    return keys


def reconcile(primary: Sequence[PlayerRecord], valid_keys: Set[str]) -> List[PlayerRecord]:
    """
    Keep the primary records whose last name is a validity key.

    The output preserves the primary ordering and does not deduplicate:
    duplicate primary entries pass through independently. A record whose
    name cannot be normalized is skipped on its own without affecting the
    others.

    Args:
        primary: Ranked records from the primary source.
        valid_keys: Lower-cased last names from the secondary source.

    Returns:
        The filtered roster, a subsequence of primary.
    """
    if not valid_keys:
        logger.info("No validity keys available, roster is empty")
        return []

    roster: List[PlayerRecord] = []

    for record in primary:
        try:
            key = normalize_name(record.full_name)
        except MalformedNameError as e:
            logger.warning(f"Skipping record with malformed name: {e}")
            continue

        if key in valid_keys:
            roster.append(record)
        else:
            logger.debug(f"{record.full_name} not confirmed by secondary source")

    logger.info(f"Reconciled {len(roster)}/{len(primary)} primary record(s)")

    return roster
