"""
Extract module for the Scorer Watcher pipeline.

This module turns the two scorer pages into structured data:
- the primary page (ranked scorers with goal counts) into PlayerRecord values
- the secondary page (independent scorer list) into a set of validity keys

Parsing is done with BeautifulSoup; downloading goes through the fetch module.
"""

import time
from typing import List, Optional, Set

import requests
from bs4 import BeautifulSoup, Tag

from scorer_watcher.fetch import DEFAULT_TIMEOUT, ExtractionFailure, create_session, download_page
from scorer_watcher.models import MalformedNameError, PlayerRecord
from scorer_watcher.reconcile import build_valid_keys
from scorer_watcher.utils import get_logger, sanitize_text


# Module logger
logger = get_logger("extract")

# Row selectors for the primary ranking, tried in order
PRIMARY_ROW_SELECTORS = [
    ".pbestscorers:nth-child(2) .line",
    ".pbestscorers .line",
]
PRIMARY_NAME_SELECTOR = ".player > a"
PRIMARY_GOALS_SELECTOR = ".score > a"
PRIMARY_FLAG_SELECTOR = "span.real_flag"

# Name cells of the secondary ranking table
SECONDARY_NAME_SELECTOR = "tr .jou1 > b"

DEFAULT_DELAY_BETWEEN_REQUESTS = 1.0  # seconds


def _text_of(row: Tag, selector: str) -> str:
    element = row.select_one(selector)
    if element is None:
        return ""
    return sanitize_text(element.get_text())


def parse_goal_count(text: str) -> int:
    """
    Parse a scraped goal total.

    Args:
        text: Cell text, e.g. "30".

    Returns:
        The goal count.

    Raises:
        ValueError: If the text is not a non-negative integer.
    """
    cleaned = sanitize_text(text)
    if not cleaned.isdigit():
        raise ValueError(f"Invalid goal count: {text!r}")
    return int(cleaned)


def parse_primary_row(row: Tag) -> Optional[PlayerRecord]:
    """
    Parse one row of the primary ranking.

    Args:
        row: A ``.line`` element of the ranking.

    Returns:
        The scorer record, or None for rows carrying no player link
        (headers and separators).

    Raises:
        MalformedNameError: If the player link has no usable name.
        ValueError: If the goal count cannot be parsed.
    """
    name_link = row.select_one(PRIMARY_NAME_SELECTOR)
    if name_link is None:
        return None

    full_name = sanitize_text(name_link.get_text())
    goal_count = parse_goal_count(_text_of(row, PRIMARY_GOALS_SELECTOR))

    flag = row.select_one(PRIMARY_FLAG_SELECTOR)
    country = flag.get("title") if flag is not None else None

    return PlayerRecord.from_full_name(full_name, goal_count, country=country)


def select_primary_rows(soup: BeautifulSoup) -> List[Tag]:
    """Return the ranking rows, using the first selector that matches."""
    for selector in PRIMARY_ROW_SELECTORS:
        rows = soup.select(selector)
        if rows:
            logger.debug(f"Selector '{selector}' matched {len(rows)} row(s)")
            return rows
    return []


def parse_primary_scorers(html: str, source_url: Optional[str] = None) -> List[PlayerRecord]:
    """
    Parse the primary page into ranked scorer records.

    Bad rows (blank name, unreadable goal count) are skipped one by one so
    a single broken row cannot block the announcement.

    Args:
        html: Raw HTML of the primary page.
        source_url: URL of the page, used in error reports.

    Returns:
        Records in page order.

    Raises:
        ExtractionFailure: If the page holds no scorer rows at all.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    rows = select_primary_rows(soup)

    if not rows:
        raise ExtractionFailure("Best players not found", source_url=source_url)

    records: List[PlayerRecord] = []

    for index, row in enumerate(rows, 1):
        try:
            record = parse_primary_row(row)
        except (MalformedNameError, ValueError) as e:
            logger.warning(f"Skipping row {index}: {e}")
            continue

        if record is None:
            continue

        logger.debug(f"Collected {record}")
        records.append(record)

    if not records:
        raise ExtractionFailure("No valid scorer rows found", source_url=source_url)

    logger.info(f"Parsed {len(records)} scorer(s) from primary source")

    return records


def parse_secondary_names(html: str) -> List[str]:
    """
    Parse the secondary page into player display names.

    Args:
        html: Raw HTML of the secondary page.

    Returns:
        Non-blank names in page order.
    """
    soup = BeautifulSoup(html or "", "html.parser")

    names = []
    for cell in soup.select(SECONDARY_NAME_SELECTOR):
        name = sanitize_text(cell.get_text())
        if name:
            names.append(name)

    logger.info(f"Parsed {len(names)} name(s) from secondary source")

    return names


class ScorerExtractor:
    """
    Fetches and parses both scorer sources over one HTTP session.

    Pages are fetched one after the other with a pause in between.
    """

    def __init__(
        self,
        primary_url: str,
        secondary_url: str,
        timeout: int = DEFAULT_TIMEOUT,
        delay_between_requests: float = DEFAULT_DELAY_BETWEEN_REQUESTS,
        session: Optional[requests.Session] = None
    ):
        self.primary_url = primary_url
        self.secondary_url = secondary_url
        self.timeout = timeout
        self.delay_between_requests = delay_between_requests
        self._session = session
        self._pages_fetched = 0

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = create_session()
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def _download(self, url: str) -> str:
        if self._pages_fetched and self.delay_between_requests > 0:
            time.sleep(self.delay_between_requests)

        self._pages_fetched += 1
        return download_page(url, self.session, self.timeout)

    def primary_records(self) -> List[PlayerRecord]:
        """
        Fetch the ranked scorers from the primary source.

        Raises:
            ExtractionFailure: If the page cannot be fetched or has no scorers.
        """
        html = self._download(self.primary_url)
        return parse_primary_scorers(html, source_url=self.primary_url)

    def secondary_keys(self) -> Set[str]:
        """
        Fetch the validity keys from the secondary source.

        An empty page yields an empty set rather than an error.

        Raises:
            ExtractionFailure: If the page cannot be fetched.
        """
        html = self._download(self.secondary_url)
        keys = build_valid_keys(parse_secondary_names(html))
        logger.info(f"Built {len(keys)} validity key(s)")
        return keys
