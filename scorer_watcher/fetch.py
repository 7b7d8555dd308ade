"""
Fetch module for the Scorer Watcher pipeline.

Downloads the scorer pages over a retrying requests session. A page that
cannot be obtained is raised as ExtractionFailure, since a run cannot
announce anything without both sources.
"""

from typing import Optional
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from scorer_watcher.utils import get_logger


# Module logger
logger = get_logger("fetch")

DEFAULT_TIMEOUT = 60  # seconds, per page
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 1.0

# Transient statuses retried inside the session
RETRY_STATUSES = (429, 500, 502, 503, 504)

# Both sites serve a reduced page to non-browser agents
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5,fr;q=0.3",
}


class ExtractionFailure(Exception):
    """Raised when a source page cannot be fetched or lacks the expected data."""

    def __init__(
        self,
        message: str,
        source_url: Optional[str] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.source_url = source_url
        self.cause = cause


def create_session(
    max_retries: int = DEFAULT_MAX_RETRIES,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR
) -> requests.Session:
    """
    Create a session that retries transient failures with backoff.

    Args:
        max_retries: Retry budget per page.
        backoff_factor: Sleep is backoff_factor * (2 ** retry_number).

    Returns:
        Session with browser-like headers.
    """
    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=["GET"],
        raise_on_status=False
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)

    session = requests.Session()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update(BROWSER_HEADERS)

    return session


def is_page_url(url: str) -> bool:
    """Return True for an http(s) URL with a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def download_page(
    url: str,
    session: requests.Session,
    timeout: int = DEFAULT_TIMEOUT
) -> str:
    """
    Download one scorer page.

    Args:
        url: Page to download.
        session: Session from create_session().
        timeout: Seconds allowed for the request.

    Returns:
        The page HTML.

    Raises:
        ExtractionFailure: On an invalid URL, a transport error, a timeout
            or any status other than 200.
    """
    if not is_page_url(url):
        raise ExtractionFailure(f"Invalid page URL: {url!r}", source_url=url)

    try:
        response = session.get(url, timeout=timeout)
    except requests.exceptions.Timeout as e:
        raise ExtractionFailure(f"Timed out after {timeout}s fetching {url}", source_url=url, cause=e) from e
    except requests.exceptions.RequestException as e:
        raise ExtractionFailure(f"Could not fetch {url}: {e}", source_url=url, cause=e) from e

    if response.status_code != 200:
        raise ExtractionFailure(f"HTTP {response.status_code} for {url}", source_url=url)

    logger.info(f"Fetched {url} ({len(response.text)} bytes)")

    return response.text
