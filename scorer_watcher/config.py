"""
Configuration for the Scorer Watcher pipeline.

Settings come from environment variables (optionally loaded from a .env
file by the entry point) and are gathered once per process into a
WatcherConfig.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from scorer_watcher.extract import DEFAULT_DELAY_BETWEEN_REQUESTS
from scorer_watcher.fetch import DEFAULT_TIMEOUT
from scorer_watcher.media import DEFAULT_MEDIA_DIR
from scorer_watcher.utils import DEFAULT_ERROR_LOG_DIR, get_env_var, get_logger, is_truthy


# Module logger
logger = get_logger("config")

DEFAULT_PRIMARY_URL = "https://www.footballdatabase.eu/en/players"
DEFAULT_SECONDARY_URL = (
    "https://www.maxifoot.fr/classement-buteur-europe-annee-civile-{period}.htm"
)


def current_period() -> str:
    """Return the current calendar year as the default reporting period."""
    return str(date.today().year)


def _default_secondary_url() -> str:
    return DEFAULT_SECONDARY_URL.replace("{period}", current_period())


@dataclass
class WatcherConfig:
    """
    Settings for one watcher process.

    Attributes:
        primary_url: Page with the ranked scorers and goal counts.
        secondary_url: Page with the scorer list used for cross-checking.
        reporting_period: Label shown in the announcement header.
        media_dir: Directory holding player pictures.
        error_log_dir: Directory receiving error log files.
        dry_run: Print the announcement instead of publishing it.
        request_timeout: HTTP timeout per page, in seconds.
        page_delay: Pause between the two page downloads, in seconds.
        run_interval: Seconds between runs when looping, None to run once.
        log_level: Logging level name.
    """
    primary_url: str = DEFAULT_PRIMARY_URL
    secondary_url: str = field(default_factory=_default_secondary_url)
    reporting_period: str = field(default_factory=current_period)
    media_dir: str = DEFAULT_MEDIA_DIR
    error_log_dir: str = DEFAULT_ERROR_LOG_DIR
    dry_run: bool = False
    request_timeout: int = DEFAULT_TIMEOUT
    page_delay: float = DEFAULT_DELAY_BETWEEN_REQUESTS
    run_interval: Optional[float] = None
    log_level: str = "INFO"


def _str_from_env(name: str, default: str) -> str:
    value = get_env_var(name, required=False)
    return value if value is not None else default


def _int_from_env(name: str, default: int) -> int:
    raw = get_env_var(name, required=False)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{name} must be an integer, got {raw!r}; using {default}")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive, got {value}; using {default}")
        return default
    return value


def _float_from_env(name: str, default: Optional[float]) -> Optional[float]:
    raw = get_env_var(name, required=False)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"{name} must be a number, got {raw!r}; using {default}")
        return default
    if value < 0:
        logger.warning(f"{name} must not be negative, got {value}; using {default}")
        return default
    return value


def load_config() -> WatcherConfig:
    """
    Build the watcher configuration from the environment.

    ``{period}`` in SECONDARY_URL is replaced with the reporting period, so
    the secondary ranking follows the period without editing the URL.

    Returns:
        Populated WatcherConfig.
    """
    period = _str_from_env("REPORTING_PERIOD", current_period())
    secondary_template = _str_from_env("SECONDARY_URL", DEFAULT_SECONDARY_URL)

    run_interval = _float_from_env("RUN_INTERVAL_SECONDS", None)
    if run_interval == 0:
        run_interval = None

    config = WatcherConfig(
        primary_url=_str_from_env("PRIMARY_URL", DEFAULT_PRIMARY_URL),
        secondary_url=secondary_template.replace("{period}", period),
        reporting_period=period,
        media_dir=_str_from_env("MEDIA_DIR", DEFAULT_MEDIA_DIR),
        error_log_dir=_str_from_env("ERROR_LOG_DIR", DEFAULT_ERROR_LOG_DIR),
        dry_run=is_truthy(get_env_var("DRY_RUN", required=False)),
        request_timeout=_int_from_env("REQUEST_TIMEOUT", DEFAULT_TIMEOUT),
        page_delay=_float_from_env("PAGE_DELAY_SECONDS", DEFAULT_DELAY_BETWEEN_REQUESTS),
        run_interval=run_interval,
        log_level=_str_from_env("LOG_LEVEL", "INFO").upper(),
    )

    logger.debug(f"Loaded configuration: {config}")

    return config
