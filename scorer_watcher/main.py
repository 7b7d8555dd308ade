#!/usr/bin/env python3
"""
Main orchestration module for the Scorer Watcher pipeline.

This module coordinates one run of the pipeline:
extract primary → extract secondary → reconcile → select leaders →
resolve media → publish

Scheduling is left to the caller: main() runs once, or loops with a fixed
pause between runs when RUN_INTERVAL_SECONDS is set.
"""

import sys
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from dotenv import load_dotenv

from scorer_watcher.announce import format_announcement
from scorer_watcher.config import WatcherConfig, load_config
from scorer_watcher.extract import ScorerExtractor
from scorer_watcher.leaderboard import EmptyRosterError, select_leaders
from scorer_watcher.media import resolve_leader_media
from scorer_watcher.models import PlayerRecord
from scorer_watcher.publish import PublishFailure, TwitterPublisher
from scorer_watcher.reconcile import reconcile
from scorer_watcher.utils import get_logger, setup_logging, write_error_log


# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class RunState(Enum):
    IDLE = "idle"
    EXTRACTING_PRIMARY = "extracting_primary"
    EXTRACTING_SECONDARY = "extracting_secondary"
    RECONCILING = "reconciling"
    SELECTING_LEADERS = "selecting_leaders"
    RESOLVING_MEDIA = "resolving_media"
    PUBLISHING = "publishing"


class RunOutcome(Enum):
    PUBLISHED = "published"
    DRY_RUN = "dry_run"
    NOTHING_TO_REPORT = "nothing_to_report"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class RunResult:
    """
    Summary of one run.

    Attributes:
        outcome: How the run ended.
        roster: Reconciled scorers, in ranking order.
        leaders: Scorers tied at the top of the roster.
        announcement: Text that was (or would have been) published.
        media_paths: Pictures attached to the announcement.
        post_id: Id of the published post, when available.
        error: Exception that ended a failed run.
    """
    outcome: RunOutcome
    roster: List[PlayerRecord] = field(default_factory=list)
    leaders: List[PlayerRecord] = field(default_factory=list)
    announcement: Optional[str] = None
    media_paths: List[str] = field(default_factory=list)
    post_id: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not RunOutcome.FAILED


class ScorerWatcher:
    """
    Runs the scrape → reconcile → announce pipeline on demand.

    Each call to run_once() starts from scratch; nothing is kept between
    runs. A call made while another run is in progress returns at once
    with RunOutcome.SKIPPED.

    Args:
        config: Watcher settings.
        extractor: Source of primary records and validity keys. A fresh
                   ScorerExtractor is built per run when omitted.
        publisher: Object with a publish(text, media_paths) method. A
                   TwitterPublisher is built at publish time when omitted.
        error_log: Sink receiving the exception of a failed run.
    """

    def __init__(
        self,
        config: WatcherConfig,
        extractor=None,
        publisher=None,
        error_log: Optional[Callable[[BaseException], Optional[str]]] = None
    ):
        self.config = config
        self._extractor = extractor
        self._publisher = publisher
        self._error_log = error_log or (
            lambda error: write_error_log(error, config.error_log_dir)
        )
        self._lock = threading.Lock()
        self.state = RunState.IDLE
        self.logger = get_logger("main")

    def _enter(self, state: RunState) -> None:
        self.logger.debug(f"State {self.state.value} -> {state.value}")
        self.state = state

    def _fail(self, stage: str, error: Exception) -> RunResult:
        self.logger.error(f"{stage} failed: {error}")
        self._error_log(error)
        return RunResult(outcome=RunOutcome.FAILED, error=error)

    def _build_extractor(self) -> ScorerExtractor:
        return ScorerExtractor(
            primary_url=self.config.primary_url,
            secondary_url=self.config.secondary_url,
            timeout=self.config.request_timeout,
            delay_between_requests=self.config.page_delay
        )

    def run_once(self) -> RunResult:
        """
        Execute one complete run.

        Returns:
            RunResult describing the outcome. Failures are reported in the
            result and the error log, never raised.
        """
        if not self._lock.acquire(blocking=False):
            self.logger.warning("A run is already in progress, skipping this one")
            return RunResult(outcome=RunOutcome.SKIPPED)

        try:
            return self._run()
        finally:
            self._enter(RunState.IDLE)
            self._lock.release()

    def _run(self) -> RunResult:
        self.logger.info("=" * 60)
        self.logger.info("Scorer Watcher Run - Starting")
        self.logger.info("=" * 60)

        extractor = self._extractor or self._build_extractor()

        try:
            self._enter(RunState.EXTRACTING_PRIMARY)
            self.logger.info("[Stage 1/6] Collecting best players...")
            try:
                primary = extractor.primary_records()
            except Exception as e:
                return self._fail("Primary extraction", e)

            self._enter(RunState.EXTRACTING_SECONDARY)
            self.logger.info("[Stage 2/6] Collecting validity list...")
            try:
                valid_keys = extractor.secondary_keys()
            except Exception as e:
                return self._fail("Secondary extraction", e)
        finally:
            if self._extractor is None:
                extractor.close()

        self._enter(RunState.RECONCILING)
        self.logger.info("[Stage 3/6] Filtering players...")
        roster = reconcile(primary, valid_keys)

        if not roster:
            self.logger.info("No players to report, nothing to announce")
            return RunResult(outcome=RunOutcome.NOTHING_TO_REPORT)

        self._enter(RunState.SELECTING_LEADERS)
        self.logger.info("[Stage 4/6] Selecting leaders...")
        try:
            leaders = select_leaders(roster)
        except EmptyRosterError:
            self.logger.info("No leaders found, nothing to announce")
            return RunResult(outcome=RunOutcome.NOTHING_TO_REPORT, roster=roster)

        announcement = format_announcement(roster, self.config.reporting_period)

        self._enter(RunState.RESOLVING_MEDIA)
        self.logger.info("[Stage 5/6] Resolving leader pictures...")
        media_paths = resolve_leader_media(leaders, self.config.media_dir)

        result = RunResult(
            outcome=RunOutcome.PUBLISHED,
            roster=roster,
            leaders=leaders,
            announcement=announcement,
            media_paths=media_paths
        )

        self._enter(RunState.PUBLISHING)
        self.logger.info("[Stage 6/6] Publishing announcement...")

        if self.config.dry_run:
            print(announcement)
            self.logger.info(
                f"[DRY RUN] Announcement not published ({len(media_paths)} picture(s))"
            )
            result.outcome = RunOutcome.DRY_RUN
            return result

        try:
            publisher = self._publisher or TwitterPublisher()
            result.post_id = publisher.publish(announcement, media_paths)
        except (PublishFailure, ValueError) as e:
            self.logger.error(f"Publishing failed: {e}")
            self._error_log(e)
            result.outcome = RunOutcome.FAILED
            result.error = e
            return result
        except Exception as e:
            self.logger.exception(f"Unexpected error while publishing: {e}")
            self._error_log(e)
            result.outcome = RunOutcome.FAILED
            result.error = e
            return result

        self.logger.info("=" * 60)
        self.logger.info("Scorer Watcher Run - Complete")
        self.logger.info(f"Summary: {len(roster)} reconciled, {len(leaders)} leader(s)")
        self.logger.info("=" * 60)

        return result


def run_forever(watcher: ScorerWatcher, interval: float) -> None:
    """
    Run the watcher repeatedly, pausing `interval` seconds between runs.

    Runs are strictly sequential, so they never overlap.
    """
    logger = get_logger("main")
    logger.info(f"Running every {interval:g} second(s)")

    while True:
        watcher.run_once()
        time.sleep(interval)


def main() -> int:
    """
    Main entry point for the Scorer Watcher pipeline.

    Loads a .env file if present, sets up logging and runs the pipeline.

    Returns:
        Exit code for the process.
    """
    load_dotenv()

    config = load_config()

    setup_logging(config.log_level)
    logger = get_logger("main")

    watcher = ScorerWatcher(config)

    try:
        if config.run_interval is not None:
            run_forever(watcher, config.run_interval)
            return EXIT_SUCCESS

        result = watcher.run_once()
        return EXIT_SUCCESS if result.ok else EXIT_FAILURE

    except KeyboardInterrupt:
        logger.warning("Watcher interrupted by user")
        return EXIT_FAILURE

    except Exception as e:
        logger.exception(f"Unexpected error in watcher: {e}")
        write_error_log(e, config.error_log_dir)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
