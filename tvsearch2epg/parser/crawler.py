"""
tvsearch2epg.parser.crawler - Day listing crawler

Fetches one channel's listing page for one day and turns its rows into
programme stubs. A missing listing container (the site sometimes serves an
empty shell page) or a failed fetch is retried up to MAX_ATTEMPTS times; a
container with no rows is a genuinely empty day.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional

from ..models import ProgrammeStub
from ..utils import Deadline, TimeUtils
from .document import DocumentParser
from .markup import DEFAULT_MARKUP, SiteMarkup

MAX_ATTEMPTS = 10


class ListingUnavailable(Exception):
    """The day page could not be fetched or has no listing container"""


class CrawlState(Enum):
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    ABANDONED = "abandoned"


@dataclass
class CrawlAttempt:
    """Bounded retry state for one channel-day"""
    channel_id: str
    day: date
    max_attempts: int = MAX_ATTEMPTS
    attempts: int = 0
    state: CrawlState = CrawlState.ATTEMPTING
    stubs: List[ProgrammeStub] = field(default_factory=list)
    last_error: Optional[str] = None

    def begin(self):
        """Attempting(n) -> Attempting(n+1)"""
        if self.state is not CrawlState.ATTEMPTING:
            raise RuntimeError(f"Crawl already {self.state.value}")
        self.attempts += 1

    def succeed(self, stubs: List[ProgrammeStub]):
        self.stubs = stubs
        self.state = CrawlState.SUCCEEDED

    def fail(self, reason: str):
        """Record a failed attempt, abandoning once the bound is reached"""
        self.last_error = reason
        if self.attempts >= self.max_attempts:
            self.stubs = []
            self.state = CrawlState.ABANDONED

    def abandon(self, reason: str):
        self.last_error = reason
        self.stubs = []
        self.state = CrawlState.ABANDONED


class ScheduleCrawler:
    """Extracts programme stubs from per-day listing pages"""

    def __init__(
        self,
        fetcher,
        document_parser: Optional[DocumentParser] = None,
        markup: SiteMarkup = DEFAULT_MARKUP,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = 1.0,
    ):
        self.fetcher = fetcher
        self.document_parser = document_parser or DocumentParser()
        self.markup = markup
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

        # Statistics
        self.retry_count = 0
        self.abandoned_days = 0
        self.malformed_rows = 0
        self._stats_lock = threading.Lock()

    def _count(self, name: str):
        with self._stats_lock:
            setattr(self, name, getattr(self, name) + 1)

    def day_url(self, channel_id: str, day: date) -> str:
        return self.markup.day_url(channel_id, TimeUtils.format_day(day))

    def crawl_day(self, channel_id: str, day: date) -> List[ProgrammeStub]:
        """Single attempt; raises ListingUnavailable when the listing is missing"""
        url = self.day_url(channel_id, day)
        content = self.fetcher.fetch(url)
        if content is None:
            raise ListingUnavailable(f"fetch failed: {url}")

        parser = self.document_parser
        document = parser.parse(content)
        container = parser.find_first(document, *self.markup.listing_container)
        if container is None:
            raise ListingUnavailable(f"no listing container: {url}")

        stubs = []
        for row in parser.find_all(container, self.markup.listing_row_tag):
            stub = self._parse_row(row)
            if stub is not None:
                stubs.append(stub)
        return stubs

    def _parse_row(self, row) -> Optional[ProgrammeStub]:
        parser = self.document_parser
        markup = self.markup

        links = parser.extract_links(row)
        time_node = parser.find_first(row, *markup.listing_time)
        start_time = parser.attr(time_node, markup.start_attr)
        end_time = parser.attr(time_node, markup.end_attr)

        if not links or not start_time or not end_time:
            self._count("malformed_rows")
            logging.debug("  Malformed listing row skipped (link/start/end missing)")
            return None

        try:
            TimeUtils.parse_hhmm(start_time)
            TimeUtils.parse_hhmm(end_time)
        except ValueError as e:
            self._count("malformed_rows")
            logging.debug("  Malformed listing row skipped: %s", e)
            return None

        href, _ = links[0]
        return ProgrammeStub(detail_link=href, start_time=start_time, end_time=end_time)

    def run_attempts(
        self, channel_id: str, day: date, deadline: Optional[Deadline] = None
    ) -> CrawlAttempt:
        """Drive the Attempting(n) -> Succeeded | Attempting(n+1) | Abandoned machine"""
        attempt = CrawlAttempt(channel_id=channel_id, day=day, max_attempts=self.max_attempts)

        while attempt.state is CrawlState.ATTEMPTING:
            if deadline is not None and deadline.expired():
                attempt.abandon("deadline exceeded")
                break

            attempt.begin()
            try:
                attempt.succeed(self.crawl_day(channel_id, day))
            except ListingUnavailable as e:
                attempt.fail(str(e))
                if attempt.state is CrawlState.ATTEMPTING:
                    self._count("retry_count")
                    logging.info(
                        "  Listing unavailable for %s on %s (attempt %d/%d), retrying",
                        channel_id,
                        day.isoformat(),
                        attempt.attempts,
                        attempt.max_attempts,
                    )
                    if self.retry_delay > 0:
                        time.sleep(self.retry_delay)

        if attempt.state is CrawlState.ABANDONED:
            self._count("abandoned_days")
            logging.warning(
                "Abandoning %s on %s after %d attempt(s): %s",
                channel_id,
                day.isoformat(),
                attempt.attempts,
                attempt.last_error,
            )
        else:
            logging.debug(
                "  %s on %s: %d programme(s) listed",
                channel_id,
                day.isoformat(),
                len(attempt.stubs),
            )
        return attempt

    def crawl_day_with_retry(
        self, channel_id: str, day: date, deadline: Optional[Deadline] = None
    ) -> List[ProgrammeStub]:
        """Stubs for a channel-day, empty when the day was abandoned"""
        return self.run_attempts(channel_id, day, deadline).stubs
