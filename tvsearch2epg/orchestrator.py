"""
tvsearch2epg.orchestrator - Schedule orchestration

Drives the channel x day grid: crawl each day's listing, extract every stub
and forward the records to the sink. Channels can be crawled by a bounded
worker pool; records still reach the sink one contiguous block per channel,
in configured channel order.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

from .models import ProgrammeRecord
from .utils import Deadline, TimeUtils

MAX_DAYS = 4


class ScheduleOrchestrator:
    """Sequences ScheduleCrawler and ProgrammeExtractor calls for a date range"""

    def __init__(
        self,
        crawler,
        extractor,
        sink,
        max_workers: int = 1,
        deadline: Optional[Deadline] = None,
    ):
        self.crawler = crawler
        self.extractor = extractor
        self.sink = sink
        self.max_workers = max(1, max_workers)
        self.deadline = deadline or Deadline(0)

        # Statistics
        self.records_forwarded = 0
        self.channel_days = 0
        self.deadline_reached = False
        self._stats_lock = threading.Lock()

    @staticmethod
    def clamp_days(day_count: int) -> int:
        """Requested day count limited to what the site reliably publishes"""
        if day_count > MAX_DAYS:
            logging.info("Requested %d days, limited to %d", day_count, MAX_DAYS)
            return MAX_DAYS
        return max(0, day_count)

    def run(self, channel_ids: Sequence[str], start_day: date, day_count: int):
        """Crawl every channel for start_day .. start_day + day_count (exclusive)"""
        days = list(TimeUtils.day_range(start_day, self.clamp_days(day_count)))
        if not days or not channel_ids:
            logging.info("Nothing to grab (%d channels, %d days)", len(channel_ids), len(days))
            return

        logging.info(
            "Grabbing %d channel(s) from %s for %d day(s) with %d worker(s)",
            len(channel_ids),
            start_day.isoformat(),
            len(days),
            self.max_workers,
        )
        run_start = time.time()

        if self.max_workers == 1:
            for channel_id in channel_ids:
                self._process_channel(channel_id, days, self._forward)
        else:
            self._run_parallel(channel_ids, days)

        logging.info(
            "Grab completed: %d programmes from %d channel-day(s) in %.2f seconds",
            self.records_forwarded,
            self.channel_days,
            time.time() - run_start,
        )

    def _run_parallel(self, channel_ids: Sequence[str], days: List[date]):
        workers = min(self.max_workers, len(channel_ids))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="grab") as executor:
            futures = [
                (channel_id, executor.submit(self._collect_channel, channel_id, days))
                for channel_id in channel_ids
            ]

            # Submission order keeps each channel's block contiguous and ordered
            for channel_id, future in futures:
                records = future.result()
                for record in records:
                    self._forward(record)
                logging.debug("Channel %s: %d programmes forwarded", channel_id, len(records))

    def _collect_channel(self, channel_id: str, days: List[date]) -> List[ProgrammeRecord]:
        records: List[ProgrammeRecord] = []
        self._process_channel(channel_id, days, records.append)
        return records

    def _process_channel(
        self,
        channel_id: str,
        days: List[date],
        emit: Callable[[ProgrammeRecord], None],
    ):
        logging.info("Processing channel %s", channel_id)

        for day in days:
            if self._check_deadline():
                return

            stubs = self.crawler.crawl_day_with_retry(channel_id, day, self.deadline)
            with self._stats_lock:
                self.channel_days += 1
            logging.info("  %s %s: %d programme(s) listed", channel_id, day.isoformat(), len(stubs))

            for stub in stubs:
                if self._check_deadline():
                    return
                record = self.extractor.extract(stub, channel_id, day)
                if record is not None:
                    emit(record)

    def _forward(self, record: ProgrammeRecord):
        self.sink.write_programme(record)
        self.records_forwarded += 1

    def _check_deadline(self) -> bool:
        if self.deadline.expired():
            if not self.deadline_reached:
                self.deadline_reached = True
                logging.warning(
                    "Overall deadline of %.0f seconds reached - stopping grab early",
                    self.deadline.seconds,
                )
            return True
        return False

    def get_statistics(self) -> Dict[str, int]:
        return {
            "records_forwarded": self.records_forwarded,
            "channel_days": self.channel_days,
            "retries": getattr(self.crawler, "retry_count", 0),
            "abandoned_days": getattr(self.crawler, "abandoned_days", 0),
            "malformed_rows": getattr(self.crawler, "malformed_rows", 0),
            "detail_failures": getattr(self.extractor, "fetch_failures", 0),
            "non_programme_pages": getattr(self.extractor, "non_programme_pages", 0),
        }
