"""
tvsearch2epg.utils - Time utilities and XML helpers

Day arithmetic in the listings' target time zone, HHMM conversion to
absolute timestamps and XMLTV-safe escaping.
"""

import html
import re
import time
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Tuple
from zoneinfo import ZoneInfo

TARGET_ZONE = ZoneInfo("Europe/Zurich")

HHMM_PATTERN = re.compile(r"^([01][0-9]|2[0-3])([0-5][0-9])$")


class TimeUtils:
    """Time and date utilities bound to the target zone"""

    @staticmethod
    def today(now: Optional[datetime] = None) -> date:
        """Civil date in the target zone (not the operator's local zone)"""
        if now is None:
            now = datetime.now(TARGET_ZONE)
        elif now.tzinfo is None:
            raise ValueError("now must be timezone-aware")
        return now.astimezone(TARGET_ZONE).date()

    @staticmethod
    def start_day(offset: int = 0, now: Optional[datetime] = None) -> date:
        """Base day plus offset days"""
        return TimeUtils.today(now) + timedelta(days=offset)

    @staticmethod
    def day_range(start: date, day_count: int) -> Iterator[date]:
        """Days from start inclusive to start + day_count exclusive"""
        for index in range(max(0, day_count)):
            yield start + timedelta(days=index)

    @staticmethod
    def format_day(day: date) -> str:
        """Format a day as YYYYMMDD for listing URLs"""
        return day.strftime("%Y%m%d")

    @staticmethod
    def parse_hhmm(value: str) -> Tuple[int, int]:
        """Split a 4-digit HHMM string into (hour, minute)"""
        match = HHMM_PATTERN.match(value or "")
        if not match:
            raise ValueError(f"Invalid HHMM time: {value!r}")
        return int(match.group(1)), int(match.group(2))

    @staticmethod
    def at(day: date, hhmm: str) -> datetime:
        """Absolute instant for a day and HHMM in the target zone"""
        hour, minute = TimeUtils.parse_hhmm(hhmm)
        return datetime(day.year, day.month, day.day, hour, minute, tzinfo=TARGET_ZONE)

    @staticmethod
    def programme_times(day: date, start_hhmm: str, end_hhmm: str) -> Tuple[datetime, datetime]:
        """
        Compute start/stop instants for a listing row.

        The stop falls on the next day when the end hour is strictly lower than
        the start hour. Only hours are compared, minutes are ignored.
        """
        start_hour, _ = TimeUtils.parse_hhmm(start_hhmm)
        end_hour, _ = TimeUtils.parse_hhmm(end_hhmm)

        start = TimeUtils.at(day, start_hhmm)
        stop_day = day + timedelta(days=1) if end_hour < start_hour else day
        stop = TimeUtils.at(stop_day, end_hhmm)
        return start, stop

    @staticmethod
    def conv_time(timestamp: datetime) -> str:
        """Convert an aware datetime to XMLTV format with explicit offset"""
        return timestamp.strftime("%Y%m%d%H%M%S %z")


class HtmlUtils:
    """HTML/XML utilities"""

    @staticmethod
    def conv_html(data) -> str:
        """Convert data to an XML-safe string with entity normalization"""
        if data is None:
            return ""

        data = html.unescape(str(data))

        data = data.replace("&", "&amp;")
        data = data.replace('"', "&quot;")
        data = data.replace("'", "&apos;")
        data = data.replace("<", "&lt;")
        data = data.replace(">", "&gt;")

        return data


class Deadline:
    """Overall run deadline; zero or negative seconds means no deadline"""

    def __init__(self, seconds: float = 0):
        self.seconds = seconds
        self.started = time.monotonic()

    def expired(self) -> bool:
        if self.seconds <= 0:
            return False
        return time.monotonic() - self.started >= self.seconds

    def remaining(self) -> Optional[float]:
        if self.seconds <= 0:
            return None
        return max(0.0, self.seconds - (time.monotonic() - self.started))
