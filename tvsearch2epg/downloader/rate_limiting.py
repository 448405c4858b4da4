"""
tvsearch2epg.downloader.rate_limiting - Per-host request rate ceiling

Thread-safe rate limiting shared by every worker using the same fetcher.
"""

import logging
import threading
import time


class RateLimiter:
    """Thread-safe rate limiter for controlling request frequency"""

    def __init__(self, max_requests_per_second: float = 4.0):
        if max_requests_per_second <= 0:
            raise ValueError("max_requests_per_second must be positive")
        self.max_requests_per_second = max_requests_per_second
        self.min_interval = 1.0 / max_requests_per_second
        self.last_request_time = 0.0
        self.total_wait = 0.0
        self.lock = threading.Lock()

    def wait_if_needed(self) -> float:
        """Wait if necessary to respect the rate limit, return time slept"""
        with self.lock:
            current_time = time.monotonic()
            time_since_last = current_time - self.last_request_time

            sleep_time = 0.0
            if time_since_last < self.min_interval:
                sleep_time = self.min_interval - time_since_last
                logging.debug("  Rate limit delay: %.2fs", sleep_time)
                time.sleep(sleep_time)
                self.total_wait += sleep_time

            self.last_request_time = time.monotonic()
            return sleep_time

    def get_current_rate(self) -> float:
        """Get current rate limit setting"""
        with self.lock:
            return self.max_requests_per_second
