"""
tvsearch2epg.downloader.base - HTTP fetcher

Performs GET requests over one persistent requests session (keep-alive
connection pool) with a fixed client identity. No retries and no caching are
done here: callers decide what a failure means.
"""

import logging
import threading
from http.cookiejar import DefaultCookiePolicy
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .. import __version__
from .rate_limiting import RateLimiter

USER_AGENT = f"tvsearch2epg/{__version__}"


class FetchError(Exception):
    """Transport failure, non-success status or empty body"""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{reason}: {url}")
        self.url = url
        self.reason = reason


class HttpFetcher:
    """Shared-session page fetcher with per-request timeout and rate ceiling"""

    def __init__(
        self,
        timeout: float = 15.0,
        pool_size: int = 1,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        self.session: Optional[requests.Session] = None
        self.timeout = timeout
        self.pool_size = max(1, pool_size)
        self.rate_limiter = rate_limiter

        self.total_requests = 0
        self.failed_requests = 0
        self.bytes_downloaded = 0
        self._stats_lock = threading.Lock()

        self.init_session()

    def init_session(self):
        """Initialize session with persistent connections"""
        if self.session:
            self.session.close()

        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": USER_AGENT,
                "Accept": "text/html",
                "Connection": "keep-alive",
            }
        )
        # Listing pages are stateless: never store cookies
        self.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))

        # Retry policy belongs to the callers
        retry_strategy = Retry(total=0, backoff_factor=0, status_forcelist=[])

        adapter = HTTPAdapter(
            pool_connections=1,
            pool_maxsize=self.pool_size,
            max_retries=retry_strategy,
            pool_block=True,
        )

        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

        logging.info("HTTP session initialized with persistent connections")
        logging.debug("  Connection pool: %d connection(s), keep-alive enabled", self.pool_size)

    def fetch(self, url: str) -> Optional[str]:
        """Fetch a page, returning its text or None on any failure"""
        try:
            return self.fetch_or_raise(url)
        except FetchError as e:
            logging.warning("  Fetch failed: %s", e)
            return None

    def fetch_or_raise(self, url: str) -> str:
        """Fetch a page, raising FetchError on any failure"""
        if self.session is None:
            raise FetchError(url, "Session closed")

        if self.rate_limiter:
            self.rate_limiter.wait_if_needed()

        self._count("total_requests")
        logging.debug("  GET %s (timeout: %.0fs)", url, self.timeout)

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout:
            self._count("failed_requests")
            raise FetchError(url, f"Timeout ({self.timeout:.0f}s)")
        except requests.exceptions.RequestException as e:
            self._count("failed_requests")
            raise FetchError(url, f"Request error ({e.__class__.__name__})") from e

        if response.status_code != 200:
            self._count("failed_requests")
            raise FetchError(url, f"HTTP {response.status_code}")

        if "charset" not in response.headers.get("Content-Type", "").lower():
            # requests assumes ISO-8859-1 for text/* without a declared charset
            response.encoding = self.detect_encoding(response)

        text = response.text
        if not text or not text.strip():
            self._count("failed_requests")
            raise FetchError(url, "Empty body")

        self._count("bytes_downloaded", len(response.content))
        logging.debug("  Success: %d bytes received", len(response.content))
        return text

    @staticmethod
    def detect_encoding(response) -> str:
        """Encoding for a body served without charset: UTF-8 when it decodes, else guessed"""
        try:
            response.content.decode("utf-8")
        except UnicodeDecodeError:
            return response.apparent_encoding or "ISO-8859-1"
        return "utf-8"

    def _count(self, name: str, amount: int = 1):
        with self._stats_lock:
            setattr(self, name, getattr(self, name) + amount)

    def close(self):
        """Clean shutdown"""
        if self.session:
            self.session.close()
            self.session = None

    def get_stats(self) -> Dict[str, Any]:
        """Get download statistics"""
        with self._stats_lock:
            return {
                "total_requests": self.total_requests,
                "failed_requests": self.failed_requests,
                "bytes_downloaded": self.bytes_downloaded,
            }

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()
