"""
tvsearch2epg.downloader - Download management module

Handles all HTTP download operations for tvsearch2epg: one shared session,
per-request timeouts and a per-host request rate ceiling.
"""

from .base import FetchError, HttpFetcher, USER_AGENT
from .rate_limiting import RateLimiter

__all__ = [
    "FetchError",
    "HttpFetcher",
    "RateLimiter",
    "USER_AGENT",
]
