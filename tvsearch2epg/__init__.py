"""
tvsearch2epg - Swiss TV Guide Grabber

A modular Python implementation for scraping TV guide data from the
tv.search.ch listings website and writing it as XMLTV.
"""

__version__ = "1.0.0"
__author__ = "th0ma7"
__license__ = "GPL-3.0"

from .args import ArgumentParser
from .config import ConfigManager, GrabberConfig
from .downloader import FetchError, HttpFetcher, RateLimiter
from .models import Channel, ProgrammeRecord, ProgrammeStub, SeasonEpisode
from .orchestrator import ScheduleOrchestrator
from .parser import (
    ChannelCatalog,
    CatalogError,
    DocumentParser,
    ProgrammeExtractor,
    ScheduleCrawler,
)
from .utils import HtmlUtils, TimeUtils
from .xmltv import XmltvWriter

__all__ = [
    "ArgumentParser",
    "ConfigManager",
    "GrabberConfig",
    "FetchError",
    "HttpFetcher",
    "RateLimiter",
    "Channel",
    "ProgrammeRecord",
    "ProgrammeStub",
    "SeasonEpisode",
    "ScheduleOrchestrator",
    "ChannelCatalog",
    "CatalogError",
    "DocumentParser",
    "ProgrammeExtractor",
    "ScheduleCrawler",
    "HtmlUtils",
    "TimeUtils",
    "XmltvWriter",
]
