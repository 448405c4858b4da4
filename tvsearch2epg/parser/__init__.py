"""
tvsearch2epg.parser - Scraping module

Document parsing, channel catalog discovery, day listing crawling and
programme detail extraction.
"""

from .catalog import CatalogError, ChannelCatalog
from .crawler import CrawlAttempt, CrawlState, ListingUnavailable, ScheduleCrawler
from .document import DocumentParser
from .markup import DEFAULT_MARKUP, SiteMarkup
from .programme import ProgrammeExtractor

__all__ = [
    "CatalogError",
    "ChannelCatalog",
    "CrawlAttempt",
    "CrawlState",
    "ListingUnavailable",
    "ScheduleCrawler",
    "DocumentParser",
    "DEFAULT_MARKUP",
    "SiteMarkup",
    "ProgrammeExtractor",
]
