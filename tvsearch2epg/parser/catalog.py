"""
tvsearch2epg.parser.catalog - Channel catalog discovery

Reads the single catalog page and builds the run's channel map. The catalog
is best effort: rows missing a name or a logo are skipped.
"""

import logging
from collections import OrderedDict
from typing import Dict, Optional
from urllib.parse import quote, urlsplit

from ..models import Channel
from .document import DocumentParser
from .markup import DEFAULT_MARKUP, SiteMarkup


class CatalogError(Exception):
    """The catalog page could not be fetched"""


class ChannelCatalog:
    """Discovers available channels (id, display name, logo)"""

    def __init__(
        self,
        fetcher,
        document_parser: Optional[DocumentParser] = None,
        markup: SiteMarkup = DEFAULT_MARKUP,
    ):
        self.fetcher = fetcher
        self.document_parser = document_parser or DocumentParser()
        self.markup = markup
        self.skipped_count = 0

    def discover_all(self) -> Dict[str, Channel]:
        """Fetch the catalog page and return channels keyed by id, in page order"""
        url = self.markup.catalog_url
        logging.info("Discovering channels from %s", url)

        content = self.fetcher.fetch(url)
        if content is None:
            raise CatalogError(f"Cannot fetch channel catalog: {url}")

        parser = self.document_parser
        document = parser.parse(content)
        scheme = urlsplit(url).scheme or "https"

        channels: Dict[str, Channel] = OrderedDict()
        self.skipped_count = 0

        row_tag, row_class = self.markup.channel_row
        for row in parser.find_all(document, row_tag, row_class):
            channel = self._parse_row(row, scheme)
            if channel is None:
                self.skipped_count += 1
                continue
            if channel.id in channels:
                logging.debug("Duplicate channel row ignored: %s", channel.id)
                continue
            channels[channel.id] = channel

        logging.info(
            "Channel catalog: %d channels found, %d rows skipped",
            len(channels),
            self.skipped_count,
        )
        return channels

    def _parse_row(self, row, scheme: str) -> Optional[Channel]:
        parser = self.document_parser
        markup = self.markup

        name_node = parser.find_first(row, *markup.channel_name)
        logo_node = parser.find_first(row, markup.channel_logo_tag)
        if name_node is None or logo_node is None:
            logging.debug("Catalog row without name or logo skipped")
            return None

        display_name = parser.text(name_node)
        logo_url = parser.attr(logo_node, "src") or ""
        if logo_url.startswith("//"):
            logo_url = f"{scheme}:{logo_url}"

        channel_id = self.channel_id_from_href(parser.attr(row, "href") or "")
        if not channel_id or not display_name:
            logging.debug("Catalog row without usable link or name skipped")
            return None

        return Channel(id=channel_id, display_name=display_name, logo_url=logo_url)

    def channel_id_from_href(self, href: str) -> str:
        """Strip the fixed-length path prefix and escape the rest as one path segment"""
        suffix = href[len(self.markup.channel_path_prefix):]
        return quote(suffix, safe="")
