"""
tvsearch2epg.parser.programme - Programme detail extraction

Fetches a stub's detail page and builds the canonical ProgrammeRecord from
the heading plus the optional field groups.
"""

import logging
import threading
from datetime import date
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

from ..models import ProgrammeRecord, ProgrammeStub
from ..utils import TimeUtils
from .document import DocumentParser
from .fields import FieldExtractor, HeadingExtractor, default_field_extractors
from .markup import DEFAULT_MARKUP, SiteMarkup


class ProgrammeExtractor:
    """Turns programme stubs into ProgrammeRecords"""

    def __init__(
        self,
        fetcher,
        document_parser: Optional[DocumentParser] = None,
        markup: SiteMarkup = DEFAULT_MARKUP,
        heading_extractor: Optional[HeadingExtractor] = None,
        field_extractors: Optional[List[FieldExtractor]] = None,
    ):
        self.fetcher = fetcher
        self.document_parser = document_parser or DocumentParser()
        self.markup = markup
        self.heading_extractor = heading_extractor or HeadingExtractor(
            self.document_parser, markup
        )
        if field_extractors is None:
            field_extractors = default_field_extractors(self.document_parser, markup)
        self.field_extractors = field_extractors

        # Statistics
        self.extracted_count = 0
        self.fetch_failures = 0
        self.non_programme_pages = 0
        self.invalid_times = 0
        self._stats_lock = threading.Lock()

    def _count(self, name: str):
        with self._stats_lock:
            setattr(self, name, getattr(self, name) + 1)

    def detail_url(self, stub: ProgrammeStub) -> str:
        return urljoin(self.markup.base_url + "/", stub.detail_link)

    def extract(self, stub: ProgrammeStub, channel_id: str, day: date) -> Optional[ProgrammeRecord]:
        """Build a record from the stub's detail page, None when there is nothing to extract"""
        url = self.detail_url(stub)
        content = self.fetcher.fetch(url)
        if content is None:
            self._count("fetch_failures")
            logging.warning("  Detail page unavailable, programme skipped: %s", url)
            return None

        document = self.document_parser.parse(content)

        heading = self.heading_extractor.extract(document)
        if heading is None:
            self._count("non_programme_pages")
            logging.debug("  Not a programme page, skipped: %s", url)
            return None

        fields: Dict[str, Any] = dict(heading)
        for extractor in self.field_extractors:
            fields.update(extractor.extract(document))

        try:
            start, stop = TimeUtils.programme_times(day, stub.start_time, stub.end_time)
            record = ProgrammeRecord(channel_id=channel_id, start=start, stop=stop, **fields)
        except ValueError as e:
            self._count("invalid_times")
            logging.warning("  Programme %r skipped: %s", fields.get("title"), e)
            return None

        self._count("extracted_count")
        logging.debug(
            "  %s %s-%s %s",
            channel_id,
            stub.start_time,
            stub.end_time,
            record.title,
        )
        return record
