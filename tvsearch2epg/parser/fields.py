"""
tvsearch2epg.parser.fields - Detail page field extractors

Each extractor reads one group of programme fields (heading, description,
categories, credits, episode numbering, star rating) from a parsed detail
page. Extraction is best effort: a missing element yields no field.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from ..models import SeasonEpisode
from .document import DocumentParser
from .markup import DEFAULT_MARKUP, SiteMarkup

# Star rating sits at a fixed position from the end of the meta line
RATING_MIN_LENGTH = 45
RATING_OFFSET_FROM_END = 45
RATING_WIDTH = 3
RATING_PATTERN = re.compile(r"[0-9]+(\.[0-9]+)?")


class FieldExtractor:
    """Base class: extract(document) returns a dict of ProgrammeRecord fields"""

    name = "base"

    def __init__(
        self,
        document_parser: Optional[DocumentParser] = None,
        markup: SiteMarkup = DEFAULT_MARKUP,
    ):
        self.document_parser = document_parser or DocumentParser()
        self.markup = markup

    def extract(self, document) -> Dict[str, Any]:
        raise NotImplementedError

    def meta_node(self, document):
        return self.document_parser.find_first(document, *self.markup.event_meta)


class HeadingExtractor(FieldExtractor):
    """Title and original title; None means the page is not a programme page"""

    name = "heading"

    def extract(self, document) -> Optional[Dict[str, Any]]:
        parser = self.document_parser
        heading = parser.find_first(document, *self.markup.heading)
        if heading is None:
            return None

        title = parser.text(parser.find_first(heading, self.markup.title_tag))
        if not title:
            return None

        fields: Dict[str, Any] = {"title": title}
        subtitle = parser.text(parser.find_first(heading, *self.markup.original_title))
        if subtitle:
            fields["subtitle"] = subtitle
        return fields


class DescriptionExtractor(FieldExtractor):
    """Description from every content block; the last embedded image is the icon"""

    name = "description"

    def extract(self, document) -> Dict[str, Any]:
        parser = self.document_parser
        parts = []
        icon_url = None

        for block in parser.find_all(document, class_attr=self.markup.content_class):
            text = parser.text(block)
            if text:
                parts.append(text)
            image = parser.attr(block, self.markup.content_image_attr)
            if image:
                icon_url = image

        fields: Dict[str, Any] = {}
        if parts:
            fields["description"] = " ".join(parts)
        if icon_url:
            fields["icon_url"] = icon_url
        return fields


class CategoryExtractor(FieldExtractor):
    """Primary category from the meta line, then the nested genre if any"""

    name = "categories"

    def extract(self, document) -> Dict[str, Any]:
        parser = self.document_parser
        meta = self.meta_node(document)
        if meta is None:
            return {}

        categories: List[str] = []
        primary = parser.text(meta).split("/", 1)[0].strip()
        if primary:
            categories.append(primary)

        genre = parser.text(parser.find_first(meta, class_attr=self.markup.genre_class))
        if genre:
            categories.append(genre)

        return {"categories": tuple(categories)} if categories else {}


class CreditsExtractor(FieldExtractor):
    """Cast and directors in page order, duplicates kept"""

    name = "credits"

    def _names(self, document, role_class: str) -> List[str]:
        parser = self.document_parser
        names = []
        for person in parser.find_all(document, class_attr=role_class):
            name = parser.text(
                parser.find_first(person, class_attr=self.markup.person_name_class)
            )
            if name:
                names.append(name)
        return names

    def extract(self, document) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        cast = self._names(document, self.markup.actor_class)
        directors = self._names(document, self.markup.director_class)
        if cast:
            fields["cast"] = tuple(cast)
        if directors:
            fields["directors"] = tuple(directors)
        return fields


class EpisodeExtractor(FieldExtractor):
    """Season/episode, converted from the site's 1-based numbers to 0-based"""

    name = "episode"

    @staticmethod
    def _zero_based(value: str) -> Optional[int]:
        value = value.strip()
        if not value.isdigit() or int(value) < 1:
            return None
        return int(value) - 1

    def extract(self, document) -> Dict[str, Any]:
        parser = self.document_parser
        marker = parser.find_first(document, class_attr=self.markup.season_class)
        if marker is None:
            return {}

        season = self._zero_based(
            parser.text(parser.find_first(marker, class_attr=self.markup.season_number_class))
        )
        episode = self._zero_based(
            parser.text(parser.find_first(marker, class_attr=self.markup.episode_number_class))
        )

        numbering = SeasonEpisode(season=season, episode=episode)
        if numbering.is_empty():
            return {}
        return {"season_episode": numbering}


class RatingExtractor(FieldExtractor):
    """Star rating read from a fixed window near the end of the meta line"""

    name = "rating"

    @staticmethod
    def rating_from_meta(text: str) -> Optional[str]:
        """'X/10' when the 3-character window 45 characters from the end is a decimal"""
        text = text.strip()
        if len(text) < RATING_MIN_LENGTH:
            return None

        start = len(text) - RATING_OFFSET_FROM_END
        window = text[start:start + RATING_WIDTH].replace(",", ".").strip()
        if not RATING_PATTERN.fullmatch(window):
            return None
        return f"{window}/10"

    def extract(self, document) -> Dict[str, Any]:
        meta = self.meta_node(document)
        if meta is None:
            return {}

        rating = self.rating_from_meta(self.document_parser.text(meta))
        if rating is None:
            return {}
        logging.debug("  Star rating found: %s", rating)
        return {"star_rating": rating}


def default_field_extractors(
    document_parser: Optional[DocumentParser] = None, markup: SiteMarkup = DEFAULT_MARKUP
) -> List[FieldExtractor]:
    """Optional field groups applied after the heading, in page order"""
    return [
        extractor_class(document_parser, markup)
        for extractor_class in (
            DescriptionExtractor,
            CategoryExtractor,
            CreditsExtractor,
            EpisodeExtractor,
            RatingExtractor,
        )
    ]
