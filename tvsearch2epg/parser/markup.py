"""
tvsearch2epg.parser.markup - Site markup profile

Every URL and selector the scrapers depend on. A markup change on the
listings site should only touch this module and the field extractors.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SiteMarkup:
    """URLs and tag/class selectors of one listings site"""

    base_url: str = "https://tv.search.ch"
    catalog_path: str = "/channels"

    # Catalog page
    channel_row: Tuple[str, str] = ("a", "tv-index-channel")
    channel_path_prefix: str = "/channels/"
    channel_name: Tuple[str, str] = ("span", "tv-index-channel-name")
    channel_logo_tag: str = "img"

    # Day listing page
    day_path: str = "/channels/{channel_id}/{day}"
    listing_container: Tuple[str, str] = ("ul", "tv-channel-list")
    listing_row_tag: str = "li"
    listing_time: Tuple[str, str] = ("span", "tv-time")
    start_attr: str = "data-start"
    end_attr: str = "data-end"

    # Detail page
    heading: Tuple[str, str] = ("header", "tv-detail-heading")
    title_tag: str = "h1"
    original_title: Tuple[str, str] = ("span", "tv-detail-original-title")
    content_class: str = "tv-detail-content"
    content_image_attr: str = "data-image"
    event_meta: Tuple[str, str] = ("p", "tv-detail-meta")
    genre_class: str = "tv-detail-genre"
    actor_class: str = "tv-detail-actor"
    director_class: str = "tv-detail-director"
    person_name_class: str = "name"
    season_class: str = "tv-detail-season"
    season_number_class: str = "season"
    episode_number_class: str = "episode"

    @property
    def catalog_url(self) -> str:
        return self.base_url + self.catalog_path

    def day_url(self, channel_id: str, day: str) -> str:
        """Listing URL for one channel id and a YYYYMMDD day"""
        return self.base_url + self.day_path.format(channel_id=channel_id, day=day)


DEFAULT_MARKUP = SiteMarkup()
