"""
tvsearch2epg.models - Channel and programme data structures

Immutable records passed between the catalog, crawler, extractor and the
XMLTV writer.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class Channel:
    """A channel discovered in the catalog"""
    id: str
    display_name: str
    logo_url: str


@dataclass(frozen=True)
class ProgrammeStub:
    """Detail-page link plus coarse HHMM bounds from a day listing"""
    detail_link: str
    start_time: str  # "HHMM"
    end_time: str  # "HHMM"


@dataclass(frozen=True)
class SeasonEpisode:
    """Zero-based season/episode numbering, either part may be missing"""
    season: Optional[int] = None
    episode: Optional[int] = None

    def is_empty(self) -> bool:
        return self.season is None and self.episode is None

    def xmltv_ns(self) -> str:
        """Format as xmltv_ns ("season . episode . part")"""
        season = "" if self.season is None else str(self.season)
        episode = "" if self.episode is None else str(self.episode)
        return f"{season} . {episode} . "


@dataclass(frozen=True)
class ProgrammeRecord:
    """Canonical programme entry with absolute, zone-aware timestamps"""
    channel_id: str
    title: str
    start: datetime
    stop: datetime
    subtitle: Optional[str] = None
    description: Optional[str] = None
    categories: Tuple[str, ...] = ()
    cast: Tuple[str, ...] = ()
    directors: Tuple[str, ...] = ()
    season_episode: Optional[SeasonEpisode] = None
    star_rating: Optional[str] = None  # "X/10"
    icon_url: Optional[str] = None

    def __post_init__(self):
        for name in ("categories", "cast", "directors"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        if not self.title:
            raise ValueError("Programme record requires a title")
        if self.stop <= self.start:
            raise ValueError(
                f"Programme stop {self.stop.isoformat()} is not after start {self.start.isoformat()}"
            )
