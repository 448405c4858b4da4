"""
tvsearch2epg.xmltv - XMLTV generation (DTD Compliant)

Streams the channel list and then programme records to an XMLTV document.
The channel list is always complete before the first programme, and every
programme element is written in one call under a lock.
"""

import logging
import threading
from typing import Iterable, List, TextIO

from .models import Channel, ProgrammeRecord
from .utils import HtmlUtils, TimeUtils


class XmltvWriter:
    """Writes channels and programmes as XMLTV to a text stream"""

    def __init__(
        self,
        stream: TextIO,
        lang: str = "de",
        source_url: str = "https://tv.search.ch/",
        source_name: str = "tv.search.ch",
        generator_name: str = "tvsearch2epg",
        id_suffix: str = ".search.ch",
    ):
        self.stream = stream
        self.lang = lang
        self.source_url = source_url
        self.source_name = source_name
        self.generator_name = generator_name
        self.id_suffix = id_suffix

        self.channel_count = 0
        self.programme_count = 0
        self._channels_written = False
        self._closed = False
        self._lock = threading.Lock()

    def xmltv_id(self, channel_id: str) -> str:
        return f"{channel_id}{self.id_suffix}"

    def write_channels(self, channels: Iterable[Channel]):
        """Write the header and the full channel list (once)"""
        with self._lock:
            if self._channels_written:
                raise RuntimeError("Channel list already written")
            if self._closed:
                raise RuntimeError("XMLTV writer is closed")

            logging.info("Writing Stations to XMLTV output...")
            self._print_header()
            for channel in channels:
                self.stream.write(self._format_channel(channel))
                self.channel_count += 1
            self._channels_written = True

    def write_programme(self, record: ProgrammeRecord):
        """Write one programme element"""
        with self._lock:
            if not self._channels_written:
                raise RuntimeError("Channel list must be written before programmes")
            if self._closed:
                raise RuntimeError("XMLTV writer is closed")

            self.stream.write(self._format_programme(record))
            self.programme_count += 1

    def close(self):
        """Write the footer (once) and flush"""
        with self._lock:
            if self._closed:
                return
            if not self._channels_written:
                self._print_header()
                self._channels_written = True
            self.stream.write("</tv>\n")
            self.stream.flush()
            self._closed = True

        logging.info(
            "%d Stations and %d Programmes written to XMLTV output",
            self.channel_count,
            self.programme_count,
        )

    def _print_header(self):
        self.stream.write('<?xml version="1.0" encoding="utf-8"?>\n')
        self.stream.write('<!DOCTYPE tv SYSTEM "xmltv.dtd">\n')
        self.stream.write(
            f'<tv source-info-url="{HtmlUtils.conv_html(self.source_url)}" '
            f'source-info-name="{HtmlUtils.conv_html(self.source_name)}" '
            f'generator-info-name="{HtmlUtils.conv_html(self.generator_name)}">\n'
        )

    def _format_channel(self, channel: Channel) -> str:
        lines = [f'\t<channel id="{HtmlUtils.conv_html(self.xmltv_id(channel.id))}">']
        lines.append(
            f'\t\t<display-name lang="{self.lang}">'
            f"{HtmlUtils.conv_html(channel.display_name)}</display-name>"
        )
        if channel.logo_url:
            lines.append(f'\t\t<icon src="{HtmlUtils.conv_html(channel.logo_url)}" />')
        lines.append("\t</channel>")
        return "\n".join(lines) + "\n"

    def _format_programme(self, record: ProgrammeRecord) -> str:
        lang = self.lang
        start = TimeUtils.conv_time(record.start)
        stop = TimeUtils.conv_time(record.stop)
        channel = HtmlUtils.conv_html(self.xmltv_id(record.channel_id))

        lines: List[str] = [f'\t<programme start="{start}" stop="{stop}" channel="{channel}">']

        # 1. TITLE+
        lines.append(f'\t\t<title lang="{lang}">{HtmlUtils.conv_html(record.title)}</title>')

        # 2. SUB-TITLE*
        if record.subtitle:
            lines.append(
                f'\t\t<sub-title lang="{lang}">{HtmlUtils.conv_html(record.subtitle)}</sub-title>'
            )

        # 3. DESC*
        if record.description:
            lines.append(f'\t\t<desc lang="{lang}">{HtmlUtils.conv_html(record.description)}</desc>')

        # 4. CREDITS? (director before actor)
        if record.directors or record.cast:
            lines.append("\t\t<credits>")
            for name in record.directors:
                lines.append(f"\t\t\t<director>{HtmlUtils.conv_html(name)}</director>")
            for name in record.cast:
                lines.append(f"\t\t\t<actor>{HtmlUtils.conv_html(name)}</actor>")
            lines.append("\t\t</credits>")

        # 5. CATEGORY*
        for category in record.categories:
            lines.append(f'\t\t<category lang="{lang}">{HtmlUtils.conv_html(category)}</category>')

        # 6. ICON*
        if record.icon_url:
            lines.append(f'\t\t<icon src="{HtmlUtils.conv_html(record.icon_url)}" />')

        # 7. EPISODE-NUM*
        if record.season_episode and not record.season_episode.is_empty():
            lines.append(
                f'\t\t<episode-num system="xmltv_ns">{record.season_episode.xmltv_ns()}</episode-num>'
            )

        # 8. STAR-RATING*
        if record.star_rating:
            lines.append("\t\t<star-rating>")
            lines.append(f"\t\t\t<value>{HtmlUtils.conv_html(record.star_rating)}</value>")
            lines.append("\t\t</star-rating>")

        lines.append("\t</programme>")
        return "\n".join(lines) + "\n"
