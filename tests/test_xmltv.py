import io
import threading
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta

import pytest

from tvsearch2epg.models import Channel, ProgrammeRecord, SeasonEpisode
from tvsearch2epg.utils import TARGET_ZONE
from tvsearch2epg.xmltv import XmltvWriter

START = datetime(2024, 7, 1, 20, 15, tzinfo=TARGET_ZONE)
CHANNELS = [
    Channel("sf1", "SRF 1", "https://img.example/sf1.png"),
    Channel("3%2Bplus", "3+ & Co", "https://img.example/3plus.png"),
]


def record(**overrides):
    fields = dict(channel_id="sf1", title="Tatort", start=START, stop=START + timedelta(minutes=95))
    fields.update(overrides)
    return ProgrammeRecord(**fields)


def written(writer, stream):
    writer.close()
    return stream.getvalue()


def parse(text):
    # DOCTYPE refers to an external DTD; ElementTree ignores it
    return ET.fromstring(text.encode("utf-8"))


def test_channels_precede_programmes():
    stream = io.StringIO()
    writer = XmltvWriter(stream)
    writer.write_channels(CHANNELS)
    writer.write_programme(record())

    root = parse(written(writer, stream))

    assert [child.tag for child in root] == ["channel", "channel", "programme"]
    assert root.get("generator-info-name") == "tvsearch2epg"
    channel = root.find("channel")
    assert channel.get("id") == "sf1.search.ch"
    assert channel.find("display-name").text == "SRF 1"
    assert channel.find("display-name").get("lang") == "de"
    assert channel.find("icon").get("src") == "https://img.example/sf1.png"


def test_programme_attributes_and_minimal_children():
    stream = io.StringIO()
    writer = XmltvWriter(stream, lang="fr")
    writer.write_channels(CHANNELS)
    writer.write_programme(record())

    programme = parse(written(writer, stream)).find("programme")

    assert programme.get("start") == "20240701201500 +0200"
    assert programme.get("stop") == "20240701215000 +0200"
    assert programme.get("channel") == "sf1.search.ch"
    assert [child.tag for child in programme] == ["title"]
    assert programme.find("title").get("lang") == "fr"


def test_programme_children_follow_dtd_order():
    stream = io.StringIO()
    writer = XmltvWriter(stream)
    writer.write_channels(CHANNELS)
    writer.write_programme(
        record(
            subtitle="Original",
            description="Ein Fall.",
            categories=["Krimi", "Serie"],
            cast=["Anna", "Ben"],
            directors=["Clara"],
            season_episode=SeasonEpisode(season=1, episode=4),
            star_rating="7.5/10",
            icon_url="https://img.example/tatort.jpg",
        )
    )

    programme = parse(written(writer, stream)).find("programme")

    assert [child.tag for child in programme] == [
        "title",
        "sub-title",
        "desc",
        "credits",
        "category",
        "category",
        "icon",
        "episode-num",
        "star-rating",
    ]
    assert [child.tag for child in programme.find("credits")] == ["director", "actor", "actor"]
    assert programme.find("episode-num").get("system") == "xmltv_ns"
    assert programme.find("episode-num").text == "1 . 4 . "
    assert programme.find("star-rating/value").text == "7.5/10"


def test_text_is_escaped():
    stream = io.StringIO()
    writer = XmltvWriter(stream)
    writer.write_channels(CHANNELS)
    writer.write_programme(record(title='Tom & Jerry <"Spezial">', channel_id="3%2Bplus"))

    text = written(writer, stream)
    root = parse(text)

    assert "Tom &amp; Jerry &lt;&quot;Spezial&quot;&gt;" in text
    assert root.find("programme/title").text == 'Tom & Jerry <"Spezial">'
    assert root.findall("channel")[1].find("display-name").text == "3+ & Co"
    assert root.find("programme").get("channel") == "3%2Bplus.search.ch"


def test_programme_before_channels_is_rejected():
    writer = XmltvWriter(io.StringIO())

    with pytest.raises(RuntimeError):
        writer.write_programme(record())


def test_channels_written_once():
    writer = XmltvWriter(io.StringIO())
    writer.write_channels(CHANNELS)

    with pytest.raises(RuntimeError):
        writer.write_channels(CHANNELS)


def test_write_after_close_is_rejected():
    writer = XmltvWriter(io.StringIO())
    writer.write_channels(CHANNELS)
    writer.close()

    with pytest.raises(RuntimeError):
        writer.write_programme(record())


def test_close_is_idempotent_and_always_well_formed():
    stream = io.StringIO()
    writer = XmltvWriter(stream)
    writer.close()
    writer.close()

    text = stream.getvalue()
    assert text.count("</tv>") == 1
    assert len(parse(text)) == 0


def test_concurrent_writes_do_not_interleave():
    stream = io.StringIO()
    writer = XmltvWriter(stream)
    writer.write_channels(CHANNELS)

    def emit(channel_id):
        for n in range(50):
            writer.write_programme(record(channel_id=channel_id, title=f"{channel_id}-{n}"))

    threads = [threading.Thread(target=emit, args=(channel_id,)) for channel_id in ("sf1", "sf2")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    root = parse(written(writer, stream))
    assert len(root.findall("programme")) == 100
    assert writer.programme_count == 100
