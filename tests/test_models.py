import dataclasses
from datetime import datetime, timedelta

import pytest

from tvsearch2epg.models import ProgrammeRecord, SeasonEpisode
from tvsearch2epg.utils import TARGET_ZONE

START = datetime(2024, 3, 1, 20, 15, tzinfo=TARGET_ZONE)


def make_record(**overrides):
    fields = dict(channel_id="sf1", title="Tatort", start=START, stop=START + timedelta(hours=1))
    fields.update(overrides)
    return ProgrammeRecord(**fields)


def test_sequences_are_frozen_copies():
    cast = ["Anna", "Ben"]
    record = make_record(categories=["Krimi"], cast=cast, directors=["Clara"])
    cast.append("Eve")

    assert record.categories == ("Krimi",)
    assert record.cast == ("Anna", "Ben")
    assert record.directors == ("Clara",)
    with pytest.raises(AttributeError):
        record.cast.append("Eve")
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.cast = ()


def test_defaults_are_empty_tuples():
    record = make_record()

    assert (record.categories, record.cast, record.directors) == ((), (), ())


def test_empty_title_is_rejected():
    with pytest.raises(ValueError):
        make_record(title="")


def test_stop_must_follow_start():
    with pytest.raises(ValueError):
        make_record(stop=START)


def test_xmltv_ns_leaves_missing_parts_blank():
    assert SeasonEpisode(season=0).xmltv_ns() == "0 .  . "
    assert SeasonEpisode().is_empty()
