from datetime import date, datetime, timezone

import pytest

from tvsearch2epg.utils import Deadline, HtmlUtils, TimeUtils


def test_today_is_taken_in_target_zone():
    # 23:30 UTC on 31 Dec is already New Year in Zurich
    now = datetime(2023, 12, 31, 23, 30, tzinfo=timezone.utc)

    assert TimeUtils.today(now) == date(2024, 1, 1)


def test_today_rejects_naive_datetime():
    with pytest.raises(ValueError):
        TimeUtils.today(datetime(2024, 1, 1, 12, 0))


def test_start_day_applies_offset():
    now = datetime(2024, 2, 28, 10, 0, tzinfo=timezone.utc)

    assert TimeUtils.start_day(2, now) == date(2024, 3, 1)


def test_day_range_is_half_open():
    days = list(TimeUtils.day_range(date(2024, 3, 30), 3))

    assert days == [date(2024, 3, 30), date(2024, 3, 31), date(2024, 4, 1)]
    assert list(TimeUtils.day_range(date(2024, 3, 30), 0)) == []


@pytest.mark.parametrize("value", ["", "930", "2400", "1260", "ab12", "12:30"])
def test_parse_hhmm_rejects_invalid(value):
    with pytest.raises(ValueError):
        TimeUtils.parse_hhmm(value)


def test_rollover_when_end_hour_is_lower():
    start, stop = TimeUtils.programme_times(date(2024, 3, 1), "2300", "0100")

    assert TimeUtils.conv_time(start) == "20240301230000 +0100"
    assert TimeUtils.conv_time(stop) == "20240302010000 +0100"


def test_no_rollover_within_same_hour():
    start, stop = TimeUtils.programme_times(date(2024, 3, 1), "2210", "2250")

    assert start.date() == stop.date() == date(2024, 3, 1)


def test_offsets_follow_daylight_saving():
    winter, _ = TimeUtils.programme_times(date(2024, 1, 15), "2015", "2100")
    summer, _ = TimeUtils.programme_times(date(2024, 7, 15), "2015", "2100")

    assert TimeUtils.conv_time(winter) == "20240115201500 +0100"
    assert TimeUtils.conv_time(summer) == "20240715201500 +0200"


def test_rollover_across_dst_change():
    # Night of the spring-forward change
    start, stop = TimeUtils.programme_times(date(2024, 3, 30), "2300", "0500")

    assert TimeUtils.conv_time(start) == "20240330230000 +0100"
    assert TimeUtils.conv_time(stop) == "20240331050000 +0200"


def test_conv_html_escapes_and_normalizes_entities():
    assert HtmlUtils.conv_html('Tom & Jerry <"Spezial">') == (
        "Tom &amp; Jerry &lt;&quot;Spezial&quot;&gt;"
    )
    assert HtmlUtils.conv_html("Rock &amp; Roll") == "Rock &amp; Roll"
    assert HtmlUtils.conv_html(None) == ""


def test_deadline_zero_never_expires():
    deadline = Deadline(0)

    assert not deadline.expired()
    assert deadline.remaining() is None


def test_deadline_expires():
    deadline = Deadline(5)
    deadline.started -= 6

    assert deadline.expired()
    assert deadline.remaining() == 0.0
