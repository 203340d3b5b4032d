import time
from datetime import date
import pytest
from meal_plan_wizard.dates import (
    anchor_options,
    date_for_day,
    event_date,
    event_time_label,
    events_in_week,
    format_week_range,
    is_current_week,
    most_recent_anchor,
    next_anchor,
    parse_local_date,
    week_dates,
)
from meal_plan_wizard.models import CalendarEvent

SATURDAY = date(2026, 10, 17)


@pytest.fixture
def host_tz(monkeypatch):
    """Switch the process timezone for the duration of a test."""

    def switch(name):
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield switch
    monkeypatch.undo()
    time.tzset()


def test_week_dates_are_seven_consecutive_days():
    days = week_dates(SATURDAY)
    assert days[0] == SATURDAY
    assert days[-1] == date(2026, 10, 23)
    assert len(days) == 7


@pytest.mark.parametrize("tz", ["UTC", "America/Los_Angeles", "Pacific/Auckland"])
def test_week_dates_ignore_host_timezone(host_tz, tz):
    host_tz(tz)
    assert week_dates("2026-10-17")[0] == SATURDAY
    assert date_for_day("2026-10-17", 7) == date(2026, 10, 23)


def test_date_for_day():
    assert date_for_day(SATURDAY, 1) == SATURDAY
    assert date_for_day(SATURDAY, 3) == date(2026, 10, 19)


def test_parse_local_date_accepts_strings_and_dates():
    assert parse_local_date("2026-10-17") == SATURDAY
    assert parse_local_date("2026-10-17T00:00:00.000Z") == SATURDAY
    assert parse_local_date(SATURDAY) == SATURDAY


def test_most_recent_anchor_on_saturday_is_today():
    assert most_recent_anchor(SATURDAY) == SATURDAY


def test_most_recent_anchor_on_friday_is_previous_saturday():
    assert most_recent_anchor(date(2026, 10, 16)) == date(2026, 10, 10)


def test_next_anchor_is_strictly_after_today():
    assert next_anchor(SATURDAY) == date(2026, 10, 24)
    assert next_anchor(date(2026, 10, 21)) == date(2026, 10, 24)


def test_anchor_options_returns_eight_saturdays():
    options = anchor_options(date(2026, 10, 21))
    assert len(options) == 8
    assert options[0].date == SATURDAY
    assert all(o.date.weekday() == 5 for o in options)
    assert options[-1].date == date(2026, 12, 5)


def test_anchor_options_marks_planned_weeks():
    options = anchor_options(SATURDAY, planned_weeks=[date(2026, 10, 24), "2026-11-07"])
    planned = [o.date for o in options if o.has_plan]
    assert planned == [date(2026, 10, 24), date(2026, 11, 7)]


def test_format_week_range():
    assert format_week_range(SATURDAY) == "Oct 17 - Oct 23, 2026"
    assert format_week_range("2026-12-26") == "Dec 26 - Jan 1, 2027"


def test_is_current_week():
    assert is_current_week(SATURDAY, date(2026, 10, 23))
    assert not is_current_week(SATURDAY, date(2026, 10, 24))


def test_date_only_event_keeps_its_day(host_tz):
    host_tz("America/Los_Angeles")
    event = CalendarEvent(id="e1", title="Field trip", start_time="2026-10-18", all_day=True)
    assert event_date(event) == date(2026, 10, 18)


def test_utc_event_lands_on_local_day(host_tz):
    host_tz("America/Los_Angeles")
    event = CalendarEvent(id="e1", title="Late game", start_time="2026-10-18T02:00:00Z")
    assert event_date(event) == date(2026, 10, 17)


def test_events_in_week_filters_and_sorts():
    events = [
        CalendarEvent(id="late", title="Recital", start_time="2026-10-20T19:00:00"),
        CalendarEvent(id="out", title="Next week", start_time="2026-10-24T10:00:00"),
        CalendarEvent(id="early", title="Dentist", start_time="2026-10-20T08:00:00"),
        CalendarEvent(id="first", title="Soccer", start_time="2026-10-17"),
    ]
    assert [e.id for e in events_in_week(events, SATURDAY)] == ["first", "early", "late"]


def test_event_time_label():
    assert event_time_label(CalendarEvent(id="e", title="x", start_time="2026-10-17T17:30:00")) == "5:30 PM"
    assert event_time_label(CalendarEvent(id="e", title="x", start_time="2026-10-17", all_day=True)) == "all day"
