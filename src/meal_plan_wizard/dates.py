"""Week arithmetic for the Saturday-anchored planning week.

Everything here works on calendar dates (``datetime.date``) so that the host
timezone never shifts a day. Timestamps only enter through calendar events,
which are converted to local calendar dates before comparison.
"""
from __future__ import annotations
from datetime import date, datetime, timedelta
from typing import Iterable, NamedTuple
from zoneinfo import ZoneInfo
from meal_plan_wizard.constants import ANCHOR_WEEKDAY
from meal_plan_wizard.models import CalendarEvent


class WeekOption(NamedTuple):
    date: date
    has_plan: bool


def format_date_local(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_local_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def today_in(timezone: str) -> date:
    """Today's calendar date in the household's timezone."""
    return datetime.now(tz=ZoneInfo(timezone)).date()


def week_dates(anchor: date | str) -> list[date]:
    start = parse_local_date(anchor)
    return [start + timedelta(days=i) for i in range(7)]


def date_for_day(anchor: date | str, day: int) -> date:
    return parse_local_date(anchor) + timedelta(days=day - 1)


def most_recent_anchor(today: date) -> date:
    return today - timedelta(days=(today.weekday() - ANCHOR_WEEKDAY) % 7)


def next_anchor(today: date) -> date:
    """The next anchor weekday strictly after today."""
    return most_recent_anchor(today) + timedelta(days=7)


def anchor_options(
    today: date,
    count: int = 8,
    planned_weeks: Iterable[date] = (),
) -> list[WeekOption]:
    planned = {parse_local_date(w) for w in planned_weeks}
    first = most_recent_anchor(today)
    options = []
    for i in range(count):
        anchor = first + timedelta(weeks=i)
        options.append(WeekOption(date=anchor, has_plan=anchor in planned))
    return options


def format_week_range(anchor: date | str) -> str:
    start = parse_local_date(anchor)
    end = start + timedelta(days=6)
    return f"{start:%b} {start.day} - {end:%b} {end.day}, {end.year}"


def is_current_week(anchor: date | str, today: date) -> bool:
    start = parse_local_date(anchor)
    return start <= today <= start + timedelta(days=6)


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def event_date(event: CalendarEvent) -> date:
    if len(event.start_time) == 10:
        return date.fromisoformat(event.start_time)
    start = _parse_timestamp(event.start_time)
    if start.tzinfo is not None:
        start = start.astimezone()
    return start.date()


def event_sort_key(event: CalendarEvent) -> tuple[date, str]:
    if len(event.start_time) == 10:
        return (event_date(event), "")
    start = _parse_timestamp(event.start_time)
    if start.tzinfo is not None:
        start = start.astimezone()
    return (start.date(), start.strftime("%H:%M:%S"))


def events_in_week(events: Iterable[CalendarEvent], anchor: date | str) -> list[CalendarEvent]:
    days = set(week_dates(anchor))
    return sorted((e for e in events if event_date(e) in days), key=event_sort_key)


def event_time_label(event: CalendarEvent) -> str:
    if event.all_day or len(event.start_time) == 10:
        return "all day"
    start = _parse_timestamp(event.start_time)
    if start.tzinfo is not None:
        start = start.astimezone()
    return start.strftime("%I:%M %p").lstrip("0")
