"""
Calendar rendering helpers: month grid, day/week event lists and event cards.

Weeks run Sunday to Saturday. Events are placed on days using their start
time in ``settings.DEFAULT_TIMEZONE``.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from backend.config import settings

WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
PREVIEW_LIMIT = 3


def _zone() -> ZoneInfo:
    return ZoneInfo(settings.DEFAULT_TIMEZONE)


def parse_event_time(value: str) -> datetime:
    """ISO datetime or bare date -> aware datetime in the display zone."""
    tz = _zone()
    if len(value) == 10:
        return datetime.combine(date.fromisoformat(value), datetime.min.time(), tzinfo=tz)
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def event_start(event: dict) -> datetime:
    return parse_event_time(event["start"])


def event_day(event: dict) -> date:
    return event_start(event).date()


def start_of_week(day: date) -> date:
    return day - timedelta(days=(day.weekday() + 1) % 7)


def end_of_week(day: date) -> date:
    return start_of_week(day) + timedelta(days=6)


def week_bounds(day: date) -> tuple[date, date]:
    return start_of_week(day), end_of_week(day)


def shift_month(day: date, months: int) -> date:
    """Move by whole months, clamping to the last day of the target month."""
    index = day.year * 12 + day.month - 1 + months
    year, month = divmod(index, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def sort_events(events: list[dict]) -> list[dict]:
    return sorted(events, key=event_start)


def events_for_day(events: list[dict], day: date) -> list[dict]:
    return [e for e in events if event_day(e) == day]


def events_for_week(events: list[dict], day: date) -> list[dict]:
    first, last = week_bounds(day)
    return [e for e in events if first <= event_day(e) <= last]


def format_clock(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:{dt.minute:02d} {meridiem}"


def day_title(day: date) -> str:
    return f"Events for {day:%B} {day.day}, {day.year}"


def week_title(day: date) -> str:
    first, last = week_bounds(day)
    return f"Events for week of {first:%b} {first.day} - {last:%b} {last.day}, {last.year}"


def month_header(day: date) -> str:
    return f"{day:%B} {day.year}"


def _preview_line(event: dict) -> str:
    if event.get("all_day"):
        return f"All day {event['summary']}"
    return f"{event_start(event):%H:%M} {event['summary']}"


def month_grid(
    events: list[dict],
    selected_date: date,
    selected_week: Optional[date] = None,
    today: Optional[date] = None,
) -> dict:
    today = today or datetime.now(_zone()).date()
    first = selected_date.replace(day=1)
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
    grid_start, grid_end = start_of_week(first), end_of_week(last)
    week_start = start_of_week(selected_week) if selected_week else None

    by_day: dict[date, list[dict]] = {}
    for e in sort_events(events):
        by_day.setdefault(event_day(e), []).append(e)

    days = []
    current = grid_start
    while current <= grid_end:
        day_events = by_day.get(current, [])
        days.append({
            "date": current.isoformat(),
            "day": current.day,
            "in_current_month": current.month == selected_date.month,
            "is_selected": current == selected_date,
            "is_today": current == today,
            "in_selected_week": week_start is not None and start_of_week(current) == week_start,
            "event_count": len(day_events),
            "preview": [_preview_line(e) for e in day_events[:PREVIEW_LIMIT]],
            "more": max(len(day_events) - PREVIEW_LIMIT, 0),
        })
        current += timedelta(days=1)

    return {"header": month_header(selected_date), "weekdays": WEEKDAY_LABELS, "days": days}


def event_card(event: dict) -> dict:
    start = event_start(event)
    end = parse_event_time(event["end"])
    if event.get("all_day"):
        time_range = "All day"
    else:
        time_range = f"{format_clock(start)} - {format_clock(end)}"
    return {
        **event,
        "time_range": time_range,
        "duration_minutes": int((end - start).total_seconds() // 60),
        "join_url": event.get("conference_uri") or event.get("hangout_link"),
    }


def displayed_events(events: list[dict], day: date, view: str = "day") -> dict:
    """Title plus sorted cards for the selected day or its week."""
    if view == "week":
        week = events_for_week(events, day)
        if week:
            return {"title": week_title(day), "events": [event_card(e) for e in sort_events(week)]}
    selected = events_for_day(events, day)
    return {"title": day_title(day), "events": [event_card(e) for e in sort_events(selected)]}
