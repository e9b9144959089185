"""Serialize calendar events into an iCalendar (ICS) document."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Union

import structlog
from icalendar import Calendar, Event

from hostex_bridge.calendar_feed.errors import CalendarEncodingError
from hostex_bridge.schemas.calendar import CalendarEvent
from hostex_bridge.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

PRODID = "-//hostex-bridge//bookings calendar//EN"


def _event_time(value: Union[date, datetime], is_all_day: bool) -> Union[date, datetime]:
    if is_all_day:
        # All-day events are bare (year, month, day) triples
        return value.date() if isinstance(value, datetime) else value
    if not isinstance(value, datetime):
        raise ValueError(f"Timed event needs a timestamp, got {value!r}")
    return value.replace(second=0, microsecond=0)


def generate_ics(events: Iterable[CalendarEvent]) -> str:
    """
    Encode events as an ICS calendar.

    All-day events use DATE values; timed events use floating local
    DATE-TIME values with start equal to end.

    Args:
        events: Calendar events, in output order.

    Returns:
        str: The ICS document.

    Raises:
        CalendarEncodingError: If any event cannot be encoded. No partial
            document is returned.
    """
    calendar = Calendar()
    calendar.add("prodid", PRODID)
    calendar.add("version", "2.0")
    calendar.add("calscale", "GREGORIAN")

    stamp = utc_now().replace(microsecond=0)
    count = 0

    try:
        for event in events:
            component = Event()
            component.add("uid", event.uid)
            component.add("dtstamp", stamp)
            component.add("summary", event.title)
            component.add("description", event.description)
            component.add("dtstart", _event_time(event.start, event.is_all_day))
            component.add("dtend", _event_time(event.end, event.is_all_day))
            calendar.add_component(component)
            count += 1

        content = calendar.to_ical().decode("utf-8")
    except Exception as err:
        logger.error("ics_generation_failed", error=str(err))
        raise CalendarEncodingError(f"Failed to generate ICS: {err}") from err

    logger.info("ics_generated", event_count=count)
    return content
