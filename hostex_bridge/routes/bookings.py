"""
Booking endpoints: raw upcoming reservations and calendar feeds.

The ICS feeds are meant to be subscribed to from a calendar app; the JSON
variants return the same events for debugging.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, List

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from hostex_bridge.calendar_feed.events import generate_checkinout_events, generate_full_day_events
from hostex_bridge.calendar_feed.ics import generate_ics
from hostex_bridge.dependencies import get_hostex_client, get_properties
from hostex_bridge.hostex_api.client import HostexClient
from hostex_bridge.properties import PropertyRegistry
from hostex_bridge.schemas.calendar import CalendarEvent

logger = structlog.get_logger(__name__)

router = APIRouter()

ICS_MEDIA_TYPE = "text/calendar; charset=utf-8"


def _ics_response(events: List[CalendarEvent], filename: str) -> Response:
    return Response(
        content=generate_ics(events),
        media_type=ICS_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _json_events(events: List[CalendarEvent]) -> List[Dict[str, Any]]:
    return [event.to_json() for event in events]


@router.get("/next")
def next_bookings(hostex: HostexClient = Depends(get_hostex_client)) -> JSONResponse:
    """
    Upcoming reservations as returned by Hostex.

    Example:
        >>> GET /bookings/next
        {"bookings": {"reservations": [...]}, "page": 1, "pageSize": 100,
         "requestId": "5f0c...", "total": 2}
    """
    reservations = hostex.get_reservations()
    return JSONResponse(
        content={
            "bookings": {
                "reservations": [r.model_dump(mode="json") for r in reservations],
            },
            "page": 1,
            "pageSize": 100,
            "requestId": str(uuid.uuid4()),
            "total": len(reservations),
        }
    )


@router.get("/calendar/full-day.ics")
def full_day_calendar(hostex: HostexClient = Depends(get_hostex_client)) -> Response:
    events = generate_full_day_events(hostex.get_reservations())
    return _ics_response(events, "bookings-full-day.ics")


@router.get("/calendar/checkinout.ics")
def checkinout_calendar(
    hostex: HostexClient = Depends(get_hostex_client),
    properties: PropertyRegistry = Depends(get_properties),
) -> Response:
    events = generate_checkinout_events(hostex.get_reservations(), properties.get_property_times)
    return _ics_response(events, "bookings-checkinout.ics")


@router.get("/calendar/full-day.json")
def full_day_calendar_json(hostex: HostexClient = Depends(get_hostex_client)) -> JSONResponse:
    events = generate_full_day_events(hostex.get_reservations())
    return JSONResponse(content=_json_events(events))


@router.get("/calendar/checkinout.json")
def checkinout_calendar_json(
    hostex: HostexClient = Depends(get_hostex_client),
    properties: PropertyRegistry = Depends(get_properties),
) -> JSONResponse:
    events = generate_checkinout_events(hostex.get_reservations(), properties.get_property_times)
    return JSONResponse(content=_json_events(events))
