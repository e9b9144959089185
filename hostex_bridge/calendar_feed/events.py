"""
Turn Hostex reservations into calendar events.

Two display modes are supported:

* full day: one all-day event per booking spanning check-in to check-out
* check-in/out: two zero-length events per booking, at the property's
  check-in and check-out times

Cancelled bookings are dropped. A reservation that fails to render is logged
and skipped; it never aborts the batch.
"""

from __future__ import annotations

import math
from datetime import datetime, time
from typing import Callable, Iterable

import structlog

from hostex_bridge.calendar_feed.errors import ReservationProcessingError
from hostex_bridge.metrics import calendar_events_generated, reservation_processing_failures
from hostex_bridge.schemas.calendar import CalendarEvent
from hostex_bridge.schemas.properties import PropertyTimeConfig
from hostex_bridge.schemas.reservations import Reservation
from hostex_bridge.utils.datetime import calculate_nights

logger = structlog.get_logger(__name__)

TimeLookup = Callable[[int], PropertyTimeConfig]

GUEST_EMOJIS = (
    ("number_of_adults", "👤"),
    ("number_of_children", "👶"),
    ("number_of_infants", "🍼"),
    ("number_of_pets", "🐾"),
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def currency_symbol(currency: str | None) -> str:
    if currency is None or currency == "EUR":
        return "€"
    return currency


def _amounts(reservation: Reservation) -> tuple[float, float, str]:
    rates = reservation.rates
    total_rate = rates.total_rate if rates else None
    total_commission = rates.total_commission if rates else None
    rate = total_rate.amount if total_rate else 0.0
    commission = total_commission.amount if total_commission else 0.0
    symbol = currency_symbol(total_rate.currency if total_rate else None)
    return rate, commission, symbol


def generate_guest_emojis(reservation: Reservation) -> str:
    """One emoji per adult, child, infant and pet, in that order."""
    return "".join(
        emoji * max(getattr(reservation, field), 0) for field, emoji in GUEST_EMOJIS
    )


def generate_title(reservation: Reservation) -> str:
    """
    Build the calendar title for a reservation.

    Example:
        "John Doe #4 800€ (750€) 👤👤"

    Raises:
        ReservationProcessingError: If the reservation data cannot be rendered.
    """
    try:
        nights = calculate_nights(reservation.check_in_date, reservation.check_out_date)
        rate, commission, symbol = _amounts(reservation)
        net_rate = rate - commission
        emojis = generate_guest_emojis(reservation)
        return (
            f"{reservation.guest_name} #{nights} "
            f"{round_half_up(rate)}{symbol} ({round_half_up(net_rate)}{symbol}) {emojis}"
        )
    except Exception as err:
        raise ReservationProcessingError(
            reservation.reservation_code, "Failed to generate title for reservation"
        ) from err


def generate_description(reservation: Reservation) -> str:
    """
    Build the multi-line calendar description for a reservation.

    Raises:
        ReservationProcessingError: If the reservation data cannot be rendered.
    """
    try:
        nights = calculate_nights(reservation.check_in_date, reservation.check_out_date)
        rate, commission, symbol = _amounts(reservation)
        net_rate = rate - commission

        lines = [
            "BOOKING DETAILS",
            "",
            f"Guest: {reservation.guest_name or 'N/A'}",
            f"Email: {reservation.guest_email or 'N/A'}",
            f"Phone: {reservation.guest_phone or 'N/A'}",
            "",
            f"Number of Guests: {reservation.number_of_guests}",
            f"  - Adults: {reservation.number_of_adults}",
            f"  - Children: {reservation.number_of_children}",
            f"  - Infants: {reservation.number_of_infants}",
            f"  - Pets: {reservation.number_of_pets}",
            "",
            f"Stay Duration: {nights} night{'' if nights == 1 else 's'}",
            f"Check-in: {reservation.check_in_date.isoformat()}",
            f"Check-out: {reservation.check_out_date.isoformat()}",
            "",
            "FINANCIAL DETAILS",
            "",
            f"Total Rate: {round_half_up(rate)} {symbol}",
            f"Commission: {round_half_up(commission)} {symbol}",
            f"Net Rate: {round_half_up(net_rate)} {symbol}",
            "",
            "BOOKING INFORMATION",
            "",
            f"Channel: {reservation.channel_type}",
            f"Reservation Code: {reservation.reservation_code}",
            f"Status: {reservation.status}",
            f"Booked At: {reservation.booked_at}",
        ]

        if reservation.remarks:
            lines.extend(["", "REMARKS", "", reservation.remarks])

        if reservation.channel_remarks:
            lines.extend(["", "CHANNEL REMARKS", "", reservation.channel_remarks])

        return "\n".join(lines)
    except Exception as err:
        raise ReservationProcessingError(
            reservation.reservation_code, "Failed to generate description for reservation"
        ) from err


def _active(reservations: Iterable[Reservation]) -> list[Reservation]:
    return [r for r in reservations if not r.is_cancelled]


def generate_full_day_events(reservations: Iterable[Reservation]) -> list[CalendarEvent]:
    """
    Generate one all-day event per non-cancelled reservation.

    Args:
        reservations: Reservations in any status.

    Returns:
        list[CalendarEvent]: Events in input order; failed reservations are skipped.
    """
    events: list[CalendarEvent] = []

    for reservation in _active(reservations):
        try:
            event = CalendarEvent(
                title=generate_title(reservation),
                description=generate_description(reservation),
                start=reservation.check_in_date,
                end=reservation.check_out_date,
                is_all_day=True,
                uid=f"booking-{reservation.reservation_code}",
                reservation=reservation,
            )
        except Exception as e:
            reservation_processing_failures.labels(mode="full_day").inc()
            logger.exception(
                "calendar_event_failed",
                reservation_code=reservation.reservation_code,
                error=str(e),
            )
            continue
        events.append(event)

    calendar_events_generated.labels(mode="full_day").inc(len(events))
    return events


def generate_checkinout_events(
    reservations: Iterable[Reservation], get_times: TimeLookup
) -> list[CalendarEvent]:
    """
    Generate a check-in and a check-out event per non-cancelled reservation.

    Args:
        reservations: Reservations in any status.
        get_times: Lookup of check-in/out times by property id, with its own default.

    Returns:
        list[CalendarEvent]: Pairs of events in input order. A reservation that
        fails contributes neither event.
    """
    events: list[CalendarEvent] = []

    for reservation in _active(reservations):
        try:
            times = get_times(reservation.property_id)
            title = generate_title(reservation)
            description = generate_description(reservation)

            check_in_at = datetime.combine(
                reservation.check_in_date, time(times.check_in_hour, times.check_in_minute)
            )
            check_out_at = datetime.combine(
                reservation.check_out_date, time(times.check_out_hour, times.check_out_minute)
            )

            pair = [
                CalendarEvent(
                    title=f"Check-in: {title}",
                    description=description,
                    start=check_in_at,
                    end=check_in_at,
                    is_all_day=False,
                    uid=f"checkin-{reservation.reservation_code}",
                    reservation=reservation,
                ),
                CalendarEvent(
                    title=f"Check-out: {title}",
                    description=description,
                    start=check_out_at,
                    end=check_out_at,
                    is_all_day=False,
                    uid=f"checkout-{reservation.reservation_code}",
                    reservation=reservation,
                ),
            ]
        except Exception as e:
            reservation_processing_failures.labels(mode="checkinout").inc()
            logger.exception(
                "calendar_events_failed",
                reservation_code=reservation.reservation_code,
                error=str(e),
            )
            continue
        events.extend(pair)

    calendar_events_generated.labels(mode="checkinout").inc(len(events))
    return events
