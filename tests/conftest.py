"""
Shared fixtures and builders for the test suite.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import pytest

from hostex_bridge.properties import PropertyRegistry
from hostex_bridge.schemas.messages import Conversation, ConversationDetails, Message
from hostex_bridge.schemas.reservations import Reservation


def make_reservation(**overrides: Any) -> Reservation:
    """Build a reservation for John Doe: 4 nights, 800 EUR, 50 EUR commission, 2 adults."""
    payload: dict[str, Any] = {
        "reservation_code": "0-ABC123-xyz",
        "property_id": 123456,
        "check_in_date": "2024-12-01",
        "check_out_date": "2024-12-05",
        "status": "accepted",
        "guest_name": "John Doe",
        "guest_email": "john@example.com",
        "guest_phone": "+33600000000",
        "number_of_guests": 2,
        "number_of_adults": 2,
        "rates": {
            "total_rate": {"amount": 800, "currency": "EUR"},
            "total_commission": {"amount": 50, "currency": "EUR"},
        },
        "channel_type": "airbnb",
        "booked_at": "2024-11-01T10:00:00Z",
    }
    payload.update(overrides)
    return Reservation.model_validate(payload)


def make_message(
    message_id: str,
    sent_at: datetime,
    content: str = "Hello",
    sent_by: str = "guest",
    conversation_id: str = "conv-1",
    **extra: Any,
) -> Message:
    return Message(
        id=message_id,
        conversation_id=conversation_id,
        content=content,
        sent_by=sent_by,  # type: ignore[arg-type]
        sent_at=sent_at,
        **extra,
    )


def make_thread(conversation_id: str, messages: list[Message], **extra: Any) -> ConversationDetails:
    conversation = Conversation(
        id=conversation_id,
        guest_name=extra.pop("guest_name", "Jane Guest"),
        property_id=extra.pop("property_id", "Sea View Loft"),
        last_message_at=extra.pop("last_message_at", "2025-07-20T10:00:00.000Z"),
        **extra,
    )
    return ConversationDetails(conversation=conversation, messages=messages)


@pytest.fixture
def reservation_factory() -> Callable[..., Reservation]:
    return make_reservation


@pytest.fixture
def utc() -> Callable[..., datetime]:
    """Shorthand for building aware UTC datetimes."""

    def _utc(*args: int) -> datetime:
        return datetime(*args, tzinfo=timezone.utc)

    return _utc


@pytest.fixture
def property_registry() -> PropertyRegistry:
    """Two properties mirroring the example configuration file."""
    return PropertyRegistry.from_dict(
        {
            "123456": {
                "times": {
                    "check_in_hour": 16,
                    "check_in_minute": 0,
                    "check_out_hour": 12,
                    "check_out_minute": 0,
                },
                "voucher_greenlist": ["SUMMER2024", "WELCOME10"],
                "thirdparty_account_id": "422121",
                "loyalty_to_voucher": {
                    "discount_type": "flat",
                    "minimum_stay": 1,
                    "number_of_redemptions": 1,
                },
            },
            "789012": {
                "times": {
                    "check_in_hour": 15,
                    "check_in_minute": 0,
                    "check_out_hour": 11,
                    "check_out_minute": 0,
                },
                "voucher_greenlist": [],
                "thirdparty_account_id": "422122",
                "loyalty_to_voucher": {
                    "discount_type": "percent",
                    "minimum_stay": 2,
                    "number_of_redemptions": 3,
                },
            },
        }
    )


@pytest.fixture
def message_factory() -> Callable[..., Message]:
    return make_message


@pytest.fixture
def thread_factory() -> Callable[..., ConversationDetails]:
    return make_thread
