"""
Live checks that the Hostex API still returns the shapes the client parses.
"""

import os

import pytest

from hostex_bridge.dependencies import build_hostex_client
from hostex_bridge.hostex_api.client import HostexClient

# === Config ===

# Skip unless real Hostex credentials are available
pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not os.getenv("HOSTEX_ACCESS_TOKEN") or os.getenv("CI") == "true",
        reason="Schema validation tests require real Hostex API credentials",
    ),
]

# === Fixtures ===


@pytest.fixture(scope="module")
def client() -> HostexClient:
    """Hostex client built from the environment once per module."""
    return build_hostex_client()


# === Schema Check: Per Object Type ===


def test_reservations_structure(client: HostexClient) -> None:
    """
    Validates that reservations parse with the fields the calendar needs.
    """
    reservations = client.get_reservations(page_size=10)

    for reservation in reservations:
        assert reservation.reservation_code
        assert reservation.property_id
        assert reservation.check_out_date >= reservation.check_in_date


def test_conversations_structure(client: HostexClient) -> None:
    """
    Validates the conversation listing and the detail of its first entry.
    """
    page = client.get_conversations(page=1, page_size=5)

    assert page.total >= len(page.data)
    if not page.data:
        pytest.skip("No conversations on this account")

    details = client.get_conversation_details(page.data[0].id)
    for message in details.messages:
        assert message.sent_by in ("host", "guest")
        assert message.sent_at.tzinfo is not None


def test_webhooks_structure(client: HostexClient) -> None:
    """
    Validates that each webhook carries the keys registration relies on.
    """
    for webhook in client.get_webhooks():
        assert "url" in webhook
        assert "active" in webhook
