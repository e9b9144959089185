"""Unit tests for webhook registration service."""

from unittest.mock import Mock

import pytest

from hostex_bridge.hostex_api.errors import HostexError
from hostex_bridge.services.webhook_registration import register_webhooks

WEBHOOK_URL = "https://bridge.example.com/hostex/webhooks"


@pytest.mark.unit
def test_register_webhooks_reuses_active_webhook() -> None:
    """Test an active webhook for the same URL is returned without creating another."""
    client = Mock()
    client.get_webhooks.return_value = [
        {"id": 1, "url": "https://other.example.com", "active": True},
        {"id": 2, "url": WEBHOOK_URL, "active": True},
    ]

    webhook = register_webhooks(client, WEBHOOK_URL)

    assert webhook["id"] == 2
    client.create_webhook.assert_not_called()


@pytest.mark.unit
def test_register_webhooks_creates_when_only_inactive_exists() -> None:
    """Test an inactive webhook for the same URL does not count as registered."""
    client = Mock()
    client.get_webhooks.return_value = [{"id": 3, "url": WEBHOOK_URL, "active": False}]
    client.create_webhook.return_value = {"id": 4, "url": WEBHOOK_URL, "active": True}

    webhook = register_webhooks(client, WEBHOOK_URL)

    assert webhook["id"] == 4
    client.create_webhook.assert_called_once_with(WEBHOOK_URL)


@pytest.mark.unit
def test_register_webhooks_propagates_hostex_errors() -> None:
    """Test a rejected registration raises so the caller can log it."""
    client = Mock()
    client.get_webhooks.return_value = []
    client.create_webhook.side_effect = HostexError("Invalid URL", error_code="400")

    with pytest.raises(HostexError):
        register_webhooks(client, WEBHOOK_URL)
