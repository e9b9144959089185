"""
Hostex webhook registration service.

Makes sure Hostex posts reservation and message events to this service.
Registration is idempotent: an active webhook for the same URL is reused.
"""

from typing import Any, Dict, List, Optional, Protocol

import structlog

logger = structlog.get_logger(__name__)


class WebhookRegistry(Protocol):
    def get_webhooks(self) -> List[Dict[str, Any]]: ...

    def create_webhook(self, url: str, events: Optional[List[str]] = None) -> Dict[str, Any]: ...


def register_webhooks(client: WebhookRegistry, webhook_url: str) -> Dict[str, Any]:
    """
    Register the webhook with Hostex unless an active one already exists.

    Args:
        client: Webhook registry (normally HostexClient).
        webhook_url (str): Public URL Hostex should call.

    Returns:
        Dict[str, Any]: The existing or newly created webhook record.

    Raises:
        HostexError: If Hostex rejects the registration.
    """
    existing = next(
        (
            webhook
            for webhook in client.get_webhooks()
            if webhook.get("url") == webhook_url and webhook.get("active")
        ),
        None,
    )
    if existing is not None:
        logger.info("webhook_exists", webhook_id=existing.get("id"), url=webhook_url)
        return existing

    logger.info("webhook_registering", url=webhook_url)
    webhook = client.create_webhook(webhook_url)
    logger.info("webhook_registered", webhook_id=webhook.get("id"), url=webhook_url)
    return webhook
