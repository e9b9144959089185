"""Flat-text transcript export of all Hostex guest conversations."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import structlog

from hostex_bridge.metrics import message_export_conversations
from hostex_bridge.normalizers.messages import prepare_conversations, wrap_text
from hostex_bridge.pollers.messages import (
    ConversationSource,
    fetch_all_conversations,
    fetch_conversation_messages,
)
from hostex_bridge.schemas.messages import ConversationDetails, Message
from hostex_bridge.utils.datetime import to_iso_z, utc_now

logger = structlog.get_logger(__name__)

BANNER = "=" * 119
RULE = "-" * 119
TITLE_COLUMN = 70


@dataclass(frozen=True)
class MessageExport:
    """Rendered transcript plus whether the conversation listing was cut short."""

    content: str
    truncated: bool = False


def _render_message(message: Message) -> List[str]:
    sender = "[HOST]" if message.sent_by == "host" else "[GUEST]"
    lines = [f"{sender} ({to_iso_z(message.sent_at)})"]

    if message.message_type == "image" and message.image_url:
        lines.append(f"[IMAGE]: {message.image_url}")

    for raw_line in message.content.split("\n"):
        lines.extend(f"  {line}" for line in wrap_text(raw_line))

    lines.append("")
    return lines


def _render_conversation(thread: ConversationDetails) -> List[str]:
    conversation = thread.conversation
    lines = [
        RULE,
        f"CONVERSATION ID: {conversation.id} | Guest: {conversation.guest_name} "
        f"| Property: {conversation.property_id}",
    ]
    if conversation.reservation_code:
        lines.append(f"Reservation: {conversation.reservation_code}")
    if conversation.channel:
        lines.append(f"Channel: {conversation.channel}")
    lines.extend(
        [
            f"Last Message: {conversation.last_message_at}",
            f"Total Messages: {len(thread.messages)}",
            RULE,
            "",
        ]
    )

    for message in thread.messages:
        lines.extend(_render_message(message))

    lines.extend(["", ""])
    return lines


def render_transcript(
    threads: List[ConversationDetails],
    cutoff: Optional[datetime],
    generated_at: datetime,
    truncated: bool = False,
) -> str:
    """
    Render prepared conversations as the export transcript.

    Args:
        threads: Conversations already sorted and filtered by prepare_conversations.
        cutoff: Cutoff shown in the header, if any.
        generated_at: Timestamp shown as the generation time.
        truncated: Add a warning that the conversation listing was incomplete.

    Returns:
        str: Transcript lines joined with newlines.
    """
    total_messages = sum(len(t.messages) for t in threads)

    lines = [
        BANNER,
        "HOSTEX MESSAGE EXPORT FOR LLM TRAINING".rjust(TITLE_COLUMN),
        f"Generated: {to_iso_z(generated_at)}".rjust(TITLE_COLUMN),
    ]
    if cutoff is not None:
        lines.append(f"Messages Since: {to_iso_z(cutoff)}".rjust(TITLE_COLUMN))
    lines.append(f"Total Conversations: {len(threads)}".rjust(TITLE_COLUMN))
    lines.append(f"Total Messages: {total_messages}".rjust(TITLE_COLUMN))
    if truncated:
        lines.append(
            "WARNING: conversation listing failed part way; this export is incomplete".rjust(
                TITLE_COLUMN
            )
        )
    lines.extend([BANNER, "", ""])

    for thread in threads:
        lines.extend(_render_conversation(thread))

    lines.extend([BANNER, "END OF MESSAGE EXPORT".rjust(TITLE_COLUMN), BANNER])
    return "\n".join(lines)


def export_messages(
    client: ConversationSource, cutoff: Optional[datetime] = None
) -> MessageExport:
    """
    Run the full export: page conversations, fetch messages, filter and render.

    Args:
        client: Conversation source (normally HostexClient).
        cutoff: Messages sent before this instant are left out.

    Returns:
        MessageExport: The transcript and the truncation flag.
    """
    logger.info("message_export_started", cutoff=cutoff.isoformat() if cutoff else None)

    listing = fetch_all_conversations(client)
    if listing.truncated:
        logger.warning(
            "message_export_truncated",
            pages_fetched=listing.pages_fetched,
            conversations=len(listing.conversations),
        )

    threads = fetch_conversation_messages(client, listing.conversations)
    prepared = prepare_conversations(threads, cutoff)
    message_export_conversations.labels(status="exported").inc(len(prepared))

    content = render_transcript(prepared, cutoff, utc_now(), truncated=listing.truncated)

    logger.info(
        "message_export_completed",
        conversations=len(prepared),
        messages=sum(len(t.messages) for t in prepared),
        truncated=listing.truncated,
    )
    return MessageExport(content=content, truncated=listing.truncated)
