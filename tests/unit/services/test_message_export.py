"""
Unit tests for the message transcript renderer and export pipeline.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable
from unittest.mock import Mock

import pytest

from hostex_bridge.hostex_api.errors import HostexNetworkError
from hostex_bridge.schemas.messages import (
    Conversation,
    ConversationDetails,
    ConversationPage,
    Message,
)
from hostex_bridge.services.message_export import BANNER, RULE, export_messages, render_transcript

GENERATED_AT = datetime(2025, 8, 1, 12, 0, tzinfo=timezone.utc)
CUTOFF = datetime(2025, 7, 15, tzinfo=timezone.utc)


@pytest.mark.unit
def test_transcript_layout(
    message_factory: Callable[..., Message],
    thread_factory: Callable[..., ConversationDetails],
) -> None:
    """Test the header, conversation block, message lines and footer."""
    thread = thread_factory(
        "conv-1",
        [
            message_factory(
                "m1", datetime(2025, 7, 16, 18, 31, 12, tzinfo=timezone.utc), "Hi!\nIs parking free?"
            ),
            message_factory(
                "m2",
                datetime(2025, 7, 16, 19, 0, tzinfo=timezone.utc),
                "",
                sent_by="host",
                message_type="image",
                image_url="https://cdn.example.com/map.png",
            ),
        ],
        reservation_code="0-ABC123-xyz",
        channel="airbnb",
    )

    lines = render_transcript([thread], CUTOFF, GENERATED_AT).split("\n")

    assert len(BANNER) == 119 and len(RULE) == 119
    assert lines[:9] == [
        BANNER,
        "HOSTEX MESSAGE EXPORT FOR LLM TRAINING".rjust(70),
        "Generated: 2025-08-01T12:00:00.000Z".rjust(70),
        "Messages Since: 2025-07-15T00:00:00.000Z".rjust(70),
        "Total Conversations: 1".rjust(70),
        "Total Messages: 2".rjust(70),
        BANNER,
        "",
        "",
    ]
    assert lines[9:25] == [
        RULE,
        "CONVERSATION ID: conv-1 | Guest: Jane Guest | Property: Sea View Loft",
        "Reservation: 0-ABC123-xyz",
        "Channel: airbnb",
        "Last Message: 2025-07-20T10:00:00.000Z",
        "Total Messages: 2",
        RULE,
        "",
        "[GUEST] (2025-07-16T18:31:12.000Z)",
        "  Hi!",
        "  Is parking free?",
        "",
        "[HOST] (2025-07-16T19:00:00.000Z)",
        "[IMAGE]: https://cdn.example.com/map.png",
        "  ",
        "",
    ]
    assert lines[25:] == ["", "", BANNER, "END OF MESSAGE EXPORT".rjust(70), BANNER]


@pytest.mark.unit
def test_transcript_without_cutoff_or_optional_lines(
    message_factory: Callable[..., Message],
    thread_factory: Callable[..., ConversationDetails],
) -> None:
    """Test the cutoff, reservation and channel lines are omitted when unset."""
    thread = thread_factory("conv-2", [message_factory("m1", GENERATED_AT)])

    content = render_transcript([thread], None, GENERATED_AT)

    assert "Messages Since:" not in content
    assert "Reservation:" not in content
    assert "Channel:" not in content
    assert "WARNING:" not in content


@pytest.mark.unit
def test_transcript_wraps_long_lines(
    message_factory: Callable[..., Message],
    thread_factory: Callable[..., ConversationDetails],
) -> None:
    """Test long message lines are wrapped and every piece is indented."""
    body = " ".join(["word"] * 40)
    thread = thread_factory("conv-3", [message_factory("m1", GENERATED_AT, body)])

    lines = render_transcript([thread], None, GENERATED_AT).split("\n")
    body_lines = [line for line in lines if line.startswith("  word")]

    assert len(body_lines) == 2
    assert all(len(line) <= 122 for line in body_lines)


@pytest.mark.unit
def test_truncated_transcript_carries_warning(
    message_factory: Callable[..., Message],
    thread_factory: Callable[..., ConversationDetails],
) -> None:
    """Test a truncated export says so in its header."""
    thread = thread_factory("conv-4", [message_factory("m1", GENERATED_AT)])

    lines = render_transcript([thread], None, GENERATED_AT, truncated=True).split("\n")

    header = lines[: lines.index(BANNER, 1)]
    assert any(line.strip().startswith("WARNING:") for line in header)


@pytest.mark.unit
def test_export_messages_end_to_end() -> None:
    """Test the pipeline filters by cutoff and skips conversations that fail."""
    client = Mock()
    client.get_conversations.return_value = ConversationPage(
        data=[Conversation(id="keep"), Conversation(id="fails"), Conversation(id="old")],
        total=3,
    )

    def details(conversation_id: str, timeout: float | None = None) -> ConversationDetails:
        if conversation_id == "fails":
            raise HostexNetworkError("Read timed out")
        sent_at = (
            datetime(2025, 1, 1, tzinfo=timezone.utc)
            if conversation_id == "old"
            else datetime(2025, 8, 1, tzinfo=timezone.utc)
        )
        return ConversationDetails(
            conversation=Conversation(id=conversation_id, guest_name="Guest"),
            messages=[
                Message(
                    id=f"{conversation_id}-1",
                    conversation_id=conversation_id,
                    content="Thanks!",
                    sent_by="guest",
                    sent_at=sent_at,
                )
            ],
        )

    client.get_conversation_details.side_effect = details

    export = export_messages(client, CUTOFF)

    assert export.truncated is False
    assert "CONVERSATION ID: keep" in export.content
    assert "CONVERSATION ID: fails" not in export.content
    assert "CONVERSATION ID: old" not in export.content
    assert "Total Conversations: 1".rjust(70) in export.content


@pytest.mark.unit
def test_export_messages_reports_truncation() -> None:
    """Test a page failure is surfaced through the truncated flag."""
    client = Mock()
    client.get_conversations.side_effect = HostexNetworkError("Connection reset")

    export = export_messages(client, None)

    assert export.truncated is True
    assert "Total Conversations: 0".rjust(70) in export.content
    client.get_conversation_details.assert_not_called()
