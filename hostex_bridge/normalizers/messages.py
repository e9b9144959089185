from datetime import datetime
from typing import List, Optional

import structlog

from hostex_bridge.metrics import message_export_conversations
from hostex_bridge.schemas.messages import ConversationDetails

logger = structlog.get_logger(__name__)

LINE_WIDTH = 120


def prepare_conversations(
    threads: List[ConversationDetails], cutoff: Optional[datetime] = None
) -> List[ConversationDetails]:
    """
    Sort each thread oldest to newest and apply the cutoff.

    Messages sent strictly before ``cutoff`` are dropped, and threads left
    without messages are removed entirely.

    Args:
        threads: Conversations with their messages, in API order.
        cutoff: Optional lower bound for message timestamps.

    Returns:
        List[ConversationDetails]: Non-empty threads, order preserved.
    """
    prepared: List[ConversationDetails] = []

    for thread in threads:
        messages = sorted(thread.messages, key=lambda m: m.sent_at)
        if cutoff is not None:
            messages = [m for m in messages if m.sent_at >= cutoff]

        if not messages:
            message_export_conversations.labels(status="empty").inc()
            continue

        prepared.append(thread.model_copy(update={"messages": messages}))

    logger.info(
        "conversations_filtered",
        cutoff=cutoff.isoformat() if cutoff else None,
        conversations=len(prepared),
        messages=sum(len(t.messages) for t in prepared),
    )
    return prepared


def wrap_text(line: str, width: int = LINE_WIDTH) -> List[str]:
    """
    Greedy word wrap on single spaces.

    Words are added to the current line until the next one would push it past
    ``width``. A word longer than ``width`` is kept whole on its own line.

    Example:
        >>> wrap_text("a" * 130)
        ['aaaa...']  # one unbroken 130 character line
    """
    if len(line) <= width:
        return [line]

    wrapped: List[str] = []
    current = ""
    for word in line.split(" "):
        if len(current) + len(word) + 1 > width:
            if current:
                wrapped.append(current)
            current = word
        else:
            current = f"{current} {word}" if current else word
    if current:
        wrapped.append(current)
    return wrapped
