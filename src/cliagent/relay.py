"""Forwarding of a request's events to an opaque push sink."""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import Any, Callable

from .errors import ClaudeServiceError
from .models import SendMessageOptions
from .service import ClaudeService

logger = logging.getLogger(__name__)

EventSink = Callable[[dict[str, Any]], None]
"""Callable receiving each event as a plain dictionary."""


async def relay(
    service: ClaudeService,
    message: str,
    sink: EventSink,
    options: SendMessageOptions | None = None,
) -> int:
    """Stream one message and push every event to a sink.

    This is the boundary a UI transport (an IPC channel, a websocket) plugs
    into. Errors raised by the service, such as ``BUSY``, are pushed as a
    single ``error`` event without a code instead of being raised.
    Exceptions raised by the sink propagate after the request is closed.

    Args:
        service: The service to send the message with.
        message: The user message.
        sink: Receives each event, converted with ``to_dict()``.
        options: Options forwarded to ``send_message``.

    Returns:
        int: Number of events pushed to the sink.
    """
    pushed = 0
    try:
        # Closed even when the sink raises
        async with aclosing(service.send_message(message, options)) as events:
            async for event in events:
                logger.debug("Relaying %s event", event.type)
                sink(event.to_dict())
                pushed += 1
    except ClaudeServiceError as exc:
        logger.error("Relay of message failed: %s", exc.message)
        sink({"type": "error", "message": exc.message})
        pushed += 1

    logger.debug("Relay complete, %d events pushed", pushed)
    return pushed
