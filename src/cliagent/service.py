"""Service that streams CLI responses as typed events."""

from __future__ import annotations

import asyncio
import logging
import shlex
from contextlib import aclosing
from typing import Any, AsyncIterator

from .errors import ClaudeServiceError
from .events import StreamEvent, StartEvent, CompleteEvent, ErrorEvent
from .models import ServiceOptions, SendMessageOptions, ServiceStatus
from .process_manager import ProcessManager
from .stream_parser import StreamParser
from .context_builder import ContextBuilder
from .constants import BASE_CLI_ARGS

logger = logging.getLogger(__name__)


class ClaudeService:
    """Sends messages to the CLI and streams the response as events.

    Only one message can be in flight at a time. Each ``send_message`` runs
    a fresh CLI process, feeds its output through a fresh ``StreamParser``
    and yields the resulting events in the order their lines arrived. The
    stream always starts with a ``start`` event and ends with exactly one
    ``complete`` or ``error`` event.

    Args:
        options: Service configuration.
        process_manager: Process manager to use. Built from
            ``options.cli_path`` when omitted.
        context_builder: Context builder to use. Built from
            ``options.context_builder`` when omitted.
    """

    def __init__(
        self,
        options: ServiceOptions,
        *,
        process_manager: ProcessManager | None = None,
        context_builder: ContextBuilder | None = None,
    ) -> None:
        self.options = options
        self._process_manager = process_manager or ProcessManager(options.cli_path)
        self._context_builder = context_builder or ContextBuilder(options.context_builder)
        self._status = ServiceStatus()
        self._cancel_event: asyncio.Event | None = None

    async def send_message(
        self,
        message: str,
        options: SendMessageOptions | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Send a message and stream the response.

        Failures of the CLI do not raise: they end the stream with an
        ``error`` event, so content already yielded stays valid.

        Args:
            message: The user message.
            options: Context, system prompt and extra directories.

        Yields:
            StreamEvent: Events in arrival order, ending with ``complete``
                or ``error``.

        Raises:
            ClaudeServiceError: ``BUSY`` if another message is in flight.
                Nothing is started in that case.
        """
        if self._status.state in ("sending", "streaming"):
            raise ClaudeServiceError("Service is busy", "BUSY")

        options = options or SendMessageOptions()
        cancel_event = asyncio.Event()
        self._cancel_event = cancel_event
        self._status.state = "sending"
        self._status.error_message = None
        parser = StreamParser()

        try:
            yield StartEvent()

            args = self._build_command(message, options)
            if self.options.debug:
                logger.info("Running: %s", shlex.join([self.options.cli_path, *args]))

            stream = self._process_manager.spawn(
                args,
                cwd=self.options.working_directory,
                cancel_event=cancel_event,
                timeout_ms=self.options.timeout_ms,
            )
            async with aclosing(stream) as chunks:
                self._status.state = "streaming"
                async for chunk in chunks:
                    if self.options.debug:
                        logger.info("Chunk: %r", chunk)
                    for event in parser.parse(chunk):
                        yield event

            for event in parser.flush():
                yield event

            self._status.state = "idle"
            yield CompleteEvent()

        except Exception as exc:
            if isinstance(exc, ClaudeServiceError) and exc.code == "CANCELLED":
                logger.info("Request cancelled: %s", exc.message)
                self._status.state = "idle"
                yield ErrorEvent(message="Request cancelled", code="CANCELLED")
            else:
                error_message = str(exc) or "Unknown error"
                logger.error("Request failed: %s", error_message)
                self._status.state = "error"
                self._status.error_message = error_message
                yield ErrorEvent(message=error_message, code="UNKNOWN")

        finally:
            # Reached on every path, including a consumer that stops early
            if self._status.state in ("sending", "streaming"):
                self._status.state = "idle"
            if self._cancel_event is cancel_event:
                self._cancel_event = None

    def cancel(self) -> None:
        """Request cancellation of the message in flight, if any.

        Returns immediately. The stream acknowledges with an ``error`` event
        whose code is ``CANCELLED``.
        """
        if self._cancel_event is not None:
            self._cancel_event.set()

    async def check_availability(self) -> bool:
        """Probe the CLI and record the result in the status.

        Returns:
            bool: True if the CLI can be run.
        """
        try:
            result = await self._process_manager.check_availability()
        except Exception as exc:
            logger.warning("Availability check failed: %s", exc)
            self._status.ready = False
            return False

        self._status.ready = result.available
        if result.version:
            self._status.cli_version = result.version
        return result.available

    def get_status(self) -> ServiceStatus:
        """Return a copy of the current status."""
        return self._status.model_copy()

    def dispose(self) -> None:
        """Cancel any request in flight and terminate its process.

        Safe to call repeatedly and while idle.
        """
        self.cancel()
        self._process_manager.kill()

    def _build_command(self, message: str, options: SendMessageOptions) -> list[str]:
        args = list(BASE_CLI_ARGS)

        if options.context is not None:
            args += ["--system-prompt", self._context_builder.build(options.context)]
        elif options.system_prompt:
            args += ["--system-prompt", options.system_prompt]

        for path in options.include_files:
            args += ["--add-dir", path]

        # The message is always the last positional argument
        args.append(message)
        return args


def create_service(**kwargs: Any) -> ClaudeService:
    """Create a ``ClaudeService`` from ``ServiceOptions`` keyword arguments.

    Args:
        **kwargs: Fields of ``ServiceOptions``, e.g. ``working_directory``.

    Returns:
        ``ClaudeService``: A new idle service.
    """
    return ClaudeService(ServiceOptions(**kwargs))
