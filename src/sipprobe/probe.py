# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Probe orchestration.

One transport strategy runs as its own task and reports over a queue: first
the request it wrote, then exactly one outcome. The orchestrator races the next
queued event against a single fixed deadline and an external cancel signal and
commits to whichever comes first.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from .config import ProbeSettings, load_probe_settings
from .errors import TransportError, error_category_to_reason
from .models import ProbeError, ProbeRequest, ProbeResponse, ProbeResult, ProbeState
from .sip.response import indent_message, is_success
from .target import Target
from .transports import Transport, select_transport

module_logger = logging.getLogger(__name__)

TransportFactory = Callable[[str, ProbeSettings], Transport]


class ProbeOrchestrator:
    """Runs exactly one probe and maps its first decisive event to a ProbeResult."""

    def __init__(
        self,
        settings: ProbeSettings | None = None,
        *,
        logger: logging.Logger | None = None,
        transport_factory: TransportFactory | None = None,
    ):
        self.settings = settings or load_probe_settings()
        self.logger = logger or module_logger
        self.transport_factory = transport_factory or select_transport
        self.state = ProbeState.IDLE
        self.task: asyncio.Task | None = None

    async def run(self, target: Target, cancel_event: asyncio.Event | None = None) -> ProbeResult:
        if self.state != ProbeState.IDLE:
            raise RuntimeError("ProbeOrchestrator instances run a single probe")

        # Raises ConfigurationError before any network activity.
        transport = self.transport_factory(target.scheme, self.settings)
        self.logger.debug("Doing %s sip check against %s", transport.name or target.scheme, target.address)

        loop = asyncio.get_running_loop()
        events: asyncio.Queue = asyncio.Queue()
        cancel_event = cancel_event or asyncio.Event()

        self.state = ProbeState.PROBING
        deadline = loop.time() + self.settings.timeout
        self.task = asyncio.create_task(transport.probe(target, events), name=f"sip-probe-{target.scheme}")
        cancelled = asyncio.ensure_future(cancel_event.wait())
        request: ProbeRequest | None = None
        try:
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    return self._timed_out(request)
                next_event = asyncio.ensure_future(events.get())
                done, _ = await asyncio.wait(
                    {next_event, cancelled},
                    timeout=remaining,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if cancelled in done:
                    next_event.cancel()
                    return self._finish(ProbeState.CANCELLED, "Interrupted", request=request)
                if next_event not in done:
                    # Deadline re-checked at the top of the loop.
                    next_event.cancel()
                    continue

                event = next_event.result()
                if isinstance(event, ProbeRequest):
                    request = event
                    self.logger.info("Request:\n%s", indent_message(event.payload))
                    continue
                if isinstance(event, ProbeError):
                    return self._failed(event.cause, request)
                return self._responded(event, request)
        finally:
            cancelled.cancel()

    def _timed_out(self, request: ProbeRequest | None) -> ProbeResult:
        return self._finish(ProbeState.TIMED_OUT, "Timed out waiting for response", request=request)

    def _failed(self, cause: BaseException, request: ProbeRequest | None) -> ProbeResult:
        reason = cause.reason if isinstance(cause, TransportError) else error_category_to_reason(None)
        message = f"Got Error response, {cause}"
        if reason:
            message = f"{message} ({reason})"
        return self._finish(ProbeState.FAILED, message, request=request, error=cause)

    def _responded(self, response: ProbeResponse, request: ProbeRequest | None) -> ProbeResult:
        message = f"Response({response.elapsed_ms}ms):\n{indent_message(response.body)}"
        self.logger.info("%s", message)
        state = ProbeState.SUCCEEDED if is_success(response.body) else ProbeState.FAILED
        self.state = state
        return ProbeResult(state=state, message=message, request=request, response=response)

    def _finish(
        self,
        state: ProbeState,
        message: str,
        *,
        request: ProbeRequest | None = None,
        error: BaseException | None = None,
    ) -> ProbeResult:
        self.logger.critical("%s", message)
        self.state = state
        return ProbeResult(state=state, message=message, request=request, error=error)


async def run_probe(
    target: Target,
    settings: ProbeSettings | None = None,
    *,
    cancel_event: asyncio.Event | None = None,
    logger: logging.Logger | None = None,
) -> ProbeResult:
    """Convenience wrapper around a fresh ProbeOrchestrator."""
    orchestrator = ProbeOrchestrator(settings, logger=logger)
    return await orchestrator.run(target, cancel_event)


__all__ = ["ProbeOrchestrator", "TransportFactory", "run_probe"]
