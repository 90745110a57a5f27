# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level sipprobe facade: one target, one probe, one result."""

from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import suppress

from .config import ProbeSettings, load_probe_settings
from .models import ProbeResult
from .probe import ProbeOrchestrator, TransportFactory
from .target import Target, parse_target

CANCEL_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SipProbe:
    """
    Wires settings, target parsing and the orchestrator for a single invocation.

    ``probe`` owns the event loop: it installs signal handlers that request
    cancellation, runs the orchestrator, and lets ``asyncio.run`` tear down any
    I/O the abandoned transport task still holds.
    """

    def __init__(
        self,
        settings: ProbeSettings | None = None,
        *,
        logger: logging.Logger | None = None,
        transport_factory: TransportFactory | None = None,
    ):
        self.settings = settings or load_probe_settings()
        self.logger = logger
        self.transport_factory = transport_factory

    def target(self, url: str) -> Target:
        return parse_target(url, verify_tls=self.settings.verify_tls)

    async def probe_async(self, target: Target | str, cancel_event: asyncio.Event | None = None) -> ProbeResult:
        if isinstance(target, str):
            target = self.target(target)
        orchestrator = ProbeOrchestrator(
            self.settings,
            logger=self.logger,
            transport_factory=self.transport_factory,
        )
        return await orchestrator.run(target, cancel_event)

    async def _probe_with_signals(self, target: Target) -> ProbeResult:
        loop = asyncio.get_running_loop()
        cancel_event = asyncio.Event()
        installed = []
        for sig in CANCEL_SIGNALS:
            # Not available on Windows event loops.
            with suppress(NotImplementedError, RuntimeError):
                loop.add_signal_handler(sig, cancel_event.set)
                installed.append(sig)
        try:
            return await self.probe_async(target, cancel_event)
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)

    def probe(self, url: str) -> ProbeResult:
        """Parse ``url`` and run one probe to completion."""
        target = self.target(url)
        return asyncio.run(self._probe_with_signals(target))


__all__ = ["SipProbe"]
