# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport strategy abstraction."""

from __future__ import annotations

import asyncio
import logging
import ssl
from abc import ABC, abstractmethod
from typing import ClassVar

from ..config import ProbeSettings, load_probe_settings
from ..errors import TransportError
from ..models import ProbeError
from ..target import Target

logger = logging.getLogger(__name__)



def build_ssl_context(verify: bool = True) -> ssl.SSLContext:
    """Client TLS context; ``verify=False`` skips hostname and chain checks."""
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def format_address(sockname) -> str:  # noqa: ANN001
    """Render a socket name as ``host:port`` (IPv6 hosts bracketed)."""
    if not sockname:
        return ""
    if isinstance(sockname, str):
        return sockname
    host, port = sockname[0], sockname[1]
    if ":" in str(host):
        return f"[{host}]:{port}"
    return f"{host}:{port}"


class Transport(ABC):
    """
    Send one request, receive one response.

    ``probe`` posts a ProbeRequest once the request is written and then exactly
    one outcome (ProbeResponse or ProbeError) to ``events``. Strategies never
    watch for cancellation; the orchestrator abandons them instead.
    """

    name: ClassVar[str] = ""

    def __init__(self, settings: ProbeSettings | None = None):
        self.settings = settings or load_probe_settings()

    async def probe(self, target: Target, events: asyncio.Queue) -> None:
        try:
            await self.exchange(target, events)
        except TransportError as exc:
            logger.debug("%s probe failed: %s", target.scheme, exc)
            events.put_nowait(ProbeError(exc))
        except Exception as exc:  # noqa: BLE001
            logger.debug("%s probe failed: %r", target.scheme, exc)
            message = str(exc) or type(exc).__name__
            events.put_nowait(ProbeError(TransportError(message, cause=exc)))

    @abstractmethod
    async def exchange(self, target: Target, events: asyncio.Queue) -> None:
        """Perform the I/O; exceptions are reported as ProbeError by ``probe``."""


__all__ = ["Transport", "build_ssl_context", "format_address"]
