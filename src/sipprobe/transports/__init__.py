# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport strategies keyed by URL scheme."""

from __future__ import annotations

from ..config import ProbeSettings
from ..errors import UnknownSchemeError
from .base import Transport, build_ssl_context
from .sockets import TcpTransport, TlsTransport, UdpTransport, read_message
from .websocket import WebSocketTransport

TRANSPORTS: dict[str, type[Transport]] = {
    "tcp": TcpTransport,
    "udp": UdpTransport,
    "tls": TlsTransport,
    "ws": WebSocketTransport,
    "wss": WebSocketTransport,
}


def select_transport(scheme: str, settings: ProbeSettings | None = None) -> Transport:
    """Instantiate the strategy for ``scheme``; unknown schemes are a configuration error."""
    try:
        transport_cls = TRANSPORTS[scheme.lower()]
    except KeyError:
        raise UnknownSchemeError(scheme) from None
    return transport_cls(settings)


__all__ = [
    "TRANSPORTS",
    "TcpTransport",
    "TlsTransport",
    "Transport",
    "UdpTransport",
    "WebSocketTransport",
    "build_ssl_context",
    "read_message",
    "select_transport",
]
