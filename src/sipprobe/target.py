# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe target parsing."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlparse

from .errors import ConfigurationError, UnknownSchemeError

SOCKET_SCHEMES = frozenset({"udp", "tcp", "tls"})
WEBSOCKET_SCHEMES = frozenset({"ws", "wss"})
SUPPORTED_SCHEMES = SOCKET_SCHEMES | WEBSOCKET_SCHEMES


@dataclass(frozen=True)
class Target:
    """A parsed endpoint; immutable for the lifetime of one probe."""

    scheme: str
    host: str
    port: int
    url: str
    verify_tls: bool = True

    @property
    def address(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"

    @property
    def is_websocket(self) -> bool:
        return self.scheme in WEBSOCKET_SCHEMES

    @property
    def is_secure(self) -> bool:
        return self.scheme in {"tls", "wss"}


def parse_target(url: str, *, verify_tls: bool = True) -> Target:
    """
    Parse ``scheme://host:port`` into a Target.

    The scheme is validated here so an unusable target fails before any
    network activity. WebSocket targets may omit the port (80/443).
    """
    parsed = urlparse(str(url or "").strip())
    scheme = parsed.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise UnknownSchemeError(scheme)

    host = parsed.hostname
    if not host:
        raise ConfigurationError(f"Missing host in address: {url!r}")

    try:
        port = parsed.port
    except ValueError as exc:
        raise ConfigurationError(f"Invalid port in address: {url!r}") from exc
    if port is None:
        if scheme == "ws":
            port = 80
        elif scheme == "wss":
            port = 443
        else:
            raise ConfigurationError(f"Missing port in address: {url!r}")

    return Target(scheme=scheme, host=host, port=port, url=url, verify_tls=verify_tls)


__all__ = ["SOCKET_SCHEMES", "SUPPORTED_SCHEMES", "WEBSOCKET_SCHEMES", "Target", "parse_target"]
