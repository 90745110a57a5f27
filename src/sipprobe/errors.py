# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import asyncio
import socket
import ssl
from enum import Enum

import aiohttp


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    WEBSOCKET_ERROR = "WEBSOCKET_ERROR"
    INCOMPLETE_RESPONSE = "INCOMPLETE_RESPONSE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class SipProbeError(Exception):
    """Base class for sipprobe errors."""


class ConfigurationError(SipProbeError):
    """The probe target cannot be used; raised before any network activity."""


class UnknownSchemeError(ConfigurationError):
    def __init__(self, scheme: str):
        super().__init__(f"Unknown scheme: {scheme!r}")
        self.scheme = scheme


class IncompleteResponseError(SipProbeError):
    """The peer stopped sending before a full SIP message arrived."""

    def __init__(self, received: bytes):
        super().__init__(f"connection closed after {len(received)} bytes without a complete response")
        self.received = received


class TransportError(SipProbeError):
    """A dial, write or read failure inside a transport strategy."""

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        category: ErrorCategory | None = None,
    ):
        super().__init__(message)
        self.cause = cause
        if category is None:
            category = categorize_exception(cause) if cause is not None else ErrorCategory.UNKNOWN_ERROR
        self.category = category

    @property
    def reason(self) -> str:
        return error_category_to_reason(self.category)


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/aiohttp exceptions to ErrorCategory.
    """
    if isinstance(exc, TransportError):
        return exc.category

    if isinstance(exc, IncompleteResponseError):
        return ErrorCategory.INCOMPLETE_RESPONSE

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, aiohttp.ServerTimeoutError)):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (aiohttp.ClientSSLError, ssl.SSLError, ssl.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (aiohttp.WSServerHandshakeError, aiohttp.WebSocketError)):
        return ErrorCategory.WEBSOCKET_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, aiohttp.ClientConnectorError):
        os_error = getattr(exc, "os_error", None)
        if isinstance(os_error, socket.gaierror):
            return ErrorCategory.DNS_ERROR
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, aiohttp.ClientConnectionError, OSError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout during probe",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.WEBSOCKET_ERROR: "WebSocket handshake or framing failure",
        ErrorCategory.INCOMPLETE_RESPONSE: "Peer closed the connection mid-response",
        ErrorCategory.UNKNOWN_ERROR: "Network error during probe",
        None: "",
    }
    return mapping.get(category, "Probe failed due to network error")
