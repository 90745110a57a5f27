# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Response framing and success checks."""

from __future__ import annotations

MESSAGE_TERMINATOR = b"\r\n\r\n"
SUCCESS_MARKER = "SIP/2.0 200 OK"
DEFAULT_MAX_RESPONSE_BYTES = 65536


def is_complete(buffer: bytes | bytearray, max_bytes: int = DEFAULT_MAX_RESPONSE_BYTES) -> bool:
    """
    True once ``buffer`` holds a full SIP message head or hit the size cap.

    The cap guards against peers that never send a blank line.
    """
    return MESSAGE_TERMINATOR in buffer or len(buffer) >= max_bytes


def unescape_crlf(payload: str) -> str:
    """Turn literal ``\\r\\n`` escapes into real CRLF pairs."""
    return payload.replace("\\r\\n", "\r\n")


def is_success(body: str) -> bool:
    return SUCCESS_MARKER in body


def decode_body(buffer: bytes | bytearray) -> str:
    return bytes(buffer).decode("utf-8", errors="replace")


def indent_message(message: str) -> str:
    """Render a CRLF message as tab-indented lines for log output."""
    return "\t" + message.replace("\r\n", "\n\t")


__all__ = [
    "DEFAULT_MAX_RESPONSE_BYTES",
    "MESSAGE_TERMINATOR",
    "SUCCESS_MARKER",
    "decode_body",
    "indent_message",
    "is_complete",
    "is_success",
    "unescape_crlf",
]
