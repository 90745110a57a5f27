# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""SIP OPTIONS request templates and rendering."""

from __future__ import annotations

import secrets

ALPHANUM = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
CALL_ID_LENGTH = 20
CRLF = "\r\n"

# Both templates end with a blank line, the end-of-request marker.
WS_OPTIONS = """OPTIONS sip:monitor@none SIP/2.0
Via: SIP/2.0/{{PROTOC}} 81okseq92jb7.invalid;branch=z9hG4bK5964427
Max-Forwards: 70
To: <sip:ba_user@none>
From: <sip:anonymous.8scs48@anonymous.invalid>;tag=fql2c8mlg3
Call-ID: {{callId}}
CSeq: {{seq}} OPTIONS
Content-Length: 0

"""

SOCKET_OPTIONS = """OPTIONS sip:host@invalid:1739;transport={{proto}} SIP/2.0
Via: SIP/2.0/{{PROTOC}} {{localaddr}};branch=z9hG4bKr1t13cmvZDjtg
Max-Forwards: 70
From: "" <sip:monitor@invalid>
To: <sip:host@invalid;transport={{proto}}>
Call-ID: {{callId}}
CSeq: {{seq}} OPTIONS
Content-Length: 0

"""


def random_call_id(length: int = CALL_ID_LENGTH) -> str:
    """Return ``length`` alphanumerics drawn from a CSPRNG."""
    return "".join(ALPHANUM[b % len(ALPHANUM)] for b in secrets.token_bytes(length))


def random_sequence() -> int:
    """Return a CSeq number in [0, 65535] (two random bytes, big-endian)."""
    return int.from_bytes(secrets.token_bytes(2), "big")


def normalize_line_endings(text: str) -> str:
    """Rewrite every line terminator as CRLF and end with exactly one blank line."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").rstrip("\n").split("\n")
    return CRLF.join(lines) + CRLF + CRLF


def template_for(transport: str) -> str:
    """WebSocket transports use the monitor template; everything else the socket one."""
    return WS_OPTIONS if transport.lower() in {"ws", "wss"} else SOCKET_OPTIONS


def render_request(template: str, local_address: str, transport: str) -> str:
    req = template.replace("{{callId}}", random_call_id())
    req = req.replace("{{localaddr}}", local_address)
    req = req.replace("{{PROTOC}}", transport.upper())
    req = req.replace("{{proto}}", transport.lower())
    req = req.replace("{{seq}}", str(random_sequence()))
    return normalize_line_endings(req)


__all__ = [
    "ALPHANUM",
    "CALL_ID_LENGTH",
    "SOCKET_OPTIONS",
    "WS_OPTIONS",
    "normalize_line_endings",
    "random_call_id",
    "random_sequence",
    "render_request",
    "template_for",
]
