# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""SIP message helpers."""

from .request import SOCKET_OPTIONS, WS_OPTIONS, random_call_id, random_sequence, render_request, template_for
from .response import SUCCESS_MARKER, is_complete, is_success, unescape_crlf

__all__ = [
    "SOCKET_OPTIONS",
    "SUCCESS_MARKER",
    "WS_OPTIONS",
    "is_complete",
    "is_success",
    "random_call_id",
    "random_sequence",
    "render_request",
    "template_for",
    "unescape_crlf",
]
