# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""SIP over WebSocket transport strategy."""

from __future__ import annotations

import asyncio
import logging
import time

import aiohttp

from ..errors import ErrorCategory, TransportError
from ..models import ProbeRequest, ProbeResponse
from ..sip.request import WS_OPTIONS, render_request
from ..sip.response import unescape_crlf
from ..target import Target
from .base import Transport, build_ssl_context

logger = logging.getLogger(__name__)

SIP_SUBPROTOCOL = "sip"


class WebSocketTransport(Transport):
    """
    One text frame out, one frame in.

    The frame boundary already delimits the reply, so no framing detection is
    applied. Peers may escape line breaks as the two characters ``\\r\\n``;
    those are unescaped before the reply is reported.
    """

    name = "ws"

    def ssl_option(self, target: Target):  # noqa: ANN201
        if target.is_secure:
            return build_ssl_context(target.verify_tls)
        return True

    async def exchange(self, target: Target, events: asyncio.Queue) -> None:
        logger.debug("Doing websocket sip to %s", target.url)
        async with aiohttp.ClientSession() as session:
            async with session.ws_connect(
                target.url,
                protocols=(SIP_SUBPROTOCOL,),
                ssl=self.ssl_option(target),
            ) as ws:
                logger.debug("Negotiated subprotocol: %s", ws.protocol)
                payload = render_request(WS_OPTIONS, "", target.scheme)
                await ws.send_str(payload)
                sent_at = time.monotonic()
                events.put_nowait(ProbeRequest(payload=payload, sent_at=sent_at))

                message = await ws.receive()
                if message.type == aiohttp.WSMsgType.TEXT:
                    text = message.data
                elif message.type == aiohttp.WSMsgType.BINARY:
                    text = message.data.decode("utf-8", errors="replace")
                else:
                    cause = ws.exception()
                    raise TransportError(
                        f"Unexpected websocket frame: {message.type.name}",
                        cause=cause,
                        category=ErrorCategory.WEBSOCKET_ERROR,
                    )
                events.put_nowait(ProbeResponse(body=unescape_crlf(text), elapsed=time.monotonic() - sent_at))


__all__ = ["SIP_SUBPROTOCOL", "WebSocketTransport"]
