# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""TCP, UDP and TLS transport strategies."""

from __future__ import annotations

import asyncio
import logging
import ssl
import time
from abc import ABC, abstractmethod

from ..errors import IncompleteResponseError
from ..models import ProbeRequest, ProbeResponse
from ..sip.request import SOCKET_OPTIONS, render_request
from ..sip.response import decode_body, is_complete
from ..target import Target
from .base import Transport, build_ssl_context, format_address

logger = logging.getLogger(__name__)


async def read_message(reader: asyncio.StreamReader, chunk_size: int, max_bytes: int) -> bytes:
    """
    Accumulate stream reads until a blank line arrives or ``max_bytes`` is reached.

    EOF before either condition raises IncompleteResponseError.
    """
    buffer = bytearray()
    while True:
        chunk = await reader.read(min(chunk_size, max_bytes - len(buffer)))
        if not chunk:
            raise IncompleteResponseError(bytes(buffer))
        buffer += chunk
        if is_complete(buffer, max_bytes):
            return bytes(buffer)


class Connection(ABC):
    """An open socket owned by one strategy for one exchange."""

    local_address: str = ""

    @abstractmethod
    async def send(self, data: bytes) -> None: ...

    @abstractmethod
    async def receive(self) -> bytes: ...

    @abstractmethod
    async def close(self) -> None: ...


class StreamConnection(Connection):
    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter, *, chunk_size: int, max_bytes: int):
        self.reader = reader
        self.writer = writer
        self.chunk_size = chunk_size
        self.max_bytes = max_bytes
        self.local_address = format_address(writer.get_extra_info("sockname"))

    async def send(self, data: bytes) -> None:
        self.writer.write(data)
        await self.writer.drain()

    async def receive(self) -> bytes:
        return await read_message(self.reader, self.chunk_size, self.max_bytes)

    async def close(self) -> None:
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except (ConnectionError, ssl.SSLError) as exc:
            logger.debug("Error while closing stream: %r", exc)


class _DatagramProtocol(asyncio.DatagramProtocol):
    def __init__(self):
        self.reply: asyncio.Future[bytes] = asyncio.get_running_loop().create_future()

    def datagram_received(self, data: bytes, addr) -> None:  # noqa: ANN001
        if not self.reply.done():
            self.reply.set_result(data)

    def error_received(self, exc: Exception) -> None:
        if not self.reply.done():
            self.reply.set_exception(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        if not self.reply.done():
            self.reply.set_exception(exc or ConnectionError("datagram endpoint closed"))


class DatagramConnection(Connection):
    """A connected UDP endpoint; the first datagram received is the whole reply."""

    def __init__(self, transport: asyncio.DatagramTransport, protocol: _DatagramProtocol, *, max_bytes: int):
        self.transport = transport
        self.protocol = protocol
        self.max_bytes = max_bytes
        self.local_address = format_address(transport.get_extra_info("sockname"))

    async def send(self, data: bytes) -> None:
        self.transport.sendto(data)

    async def receive(self) -> bytes:
        data = await self.protocol.reply
        return data[: self.max_bytes]

    async def close(self) -> None:
        self.transport.close()


class SocketTransport(Transport):
    """Shared write/read flow for the socket family; subclasses only dial."""

    @abstractmethod
    async def connect(self, target: Target) -> Connection: ...

    async def exchange(self, target: Target, events: asyncio.Queue) -> None:
        connection = await self.connect(target)
        try:
            logger.debug("Rendering SIP Request")
            payload = render_request(SOCKET_OPTIONS, connection.local_address, target.scheme)
            logger.debug("Request Rendered, writing request")
            await connection.send(payload.encode("utf-8"))
            sent_at = time.monotonic()
            events.put_nowait(ProbeRequest(payload=payload, sent_at=sent_at))
            logger.debug("Wrote request")
            body = await connection.receive()
            events.put_nowait(ProbeResponse(body=decode_body(body), elapsed=time.monotonic() - sent_at))
        finally:
            await connection.close()


class TcpTransport(SocketTransport):
    name = "tcp"

    def ssl_context(self, target: Target) -> ssl.SSLContext | None:  # noqa: ARG002
        return None

    async def connect(self, target: Target) -> Connection:
        context = self.ssl_context(target)
        logger.debug("Doing %s sip to %s", self.name.upper(), target.address)
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(
                target.host,
                target.port,
                ssl=context,
                server_hostname=target.host if context is not None else None,
            ),
            timeout=self.settings.connect_timeout,
        )
        return StreamConnection(
            reader,
            writer,
            chunk_size=self.settings.read_chunk_bytes,
            max_bytes=self.settings.max_response_bytes,
        )


class TlsTransport(TcpTransport):
    name = "tls"

    def ssl_context(self, target: Target) -> ssl.SSLContext | None:
        return build_ssl_context(target.verify_tls)


class UdpTransport(SocketTransport):
    name = "udp"

    async def connect(self, target: Target) -> Connection:
        logger.debug("Doing UDP sip to %s", target.address)
        loop = asyncio.get_running_loop()
        transport, protocol = await loop.create_datagram_endpoint(
            _DatagramProtocol,
            remote_addr=(target.host, target.port),
        )
        return DatagramConnection(transport, protocol, max_bytes=self.settings.max_response_bytes)


__all__ = [
    "Connection",
    "DatagramConnection",
    "SocketTransport",
    "StreamConnection",
    "TcpTransport",
    "TlsTransport",
    "UdpTransport",
    "read_message",
]
