# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
import ssl

import pytest

from sipprobe.config import ProbeSettings
from sipprobe.errors import ErrorCategory, TransportError
from sipprobe.models import ProbeError, ProbeRequest, ProbeResponse, ProbeState
from sipprobe.probe import run_probe
from sipprobe.target import Target
from sipprobe.transports import TcpTransport, TlsTransport, UdpTransport, build_ssl_context, select_transport
from sipprobe.transports.base import format_address

OK_REPLY_HEAD = b"SIP/2.0 200 OK\r\nVia: SIP/2.0/TCP 127.0.0.1\r\n"
OK_REPLY_TAIL = b"CSeq: 1 OPTIONS\r\nContent-Length: 0\r\n\r\n"


def _target(scheme: str, port: int) -> Target:
    return Target(scheme=scheme, host="127.0.0.1", port=port, url=f"{scheme}://127.0.0.1:{port}")


def _drain(events: asyncio.Queue) -> list:
    items = []
    while not events.empty():
        items.append(events.get_nowait())
    return items


async def _unused_tcp_port() -> int:
    server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    server.close()
    await server.wait_closed()
    return port


class _UdpSipServer(asyncio.DatagramProtocol):
    def __init__(self, reply: bytes):
        self.reply = reply
        self.received: list[bytes] = []
        self.transport = None

    def connection_made(self, transport):
        self.transport = transport

    def datagram_received(self, data, addr):
        self.received.append(data)
        self.transport.sendto(self.reply, addr)


@pytest.mark.asyncio
async def test_tcp_transport_reports_request_then_split_response():
    received = []

    async def handle(reader, writer):
        received.append(await reader.readuntil(b"\r\n\r\n"))
        writer.write(OK_REPLY_HEAD)
        await writer.drain()
        await asyncio.sleep(0.05)
        writer.write(OK_REPLY_TAIL)
        await writer.drain()
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    events: asyncio.Queue = asyncio.Queue()
    async with server:
        await TcpTransport(ProbeSettings()).probe(_target("tcp", port), events)

    request, response = _drain(events)
    assert isinstance(request, ProbeRequest)
    assert isinstance(response, ProbeResponse)
    assert received[0].decode() == request.payload
    assert "Via: SIP/2.0/TCP 127.0.0.1:" in request.payload
    assert ";transport=tcp SIP/2.0\r\n" in request.payload
    assert response.body == (OK_REPLY_HEAD + OK_REPLY_TAIL).decode()
    assert response.elapsed >= 0


@pytest.mark.asyncio
async def test_tcp_transport_reports_connection_refused():
    port = await _unused_tcp_port()
    events: asyncio.Queue = asyncio.Queue()

    await TcpTransport(ProbeSettings()).probe(_target("tcp", port), events)

    (outcome,) = _drain(events)
    assert isinstance(outcome, ProbeError)
    assert isinstance(outcome.cause, TransportError)
    assert outcome.cause.category == ErrorCategory.CONNECTION_ERROR


@pytest.mark.asyncio
async def test_tcp_transport_reports_peer_closing_mid_response():
    async def handle(reader, writer):
        await reader.readuntil(b"\r\n\r\n")
        writer.write(b"SIP/2.0 200 OK\r\n")
        await writer.drain()
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    events: asyncio.Queue = asyncio.Queue()
    async with server:
        await TcpTransport(ProbeSettings()).probe(_target("tcp", port), events)

    request, outcome = _drain(events)
    assert isinstance(request, ProbeRequest)
    assert isinstance(outcome, ProbeError)
    assert outcome.cause.category == ErrorCategory.INCOMPLETE_RESPONSE


@pytest.mark.asyncio
async def test_udp_transport_treats_single_datagram_as_complete():
    loop = asyncio.get_running_loop()
    server_transport, server = await loop.create_datagram_endpoint(
        lambda: _UdpSipServer(b"SIP/2.0 200 OK\r\nContent-Length: 0"),
        local_addr=("127.0.0.1", 0),
    )
    port = server_transport.get_extra_info("sockname")[1]
    events: asyncio.Queue = asyncio.Queue()
    try:
        await UdpTransport(ProbeSettings()).probe(_target("udp", port), events)
    finally:
        server_transport.close()

    request, response = _drain(events)
    assert isinstance(response, ProbeResponse)
    assert response.body == "SIP/2.0 200 OK\r\nContent-Length: 0"
    assert server.received[0].decode() == request.payload
    assert "Via: SIP/2.0/UDP 127.0.0.1:" in request.payload
    assert ";transport=udp SIP/2.0\r\n" in request.payload


@pytest.mark.asyncio
async def test_udp_transport_truncates_to_size_cap():
    loop = asyncio.get_running_loop()
    server_transport, _ = await loop.create_datagram_endpoint(
        lambda: _UdpSipServer(b"SIP/2.0 200 OK\r\n" + b"x" * 200),
        local_addr=("127.0.0.1", 0),
    )
    port = server_transport.get_extra_info("sockname")[1]
    events: asyncio.Queue = asyncio.Queue()
    try:
        await UdpTransport(ProbeSettings(max_response_bytes=64)).probe(_target("udp", port), events)
    finally:
        server_transport.close()

    _, response = _drain(events)
    assert len(response.body) == 64


@pytest.mark.asyncio
async def test_tls_transport_reports_handshake_failure():
    async def handle(reader, writer):
        await reader.read(1024)
        writer.write(b"definitely not a TLS record\r\n\r\n")
        await writer.drain()
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    events: asyncio.Queue = asyncio.Queue()
    async with server:
        await TlsTransport(ProbeSettings()).probe(_target("tls", port), events)

    (outcome,) = _drain(events)
    assert isinstance(outcome, ProbeError)
    assert outcome.cause.category in {ErrorCategory.SSL_ERROR, ErrorCategory.CONNECTION_ERROR}


@pytest.mark.asyncio
async def test_tcp_connect_timeout_is_a_transport_error(monkeypatch):
    async def never_connects(*_args, **_kwargs):
        await asyncio.sleep(10)

    monkeypatch.setattr(asyncio, "open_connection", never_connects)
    events: asyncio.Queue = asyncio.Queue()

    await TcpTransport(ProbeSettings(connect_timeout=0.05)).probe(_target("tcp", 5060), events)

    (outcome,) = _drain(events)
    assert outcome.cause.category == ErrorCategory.TIMEOUT


def test_tls_context_honours_verification_policy():
    strict = build_ssl_context(True)
    assert strict.verify_mode == ssl.CERT_REQUIRED
    assert strict.check_hostname is True

    relaxed = build_ssl_context(False)
    assert relaxed.verify_mode == ssl.CERT_NONE
    assert relaxed.check_hostname is False

    transport = TlsTransport(ProbeSettings())
    assert transport.ssl_context(_target("tls", 5061)).verify_mode == ssl.CERT_REQUIRED
    assert TcpTransport(ProbeSettings()).ssl_context(_target("tcp", 5060)) is None


def test_format_address_brackets_ipv6():
    assert format_address(("127.0.0.1", 5060)) == "127.0.0.1:5060"
    assert format_address(("::1", 5060, 0, 0)) == "[::1]:5060"
    assert format_address(None) == ""


def test_select_transport_by_scheme():
    settings = ProbeSettings()
    assert isinstance(select_transport("tcp", settings), TcpTransport)
    assert isinstance(select_transport("UDP", settings), UdpTransport)
    assert isinstance(select_transport("tls", settings), TlsTransport)
    assert select_transport("tls", settings).settings is settings


@pytest.mark.asyncio
async def test_run_probe_end_to_end_over_loopback_tcp():
    async def handle(reader, writer):
        await reader.readuntil(b"\r\n\r\n")
        writer.write(OK_REPLY_HEAD + OK_REPLY_TAIL)
        await writer.drain()
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    async with server:
        result = await run_probe(_target("tcp", port), ProbeSettings(timeout=5.0))

    assert result.state == ProbeState.SUCCEEDED
    assert result.exit_code == 0
    assert result.request.payload.startswith("OPTIONS sip:host@invalid:1739;transport=tcp SIP/2.0\r\n")
