import errno
import logging
import select
import time

import pytest

from greader_client.errors import CommunicationError, ConfigurationError
from greader_client.logger import TRACE_LEVEL, BoundLogger
from greader_client.transport.tcp import SocketTransport


def test_post_returns_payload_without_headers(stub_server) -> None:
    server = stub_server()
    transport = SocketTransport(server.host, server.port, "X/1.0")
    body = transport.post("/reader/api/0/token", "a=1&b=2")
    assert body == "hello"
    assert transport.connected is False


def test_post_sends_exact_request(stub_server) -> None:
    server = stub_server()
    transport = SocketTransport(server.host, server.port, "X/1.0")
    transport.post("/reader/api/0/token", "a=1&b=2")
    assert server.requests == [
        b"POST /reader/api/0/token HTTP/1.1\r\n"
        b"Host: 127.0.0.1\r\n"
        b"Content-Type: application/x-www-form-urlencoded; charset=utf-8\r\n"
        b"Content-Length: 7\r\n"
        b"User-Agent: X/1.0\r\n"
        b"\r\n"
        b"a=1&b=2"
    ]


def test_post_prefixes_subdomain_key(stub_server) -> None:
    server = stub_server()
    transport = SocketTransport(server.host, server.port, "X/1.0")
    transport.post("/comment-check", "x=1", subdomain_key="abc")
    assert b"Host: abc.127.0.0.1\r\n" in server.requests[0]


def test_post_sends_multibyte_body_with_byte_length(stub_server) -> None:
    server = stub_server()
    transport = SocketTransport(server.host, server.port, "X/1.0")
    transport.post("/", "name=Jürgen")
    request = server.requests[0]
    assert b"Content-Length: 12\r\n" in request
    assert request.endswith("name=Jürgen".encode("utf-8"))


def test_post_can_be_repeated(stub_server) -> None:
    server = stub_server()
    transport = SocketTransport(server.host, server.port, "X/1.0")
    assert transport.post("/one", "") == "hello"
    assert transport.post("/two", "") == "hello"
    assert len(server.requests) == 2


def test_malformed_response_raises(stub_server) -> None:
    server = stub_server(b"no header separator here")
    transport = SocketTransport(server.host, server.port, "X/1.0")
    with pytest.raises(CommunicationError, match="Invalid response"):
        transport.post("/", "a=1")
    assert transport.connected is False


def test_connection_reset_raises(stub_server) -> None:
    server = stub_server(reset_on_accept=True)
    transport = SocketTransport(server.host, server.port, "X/1.0")
    with pytest.raises(CommunicationError):
        transport.post("/reader/api/0/token", "a=1&b=2" * 1000)
    assert transport.connected is False


def test_connect_failure_carries_errno(unused_port: int) -> None:
    transport = SocketTransport("127.0.0.1", unused_port, "X/1.0")
    with pytest.raises(CommunicationError, match="Unable to connect") as exc_info:
        transport.post("/", "")
    assert exc_info.value.code == errno.ECONNREFUSED
    assert transport.connected is False


def test_disconnect_is_idempotent(stub_server) -> None:
    server = stub_server()
    transport = SocketTransport(server.host, server.port, "X/1.0")
    transport._connect()
    transport._connect()
    assert transport.connected is True
    transport.close()
    transport.close()
    transport.__del__()
    assert transport.connected is False


def test_context_manager_releases_connection(stub_server) -> None:
    server = stub_server()
    with SocketTransport(server.host, server.port, "X/1.0") as transport:
        transport._connect()
    assert transport.connected is False


def test_empty_path_rejected() -> None:
    transport = SocketTransport("example.test", 80, "X/1.0")
    with pytest.raises(ValueError):
        transport.post("", "a=1")
    assert transport.connected is False


@pytest.mark.parametrize("port", [0, 65536, -1])
def test_invalid_port_is_configuration_error(port: int) -> None:
    with pytest.raises(ConfigurationError):
        SocketTransport("example.test", port, "X/1.0")


def test_close_discards_pending_bytes_without_waiting_on_peer(
    stub_server, caplog: pytest.LogCaptureFixture
) -> None:
    server = stub_server(greeting=b"junk")
    logger = BoundLogger(logging.getLogger("greader.drain"), level="trace")
    transport = SocketTransport(server.host, server.port, "X/1.0", logger=logger)
    transport._connect()
    readable, _, _ = select.select([transport._socket], [], [], 5)
    assert readable

    with caplog.at_level(TRACE_LEVEL, logger="greader.drain"):
        started = time.monotonic()
        transport.close()
        elapsed = time.monotonic() - started

    assert elapsed < 1.0
    assert transport.connected is False
    assert any("Discarded 4 unread bytes" in record.getMessage() for record in caplog.records)


def test_non_ascii_path_is_sent_as_utf8(stub_server) -> None:
    server = stub_server()
    transport = SocketTransport(server.host, server.port, "X/1.0")
    assert transport.post("/feed/café", "a=1") == "hello"
    assert server.requests[0].startswith("POST /feed/café HTTP/1.1\r\n".encode("utf-8"))
