import socket
import struct
import threading
from collections.abc import Callable, Iterator

import pytest

HELLO_RESPONSE = b"HTTP/1.1 200 OK\r\nContent-Length:5\r\n\r\nhello"


class StubServer:
    """Single-threaded HTTP stub answering every connection with a canned reply."""

    def __init__(
        self,
        response: bytes,
        *,
        reset_on_accept: bool = False,
        greeting: bytes = b"",
    ) -> None:
        self.response = response
        self.reset_on_accept = reset_on_accept
        self.greeting = greeting
        self.requests: list[bytes] = []
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(5)
        self._listener.settimeout(0.1)
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    @property
    def host(self) -> str:
        return "127.0.0.1"

    @property
    def port(self) -> int:
        return self._listener.getsockname()[1]

    def start(self) -> "StubServer":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stopped.set()
        self._thread.join(timeout=5)
        self._listener.close()

    def _serve(self) -> None:
        while not self._stopped.is_set():
            try:
                conn, _ = self._listener.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            with conn:
                conn.settimeout(5)
                if self.reset_on_accept:
                    # abortive close: the peer sees a reset instead of a reply
                    conn.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))
                    continue
                if self.greeting:
                    _send_and_hold(conn, self.greeting)
                    continue
                try:
                    self.requests.append(_read_request(conn))
                    conn.sendall(self.response)
                    conn.shutdown(socket.SHUT_WR)
                except OSError:
                    continue


def _send_and_hold(conn: socket.socket, data: bytes) -> None:
    # send unsolicited bytes, then keep the connection open until the client leaves
    try:
        conn.sendall(data)
        while conn.recv(4096):
            pass
    except OSError:
        pass


def _read_request(conn: socket.socket) -> bytes:
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = conn.recv(4096)
        if not chunk:
            return data
        data += chunk
    head, _, body = data.partition(b"\r\n\r\n")
    length = 0
    for line in head.split(b"\r\n")[1:]:
        name, _, value = line.partition(b":")
        if name.strip().lower() == b"content-length":
            length = int(value.strip())
    while len(body) < length:
        chunk = conn.recv(4096)
        if not chunk:
            break
        body += chunk
    return head + b"\r\n\r\n" + body


@pytest.fixture
def stub_server() -> Iterator[Callable[..., StubServer]]:
    servers: list[StubServer] = []

    def start(response: bytes = HELLO_RESPONSE, **kwargs) -> StubServer:
        server = StubServer(response, **kwargs).start()
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.stop()


@pytest.fixture
def unused_port() -> int:
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    return port
