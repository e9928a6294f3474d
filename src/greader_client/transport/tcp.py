"""Socket transport speaking HTTP/1.1 directly over a TCP connection."""

from __future__ import annotations

import socket

from ..errors import CommunicationError
from ..logger import BoundLogger, create_logger
from .base import TransportConfig, TransportKind, require_path
from .framing import build_post_request, strip_headers


class SocketTransport:
    kind: TransportKind = "sockets"

    CHUNK_SIZE = 4096

    def __init__(
        self,
        host: str,
        port: int,
        user_agent: str,
        *,
        timeout: float | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._config = TransportConfig(host=host, port=port, user_agent=user_agent)
        self._timeout = timeout
        self._logger = (logger or create_logger()).child("tcp")
        self._socket: socket.socket | None = None
        self._at_eof = False

    @property
    def config(self) -> TransportConfig:
        return self._config

    @property
    def connected(self) -> bool:
        return self._socket is not None

    def post(self, path: str, body: str, subdomain_key: str = "") -> str:
        require_path(path)
        self._connect()
        try:
            request = build_post_request(
                path,
                self._config.effective_host(subdomain_key),
                body,
                self._config.user_agent,
            )
            self._send(request)
            raw = self._read_all()
            payload = strip_headers(raw)
            self._logger.debug(
                "POST %s received bytes=%d payload=%d", path, len(raw), len(payload)
            )
            return payload.decode("utf-8", errors="replace")
        finally:
            self._disconnect()

    def close(self) -> None:
        self._disconnect()

    def __enter__(self) -> "SocketTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self) -> None:
        self._disconnect()

    def _connect(self) -> None:
        if self._socket is not None:
            return
        host, port = self._config.host, self._config.port
        self._logger.debug("Connecting to %s:%s", host, port)
        try:
            if self._timeout is None:
                self._socket = socket.create_connection((host, port))
            else:
                self._socket = socket.create_connection((host, port), timeout=self._timeout)
        except OSError as exc:
            raise CommunicationError(
                f"Unable to connect to API server: {exc.strerror or exc}",
                code=exc.errno,
            ) from exc
        self._at_eof = False

    def _send(self, request: bytes) -> None:
        assert self._socket is not None
        self._logger.trace("Sending %d bytes", len(request))
        try:
            self._socket.sendall(request)
        except OSError as exc:
            raise CommunicationError(
                f"Unable to send request to API server: {exc}", code=exc.errno
            ) from exc

    def _read_all(self) -> bytes:
        assert self._socket is not None
        chunks: list[bytes] = []
        while True:
            try:
                chunk = self._socket.recv(self.CHUNK_SIZE)
            except OSError as exc:
                raise CommunicationError(
                    f"Error reading response from API server: {exc}", code=exc.errno
                ) from exc
            if not chunk:
                self._at_eof = True
                break
            chunks.append(chunk)
        return b"".join(chunks)

    def _disconnect(self) -> None:
        sock = getattr(self, "_socket", None)
        if sock is None:
            return
        self._socket = None
        try:
            if not self._at_eof:
                self._drain(sock)
        finally:
            sock.close()
            self._logger.trace("Disconnected from %s:%s", self._config.host, self._config.port)

    def _drain(self, sock: socket.socket) -> None:
        # Only discard what has already arrived; never block on a live peer.
        discarded = 0
        try:
            sock.setblocking(False)
            while chunk := sock.recv(self.CHUNK_SIZE):
                discarded += len(chunk)
        except OSError as exc:
            self._logger.trace("Stopped draining: %s", exc)
        if discarded:
            self._logger.trace("Discarded %d unread bytes", discarded)


__all__ = ["SocketTransport"]
