"""High-level Google Reader API client."""

from __future__ import annotations

from urllib.parse import urlencode

from .auth import AuthManager
from .logger import BoundLogger, LogLevel, create_logger
from .transport import Transport, create_transport
from .transport.factory import DEFAULT_IMPLEMENTATION
from .version import __version__

CLIENT = "UNL_Services_Google_Reader"
VERSION = __version__
USER_AGENT = f"{CLIENT}/{VERSION}"

API_SERVER = "www.google.com"
API_SERVER_PORT = 80

TOKEN_PATH = "/reader/api/0/token"
SUBSCRIPTION_EDIT_PATH = "/reader/api/0/subscription/edit"


class ReaderClient:
    """Primary entry point for talking to the Reader API.

    Every call is a single form-encoded POST through the configured
    transport; response bodies are interpreted here, never by the transport.
    """

    def __init__(
        self,
        username: str,
        password: str,
        implementation: str = DEFAULT_IMPLEMENTATION,
        *,
        host: str = API_SERVER,
        port: int = API_SERVER_PORT,
        transport: Transport | None = None,
        logger: object | None = None,
        log_level: LogLevel = "info",
    ) -> None:
        self.host = host
        self.port = port
        self._logger = create_logger(logger=logger, level=log_level)
        self._auth_manager = AuthManager(username, password, USER_AGENT, self._logger)
        self._token: str | None = None
        self._transport: Transport | None = transport
        if transport is None:
            self.set_http_client_implementation(implementation)

    @property
    def transport(self) -> Transport:
        assert self._transport is not None
        return self._transport

    @property
    def auth_token(self) -> str | None:
        return self._auth_manager.auth_token

    def set_http_client_implementation(self, implementation: str) -> None:
        """Swap the transport for a freshly built ``implementation``."""
        transport = create_transport(
            self.host, self.port, USER_AGENT, implementation, logger=self._logger
        )
        if self._transport is not None:
            self._transport.close()
        self._logger.debug("Using %s transport for %s:%s", implementation, self.host, self.port)
        self._transport = transport

    def authenticate(self) -> str:
        return self._auth_manager.authenticate(self.transport)

    def get_token(self) -> str:
        path = f"{TOKEN_PATH}?{urlencode({'client': CLIENT})}"
        token = self.transport.post(path, "").strip()
        self._token = token
        return token

    def subscribe(self, feed_url: str) -> bool:
        token = self._token or self.get_token()
        path = f"{SUBSCRIPTION_EDIT_PATH}?{urlencode({'client': CLIENT})}"
        body = urlencode({"s": f"feed/{feed_url}", "ac": "subscribe", "T": token})
        response = self.transport.post(path, body)
        ok = response.strip() == "OK"
        if not ok:
            self._logger.warn("Subscription to %s was not accepted: %s", feed_url, response.strip()[:200])
        return ok

    def close(self) -> None:
        if self._transport is not None:
            self._transport.close()

    def __enter__(self) -> "ReaderClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["API_SERVER", "API_SERVER_PORT", "CLIENT", "ReaderClient", "USER_AGENT", "VERSION"]
