"""Common transport abstractions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, runtime_checkable

from ..errors import ConfigurationError

TransportKind = Literal["sockets", "streams", "curl"]

DEFAULT_PORT = 80
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"


@dataclass(frozen=True)
class TransportConfig:
    host: str
    port: int = DEFAULT_PORT
    user_agent: str = ""

    def __post_init__(self) -> None:
        if not self.host:
            raise ConfigurationError("Transport host must not be empty")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigurationError(f"Transport port must be an integer, got {self.port!r}")
        if not 1 <= self.port <= 65535:
            raise ConfigurationError(f"Transport port out of range: {self.port}")
        if not self.user_agent.isascii():
            raise ConfigurationError(
                f"Transport user agent must be ASCII, got {self.user_agent!r}"
            )

    def effective_host(self, subdomain_key: str = "") -> str:
        """Host the request is addressed to, prefixed with ``subdomain_key`` if given."""
        if subdomain_key:
            return f"{subdomain_key}.{self.host}"
        return self.host

    def url_for(self, path: str, subdomain_key: str = "") -> str:
        """Build an ``http://`` URL, naming the port only when it is not 80."""
        if is_absolute_url(path):
            return path
        host = self.effective_host(subdomain_key)
        if self.port == DEFAULT_PORT:
            return f"http://{host}{path}"
        return f"http://{host}:{self.port}{path}"


@runtime_checkable
class Transport(Protocol):
    @property
    def kind(self) -> TransportKind: ...

    @property
    def config(self) -> TransportConfig: ...

    def post(self, path: str, body: str, subdomain_key: str = "") -> str: ...

    def close(self) -> None: ...


def is_absolute_url(path: str) -> bool:
    return path.startswith(("http://", "https://"))


def require_path(path: str) -> None:
    if not path:
        raise ValueError("Request path must not be empty")


__all__ = [
    "DEFAULT_PORT",
    "FORM_CONTENT_TYPE",
    "Transport",
    "TransportConfig",
    "TransportKind",
    "is_absolute_url",
    "require_path",
]
