"""Transport factory mapping backend names to transport classes."""

from __future__ import annotations

import inspect
from typing import Any, Callable

from ..errors import ConfigurationError
from .base import Transport, TransportKind
from .http import HttpTransport
from .stream import StreamTransport
from .tcp import SocketTransport

DEFAULT_IMPLEMENTATION: TransportKind = "sockets"

_DRIVERS: dict[str, Callable[..., Transport]] = {
    "sockets": SocketTransport,
    "streams": StreamTransport,
    "curl": HttpTransport,
}


def available_implementations() -> tuple[str, ...]:
    return tuple(_DRIVERS)


def create_transport(
    host: str,
    port: int,
    user_agent: str,
    implementation: str = DEFAULT_IMPLEMENTATION,
    **options: Any,
) -> Transport:
    """Build the transport registered under ``implementation``.

    Extra keyword ``options`` (``timeout``, ``logger`` and backend specific
    hooks) are passed to the transport's constructor unchanged. Construction
    errors propagate; no other backend is tried.

    Raises:
        ConfigurationError: If ``implementation`` is not a known backend, an
            option is not accepted by it, or the backend cannot run on this
            installation.
    """
    try:
        driver = _DRIVERS[implementation]
    except KeyError:
        known = ", ".join(_DRIVERS)
        raise ConfigurationError(
            f'HTTP client implementation "{implementation}" does not exist '
            f"(expected one of: {known})."
        ) from None
    try:
        inspect.signature(driver).bind(host, port, user_agent, **options)
    except TypeError as exc:
        raise ConfigurationError(
            f'Invalid options for HTTP client implementation "{implementation}": {exc}'
        ) from exc
    return driver(host, port, user_agent, **options)


__all__ = ["DEFAULT_IMPLEMENTATION", "available_implementations", "create_transport"]
