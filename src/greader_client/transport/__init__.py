"""Transport implementations exposed to users."""

from .base import Transport, TransportConfig, TransportKind
from .factory import available_implementations, create_transport
from .http import HttpTransport
from .stream import StreamTransport
from .tcp import SocketTransport

__all__ = [
    "HttpTransport",
    "SocketTransport",
    "StreamTransport",
    "Transport",
    "TransportConfig",
    "TransportKind",
    "available_implementations",
    "create_transport",
]
