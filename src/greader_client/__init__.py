"""Public surface for the Google Reader Python client."""

from .client import ReaderClient
from .errors import (
    AuthenticationError,
    CommunicationError,
    ConfigurationError,
    GReaderError,
)
from .transport import (
    HttpTransport,
    SocketTransport,
    StreamTransport,
    Transport,
    TransportConfig,
    create_transport,
)
from .version import __version__

__all__ = [
    "__version__",
    "AuthenticationError",
    "CommunicationError",
    "ConfigurationError",
    "GReaderError",
    "HttpTransport",
    "ReaderClient",
    "SocketTransport",
    "StreamTransport",
    "Transport",
    "TransportConfig",
    "create_transport",
]
