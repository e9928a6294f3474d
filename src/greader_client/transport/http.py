"""Curl-style transport built on top of httpx."""

from __future__ import annotations

from ..errors import CommunicationError, ConfigurationError
from ..logger import BoundLogger, create_logger
from .base import FORM_CONTENT_TYPE, TransportConfig, TransportKind, is_absolute_url, require_path

try:
    import httpx

    HTTPX_AVAILABLE = True
except ImportError:  # pragma: no cover - httpx is a declared dependency
    httpx = None  # type: ignore[assignment]
    HTTPX_AVAILABLE = False


class HttpTransport:
    """POST through an ``httpx.Client`` opened for the duration of one call.

    The library manages the TCP lifecycle and strips the header block; the
    transferred body is returned whatever the status code.
    """

    kind: TransportKind = "curl"

    def __init__(
        self,
        host: str,
        port: int,
        user_agent: str,
        *,
        timeout: float | None = None,
        transport: "httpx.BaseTransport | None" = None,
        logger: BoundLogger | None = None,
    ) -> None:
        if not HTTPX_AVAILABLE:
            raise ConfigurationError(
                "httpx is not installed; the curl transport may not be used."
            )
        self._config = TransportConfig(host=host, port=port, user_agent=user_agent)
        self._timeout = timeout
        self._transport = transport
        self._logger = (logger or create_logger()).child("http")
        self._client: httpx.Client | None = None

    @property
    def config(self) -> TransportConfig:
        return self._config

    @property
    def connected(self) -> bool:
        return self._client is not None

    def post(self, path: str, body: str, subdomain_key: str = "") -> str:
        require_path(path)
        self._connect()
        assert self._client is not None
        url = self._config.url_for(path, subdomain_key)
        headers = {"Content-Type": FORM_CONTENT_TYPE}
        if not is_absolute_url(path):
            headers["Host"] = self._config.effective_host(subdomain_key)
        content = body.encode("utf-8")
        try:
            self._logger.debug("HTTP POST %s bytes=%d", url, len(content))
            response = self._client.post(url, content=content, headers=headers)
            payload = response.content
            self._logger.debug(
                "HTTP <- %s status=%s bytes=%d", url, response.status_code, len(payload)
            )
            return payload.decode("utf-8", errors="replace")
        except httpx.HTTPError as exc:
            raise CommunicationError(
                f"Error getting response from API server: {exc}",
                code=_native_code(exc),
            ) from exc
        except UnicodeError as exc:
            raise CommunicationError(f"Request cannot be encoded for HTTP: {exc}") from exc
        finally:
            self._disconnect()

    def close(self) -> None:
        self._disconnect()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self) -> None:
        self._disconnect()

    def _connect(self) -> None:
        if self._client is not None:
            return
        options = {} if self._timeout is None else {"timeout": self._timeout}
        self._client = httpx.Client(
            headers={"User-Agent": self._config.user_agent},
            follow_redirects=False,
            transport=self._transport,
            **options,
        )

    def _disconnect(self) -> None:
        client = getattr(self, "_client", None)
        if client is None:
            return
        self._client = None
        client.close()


def _native_code(exc: "httpx.HTTPError") -> int | None:
    cause = exc.__context__
    while cause is not None:
        errno = getattr(cause, "errno", None)
        if isinstance(errno, int):
            return errno
        cause = cause.__context__
    return None


__all__ = ["HTTPX_AVAILABLE", "HttpTransport"]
