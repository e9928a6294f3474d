"""Stream transport delegating HTTP framing to ``urllib.request``."""

from __future__ import annotations

import http.client
import urllib.error
import urllib.request
from urllib.parse import quote

from ..errors import CommunicationError, ConfigurationError
from ..logger import BoundLogger, create_logger
from .base import FORM_CONTENT_TYPE, TransportConfig, TransportKind, is_absolute_url, require_path


# Reserved characters and existing escapes pass through quoting unchanged.
URL_SAFE = "/?#[]@!$&'()*+,;=:%~"


class _NoRedirectHandler(urllib.request.HTTPRedirectHandler):
    def redirect_request(self, req, fp, code, msg, headers, newurl):
        return None


class StreamTransport:
    """POST through a reusable ``urllib`` opener.

    The opener plays the role of a request context configured once per
    instance; headers and body are attached per call. There is no
    connect/disconnect step, the opener owns each connection for the
    duration of a single fetch.
    """

    kind: TransportKind = "streams"

    METHOD = "POST"

    def __init__(
        self,
        host: str,
        port: int,
        user_agent: str,
        *,
        timeout: float | None = None,
        opener: urllib.request.OpenerDirector | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._config = TransportConfig(host=host, port=port, user_agent=user_agent)
        self._timeout = timeout
        self._logger = (logger or create_logger()).child("stream")
        self._opener = opener or urllib.request.build_opener(_NoRedirectHandler)
        if not _supports_http(self._opener):
            raise ConfigurationError(
                "No http handler is installed on the URL opener; "
                "the streams transport may not be used."
            )

    @property
    def config(self) -> TransportConfig:
        return self._config

    def post(self, path: str, body: str, subdomain_key: str = "") -> str:
        require_path(path)
        # The URL always names the configured host; routing by key is done
        # through the Host header.
        target = path if is_absolute_url(path) else quote(path, safe=URL_SAFE)
        url = self._config.url_for(target)
        headers = {
            "Content-Type": FORM_CONTENT_TYPE,
            "User-Agent": self._config.user_agent,
        }
        if not is_absolute_url(path):
            headers["Host"] = self._config.effective_host(subdomain_key)

        request = urllib.request.Request(
            url, data=body.encode("utf-8"), headers=headers, method=self.METHOD
        )
        self._logger.debug("POST %s bytes=%d", url, len(request.data))
        try:
            with self._open(request) as response:
                payload = response.read()
        except urllib.error.HTTPError as exc:
            exc.close()
            raise CommunicationError(
                f"Error reading HTTP stream: {exc.code} {exc.reason}", code=exc.code
            ) from exc
        except urllib.error.URLError as exc:
            code = getattr(exc.reason, "errno", None)
            raise CommunicationError(f"Error reading HTTP stream: {exc.reason}", code=code) from exc
        except (OSError, http.client.HTTPException) as exc:
            raise CommunicationError(
                f"Error reading HTTP stream: {exc!r}", code=getattr(exc, "errno", None)
            ) from exc
        except UnicodeError as exc:
            raise CommunicationError(f"Request cannot be encoded for HTTP: {exc}") from exc

        self._logger.debug("POST %s <- bytes=%d", url, len(payload))
        return payload.decode("utf-8", errors="replace")

    def _open(self, request: urllib.request.Request):
        if self._timeout is None:
            return self._opener.open(request)
        return self._opener.open(request, timeout=self._timeout)

    def close(self) -> None:
        """Nothing to release; present for interface symmetry."""

    def __enter__(self) -> "StreamTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _supports_http(opener: urllib.request.OpenerDirector) -> bool:
    return any(hasattr(handler, "http_open") for handler in opener.handlers)


__all__ = ["StreamTransport"]
