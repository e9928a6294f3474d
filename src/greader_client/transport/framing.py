"""HTTP/1.1 framing for the socket transport.

Kept free of any I/O so the exact bytes put on the wire can be checked
without a network.
"""

from __future__ import annotations

from ..errors import CommunicationError
from .base import FORM_CONTENT_TYPE

CRLF = "\r\n"
HEADER_TERMINATOR = b"\r\n\r\n"


def content_length(body: str) -> int:
    """Number of bytes ``body`` occupies on the wire, not its character count."""
    return len(body.encode("utf-8"))


def build_post_request(path: str, host: str, body: str, user_agent: str) -> bytes:
    """Frame a form-encoded POST request.

    ``body`` is sent as given (UTF-8 encoded); encoding form fields is the
    caller's job.
    """
    lines = [
        f"POST {path} HTTP/1.1",
        f"Host: {host}",
        f"Content-Type: {FORM_CONTENT_TYPE}",
        f"Content-Length: {content_length(body)}",
        f"User-Agent: {user_agent}",
        "",
        "",
    ]
    return CRLF.join(lines).encode("utf-8") + body.encode("utf-8")


def strip_headers(raw: bytes) -> bytes:
    """Return everything after the first blank line of a raw HTTP response."""
    index = raw.find(HEADER_TERMINATOR)
    if index == -1:
        raise CommunicationError(
            "Invalid response returned by API server.",
            context={"received_bytes": len(raw)},
        )
    return raw[index + len(HEADER_TERMINATOR):]


__all__ = ["build_post_request", "content_length", "strip_headers"]
