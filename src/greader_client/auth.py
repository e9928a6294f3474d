"""ClientLogin credential handling for the Reader client."""

from __future__ import annotations

from urllib.parse import urlencode

from .errors import AuthenticationError
from .logger import BoundLogger
from .transport.base import Transport

LOGIN_PATH = "/accounts/ClientLogin"
LOGIN_SERVICE = "reader"


class AuthManager:
    """Builds the login form and keeps the ``Auth`` value it yields."""

    def __init__(
        self,
        username: str,
        password: str,
        source: str,
        logger: BoundLogger,
    ) -> None:
        self.username = username
        self.password = password
        self.source = source
        self._logger = logger.child("auth")
        self._auth_token: str | None = None

    @property
    def auth_token(self) -> str | None:
        return self._auth_token

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    def login_body(self) -> str:
        return urlencode(
            {
                "accountType": "GOOGLE",
                "Email": self.username,
                "Passwd": self.password,
                "source": self.source,
                "service": LOGIN_SERVICE,
            }
        )

    def authenticate(self, transport: Transport) -> str:
        if not self.has_credentials:
            raise AuthenticationError("Username and password are required for ClientLogin")

        self._logger.info("Authenticating %s", self.username)
        body = transport.post(LOGIN_PATH, self.login_body())
        fields = parse_login_response(body)
        if "Error" in fields:
            raise AuthenticationError(f"Authentication failed: {fields['Error']}", context=fields)
        token = fields.get("Auth")
        if not token:
            raise AuthenticationError(f"Unexpected ClientLogin response: {body.strip()}")

        self._auth_token = token
        return token

    def clear(self) -> None:
        self._auth_token = None


def parse_login_response(body: str) -> dict[str, str]:
    """Split ``Key=value`` lines (``SID=..``, ``Auth=..``, ``Error=..``)."""
    fields: dict[str, str] = {}
    for line in body.splitlines():
        key, sep, value = line.strip().partition("=")
        if sep and key:
            fields[key] = value
    return fields


__all__ = ["AuthManager", "parse_login_response"]
