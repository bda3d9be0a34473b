"""Bearer-token session lifecycle.

A ``Session`` is either empty or holds a token together with the instant it
expires.  ``SessionManager.ensure_authenticated`` hands out the held token
while it is still valid and performs the login exchange otherwise.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from .config import Config
from .errors import (
    AuthenticationFailed,
    MalformedResponse,
    MissingConfiguration,
    NetworkFailure,
)
from .request_builder import RequestBuilder
from .templates import json_escape
from .transport import Transport

logger = logging.getLogger("shiorictl.session")


@dataclass(frozen=True)
class Credentials:
    base_url: str
    username: str
    password: str

    @classmethod
    def from_config(cls, config: Config) -> "Credentials":
        return cls(
            base_url=config.server.url,
            username=config.server.username,
            password=config.server.password,
        )

    @property
    def missing(self) -> list[str]:
        fields = (("url", self.base_url), ("username", self.username), ("password", self.password))
        return [name for name, value in fields if not value]

    def __repr__(self) -> str:
        return f"Credentials(base_url={self.base_url!r}, username={self.username!r}, password='***')"


@dataclass
class Session:
    """Current token and its expiry (epoch seconds). Both set or both None."""
    token: str | None = None
    expires_at: float | None = None

    @property
    def is_empty(self) -> bool:
        return self.token is None

    def is_valid(self, now: float) -> bool:
        return not self.is_empty and now < self.expires_at

    def populate(self, token: str, expires_at: float) -> None:
        self.token, self.expires_at = token, expires_at

    def clear(self) -> None:
        self.token, self.expires_at = None, None


def _checked_seconds(seconds: float, raw: Any) -> float:
    """Reject expiries that are not finite or not representable as a date."""
    if not math.isfinite(seconds):
        raise MalformedResponse(f"Invalid expiry value: {raw!r}")
    try:
        datetime.fromtimestamp(seconds, timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedResponse(f"Expiry out of range: {raw!r}") from e
    return seconds


def parse_expiry(value: Any) -> float:
    """
    Convert the login response's ``expires`` field to epoch seconds.

    Accepts numbers (seconds, or milliseconds when implausibly large) and
    ISO-8601 strings. Naive timestamps are taken as UTC.
    """
    if isinstance(value, bool):
        raise MalformedResponse(f"Invalid expiry value: {value!r}")
    if isinstance(value, (int, float)):
        try:
            seconds = float(value)
        except OverflowError as e:
            raise MalformedResponse(f"Expiry out of range: {value!r}") from e
        if seconds > 1e12:
            seconds /= 1000
        return _checked_seconds(seconds, value)
    if isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            number = None
        if number is not None:
            return parse_expiry(number)
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise MalformedResponse(f"Invalid expiry value: {value!r}") from e
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return _checked_seconds(dt.timestamp(), value)
    raise MalformedResponse(f"Invalid expiry value: {value!r}")



def _failure_text(message: Any) -> str:
    if isinstance(message, str) and message:
        return message
    if isinstance(message, dict) and message.get("error"):
        return str(message["error"])
    return "Login rejected by server"


class SessionManager:
    """Owns a Session and performs logins through the given transport."""

    def __init__(
        self,
        transport: Transport,
        session: Session | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.transport = transport
        self.session = session if session is not None else Session()
        self.clock = clock
        self._lock = threading.RLock()

    def ensure_authenticated(self, credentials: Credentials) -> str:
        """Return a valid token, logging in first if none is held or it expired."""
        missing = credentials.missing
        if missing:
            raise MissingConfiguration(missing)

        with self._lock:
            if self.session.is_valid(self.clock()):
                return self.session.token
            if not self.session.is_empty:
                logger.info("Session token expired, logging in again")
            return self.login(credentials)

    def login(self, credentials: Credentials) -> str:
        builder = RequestBuilder(credentials.base_url)
        request = builder.build("login", {
            "username": json_escape(credentials.username),
            "password": json_escape(credentials.password),
        })

        with self._lock:
            logger.info("Logging in to %s as %s", builder.base_url, credentials.username)
            resp = self.transport.send(request)

            try:
                data = resp.json()
            except MalformedResponse:
                if not resp.ok:
                    raise NetworkFailure(resp.text.strip()[:200] or "Login failed", resp.status_code)
                raise

            if not isinstance(data, dict):
                raise MalformedResponse("Login response is not a JSON object")

            if data.get("ok") is False or resp.status_code == 401:
                self.session.clear()
                text = _failure_text(data.get("message"))
                logger.warning("Login failed for %s: %s", credentials.username, text)
                raise AuthenticationFailed(text)

            if not resp.ok:
                raise NetworkFailure(_failure_text(data.get("message")), resp.status_code)

            message = data.get("message")
            if not isinstance(message, dict):
                raise MalformedResponse("Login response has no 'message' object")
            token = message.get("token")
            if not isinstance(token, str) or not token:
                raise MalformedResponse("Login response has no token")
            if "expires" not in message:
                raise MalformedResponse("Login response has no expiry")
            expires_at = parse_expiry(message["expires"])

            self.session.populate(token, expires_at)
            logger.debug("Session valid until epoch %.0f", expires_at)
            return token

    def invalidate(self) -> None:
        """Forget the held token so the next operation logs in again."""
        with self._lock:
            self.session.clear()
