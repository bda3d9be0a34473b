"""HTTP transport: executes a ResolvedRequest and returns the raw response."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from .errors import MalformedResponse, NetworkFailure, NetworkTimeout
from .request_builder import ResolvedRequest

logger = logging.getLogger("shiorictl.transport")

REQUEST_TIMEOUT = 30.0


@dataclass
class Response:
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Parse the body as JSON, raising MalformedResponse on failure."""
        if not self.text.strip():
            return {}
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as e:
            raise MalformedResponse(f"Invalid JSON in response: {e}") from e


class Transport(Protocol):
    def send(self, request: ResolvedRequest) -> Response:
        ...


class HttpxTransport:
    """Blocking transport backed by httpx."""

    def __init__(self, timeout: float = REQUEST_TIMEOUT, verify: bool = True):
        self.timeout = timeout
        self.verify = verify

    def send(self, request: ResolvedRequest) -> Response:
        logger.debug("%s %s", request.method, request.url)
        try:
            resp = httpx.request(
                request.method,
                request.url,
                headers=request.header_dict,
                content=request.body.encode("utf-8") if request.body is not None else None,
                timeout=self.timeout,
                verify=self.verify,
            )
        except httpx.TimeoutException as e:
            raise NetworkTimeout(
                f"{request.method} {request.url} timed out after {self.timeout}s"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkFailure(f"{request.method} {request.url} failed: {e}") from e

        logger.debug("%s %s -> %d", request.method, request.url, resp.status_code)
        return Response(status_code=resp.status_code, text=resp.text)
