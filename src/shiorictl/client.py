"""High-level bookmark operations against a Shiori server."""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .config import Config
from .errors import AuthenticationFailed, MalformedResponse, NetworkFailure
from .request_builder import RequestBuilder
from .session import Credentials, SessionManager
from .templates import json_escape
from .transport import HttpxTransport, Response, Transport

logger = logging.getLogger("shiorictl.client")


@dataclass(frozen=True)
class BookmarkSummary:
    id: int
    title: str
    created_at: str
    url: str = ""
    excerpt: str = ""

    @classmethod
    def from_api(cls, raw: Any) -> "BookmarkSummary":
        if not isinstance(raw, dict):
            raise MalformedResponse(f"Bookmark entry is not an object: {raw!r}")
        try:
            bookmark_id = raw["id"]
            title = raw["title"]
            created_at = raw["createdAt"]
        except KeyError as e:
            raise MalformedResponse(f"Bookmark entry is missing field {e.args[0]!r}") from e
        if isinstance(bookmark_id, bool) or not isinstance(bookmark_id, int):
            raise MalformedResponse(f"Bookmark id is not an integer: {bookmark_id!r}")
        return cls(
            id=bookmark_id,
            title=str(title),
            created_at=str(created_at),
            url=str(raw.get("url") or ""),
            excerpt=str(raw.get("excerpt") or ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "created_at": self.created_at,
            "url": self.url,
            "excerpt": self.excerpt,
        }


def format_ids(ids: Iterable[int]) -> str:
    """Render bookmark ids as the JSON array body the delete endpoint takes."""
    return "[" + ",".join(str(int(i)) for i in ids) + "]"


class ShioriClient:
    """Bookmark operations, each gated by the session manager."""

    def __init__(
        self,
        config: Config,
        transport: Transport | None = None,
        session_manager: SessionManager | None = None,
    ):
        self.config = config
        self.credentials = Credentials.from_config(config)
        self.transport = transport or HttpxTransport(
            timeout=config.http.timeout,
            verify=config.http.verify,
        )
        self.session_manager = session_manager or SessionManager(self.transport)

    def _call(self, operation: str, args: Mapping[str, str] | None = None) -> Response:
        token = self.session_manager.ensure_authenticated(self.credentials)
        request = RequestBuilder(self.credentials.base_url).build(
            operation, {"token": token, **(args or {})},
        )
        resp = self.transport.send(request)

        if resp.status_code == 401:
            # Server no longer accepts the token; next call logs in again
            self.session_manager.invalidate()
            raise AuthenticationFailed(f"{operation}: token rejected by server")
        if not resp.ok:
            raise NetworkFailure(
                resp.text.strip()[:200] or f"{operation} request failed",
                resp.status_code,
            )
        return resp

    def list_bookmarks(self) -> list[BookmarkSummary]:
        data = self._call("bookmarks").json()
        if not isinstance(data, dict) or not isinstance(data.get("bookmarks"), list):
            raise MalformedResponse("Bookmarks response has no 'bookmarks' array")
        bookmarks = [BookmarkSummary.from_api(raw) for raw in data["bookmarks"]]
        logger.debug("Fetched %d bookmarks", len(bookmarks))
        return bookmarks

    def fetch_article(self, bookmark_id: int) -> str:
        """Return the archived article content of a bookmark as raw HTML."""
        return self._call("article", {"id": str(bookmark_id)}).text

    def add_bookmark(self, url: str) -> dict:
        data = self._call("add", {"new-url": json_escape(url)}).json()
        logger.info("Added bookmark %s", url)
        return data if isinstance(data, dict) else {"result": data}

    def delete_bookmarks(self, ids: str) -> dict:
        """
        Delete bookmarks by id.

        ids is sent verbatim as the request body and must already be a JSON
        array, e.g. "[1,2,3]" (see format_ids).
        """
        data = self._call("delete", {"ids": ids}).json()
        logger.info("Deleted bookmarks %s", ids)
        return data if isinstance(data, dict) else {"result": data}
