"""Named API descriptors and the placeholder resolver.

Each Shiori endpoint the client talks to is described once, as an
``ApiDescriptor`` whose path, headers and body are template strings
containing ``:name`` placeholders.  ``resolve`` fills those placeholders from
a mapping of runtime values.
"""

import json
import re
from dataclasses import dataclass
from typing import Mapping

from .errors import UnknownOperation

# ":token", ":new-url" -- a colon directly followed by a name
PLACEHOLDER_RE = re.compile(r":([A-Za-z][A-Za-z0-9_-]*)")

JSON_HEADER = "Content-Type: application/json"
AUTH_HEADER = "Authorization: Bearer :token"


@dataclass(frozen=True)
class ApiDescriptor:
    """Static shape of one API operation."""
    name: str
    method: str
    path: str
    header_templates: tuple[str, ...] = ()
    body_template: str | None = None

    @property
    def templates(self) -> tuple[str, ...]:
        parts = (self.path, *self.header_templates)
        if self.body_template is not None:
            parts += (self.body_template,)
        return parts

    @property
    def placeholders(self) -> frozenset[str]:
        """Names of every ``:name`` placeholder in path, headers and body."""
        names: set[str] = set()
        for template in self.templates:
            names.update(PLACEHOLDER_RE.findall(template))
        return frozenset(names)

    @property
    def requires_auth(self) -> bool:
        return AUTH_HEADER in self.header_templates


def _descriptor(name, method, path, auth=True, body=None) -> ApiDescriptor:
    headers = (JSON_HEADER, AUTH_HEADER) if auth else (JSON_HEADER,)
    return ApiDescriptor(
        name=name,
        method=method,
        path=path,
        header_templates=headers,
        body_template=body,
    )


REGISTRY: dict[str, ApiDescriptor] = {
    d.name: d
    for d in (
        _descriptor(
            "login", "POST", "/api/v1/auth/login",
            auth=False,
            body='{"username": ":username", "password": ":password", "remember": true}',
        ),
        _descriptor("bookmarks", "GET", "/api/bookmarks"),
        _descriptor("article", "GET", "/bookmark/:id/content"),
        _descriptor("add", "POST", "/api/bookmarks", body='{"url": ":new-url"}'),
        _descriptor("delete", "DELETE", "/api/bookmarks", body=":ids"),
    )
}


def lookup(name: str) -> ApiDescriptor:
    try:
        return REGISTRY[name]
    except KeyError:
        raise UnknownOperation(name) from None


def resolve(template: str, args: Mapping[str, str]) -> str:
    """
    Substitute ``:key`` placeholders in template with values from args.

    Keys are applied in the order args yields them, one plain substring
    replacement per key. Placeholders without a matching key are left as-is.
    """
    result = template
    for key, value in args.items():
        result = result.replace(f":{key}", str(value))
    return result


def json_escape(value: str) -> str:
    """Escape value for substitution inside a JSON string literal template."""
    return json.dumps(value, ensure_ascii=False)[1:-1]
