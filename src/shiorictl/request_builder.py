"""Turn a named API descriptor plus runtime values into a concrete request."""

import logging
from dataclasses import dataclass
from typing import Mapping

from .errors import MissingRequiredArgument
from .templates import lookup, resolve

logger = logging.getLogger("shiorictl.request_builder")


@dataclass(frozen=True)
class ResolvedRequest:
    """A template-free request, ready to hand to a transport."""
    url: str
    method: str
    headers: tuple[tuple[str, str], ...] = ()
    body: str | None = None
    operation: str = ""

    @property
    def header_dict(self) -> dict[str, str]:
        return dict(self.headers)


class RequestBuilder:
    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def build(self, operation: str, args: Mapping[str, str]) -> ResolvedRequest:
        """
        Build the request for operation.

        Raises UnknownOperation for an unregistered name and
        MissingRequiredArgument when args does not cover every placeholder
        the descriptor declares.
        """
        descriptor = lookup(operation)

        missing = descriptor.placeholders - set(args)
        if missing:
            raise MissingRequiredArgument(operation, missing)

        url = self.base_url + resolve(descriptor.path, args)

        headers = []
        for template in descriptor.header_templates:
            name, _, value = resolve(template, args).partition(":")
            headers.append((name.strip(), value.strip()))

        body = None
        if descriptor.body_template is not None:
            body = resolve(descriptor.body_template, args)

        logger.debug("Built %s request: %s %s", operation, descriptor.method, url)
        return ResolvedRequest(
            url=url,
            method=descriptor.method,
            headers=tuple(headers),
            body=body,
            operation=operation,
        )
