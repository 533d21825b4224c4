"""Request context and endpoint descriptor models"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

# (method, url, **kwargs) -> response
Fetch = Callable[..., Awaitable[Any]]

# (input, context) -> output
Handler = Callable[[Any, "RequestContext"], Awaitable[Any]]


@dataclass(frozen=True)
class RequestContext:
    """Per-request data handed to every handler.

    Attributes:
        fetch: Transport used to perform the request
        method: HTTP method (any case)
        path: Endpoint path, relative to base_url
        base_url: Base URL of the API
    """

    fetch: Fetch
    method: str
    path: str
    base_url: str

    @property
    def url(self) -> str:
        return self.base_url.rstrip("/") + "/" + self.path.lstrip("/")


@dataclass(frozen=True)
class Endpoint:
    """Endpoint descriptor passed to plugin handler wrappers."""

    method: str
    path: str
