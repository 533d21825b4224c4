"""Shared HTTP client utilities (requests transport + plugin-wrapped endpoints).

Endpoints are plain async handlers ``(payload, context) -> result``; plugins
such as ``retry_plugin`` wrap them before they are exposed on the client.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

import requests

from endpoint_retry.domain.models.request import Endpoint, Fetch, Handler, RequestContext
from endpoint_retry.infrastructure.plugin import Plugin

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# Methods whose payload goes to the query string rather than the body
_QUERY_METHODS = frozenset({"GET", "DELETE", "HEAD"})


class HttpError(Exception):
    """Non-2xx response returned by an endpoint.

    Attributes:
        status: HTTP status code
        status_text: Reason phrase
        body: Raw response body, if any
    """

    def __init__(self, status: int, status_text: str = "", body: Optional[str] = None):
        super().__init__(f"HTTP {status} {status_text}".strip())
        self.status = status
        self.status_text = status_text
        self.body = body


async def requests_fetch(method: str, url: str, **kwargs: Any) -> requests.Response:
    """Perform a blocking requests call in a worker thread."""
    kwargs.setdefault("timeout", DEFAULT_TIMEOUT)
    logger.debug(f"HTTP {method} {url}")
    return await asyncio.to_thread(requests.request, method, url, **kwargs)


async def send_request(payload: Any, context: RequestContext) -> Any:
    """Default endpoint handler.

    Sends the payload as query params for GET/DELETE/HEAD and as a JSON body
    otherwise, then decodes the response.

    Raises:
        HttpError: If the response status is not 2xx
    """
    method = context.method.upper()
    kwargs: dict = {}
    if payload is not None:
        if method in _QUERY_METHODS:
            kwargs["params"] = payload
        else:
            kwargs["json"] = payload

    response = await context.fetch(method, context.url, **kwargs)
    if not response.ok:
        raise HttpError(response.status_code, response.reason or "", body=response.text)

    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiClient:
    """Async API client whose endpoints are wrapped by plugins.

    Plugins are applied in order, the first one being the outermost wrapper.

    Example:
        >>> client = ApiClient("https://api.example.com", plugins=[retry_plugin(max_retries=2)])
        >>> list_users = client.endpoint("GET", "/users")
        >>> users = await list_users()
    """

    def __init__(
        self,
        base_url: str,
        plugins: Sequence[Plugin] = (),
        fetch: Optional[Fetch] = None,
    ):
        self.base_url = base_url
        self.plugins = tuple(plugins)
        self.fetch = fetch or requests_fetch

    def wrap(self, handler: Handler, endpoint: Endpoint) -> Handler:
        for plugin in reversed(self.plugins):
            handler = plugin.wrap(handler, endpoint)
        return handler

    def endpoint(
        self,
        method: str,
        path: str,
        handler: Optional[Handler] = None,
    ) -> Callable[..., Awaitable[Any]]:
        """Build a callable endpoint.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            handler: Custom handler (defaults to send_request)

        Returns:
            Async callable taking an optional payload
        """
        endpoint = Endpoint(method=method.upper(), path=path)
        wrapped = self.wrap(handler or send_request, endpoint)
        context = RequestContext(
            fetch=self.fetch,
            method=endpoint.method,
            path=path,
            base_url=self.base_url,
        )

        async def call(payload: Any = None) -> Any:
            return await wrapped(payload, context)

        return call
