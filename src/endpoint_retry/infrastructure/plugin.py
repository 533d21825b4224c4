"""Minimal plugin surface for API client handlers.

A plugin is a named set of hooks. The only hook is ``handler_wrapper``:
it receives a handler and an endpoint descriptor and returns a drop-in
replacement handler with the same ``(payload, context)`` signature.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from endpoint_retry.domain.models.request import Handler

HandlerWrapper = Callable[[Handler, Any], Handler]


@dataclass(frozen=True)
class PluginHooks:
    handler_wrapper: HandlerWrapper


@dataclass(frozen=True)
class Plugin:
    name: str
    handler_wrapper: HandlerWrapper

    def wrap(self, handler: Handler, endpoint: Any = None) -> Handler:
        return self.handler_wrapper(handler, endpoint)


def create_plugin(
    name: str,
    factory: Callable[..., PluginHooks],
) -> Callable[..., Plugin]:
    """Register a plugin factory under a name.

    Args:
        name: Plugin name
        factory: Called with the user options, returns the plugin hooks

    Returns:
        Callable building a configured Plugin from optional options
    """

    def build(*args: Any, **kwargs: Any) -> Plugin:
        hooks = factory(*args, **kwargs)
        return Plugin(name=name, handler_wrapper=hooks.handler_wrapper)

    build.__name__ = f"{name}_plugin"
    build.__doc__ = factory.__doc__
    return build
