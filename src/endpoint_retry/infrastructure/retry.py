"""Retry decorator for API client handlers, built on tenacity.

``wrap_handler`` turns an async ``(payload, context)`` handler into one that
retries eligible failures with fixed, linear or exponential backoff.
``retry_plugin`` exposes the same behaviour through the plugin surface.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Mapping, Optional, Union

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt

from endpoint_retry.domain.config.retry import RetryConfig, retry_config_from_dict
from endpoint_retry.domain.eligibility import should_retry_request
from endpoint_retry.domain.models.request import Handler, RequestContext
from endpoint_retry.domain.strategy import calculate_delay
from endpoint_retry.infrastructure.plugin import PluginHooks, create_plugin

logger = logging.getLogger(__name__)


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


def _delay_for(retry_state: RetryCallState, config: RetryConfig) -> int:
    return calculate_delay(
        retry_state.attempt_number, config.base_delay, config.max_delay, config.strategy
    )


def wrap_handler(handler: Handler, config: RetryConfig) -> Handler:
    """Wrap a handler with retry logic.

    The handler is called at most ``config.max_retries + 1`` times. A failure
    that is not eligible, or that happens once retries are exhausted, is
    re-raised unchanged. ``config.on_retry`` is called once per retry, right
    before the backoff sleep; an exception raised by it stops the loop and
    propagates in place of the original error.

    Only ``Exception`` subclasses are retried, so task cancellation during
    the backoff sleep ends the loop.

    Args:
        handler: Async handler ``(payload, context) -> result``
        config: Resolved retry configuration

    Returns:
        Handler with the same signature
    """
    total_attempts = config.max_retries + 1

    @functools.wraps(handler)
    async def wrapped(payload: Any, context: Optional[RequestContext] = None) -> Any:
        method = getattr(context, "method", None)
        path = getattr(context, "path", None)

        def _retry_condition(retry_state: RetryCallState) -> bool:
            if retry_state.outcome is None or not retry_state.outcome.failed:
                return False
            exception = retry_state.outcome.exception()
            if not isinstance(exception, Exception):
                return False
            attempt = retry_state.attempt_number
            if attempt > config.max_retries:
                logger.debug(f"{method} {path} failed after {attempt} attempts: {exception}")
                return False
            if not should_retry_request(exception, config, context):
                logger.debug(f"{method} {path} failed with non-retryable error: {exception}")
                return False
            return True

        def _before_sleep(retry_state: RetryCallState) -> None:
            if retry_state.outcome is None:
                return
            exception = retry_state.outcome.exception()
            attempt = retry_state.attempt_number
            delay = _delay_for(retry_state, config)
            logger.warning(
                f"{method} {path} failed (attempt {attempt}/{total_attempts}): {exception}. "
                f"Retrying in {delay}ms"
            )
            config.on_retry(exception, attempt, delay)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(total_attempts),
            wait=lambda retry_state: _delay_for(retry_state, config) / 1000,
            retry=_retry_condition,
            before_sleep=_before_sleep,
            sleep=_sleep,
            reraise=True,
        )
        return await retrying(handler, payload, context)

    return wrapped


def _retry_hooks(
    options: Union[Mapping[str, Any], RetryConfig, None] = None,
    **overrides: Any,
) -> PluginHooks:
    """Retry failed requests with configurable backoff.

    Options are resolved once, when the plugin is created.
    """
    if isinstance(options, RetryConfig) and not overrides:
        config = options
    else:
        if isinstance(options, RetryConfig):
            options = options.model_dump(exclude_unset=True) | {
                "should_retry": options.should_retry,
                "on_retry": options.on_retry,
            }
        config = retry_config_from_dict({**(options or {}), **overrides})

    def handler_wrapper(handler: Handler, endpoint: Any = None) -> Handler:
        return wrap_handler(handler, config)

    return PluginHooks(handler_wrapper=handler_wrapper)


retry_plugin = create_plugin("retry", _retry_hooks)
