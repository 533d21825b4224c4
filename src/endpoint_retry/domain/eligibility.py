"""Retry eligibility rules.

Errors are inspected by shape only: an error "has a status" when it exposes
a non-zero integer ``status`` attribute, or a ``response.status_code`` the way
``requests.HTTPError`` does. Anything else (network failures, timeouts) is
treated as having no status code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from endpoint_retry.domain.config.retry import RetryConfig
    from endpoint_retry.domain.models.request import RequestContext


@runtime_checkable
class HasStatus(Protocol):
    """Errors carrying an HTTP status code."""

    status: int


def _as_status(value: Any) -> Optional[int]:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value == 0:
        return None
    return value


def get_status(error: Any) -> Optional[int]:
    """Return the HTTP status carried by an error, or None."""
    if isinstance(error, HasStatus):
        status = _as_status(error.status)
        if status is not None:
            return status
    response = getattr(error, "response", None)
    if response is not None:
        return _as_status(getattr(response, "status_code", None))
    return None


def default_should_retry(error: Any, attempt: int = 0) -> bool:
    """Retry errors without a status code, and server errors."""
    status = get_status(error)
    return status is None or status >= 500


def should_retry_request(
    error: Any,
    config: RetryConfig,
    context: Optional[RequestContext] = None,
) -> bool:
    """Check whether a failed request is eligible for another attempt.

    The custom predicate always receives attempt number 0, whatever the
    current attempt is.
    """
    if not config.should_retry(error, 0):
        return False

    status = get_status(error)
    if status is not None and status not in config.retry_status_codes:
        return False

    method = getattr(context, "method", None)
    if method and method.upper() not in config.retry_methods:
        return False

    return True
