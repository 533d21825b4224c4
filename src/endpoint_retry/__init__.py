"""endpoint-retry - retry policy plugin for async API clients"""

__version__ = "0.1.0"

from endpoint_retry.domain.config import RetryConfig, retry_config_from_dict
from endpoint_retry.domain.eligibility import default_should_retry, get_status, should_retry_request
from endpoint_retry.domain.models import Endpoint, RequestContext
from endpoint_retry.domain.strategy import RetryStrategy, calculate_delay
from endpoint_retry.infrastructure.http_client import ApiClient, HttpError, requests_fetch
from endpoint_retry.infrastructure.plugin import Plugin, create_plugin
from endpoint_retry.infrastructure.retry import retry_plugin, wrap_handler

__all__ = [
    "ApiClient",
    "Endpoint",
    "HttpError",
    "Plugin",
    "RequestContext",
    "RetryConfig",
    "RetryStrategy",
    "calculate_delay",
    "create_plugin",
    "default_should_retry",
    "get_status",
    "requests_fetch",
    "retry_config_from_dict",
    "retry_plugin",
    "should_retry_request",
    "wrap_handler",
]
