"""Configuration models with Pydantic validation."""

from endpoint_retry.domain.config.app import AppConfig
from endpoint_retry.domain.config.retry import RetryConfig, retry_config_from_dict

__all__ = ["AppConfig", "RetryConfig", "retry_config_from_dict"]
