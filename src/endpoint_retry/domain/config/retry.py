"""Retry configuration model."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from endpoint_retry.domain.eligibility import default_should_retry
from endpoint_retry.domain.strategy import RetryStrategy

logger = logging.getLogger(__name__)

DEFAULT_RETRY_STATUS_CODES = frozenset({500, 502, 503, 504, 429})
DEFAULT_RETRY_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


def _noop_on_retry(error: Any, attempt: int, delay: int) -> None:
    return None


# Alternative option names -> field name
_FIELD_ALIASES = {
    "maxRetries": "max_retries",
    "baseDelay": "base_delay",
    "maxDelay": "max_delay",
    "shouldRetry": "should_retry",
    "eligibility_predicate": "should_retry",
    "onRetry": "on_retry",
    "on_retry_observed": "on_retry",
    "retryStatusCodes": "retry_status_codes",
    "retryable_status_codes": "retry_status_codes",
    "retryMethods": "retry_methods",
    "retryable_methods": "retry_methods",
}


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class RetryConfig(BaseModel):
    """Fully resolved retry configuration.

    Every field is optional on input and falls back to its default as a
    whole; ``None`` counts as "not supplied". Collections given by the
    caller replace the defaults, they are never merged with them.

    Attributes:
        max_retries: Retry attempts after the initial try
        base_delay: Base delay in milliseconds
        max_delay: Upper clamp on computed delays, in milliseconds
        strategy: Delay curve (fixed, linear or exponential)
        should_retry: Custom predicate ``(error, attempt) -> bool``
        on_retry: Callback ``(error, attempt, delay_ms) -> None``
        retry_status_codes: Status codes that may be retried
        retry_methods: Uppercase HTTP methods that may be retried
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "max_retries": 3,
                "base_delay": 1000,
                "max_delay": 30000,
                "strategy": "exponential",
                "retry_status_codes": [500, 502, 503, 504, 429],
                "retry_methods": ["GET", "POST", "PUT", "PATCH", "DELETE"],
            }
        },
    )

    max_retries: int = Field(3, ge=0)
    base_delay: int = Field(1000, ge=0)
    max_delay: int = Field(30000, ge=0)
    strategy: str = RetryStrategy.EXPONENTIAL.value
    should_retry: Callable[[Any, int], bool] = Field(
        default=default_should_retry,
        exclude=True,
        repr=False,
    )
    on_retry: Callable[[Any, int, int], None] = Field(
        default=_noop_on_retry,
        exclude=True,
        repr=False,
    )
    retry_status_codes: frozenset[int] = DEFAULT_RETRY_STATUS_CODES
    retry_methods: frozenset[str] = DEFAULT_RETRY_METHODS

    @model_validator(mode="before")
    @classmethod
    def _resolve_names(cls, data: Any) -> Any:
        """Fold alternative names onto field names and drop ``None`` values.

        When a field arrives under several names, the last one wins. ``None``
        counts as missing so the default applies.
        """
        if not isinstance(data, Mapping):
            return data
        resolved = {}
        for key, value in data.items():
            if value is not None:
                resolved[_FIELD_ALIASES.get(key, key)] = value
        return resolved

    @field_validator("strategy", mode="before")
    @classmethod
    def _normalize_strategy(cls, v: Any) -> str:
        if isinstance(v, RetryStrategy):
            return v.value
        name = str(v).strip().lower()
        if name not in {s.value for s in RetryStrategy}:
            logger.warning(f"Unknown retry strategy '{v}', falling back to exponential delays")
        return name

    @field_validator("retry_status_codes", mode="before")
    @classmethod
    def _parse_status_codes(cls, v: Any) -> Any:
        return _split_csv(v)

    @field_validator("retry_methods", mode="before")
    @classmethod
    def _normalize_methods(cls, v: Any) -> Any:
        v = _split_csv(v)
        if isinstance(v, (list, tuple, set, frozenset)):
            return frozenset(str(m).upper() for m in v)
        return v


def retry_config_from_dict(config: Optional[Mapping[str, Any]] = None) -> RetryConfig:
    """Resolve a partial options mapping into a RetryConfig.

    Accepts snake_case keys as well as the camelCase names used by the
    JavaScript client (``maxRetries``, ``retryStatusCodes``...).

    Raises:
        pydantic.ValidationError: If a value is invalid
    """
    if isinstance(config, RetryConfig):
        return config
    return RetryConfig.model_validate(dict(config or {}))
