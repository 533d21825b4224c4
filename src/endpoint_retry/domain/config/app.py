"""Root configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from endpoint_retry.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Root of the ``.endpoint-retry.yml`` file.

    Attributes:
        retry: Retry policy configuration
    """

    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "retry": {
                    "max_retries": 3,
                    "base_delay": 1000,
                    "max_delay": 30000,
                    "strategy": "exponential",
                },
            }
        },
    )
