"""Configuration manager for loading and validating .endpoint-retry.yml"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from endpoint_retry.domain.config import AppConfig, RetryConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".endpoint-retry.yml"

# Environment variable -> retry field
ENV_OVERRIDES = {
    "ENDPOINT_RETRY_MAX_RETRIES": "max_retries",
    "ENDPOINT_RETRY_BASE_DELAY": "base_delay",
    "ENDPOINT_RETRY_MAX_DELAY": "max_delay",
    "ENDPOINT_RETRY_STRATEGY": "strategy",
    "ENDPOINT_RETRY_STATUS_CODES": "retry_status_codes",
    "ENDPOINT_RETRY_METHODS": "retry_methods",
}


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages retry configuration from .endpoint-retry.yml and environment variables

    Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .endpoint-retry.yml file (searched from current directory upward)
    3. Environment variables (ENDPOINT_RETRY_*)
    4. CLI arguments (handled by CLI layer)
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize config manager

        Args:
            config_path: Path to the YAML file (searched from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                msg = error["msg"]
                errors.append(f"  - {field}: {msg}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and validate with Pydantic

        Raises:
            ValidationError: If configuration is invalid
        """
        config_dict: Dict[str, Any] = {"retry": {}}

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}")
                logger.info("Using default configuration")
            else:
                if isinstance(file_config, dict):
                    config_dict.update(file_config)
                    logger.info(f"Loaded configuration from {self.config_path}")
                else:
                    logger.warning(f"Ignoring {self.config_path}: top level must be a mapping")

        config_dict = self._apply_env_overrides(config_dict)
        return AppConfig(**config_dict)

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        retry = dict(config.get("retry") or {})
        for env_name, field in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                retry[field] = value
        config["retry"] = retry
        return config

    def get_retry_config(self) -> RetryConfig:
        """Get retry configuration

        Returns:
            Retry configuration model
        """
        return self.config.retry
