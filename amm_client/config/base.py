"""
Environment-driven configuration shared by the chain, contract and token
settings.
"""

import os
import logging
from typing import Any, Callable, Dict, Optional, List
from dataclasses import dataclass
from dotenv import load_dotenv

from ..errors import ConfigError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("local", "dev", "staging", "production", "test")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None):
    """Configure root logging from a level name, defaulting to LOG_LEVEL."""
    level = level or os.getenv("LOG_LEVEL", "INFO")
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


@dataclass
class BaseConfig:
    """Environment name and log level, plus typed accessors for env variables."""

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "local")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self):
        configure_logging(self.LOG_LEVEL)
        self._validate_config()

    def _validate_config(self):
        if self.ENVIRONMENT not in ENVIRONMENTS:
            raise ConfigError(
                f"Invalid environment: {self.ENVIRONMENT} (expected one of {', '.join(ENVIRONMENTS)})"
            )

    @staticmethod
    def get_env(key: str, default: Optional[str] = None, required: bool = False) -> str:
        """
        Read an environment variable.

        Raises:
            ConfigError: If the variable is required and unset
        """
        value = os.getenv(key, default)
        if required and value is None:
            raise ConfigError(f"Required environment variable '{key}' is not set")
        return value

    @staticmethod
    def _get_typed(key: str, default: Any, required: bool, convert: Callable[[str], Any], kind: str) -> Any:
        value = BaseConfig.get_env(key, str(default) if default is not None else None, required)
        try:
            return convert(value)
        except (ValueError, TypeError):
            raise ConfigError(f"Environment variable '{key}' must be {kind}, got: {value}")

    @staticmethod
    def get_env_int(key: str, default: Optional[int] = None, required: bool = False) -> int:
        return BaseConfig._get_typed(key, default, required, int, "an integer")

    @staticmethod
    def get_env_float(key: str, default: Optional[float] = None, required: bool = False) -> float:
        return BaseConfig._get_typed(key, default, required, float, "a number")

    @staticmethod
    def get_env_list(key: str, default: Optional[List[str]] = None, separator: str = ",") -> List[str]:
        """Comma separated values with blanks dropped."""
        value = BaseConfig.get_env(key, separator.join(default) if default else "")
        return [item.strip() for item in value.split(separator) if item.strip()] if value else []

    def to_dict(self) -> Dict[str, Any]:
        return {
            field: getattr(self, field)
            for field in self.__dataclass_fields__
            if not field.startswith('_')
        }
