"""
Configuration Management for StarDoc

🔧 Environment-driven settings for the database connection and logging.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Environment(Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


@dataclass
class DatabaseConfig:
    """Database connection configuration"""
    url: str = "memory://"
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        return cls(url=os.environ.get("STARDOC_DATABASE_URL", cls.url))


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(level=os.environ.get("STARDOC_LOG_LEVEL", cls.level).upper())


@dataclass
class StarDocConfig:
    """Complete StarDoc configuration"""
    environment: Environment = Environment.DEVELOPMENT
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def for_environment(cls, environment: Environment) -> "StarDocConfig":
        """Create configuration for specific environment"""
        config = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            config.logging.level = "DEBUG"
        elif environment == Environment.TESTING:
            config.database.url = "memory://"
            config.logging.level = "WARNING"
        elif environment == Environment.PRODUCTION:
            config.database.url = "mongodb://localhost:27017/stardoc"
            config.logging.level = "INFO"

        return config

    @classmethod
    def from_env(cls) -> "StarDocConfig":
        """Preset for ``STARDOC_ENV``, overridden by the other STARDOC_* variables"""
        environment = Environment(os.environ.get("STARDOC_ENV", Environment.DEVELOPMENT.value))
        config = cls.for_environment(environment)

        if "STARDOC_DATABASE_URL" in os.environ:
            config.database = DatabaseConfig.from_env()
        if "STARDOC_LOG_LEVEL" in os.environ:
            config.logging = LoggingConfig.from_env()

        return config


def configure_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """Apply level and format to the ``stardoc`` logger"""
    config = config or LoggingConfig.from_env()
    logger = logging.getLogger("stardoc")
    logger.setLevel(config.level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(config.format))
        logger.addHandler(handler)

    return logger


__all__ = ["Environment", "DatabaseConfig", "LoggingConfig", "StarDocConfig", "configure_logging"]
