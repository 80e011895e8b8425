"""
Application configuration management.

Supports environment-based configuration with sensible defaults.
"""

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass
class Config:
    """Application configuration container."""

    # Flask settings
    FLASK_ENV: str = "development"
    FLASK_DEBUG: bool = True
    SECRET_KEY: str = "dev-secret-key-change-in-production"

    # Server settings
    HOST: str = "127.0.0.1"
    PORT: int = 5000
    API_PREFIX: str = "/api/v1"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        return cls(
            FLASK_ENV=os.getenv("FLASK_ENV", cls.FLASK_ENV),
            FLASK_DEBUG=os.getenv("FLASK_DEBUG", "true").lower() == "true",
            SECRET_KEY=os.getenv("SECRET_KEY", cls.SECRET_KEY),
            HOST=os.getenv("HOST", cls.HOST),
            PORT=int(os.getenv("PORT", cls.PORT)),
            API_PREFIX=os.getenv("API_PREFIX", cls.API_PREFIX),
            LOG_LEVEL=os.getenv("LOG_LEVEL", cls.LOG_LEVEL),
            LOG_FORMAT=os.getenv("LOG_FORMAT", cls.LOG_FORMAT),
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()


@dataclass
class TestConfig(Config):
    """Configuration for testing environment."""

    __test__ = False  # not a pytest test class

    FLASK_ENV: str = "testing"
    FLASK_DEBUG: bool = False
    LOG_LEVEL: str = "DEBUG"
