"""Application configuration helpers."""

from __future__ import annotations

from .backend import BackendConfig, backend_configured, get_backend_config
from .env import optional_env, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .imports import ImportSettings, get_import_settings
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "BackendConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "ImportSettings",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "backend_configured",
    "configure_logging",
    "get_backend_config",
    "get_database_config",
    "get_import_settings",
    "get_storage_config",
    "optional_env",
    "require_env_vars",
]
