"""
Static configuration management for Realmforge.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults, type validation, and bounds checking. This module
handles settings that are fixed once the process has started.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to all static configuration values
- Validate critical settings on startup
- Track which values came from the environment and which from defaults

Non-Responsibilities
--------------------
- Game balance values (handled by ConfigManager and `config/*.yaml`)
- Secrets management (use environment variables)

Architecture Notes
------------------
- Class-level attributes, no instantiation
- Auto-loads on module import via Config.validate()
- Directory paths are relative to the project root

Environment Variables
---------------------
- ENVIRONMENT: development / testing / staging / production
- LOG_LEVEL, LOG_JSON, LOG_TO_FILE: logging behaviour
- DATABASE_URL, DATABASE_ECHO: SQL character store
- REDIS_URL: enables distributed per-user locks when set
- ATTEMPT_TTL_SECONDS: staleness window for open attempts (default 3600)
- ATTEMPT_SWEEP_INTERVAL_SECONDS: period of the background sweep
- ANALYTICS_TIMEOUT_SECONDS: upper bound on one analytics forward
- USER_LOCK_TIMEOUT_SECONDS: how long to wait for a per-user lock
- STARTER_REALM_ID: realm unlocked for every new character
"""

import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

load_dotenv()


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("nonsense") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            logging.warning(f"Unknown environment '{value}', defaulting to development")
            return cls.DEVELOPMENT


class _ConfigLoadMetrics:
    """Tracks which configuration values came from the environment."""

    def __init__(self):
        self.env_vars_loaded: Dict[str, bool] = {}
        self.validation_errors: Dict[str, str] = {}
        self.defaults_used: Dict[str, Any] = {}
        self.last_reload: Optional[str] = None

    def record_env_load(self, key: str, from_env: bool, default: Any):
        self.env_vars_loaded[key] = from_env
        if not from_env:
            self.defaults_used[key] = default

    def record_validation_error(self, key: str, error: str):
        self.validation_errors[key] = error

    def get_summary(self) -> Dict[str, Any]:
        return {
            "total_configs": len(self.env_vars_loaded),
            "from_environment": sum(1 for v in self.env_vars_loaded.values() if v),
            "from_defaults": sum(1 for v in self.env_vars_loaded.values() if not v),
            "validation_errors": len(self.validation_errors),
            "defaults_used": list(self.defaults_used.keys()),
            "last_reload": self.last_reload,
        }


class Config:
    """
    Centralized static configuration for the progression engine.

    Usage
    -----
    >>> Config.ATTEMPT_TTL_SECONDS
    3600
    >>> if Config.is_testing():
    ...     pass
    """

    _metrics: Optional[_ConfigLoadMetrics] = None
    _validated: bool = False

    # =========================================================================
    # Environment
    # =========================================================================

    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_TO_FILE: bool = False

    # =========================================================================
    # Directories
    # =========================================================================

    PROJECT_ROOT = Path(__file__).resolve().parents[4]
    LOGS_DIR = PROJECT_ROOT / "logs"
    CONFIG_DIR = PROJECT_ROOT / "config"

    # =========================================================================
    # Persistence
    # =========================================================================

    DATABASE_URL: str = ""
    DATABASE_ECHO: bool = False
    DATABASE_POOL_SIZE: int = 10
    REDIS_URL: str = ""

    # =========================================================================
    # Challenge lifecycle
    # =========================================================================

    ATTEMPT_TTL_SECONDS: int = 3600
    ATTEMPT_SWEEP_INTERVAL_SECONDS: int = 300
    ANALYTICS_TIMEOUT_SECONDS: float = 2.0
    USER_LOCK_TIMEOUT_SECONDS: float = 10.0
    STARTER_REALM_ID: str = "mathmage-trials"

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @classmethod
    def _init_metrics(cls):
        if cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()

    @classmethod
    def _reject(cls, key: str, error: str):
        logging.warning(error)
        if cls._metrics:
            cls._metrics.record_validation_error(key, error)

    @classmethod
    def _safe_int(
        cls,
        key: str,
        default: int,
        min_val: Optional[int] = None,
        max_val: Optional[int] = None,
    ) -> int:
        """
        Safely parse integer from environment with bounds checking.

        Parameters
        ----------
        key:
            Environment variable name.
        default:
            Value used when the variable is unset or invalid.
        min_val, max_val:
            Inclusive bounds.

        Example
        -------
        >>> Config._safe_int("ATTEMPT_TTL_SECONDS", 3600, min_val=60)
        3600
        """
        cls._init_metrics()
        raw_value = os.getenv(key)

        if raw_value is None:
            cls._metrics.record_env_load(key, False, default)
            return default

        try:
            value = int(raw_value)
        except ValueError:
            cls._reject(key, f"{key}='{raw_value}' is not a valid integer, using default {default}")
            return default

        if min_val is not None and value < min_val:
            cls._reject(key, f"{key}={value} is below minimum {min_val}, using default {default}")
            return default
        if max_val is not None and value > max_val:
            cls._reject(key, f"{key}={value} exceeds maximum {max_val}, using default {default}")
            return default

        cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_float(cls, key: str, default: float, min_val: float = 0.0) -> float:
        """Safely parse a non-negative float from environment."""
        cls._init_metrics()
        raw_value = os.getenv(key)

        if raw_value is None:
            cls._metrics.record_env_load(key, False, default)
            return default

        try:
            value = float(raw_value)
        except ValueError:
            cls._reject(key, f"{key}='{raw_value}' is not a valid number, using default {default}")
            return default

        if value < min_val:
            cls._reject(key, f"{key}={value} is below minimum {min_val}, using default {default}")
            return default

        cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_bool(cls, key: str, default: bool) -> bool:
        """
        Safely parse boolean from environment.

        Recognizes: true/false, yes/no, 1/0, on/off (case-insensitive).
        """
        cls._init_metrics()
        raw_value = os.getenv(key)

        if raw_value is None:
            cls._metrics.record_env_load(key, False, default)
            return default

        normalized = raw_value.lower().strip()
        if normalized in {"true", "yes", "1", "on"}:
            value = True
        elif normalized in {"false", "no", "0", "off"}:
            value = False
        else:
            cls._reject(key, f"{key}='{raw_value}' is not a valid boolean, using default {default}")
            return default

        cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        cls._init_metrics()
        value = os.getenv(key, default)
        cls._metrics.record_env_load(key, key in os.environ, default)
        return value

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Load all configuration from environment variables.

        Called automatically on import. Calling it again re-reads the
        environment, which tests use after patching variables.
        """
        cls._metrics = _ConfigLoadMetrics()

        cls.ENVIRONMENT = cls._safe_str("ENVIRONMENT", "development")
        cls.DEBUG = cls._safe_bool("DEBUG", False)
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO")
        cls.LOG_JSON = cls._safe_bool("LOG_JSON", False)
        cls.LOG_TO_FILE = cls._safe_bool("LOG_TO_FILE", False)

        config_dir = os.getenv("CONFIG_DIR")
        if config_dir:
            cls.CONFIG_DIR = Path(config_dir)

        cls.DATABASE_URL = cls._safe_str("DATABASE_URL", "")
        cls.DATABASE_ECHO = cls._safe_bool("DATABASE_ECHO", False)
        cls.DATABASE_POOL_SIZE = cls._safe_int("DATABASE_POOL_SIZE", 10, min_val=1, max_val=200)
        cls.REDIS_URL = cls._safe_str("REDIS_URL", "")

        cls.ATTEMPT_TTL_SECONDS = cls._safe_int("ATTEMPT_TTL_SECONDS", 3600, min_val=1)
        cls.ATTEMPT_SWEEP_INTERVAL_SECONDS = cls._safe_int(
            "ATTEMPT_SWEEP_INTERVAL_SECONDS", 300, min_val=1
        )
        cls.ANALYTICS_TIMEOUT_SECONDS = cls._safe_float("ANALYTICS_TIMEOUT_SECONDS", 2.0)
        cls.USER_LOCK_TIMEOUT_SECONDS = cls._safe_float("USER_LOCK_TIMEOUT_SECONDS", 10.0)
        cls.STARTER_REALM_ID = cls._safe_str("STARTER_REALM_ID", "mathmage-trials")

        cls._metrics.last_reload = datetime.now(timezone.utc).isoformat()

    @classmethod
    def validate(cls) -> None:
        """
        Validate critical configuration values on startup.

        Raises
        ------
        ValueError:
            If a production deployment lacks its persistence settings.
        """
        if cls._validated:
            return

        logger = logging.getLogger(__name__)
        cls.load()

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if cls.LOG_LEVEL.upper() not in valid_log_levels:
            logger.warning(f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO")
            cls.LOG_LEVEL = "INFO"

        if cls.is_production() and not cls.DATABASE_URL:
            raise ValueError("DATABASE_URL environment variable is required in production")

        if cls.LOG_TO_FILE:
            cls.LOGS_DIR.mkdir(exist_ok=True)

        cls._validated = True

        summary = cls._metrics.get_summary()
        logger.debug(f"Configuration loaded: {summary}")
        if cls._metrics.validation_errors:
            logger.warning(f"Configuration warnings: {cls._metrics.validation_errors}")

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def environment(cls) -> Environment:
        return Environment.from_string(cls.ENVIRONMENT)

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.environment() is Environment.PRODUCTION

    @classmethod
    def is_testing(cls) -> bool:
        """Check if running in testing environment."""
        return cls.environment() is Environment.TESTING

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """Non-sensitive configuration summary for debugging."""
        return {
            "environment": cls.ENVIRONMENT,
            "debug": cls.DEBUG,
            "log_level": cls.LOG_LEVEL,
            "attempt_ttl_seconds": cls.ATTEMPT_TTL_SECONDS,
            "analytics_timeout_seconds": cls.ANALYTICS_TIMEOUT_SECONDS,
            "starter_realm_id": cls.STARTER_REALM_ID,
            "database_url_set": bool(cls.DATABASE_URL),
            "redis_url_set": bool(cls.REDIS_URL),
            "load": cls._metrics.get_summary() if cls._metrics else None,
        }


# Auto-validate on import
Config.validate()
