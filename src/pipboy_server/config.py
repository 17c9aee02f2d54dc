"""
Server configuration management.

Settings are loaded from three sources with a clear priority order:

    1. Environment variables (highest priority) - for containerized deployments
    2. Config file (config/server.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The
ServerConfig dataclass provides typed access to all settings.

Usage:
    from pipboy_server.config import config

    print(config.server.port)
    print(config.auth.token_ttl_minutes)

Environment Variable Mapping:
    PIPBOY_HOST               -> server.host
    PIPBOY_PORT               -> server.port
    PIPBOY_PRODUCTION         -> security.production
    PIPBOY_CORS_ORIGINS       -> security.cors_origins
    PIPBOY_JWT_SECRET         -> auth.jwt_secret
    PIPBOY_TOKEN_TTL_MINUTES  -> auth.token_ttl_minutes
    PIPBOY_DB_PATH            -> database.path
    PIPBOY_SEED_DEFAULTS      -> database.seed_defaults
    PIPBOY_LOG_LEVEL          -> logging.level
"""

import configparser
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/, data/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "server.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "server.example.ini"

# Development-only fallback. Production mode refuses to start with it.
DEFAULT_JWT_SECRET = "fallout-pipboy-secret-key"  # nosec B105


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class ServerSettings:
    """Network server configuration."""

    host: str = "0.0.0.0"  # nosec B104 - intentional for server binding
    port: int = 3000


@dataclass
class SecuritySettings:
    """CORS and deployment mode."""

    production: bool = False
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = field(default_factory=lambda: ["*"])
    cors_allow_headers: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class AuthSettings:
    """Token and password hashing configuration."""

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_ttl_minutes: int = 24 * 60
    bcrypt_rounds: int = 10
    username_min_length: int = 2
    username_max_length: int = 20


@dataclass
class DatabaseSettings:
    """Database configuration."""

    path: str = "data/pipboy.db"
    seed_defaults: bool = True

    @property
    def absolute_path(self) -> Path:
        """Get absolute path to database file."""
        p = Path(self.path)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed"] = "detailed"


@dataclass
class FeatureSettings:
    """Feature flags."""

    websocket_enabled: bool = True
    verbose_errors: bool = False


@dataclass
class ServerConfig:
    """
    Complete server configuration.

    Aggregates all settings sections. Access via the module-level `config`
    singleton.
    """

    server: ServerSettings = field(default_factory=ServerSettings)
    security: SecuritySettings = field(default_factory=SecuritySettings)
    auth: AuthSettings = field(default_factory=AuthSettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    features: FeatureSettings = field(default_factory=FeatureSettings)

    @property
    def is_production(self) -> bool:
        """Convenience property for production mode check."""
        return self.security.production

    @property
    def uses_default_secret(self) -> bool:
        return self.auth.jwt_secret == DEFAULT_JWT_SECRET


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_bool(value: str) -> bool:
    """Parse a string value to boolean."""
    return value.lower() in ("true", "yes", "1", "on", "enabled")


def _parse_list(value: str) -> list[str]:
    """Parse a comma-separated string to list, stripping whitespace."""
    if not value or value.strip() == "":
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _load_from_ini(parser: configparser.ConfigParser, cfg: ServerConfig) -> None:
    """Load configuration from parsed INI file into ServerConfig."""
    if parser.has_section("server"):
        if parser.has_option("server", "host"):
            cfg.server.host = parser.get("server", "host")
        if parser.has_option("server", "port"):
            cfg.server.port = parser.getint("server", "port")

    if parser.has_section("security"):
        if parser.has_option("security", "production"):
            cfg.security.production = _parse_bool(parser.get("security", "production"))
        if parser.has_option("security", "cors_origins"):
            cfg.security.cors_origins = _parse_list(parser.get("security", "cors_origins"))
        if parser.has_option("security", "cors_allow_credentials"):
            cfg.security.cors_allow_credentials = _parse_bool(
                parser.get("security", "cors_allow_credentials")
            )
        if parser.has_option("security", "cors_allow_methods"):
            cfg.security.cors_allow_methods = _parse_list(
                parser.get("security", "cors_allow_methods")
            )
        if parser.has_option("security", "cors_allow_headers"):
            cfg.security.cors_allow_headers = _parse_list(
                parser.get("security", "cors_allow_headers")
            )

    if parser.has_section("auth"):
        if parser.has_option("auth", "jwt_secret"):
            cfg.auth.jwt_secret = parser.get("auth", "jwt_secret")
        if parser.has_option("auth", "jwt_algorithm"):
            cfg.auth.jwt_algorithm = parser.get("auth", "jwt_algorithm")
        if parser.has_option("auth", "token_ttl_minutes"):
            cfg.auth.token_ttl_minutes = parser.getint("auth", "token_ttl_minutes")
        if parser.has_option("auth", "bcrypt_rounds"):
            cfg.auth.bcrypt_rounds = parser.getint("auth", "bcrypt_rounds")

    if parser.has_section("database"):
        if parser.has_option("database", "path"):
            cfg.database.path = parser.get("database", "path")
        if parser.has_option("database", "seed_defaults"):
            cfg.database.seed_defaults = _parse_bool(parser.get("database", "seed_defaults"))

    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed"):
                cfg.logging.format = val  # type: ignore[assignment]

    if parser.has_section("features"):
        if parser.has_option("features", "websocket_enabled"):
            cfg.features.websocket_enabled = _parse_bool(
                parser.get("features", "websocket_enabled")
            )
        if parser.has_option("features", "verbose_errors"):
            cfg.features.verbose_errors = _parse_bool(parser.get("features", "verbose_errors"))


def _apply_env_overrides(cfg: ServerConfig) -> None:
    """Apply environment variable overrides to configuration."""
    if env_host := os.getenv("PIPBOY_HOST"):
        cfg.server.host = env_host
    if env_port := os.getenv("PIPBOY_PORT"):
        cfg.server.port = int(env_port)

    if env_production := os.getenv("PIPBOY_PRODUCTION"):
        cfg.security.production = _parse_bool(env_production)
    if env_cors := os.getenv("PIPBOY_CORS_ORIGINS"):
        cfg.security.cors_origins = _parse_list(env_cors)

    if env_secret := os.getenv("PIPBOY_JWT_SECRET"):
        cfg.auth.jwt_secret = env_secret
    if env_ttl := os.getenv("PIPBOY_TOKEN_TTL_MINUTES"):
        cfg.auth.token_ttl_minutes = int(env_ttl)

    if env_db := os.getenv("PIPBOY_DB_PATH"):
        cfg.database.path = env_db
    if env_seed := os.getenv("PIPBOY_SEED_DEFAULTS"):
        cfg.database.seed_defaults = _parse_bool(env_seed)

    if env_log := os.getenv("PIPBOY_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()


def load_config() -> ServerConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/server.ini
        3. config/server.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        ServerConfig: Fully populated configuration object.
    """
    cfg = ServerConfig()

    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file)
        _load_from_ini(parser, cfg)

    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> "ServerConfig":
    """
    Reload configuration from disk and environment.

    Updates the module-level `config` singleton in place so modules that
    imported it keep seeing current values.
    """
    fresh = load_config()
    config.__dict__.update(fresh.__dict__)
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

config = load_config()


# =============================================================================
# LOGGING
# =============================================================================

_LOG_FORMATS = {
    "simple": "%(levelname)s %(message)s",
    "detailed": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
}


def configure_logging(cfg: ServerConfig | None = None) -> None:
    """Apply the configured level and format to the root logger."""
    cfg = cfg or config
    level = logging.getLevelName(cfg.logging.level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=_LOG_FORMATS[cfg.logging.format], force=True)


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "production_mode": config.is_production,
        "default_jwt_secret": config.uses_default_secret,
        "database_path": str(config.database.absolute_path),
    }


# =============================================================================
# TEST HELPERS
# =============================================================================


class use_test_database:
    """
    Context manager for using a temporary test database.

    Usage:
        from pipboy_server.config import use_test_database

        def test_something(tmp_path):
            with use_test_database(tmp_path / "test.db"):
                schema.init_database()

    Args:
        db_path: Path to the test database file
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self.original_path: str | None = None

    def __enter__(self) -> Path:
        self.original_path = config.database.path
        config.database.path = str(self.db_path)
        return self.db_path

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.original_path is not None:
            config.database.path = self.original_path
        return None
