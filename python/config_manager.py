"""
Configuration Management Module
Loads and validates configuration from config.yaml
"""

import os
import sys
import yaml
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional, List

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ApiConfig:
    """HTTP API configuration"""
    title: str = "Customer Master Data API"
    version: str = "1.0.0"
    docs_url: str = "/api/docs"
    cors_origins: List[str] = field(default_factory=list)


@dataclass
class DatabaseConfig:
    """Database configuration (DB_* environment variables take precedence)"""
    host: str = "localhost"
    port: int = 5432
    user: str = "customer_user"
    password: str = "customer_password"
    name: str = "customer_db"
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    echo: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    file: Optional[str] = None
    console: bool = True
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class OwnershipConfig:
    """Resources whose child rows must belong to the party in the request path"""
    enforced_resources: List[str] = field(default_factory=lambda: [
        'address',
        'email_contact',
        'phone_contact',
        'natural_person',
        'legal_entity',
    ])


class ConfigurationError(Exception):
    """Raised when configuration is invalid"""
    pass


class ConfigManager:
    """Manages service configuration"""

    _instance: Optional['ConfigManager'] = None

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager

        Args:
            config_path: Path to config.yaml file (falls back to CONFIG_PATH, then search)
        """
        config_path = config_path or os.getenv("CONFIG_PATH")
        self.config_path = Path(config_path) if config_path else self._find_config()
        self._raw_config: Dict[str, Any] = {}
        self.api: ApiConfig = ApiConfig()
        self.database: DatabaseConfig = DatabaseConfig()
        self.logging: LoggingConfig = LoggingConfig()
        self.ownership: OwnershipConfig = OwnershipConfig()

        if self.config_path and self.config_path.exists():
            self.load()
        else:
            logger.warning(f"Config file not found at {self.config_path}, using defaults")

    def _find_config(self) -> Path:
        """Find config.yaml in common locations"""
        search_paths = [
            Path(__file__).parent / "config.yaml",
            Path.cwd() / "config.yaml",
            Path.cwd() / "python" / "config.yaml",
        ]

        for path in search_paths:
            if path.exists():
                return path

        return search_paths[0]

    def load(self) -> None:
        """Load configuration from YAML file"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")
        except FileNotFoundError:
            raise ConfigurationError(f"Config file not found: {self.config_path}")

        if not isinstance(self._raw_config, dict):
            raise ConfigurationError("Config file must contain a mapping at the top level")

        self._parse_api()
        self._parse_database()
        self._parse_logging()
        self._parse_ownership()
        self._validate()

    def _section(self, name: str) -> Dict[str, Any]:
        cfg = self._raw_config.get(name) or {}
        if not isinstance(cfg, dict):
            raise ConfigurationError(f"Config section '{name}' must be a mapping")
        return cfg

    def _parse_api(self) -> None:
        """Parse API configuration"""
        cfg = self._section('api')
        self.api = ApiConfig(
            title=cfg.get('title', self.api.title),
            version=str(cfg.get('version', self.api.version)),
            docs_url=cfg.get('docs_url', self.api.docs_url),
            cors_origins=cfg.get('cors_origins', self.api.cors_origins) or []
        )

    def _parse_database(self) -> None:
        """Parse database configuration"""
        cfg = self._section('database')
        self.database = DatabaseConfig(
            host=cfg.get('host', self.database.host),
            port=cfg.get('port', self.database.port),
            user=cfg.get('user', self.database.user),
            password=cfg.get('password', self.database.password),
            name=cfg.get('name', self.database.name),
            pool_size=cfg.get('pool_size', self.database.pool_size),
            max_overflow=cfg.get('max_overflow', self.database.max_overflow),
            pool_timeout=cfg.get('pool_timeout', self.database.pool_timeout),
            pool_recycle=cfg.get('pool_recycle', self.database.pool_recycle),
            echo=cfg.get('echo', self.database.echo)
        )

    def _parse_logging(self) -> None:
        """Parse logging configuration"""
        cfg = self._section('logging')
        self.logging = LoggingConfig(
            level=str(cfg.get('level', 'INFO')).upper(),
            file=cfg.get('file'),
            console=cfg.get('console', True),
            format=cfg.get('format', self.logging.format)
        )

    def _parse_ownership(self) -> None:
        """Parse ownership configuration"""
        cfg = self._section('ownership')
        self.ownership = OwnershipConfig(
            enforced_resources=cfg.get('enforced_resources', self.ownership.enforced_resources) or []
        )

    @classmethod
    def get_instance(cls, config_path: Optional[str] = None) -> 'ConfigManager':
        """Get singleton instance of ConfigManager"""
        if cls._instance is None:
            cls._instance = ConfigManager(config_path)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset singleton instance (useful for testing)"""
        cls._instance = None

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary (password masked)"""
        return {
            'api': {
                'title': self.api.title,
                'version': self.api.version,
                'docs_url': self.api.docs_url,
                'cors_origins': self.api.cors_origins
            },
            'database': {
                'host': self.database.host,
                'port': self.database.port,
                'user': self.database.user,
                'password': '***',
                'name': self.database.name,
                'pool_size': self.database.pool_size,
                'max_overflow': self.database.max_overflow
            },
            'logging': {
                'level': self.logging.level,
                'file': self.logging.file,
                'console': self.logging.console
            },
            'ownership': {
                'enforced_resources': list(self.ownership.enforced_resources)
            }
        }

    def _validate(self) -> None:
        """Validate configuration values"""
        errors = []

        if self.logging.level not in VALID_LOG_LEVELS:
            errors.append(f"logging.level must be one of {', '.join(VALID_LOG_LEVELS)}")
        if not isinstance(self.database.port, int) or not 0 < self.database.port < 65536:
            errors.append("database.port must be an integer between 1 and 65535")
        if not isinstance(self.database.pool_size, int) or self.database.pool_size < 1:
            errors.append("database.pool_size must be a positive integer")
        if not isinstance(self.database.max_overflow, int) or self.database.max_overflow < 0:
            errors.append("database.max_overflow must be a non-negative integer")
        if not isinstance(self.api.cors_origins, list):
            errors.append("api.cors_origins must be a list")
        if not isinstance(self.ownership.enforced_resources, list):
            errors.append("ownership.enforced_resources must be a list")

        if errors:
            raise ConfigurationError("Invalid configuration: " + "; ".join(errors))

    def configure_logging(self) -> None:
        """Configure the root logger from the logging section"""
        handlers: List[logging.Handler] = []
        if self.logging.console:
            handlers.append(logging.StreamHandler(sys.stdout))
        if self.logging.file:
            log_path = Path(self.logging.file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path, encoding='utf-8'))
        if not handlers:
            handlers.append(logging.NullHandler())

        logging.basicConfig(
            level=getattr(logging, self.logging.level, logging.INFO),
            format=self.logging.format,
            handlers=handlers,
            force=True
        )


def get_config(config_path: Optional[str] = None) -> ConfigManager:
    """Convenience function to get configuration instance"""
    return ConfigManager.get_instance(config_path)
