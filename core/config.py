"""
===============================================
Configuration management for the query builder.
===============================================

Loads all configuration from environment variables (.env file) and provides
a centralized Config singleton for application-wide access.

The configuration system ensures:
- Single source of truth for rendering and logging settings
- Type conversion and validation at load time
- Per-environment overrides through the .env file

Example:
    >>> from core.config import config
    >>>
    >>> # Rendering settings
    >>> print(f"Dialect: {config.dialect}, placeholder: {config.placeholder}")
    >>>
    >>> # Empty IN list handling
    >>> if config.empty_in_policy == 'false':
    ...     print("Empty IN lists degrade to an always-false predicate")
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

VALID_PLACEHOLDERS = ('?', '%s')
VALID_EMPTY_IN_POLICIES = ('raise', 'false')
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _env_flag(name: str, default: str = 'false') -> bool:
    """Read a boolean flag from the environment."""
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class BuilderConfig:
    """Statement rendering settings.

    Attributes:
        dialect: SQLAlchemy dialect name used for identifier quoting
        placeholder: Positional placeholder token written for bound values
        empty_in_policy: 'raise' to reject empty IN lists, 'false' to degrade
            them to an always-false predicate
        database_url: SQLAlchemy URL used by the execution bridge
    """

    dialect: str
    placeholder: str
    empty_in_policy: str
    database_url: str

    def __post_init__(self):
        if self.placeholder not in VALID_PLACEHOLDERS:
            raise ValueError(
                f"Invalid placeholder '{self.placeholder}', "
                f"expected one of {VALID_PLACEHOLDERS}"
            )
        self.empty_in_policy = self.empty_in_policy.strip().lower()
        if self.empty_in_policy not in VALID_EMPTY_IN_POLICIES:
            raise ValueError(
                f"Invalid empty IN policy '{self.empty_in_policy}', "
                f"expected one of {VALID_EMPTY_IN_POLICIES}"
            )
        if not self.dialect:
            raise ValueError("Dialect name must not be empty")


@dataclass
class LoggingConfig:
    """Logging settings.

    Attributes:
        level: Root log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_file: Optional log file name, written under log_dir
        log_dir: Directory for log files
        auto_configure: If True, logging is configured when core.logger is imported
    """

    level: str
    log_file: Optional[str]
    log_dir: Path
    auto_configure: bool

    def __post_init__(self):
        self.level = self.level.upper()
        if self.level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{self.level}', expected one of {VALID_LOG_LEVELS}"
            )


class Config:
    """Centralized configuration manager.

    Provides access to all configuration settings loaded from environment
    variables (.env file).

    Attributes:
        builder: BuilderConfig instance with rendering settings
        logging: LoggingConfig instance with logging settings

    Properties:
        dialect: SQLAlchemy dialect name for identifier quoting
        placeholder: Positional placeholder token
        empty_in_policy: Policy for binding an empty list to IN
        database_url: SQLAlchemy URL for the execution bridge

    Example:
        >>> config = Config()
        >>> print(f"Quoting identifiers for {config.dialect}")
    """

    def __init__(self):
        """Initialize configuration from environment variables.

        Raises:
            ValueError: If a setting holds an unsupported value
        """
        self.builder = BuilderConfig(
            dialect=os.getenv('QUERYBUILDER_DIALECT', 'mysql'),
            placeholder=os.getenv('QUERYBUILDER_PLACEHOLDER', '?'),
            empty_in_policy=os.getenv('QUERYBUILDER_EMPTY_IN_POLICY', 'raise'),
            database_url=os.getenv('QUERYBUILDER_DATABASE_URL', 'sqlite://')
        )

        project_root = Path(__file__).parent.parent
        self.logging = LoggingConfig(
            level=os.getenv('QUERYBUILDER_LOG_LEVEL', 'INFO'),
            log_file=os.getenv('QUERYBUILDER_LOG_FILE') or None,
            log_dir=Path(os.getenv('QUERYBUILDER_LOG_DIR', str(project_root / 'logs'))),
            auto_configure=_env_flag('QUERYBUILDER_LOG_AUTOCONFIGURE')
        )

    @property
    def dialect(self) -> str:
        """Get SQLAlchemy dialect name used for quoting."""
        return self.builder.dialect

    @property
    def placeholder(self) -> str:
        """Get positional placeholder token."""
        return self.builder.placeholder

    @property
    def empty_in_policy(self) -> str:
        """Get policy applied when an empty list is bound to IN."""
        return self.builder.empty_in_policy

    @property
    def database_url(self) -> str:
        """Get SQLAlchemy URL for the execution bridge."""
        return self.builder.database_url


# Global configuration instance
config = Config()
