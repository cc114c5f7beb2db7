"""Configuration management for litstage.

This module provides a clean interface for reading both
repository-local and global configuration files.
"""

import os
import configparser
from pathlib import Path
from typing import Optional

DEFAULTS = {
    ('diff', 'context'): '3',
    ('core', 'sniffsize'): '8192',
    ('core', 'loglevel'): 'WARNING',
}


class Config:
    """
    Manages litstage configuration files.

    Configuration is stored in INI format:
    - Global config: ~/.litstageconfig
    - Repository config: .lit/config

    Repository config takes precedence over global config.
    Environment variables take highest precedence.
    """

    GLOBAL_CONFIG_PATH = Path.home() / '.litstageconfig'

    def __init__(self, repo_config_path: Optional[Path] = None):
        """
        Initialize Config manager.

        Args:
            repo_config_path: Path to repository config file, if in a repo
        """
        self.repo_config_path = repo_config_path
        self._global_config = None
        self._repo_config = None

    @property
    def global_config(self) -> configparser.ConfigParser:
        """Load and return global configuration."""
        if self._global_config is None:
            self._global_config = configparser.ConfigParser()
            if self.GLOBAL_CONFIG_PATH.exists():
                self._global_config.read(self.GLOBAL_CONFIG_PATH)
        return self._global_config

    @property
    def repo_config(self) -> Optional[configparser.ConfigParser]:
        """Load and return repository configuration."""
        if self._repo_config is None and self.repo_config_path:
            self._repo_config = configparser.ConfigParser()
            if self.repo_config_path.exists():
                self._repo_config.read(self.repo_config_path)
        return self._repo_config

    def get(self, section: str, key: str, fallback: Optional[str] = None) -> Optional[str]:
        """
        Get a configuration value.

        Priority order (highest to lowest):
        1. Environment variables (LITSTAGE_<SECTION>_<KEY>)
        2. Repository config
        3. Global config
        4. Fallback value, then the built-in default

        Args:
            section: Config section (e.g., 'diff', 'core')
            key: Config key (e.g., 'context')
            fallback: Default value if not found

        Returns:
            Configuration value or fallback
        """
        env_key = f"LITSTAGE_{section.upper()}_{key.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return env_value

        if self.repo_config and self.repo_config.has_option(section, key):
            return self.repo_config.get(section, key)

        if self.global_config.has_option(section, key):
            return self.global_config.get(section, key)

        if fallback is not None:
            return fallback
        return DEFAULTS.get((section, key))

    def get_int(self, section: str, key: str, fallback: int = 0) -> int:
        """Get a configuration value as an integer, ignoring malformed values."""
        value = self.get(section, key)
        try:
            return int(value) if value is not None else fallback
        except ValueError:
            return fallback


def get_config(repo=None) -> Config:
    """
    Get a Config instance.

    Args:
        repo: Repository instance, or None for global-only config

    Returns:
        Config instance
    """
    if repo:
        return Config(repo.config_file)
    return Config()
