"""Configuration loader with multi-source support."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar

import platformdirs
import toml
from pydantic import BaseModel, ValidationError

from .errors import ConfigError

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)


class ConfigLoader:
    """Loads configuration from multiple sources with priority.

    Sources, lowest priority first: shipped defaults, system config,
    user config, environment variables.
    """

    def __init__(self, config_class: Type[T], app_name: str = "shared-mime") -> None:
        self.app_name = app_name
        self.config_class = config_class
        self._config: Optional[T] = None

    def load(self, defaults_path: Optional[Path] = None) -> T:
        """Load configuration from all sources.

        Args:
            defaults_path: Optional path to a defaults TOML file

        Returns:
            Validated configuration object

        Raises:
            ConfigError: If a file cannot be parsed or validation fails
        """
        candidates = ([defaults_path] if defaults_path else []) + self.config_paths()

        config_dict: Dict[str, Any] = {}
        for path in candidates:
            if not path.is_file():
                logger.debug(f"Config file not present: {path}")
                continue
            logger.debug(f"Merging config file: {path}")
            config_dict = self._deep_merge(config_dict, self._read_toml(path))

        config_dict = self._apply_env_overrides(config_dict)

        try:
            self._config = self.config_class(**config_dict)
        except ValidationError as e:
            raise ConfigError(
                f"Invalid {self.app_name} configuration: {e}",
                app_name=self.app_name,
            ) from e

        return self._config

    def config_paths(self) -> List[Path]:
        """System then user ``config.toml`` locations, lowest priority first."""
        if os.name == "nt":
            system_dir = Path(os.environ.get("PROGRAMDATA", "C:\\ProgramData")) / self.app_name
        else:
            system_dir = Path("/etc") / self.app_name
        user_dir = Path(platformdirs.user_config_dir(appname=self.app_name, appauthor=False))
        return [system_dir / "config.toml", user_dir / "config.toml"]

    def _read_toml(self, path: Path) -> Dict[str, Any]:
        try:
            return toml.load(path)
        except (toml.TomlDecodeError, OSError) as e:
            raise ConfigError(f"Cannot read config file {path}: {e}", path=str(path)) from e

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Override config with environment variables.

        SHARED_MIME_DATABASE_MAX_SNIFF_BYTES=4096 sets
        ``database.max_sniff_bytes``. The first underscore after the
        prefix separates the section from the key; the key keeps its
        own underscores.
        """
        prefix = f"{self.app_name.upper().replace('-', '_')}_"

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(prefix):
                continue

            section, _, key = env_key[len(prefix):].lower().partition("_")
            if not key:
                continue

            current = config.setdefault(section, {})
            if not isinstance(current, dict):
                continue
            current[key] = self._convert_env_value(env_value)

        return config

    def _convert_env_value(self, value: str) -> Any:
        """Convert string environment variable to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        # Lists: comma- or os.pathsep-separated
        for separator in (",", os.pathsep):
            if separator in value:
                return [v.strip() for v in value.split(separator) if v.strip()]

        return value

    @property
    def config(self) -> T:
        """Get loaded configuration."""
        if self._config is None:
            self._config = self.load()
        return self._config
