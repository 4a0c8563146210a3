"""
Config system - Layered configuration with validation.

Merge order (later overrides earlier):
1. Config files (YAML or JSON)
2. .env file (HERON_* keys)
3. Environment variables (HERON_* keys, ``__`` separates nesting levels)
4. Manual overrides
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging
import os

import yaml
from dotenv import dotenv_values

from .faults import ConfigInvalidFault


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class HeronConfig:
    """
    Typed application configuration.

    Attributes:
        app_name: Application name, used in logs
        log_level: Root log level
        log_format: logging format string
        case_sensitive: Route matching is case sensitive
        strict_paths: Trailing slashes are significant
    """
    app_name: str = "heron"
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    case_sensitive: bool = True
    strict_paths: bool = False


class ConfigLoader:
    """Loads and merges configuration from files, .env, environment and overrides."""

    def __init__(self, env_prefix: str = "HERON_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "HERON_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from every source, in precedence order.

        Args:
            paths: Config file paths (``.yaml``, ``.yml`` or ``.json``)
            env_prefix: Prefix for environment variables
            env_file: Path to a .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for path in paths or ():
            loader._load_file(Path(path))

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_file(self, path: Path):
        if not path.exists():
            raise ConfigInvalidFault(str(path), "file does not exist")
        with open(path) as f:
            if path.suffix == ".json":
                data = json.load(f)
            elif path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                raise ConfigInvalidFault(str(path), f"unsupported config format '{path.suffix}'")
        if data:
            if not isinstance(data, dict):
                raise ConfigInvalidFault(str(path), "top level must be a mapping")
            self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load HERON_* keys from a .env file."""
        if not Path(path).exists():
            return
        for key, value in dotenv_values(path).items():
            if key.startswith(self.env_prefix) and value is not None:
                self._set_nested(key, value)

    def _load_from_env(self):
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert HERON_ROUTER__CASE_SENSITIVE to {"router": {"case_sensitive": ...}}."""
        key = key[len(self.env_prefix):]
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    @staticmethod
    def _parse_value(value: str) -> Any:
        """Parse string value to appropriate type."""
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

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data
        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def to_config(self) -> HeronConfig:
        """
        Build a validated HeronConfig.

        Raises:
            ConfigInvalidFault: A value has the wrong type or is out of range
        """
        defaults = HeronConfig()

        log_level = str(self.get("logging.level", defaults.log_level)).upper()
        if log_level not in _LOG_LEVELS:
            raise ConfigInvalidFault("logging.level", f"unknown level '{log_level}'")

        case_sensitive = self.get("router.case_sensitive", defaults.case_sensitive)
        if not isinstance(case_sensitive, bool):
            raise ConfigInvalidFault("router.case_sensitive", "must be a boolean")

        strict_paths = self.get("router.strict", defaults.strict_paths)
        if not isinstance(strict_paths, bool):
            raise ConfigInvalidFault("router.strict", "must be a boolean")

        return HeronConfig(
            app_name=str(self.get("app.name", defaults.app_name)),
            log_level=log_level,
            log_format=str(self.get("logging.format", defaults.log_format)),
            case_sensitive=case_sensitive,
            strict_paths=strict_paths,
        )


def setup_logging(config: HeronConfig) -> None:
    """Configure root logging from ``config``."""
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format=config.log_format,
    )
