"""
Layered configuration for the chat applications.

Each application keeps a ``config/`` directory next to its ``src/``:

    default.yaml          always read
    <environment>.yaml    read on top of default.yaml
    .env.<environment>    exported into os.environ before anything else

Prefixed environment variables win over both YAML layers, then the
pydantic defaults apply.
"""

import os
from pathlib import Path
from typing import Any, Dict, Generic, Optional, Tuple, Type, TypeVar

import yaml
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

SettingsT = TypeVar("SettingsT", bound=BaseSettings)

# environment -> (dotenv file, YAML overlay)
ENVIRONMENTS: Dict[str, Tuple[str, str]] = {
    "production": (".env.production", "production.yaml"),
    "development": (".env.development", "development.yaml"),
    "test": (".env.development", "test.yaml"),
}


def read_yaml(path: Path) -> Dict[str, Any]:
    """Mapping stored in ``path``; empty when the file is missing or blank."""
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


class LayeredConfig(Generic[SettingsT]):
    """
    Loads one Settings class from its application directory and caches it.

    Args:
        settings_cls: pydantic-settings class to build
        app_root: Directory holding ``config/`` and the dotenv files
        env_prefix: Prefix of the environment variables for settings_cls
    """

    def __init__(
        self, settings_cls: Type[SettingsT], app_root: Path, env_prefix: str
    ):
        self.settings_cls = settings_cls
        self.app_root = app_root
        self.env_prefix = env_prefix
        self._current: Optional[SettingsT] = None

    @property
    def config_dir(self) -> Path:
        return self.app_root / "config"

    def load(
        self,
        config_file: Optional[str] = None,
        env_file: Optional[str] = None,
        env: Optional[str] = None,
    ) -> SettingsT:
        """
        Build settings for an environment.

        Args:
            config_file: YAML overlay to use instead of the environment's one
            env_file: Dotenv file to use instead of the environment's one
            env: Environment name (defaults to $ENV, then "production")

        Raises:
            ValidationError: If a merged value is invalid
        """
        environment = env or os.getenv("ENV", "production")
        dotenv_name, overlay_name = ENVIRONMENTS.get(
            environment, ENVIRONMENTS["production"]
        )

        dotenv_path = self.app_root / (env_file or dotenv_name)
        if dotenv_path.exists():
            load_dotenv(dotenv_path, override=True)

        values = read_yaml(self.config_dir / "default.yaml")
        values.update(read_yaml(self.config_dir / (config_file or overlay_name)))
        values["ENV"] = environment

        # Init arguments beat the environment in pydantic-settings, so YAML
        # keys that are also set as variables are left out.
        values = {
            key: value
            for key, value in values.items()
            if f"{self.env_prefix}{key}".upper() not in os.environ
        }
        return self.settings_cls(**values)

    def get(self) -> SettingsT:
        """Cached settings, loaded on first use."""
        if self._current is None:
            self._current = self.load()
        return self._current

    def override(self, settings: SettingsT) -> None:
        self._current = settings

    def reset(self) -> None:
        self._current = None


LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def check_log_level(value: str) -> str:
    """Lower-cased ``value``; ValueError unless it names a logging level."""
    level = value.lower()
    if level not in LOG_LEVELS:
        raise ValueError(f"Invalid log_level. Must be one of: {list(LOG_LEVELS)}")
    return level
