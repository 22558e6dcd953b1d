"""Configuration management for tasksync.

Settings are stored per profile as JSON under the user config directory.
Keys are addressed with dot notation, e.g. ``sync.batch_size``.
"""

from pathlib import Path
from typing import Any, Optional

from platformdirs import user_config_dir, user_data_dir
from pydantic import BaseModel, Field, ValidationError

from tasksync.utils.logger import get_logger

APP_NAME = "tasksync"

logger = get_logger("config")


class APIConfig(BaseModel):
    """Remote server configuration."""

    endpoint: str = Field(default="http://localhost:3000/api")
    timeout: float = Field(default=30.0, gt=0)
    retry: int = Field(default=0, ge=0)


class SyncConfig(BaseModel):
    """Sync cycle configuration handed to the orchestrator."""

    batch_size: int = Field(default=10, ge=1)
    batch_timeout: float = Field(default=60.0, gt=0)


class StorageConfig(BaseModel):
    db_path: Optional[str] = None


class Config(BaseModel):
    api: APIConfig = Field(default_factory=APIConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def lookup(config: Config, key: str) -> Any:
    """Return the value at a dotted key, or None if the key is unknown."""
    node: Any = config
    for part in key.split("."):
        if not isinstance(node, BaseModel) or part not in type(node).model_fields:
            return None
        node = getattr(node, part)
    return node


def _section_for(data: dict, key: str) -> tuple[dict, str]:
    *path, leaf = key.split(".")
    for part in path:
        data = data.get(part)
        if not isinstance(data, dict):
            raise KeyError(key)
    if leaf not in data:
        raise KeyError(key)
    return data, leaf


class ConfigManager:
    """Loads, edits and persists the configuration of one profile."""

    def __init__(self, profile: str = "default"):
        self.profile = profile
        self.config_dir = Path(user_config_dir(APP_NAME))
        self.data_dir = Path(user_data_dir(APP_NAME))
        for directory in (self.config_dir, self.data_dir):
            directory.mkdir(parents=True, exist_ok=True)

        self.config_file = self.config_dir / f"{profile}.json"
        self._config: Config | None = None

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = self.load_config()
        return self._config

    @property
    def db_path(self) -> Path:
        """SQLite file for this profile; storage.db_path overrides the default."""
        override = self.config.storage.db_path
        return Path(override) if override else self.data_dir / f"{self.profile}.db"

    def load_config(self) -> Config:
        """Read the profile file. A missing or unreadable file yields defaults."""
        try:
            return Config.model_validate_json(self.config_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return Config()
        except (OSError, ValidationError) as e:
            logger.warning("ignoring unreadable config %s: %s", self.config_file, e)
            return Config()

    def save_config(self, config: Config | None = None) -> None:
        if config is not None:
            self._config = config
        self.config_file.write_text(self.config.model_dump_json(indent=2), encoding="utf-8")

    def get(self, key: str) -> Any:
        return lookup(self.config, key)

    def set(self, key: str, value: Any) -> None:
        """Set a value by dotted key and persist it.

        Raises:
            KeyError: If the key does not name a known setting
            pydantic.ValidationError: If the value is rejected, e.g. batch_size < 1
        """
        data = self.config.model_dump()
        section, leaf = _section_for(data, key)
        section[leaf] = value
        self.save_config(Config.model_validate(data))

    def reset(self, key: str | None = None) -> None:
        """Restore one key, or the whole profile when key is None, to defaults."""
        if key is None:
            self.save_config(Config())
        else:
            _section_for(Config().model_dump(), key)
            self.set(key, lookup(Config(), key))


_config_manager: ConfigManager | None = None


def get_config_manager(profile: str = "default") -> ConfigManager:
    """Return the process-wide manager, replacing it when the profile changes."""
    global _config_manager
    if _config_manager is None or _config_manager.profile != profile:
        _config_manager = ConfigManager(profile)
    return _config_manager
