"""Configuration management for FolderSync.

Settings live in ``config.json`` inside the config directory, which is
``~/.config/foldersync`` unless ``FOLDERSYNC_CONFIG_DIR`` is set.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from .exceptions import ConfigurationError
from .sync.loglevel import DEFAULT_LOG_LEVEL, LogLevel, parse_log_level
from .sync.modes import SyncMode
from .utils import DEFAULT_DATE_FORMAT

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "FOLDERSYNC_CONFIG_DIR"
CONFIG_FILE_NAME = "config.json"


class Config:
    """Reads and writes FolderSync defaults."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Config directory; resolved from the environment when
                       omitted
        """
        self._config_dir = config_dir

    @property
    def config_dir(self) -> Path:
        """Directory holding config.json, exclusions and logs."""
        if self._config_dir is not None:
            return self._config_dir
        env_dir = os.environ.get(CONFIG_DIR_ENV)
        if env_dir:
            return Path(env_dir).expanduser()
        return Path.home() / ".config" / "foldersync"

    @property
    def exclusions_dir(self) -> Path:
        return self.config_dir / "exclusions"

    @property
    def log_dir(self) -> Path:
        return self.config_dir / "logs"

    def get_config_path(self) -> Path:
        """Get the path of the config file."""
        return self.config_dir / CONFIG_FILE_NAME

    def _load(self) -> dict[str, Any]:
        path = self.get_config_path()
        data: dict[str, Any] = {}
        if path.exists():
            try:
                with open(path, encoding="utf-8") as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    data = loaded
                else:
                    logger.warning(f"Ignoring config file {path}: not an object")
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to read config file {path}: {e}")
        return data

    def get_default_sync_mode(self) -> SyncMode:
        value = self._load().get("syncMode")
        if not value:
            return SyncMode.COPY
        try:
            return SyncMode.from_string(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid syncMode in config: {e}") from e

    def get_default_log_level(self) -> LogLevel:
        value = self._load().get("logLevel")
        if value is None:
            return DEFAULT_LOG_LEVEL
        try:
            return parse_log_level(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid logLevel in config: {e}") from e

    def get_default_date_format(self) -> str:
        return self._load().get("dateFormat") or DEFAULT_DATE_FORMAT

    def save_defaults(
        self,
        sync_mode: Optional[SyncMode] = None,
        log_level: Optional[LogLevel] = None,
        date_format: Optional[str] = None,
    ) -> Path:
        """Update stored defaults; None leaves a value unchanged.

        Returns:
            Path of the written config file
        """
        data = dict(self._load())
        if sync_mode is not None:
            data["syncMode"] = sync_mode.value
        if log_level is not None:
            data["logLevel"] = int(log_level)
        if date_format is not None:
            data["dateFormat"] = date_format

        path = self.get_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        return path


config = Config()
