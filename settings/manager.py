import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from .config_model import AppConfig

CONFIG_FILE_NAME = "config.json"

# Environment variable -> AppConfig field
ENV_OVERRIDES = {
    "PORT": "port",
    "HOST": "host",
    "JOURNAL_DATA_DIR": "storage_path",
    "JOURNAL_LOG_LEVEL": "log_level",
}

class SettingsManager:
    def __init__(self, config_dir: str = ".", environ: Optional[Mapping[str, str]] = None):
        self.config_dir = Path(config_dir)
        self.config_path = self.config_dir / CONFIG_FILE_NAME
        self.environ = os.environ if environ is None else environ
        self._config: Optional[AppConfig] = None

    def load_settings(self) -> AppConfig:
        """Loads settings from the config file (defaults if absent), then applies env overrides."""
        data: Dict[str, Any] = {}
        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                data = json.load(f)

        for env_name, field_name in ENV_OVERRIDES.items():
            value = self.environ.get(env_name)
            if value:
                data[field_name] = value

        self._config = AppConfig(**data)
        return self._config

    def get_config(self) -> AppConfig:
        if self._config is None:
            return self.load_settings()
        return self._config

    def exists(self) -> bool:
        return self.config_path.exists()
