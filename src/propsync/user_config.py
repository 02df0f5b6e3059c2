"""
propsync User Configuration

Hierarchical config system with global defaults + local overrides:
- Global: ~/.propsync/config.json (cross-project settings)
- Local: .propsync/config.json (project-specific overrides)

Config structure:
{
  "sync": {
    "shared_module": "@html-props/built-ins",
    "indent_unit": "  ",
    "debounce_seconds": 0.05
  },
  "registry": {
    "directories": ["src/components"]
  }
}
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional
from propsync.logging_config import logger
from propsync.paths import get_paths


DEFAULT_CONFIG = {
    "sync": {},
    "registry": {
        "directories": [],
        "extensions": [".js", ".ts", ".jsx", ".tsx"],
    },
}


class UserConfig:
    """
    Manages hierarchical user configuration.

    Load order (with override):
    1. Default config (hardcoded)
    2. Global config (~/.propsync/config.json)
    3. Local config (.propsync/config.json)
    """

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            project_root: Project root directory (defaults to CWD)
        """
        paths = get_paths(project_root or Path.cwd())
        self.project_root = paths.project_root
        self.global_config_path = paths.global_config
        self.local_config_path = paths.local_config

        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration with hierarchical override.

        Returns:
            Merged configuration dictionary
        """
        config = self._deep_merge({}, DEFAULT_CONFIG)

        for label, path in (("global", self.global_config_path), ("local", self.local_config_path)):
            if not path.exists():
                continue
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
                config = self._deep_merge(config, loaded)
                logger.debug(f"Loaded {label} config from {path}")
            except Exception as e:
                logger.warning(f"Failed to load {label} config: {e}")

        return config

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """
        Deep merge two dictionaries, with override taking precedence.

        Args:
            base: Base dictionary
            override: Override dictionary

        Returns:
            Merged dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            elif isinstance(value, dict):
                result[key] = self._deep_merge({}, value)
            else:
                result[key] = value

        return result

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a config value by dot-separated key.

        Args:
            key: Dot-separated key (e.g., "sync.indent_unit")
            default: Default value if key not found

        Returns:
            Config value
        """
        value = self._config

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set_local(self, key: str, value: Any) -> bool:
        """
        Set a local config value and save to disk.

        Args:
            key: Dot-separated key
            value: Value to set

        Returns:
            True if successful, False otherwise
        """
        config_path = self.local_config_path

        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    config = json.load(f)
            except Exception as e:
                logger.error(f"Failed to load config from {config_path}: {e}")
                return False
        else:
            config = {}

        keys = key.split(".")
        current = config
        for k in keys[:-1]:
            current = current.setdefault(k, {})
        current[keys[-1]] = value

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(config, f, indent=2)

            self._config = self._load_config()

            logger.info(f"Saved local config: {key}={value}")
            return True
        except Exception as e:
            logger.error(f"Failed to save config to {config_path}: {e}")
            return False


# Global singleton
_config: Optional[UserConfig] = None


def get_user_config(project_root: Optional[Path] = None) -> UserConfig:
    """
    Get the user configuration singleton.

    Args:
        project_root: Optional project root override

    Returns:
        UserConfig instance
    """
    global _config
    if project_root is not None:
        return UserConfig(project_root)
    if _config is None:
        _config = UserConfig()
    return _config


def reset_user_config() -> None:
    """Reset the global config singleton (for testing)."""
    global _config
    _config = None
