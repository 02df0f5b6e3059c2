"""
propsync Path Configuration

Centralized path management for propsync data files.
All paths are relative to the project root (current working directory).

Directory Structure:
.propsync/
├── config.json          # Project-local configuration overrides
└── logs/                # Log files (opt-in)
"""

from pathlib import Path
from typing import Optional


class PropSyncPaths:
    """
    Centralized path configuration for propsync.

    All paths are lazily resolved relative to project_root.
    Default project_root is current working directory.
    """

    PROPSYNC_DIR = ".propsync"
    GLOBAL_DIR = Path.home() / ".propsync"

    CONFIG_NAME = "config.json"
    LOGS_DIR = "logs"

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize paths configuration.

        Args:
            project_root: Root directory for the project. Defaults to CWD.
        """
        self._project_root = project_root

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        if self._project_root is None:
            return Path.cwd()
        return self._project_root

    @property
    def propsync_dir(self) -> Path:
        """Get the .propsync directory path."""
        return self.project_root / self.PROPSYNC_DIR

    @property
    def local_config(self) -> Path:
        """Get the project-local config file path."""
        return self.propsync_dir / self.CONFIG_NAME

    @property
    def global_config(self) -> Path:
        """Get the user-global config file path."""
        return self.GLOBAL_DIR / self.CONFIG_NAME

    @property
    def logs_dir(self) -> Path:
        """Get the logs directory path."""
        return self.propsync_dir / self.LOGS_DIR

    def ensure_dirs(self) -> None:
        """Create all necessary directories if they don't exist."""
        self.propsync_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(exist_ok=True)


# Global instance for convenience
_default_paths: Optional[PropSyncPaths] = None


def get_paths(project_root: Optional[Path] = None) -> PropSyncPaths:
    """
    Get the paths configuration.

    Args:
        project_root: Optional project root override

    Returns:
        PropSyncPaths instance
    """
    global _default_paths
    if project_root is not None:
        return PropSyncPaths(project_root)
    if _default_paths is None:
        _default_paths = PropSyncPaths()
    return _default_paths


def reset_paths() -> None:
    """Reset the global paths instance (useful for testing)."""
    global _default_paths
    _default_paths = None
