"""
Configuration for the visual-edit-to-source synchronization engine.

Contains the defaults for code generation, source patching and scheduling.
User overrides are merged in by get_sync_config().
"""

from pathlib import Path
from typing import Any, Dict, Optional

from propsync.exceptions import ConfigError


SYNC_CONFIG: Dict[str, Any] = {
    # Code generation
    "shared_module": "@html-props/built-ins",
    "indent_unit": "  ",
    "attribute_key_map": {"class": "className"},
    "text_content_key": "textContent",
    "children_key": "content",
    # Snapshot capture
    "reserved_attributes": ["is", "title"],
    "skipped_tags": ["script", "style"],
    # Source patching
    "mixin_module": "@html-props/core",
    "preserved_modules": ["@html-props/core"],  # Named imports from these are hand-authored
    "component_base_prefix": "HTMLProps",
    "render_open_marker": "return [",
    "render_close_marker": "];",
    "reject_new_syntax_errors": True,
    # Scheduling
    "debounce_seconds": 0.05,
    "settle_seconds": 0.05,
    "load_timeout_seconds": 5.0,
}

DECORATION = {
    "class_prefix": "wb-",
    "attribute_prefixes": ["wb-", "data-editor-inject"],
    "marker_attributes": ["data-layers-selected", "data-layers-hovered", "data-drop-target"],
    "chrome_attribute": "data-editor-inject",
    "hoverable_class": "wb-hoverable",
    "selected_marker": "data-layers-selected",
    "hovered_marker": "data-layers-hovered",
}

_REQUIRED_STRINGS = (
    "shared_module",
    "mixin_module",
    "render_open_marker",
    "render_close_marker",
)


def validate_sync_config(config: Dict[str, Any]) -> None:
    """
    Validate a merged sync configuration.

    Raises:
        ConfigError: If a required value is missing or malformed.
    """
    for key in _REQUIRED_STRINGS:
        value = config.get(key)
        if not isinstance(value, str) or not value:
            raise ConfigError(f"sync.{key} must be a non-empty string")

    indent = config.get("indent_unit")
    if not isinstance(indent, str) or not indent or indent.strip():
        raise ConfigError("sync.indent_unit must be a non-empty whitespace string")

    for key in ("debounce_seconds", "settle_seconds", "load_timeout_seconds"):
        value = config.get(key)
        if not isinstance(value, (int, float)) or value < 0:
            raise ConfigError(f"sync.{key} must be a non-negative number")


def get_sync_config(
    project_root: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build the effective sync configuration.

    Load order: SYNC_CONFIG defaults, then the "sync" section of the
    hierarchical user config, then explicit overrides.
    """
    from propsync.user_config import get_user_config

    user_section = get_user_config(project_root).get("sync", {}) or {}
    config = {**SYNC_CONFIG, **user_section, **(overrides or {})}
    validate_sync_config(config)
    return config
