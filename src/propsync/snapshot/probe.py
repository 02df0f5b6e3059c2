"""
Runtime property probe for upgraded custom elements.

Component instances hold reactive state that is never reflected as
attributes. Each own public member is read through a capability chain:
callable, then retrievable container (zero-argument get()), then plain
primitive.
"""

from typing import Any, Dict, Optional

from propsync.logging_config import logger

PRIMITIVES = (str, int, float, bool)


def to_transport(value: Any) -> str:
    """Coerce a primitive to the string form snapshots carry."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _read_member(value: Any) -> Optional[Any]:
    if callable(value):
        result = value()
        return result if isinstance(result, PRIMITIVES) else None

    getter = getattr(value, "get", None)
    if callable(getter) and not isinstance(value, (dict, PRIMITIVES)):
        result = getter()
        return result if isinstance(result, PRIMITIVES) else None

    if isinstance(value, PRIMITIVES):
        return value
    return None


def probe_runtime_properties(instance: Any) -> Dict[str, str]:
    """
    Read the runtime property values of a component instance.

    Members whose name starts with an underscore are private and skipped.
    A member that raises while being read is skipped on its own.

    Returns:
        Mapping of member name to transport string, in definition order
    """
    if instance is None:
        return {}

    try:
        members = vars(instance)
    except TypeError:
        return {}

    properties: Dict[str, str] = {}
    for name, value in list(members.items()):
        if name.startswith("_"):
            continue
        try:
            result = _read_member(value)
        except Exception as e:
            logger.debug(f"Skipping runtime property '{name}': {type(e).__name__}: {e}")
            continue
        if result is None:
            continue
        properties[name] = to_transport(result)
    return properties
