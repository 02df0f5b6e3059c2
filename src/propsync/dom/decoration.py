"""
Overlay-only decoration: classes and attributes the interactive view adds
to elements, and the editor chrome it injects. None of it may reach the
Clean view or generated code.
"""

from typing import Dict, List, Optional

from propsync.config import DECORATION
from propsync.dom.nodes import LiveElement


def is_decoration_class(name: str) -> bool:
    return name.startswith(DECORATION["class_prefix"])


def is_decoration_attribute(name: str) -> bool:
    if name in DECORATION["marker_attributes"]:
        return True
    return any(name.startswith(prefix) for prefix in DECORATION["attribute_prefixes"])


def is_chrome(element: LiveElement) -> bool:
    """Elements injected by the editor itself (toolbars, handles, scripts)."""
    return DECORATION["chrome_attribute"] in element.attributes


def clean_classes(element: LiveElement) -> List[str]:
    return [c for c in element.classes if not is_decoration_class(c)]


def first_class(element: LiveElement) -> Optional[str]:
    names = clean_classes(element)
    return names[0] if names else None


def clean_attributes(element: LiveElement) -> Dict[str, str]:
    """Attributes without decoration, in original order. An emptied class is dropped."""
    result: Dict[str, str] = {}
    for name, value in element.attributes.items():
        if is_decoration_attribute(name):
            continue
        if name == "class":
            names = [c for c in value.split() if not is_decoration_class(c)]
            if not names:
                continue
            value = " ".join(names)
        result[name] = value
    return result


def strip_decoration(element: LiveElement) -> LiveElement:
    """Remove decoration from a subtree in place, including editor chrome."""
    for node in element.iter():
        node.attributes = clean_attributes(node)
        for child in list(node.element_children):
            if is_chrome(child):
                node.remove(child)
    return element


def decorate(element: LiveElement) -> bool:
    """
    Make an Overlay element interactive.

    Returns:
        True if the element changed
    """
    if is_chrome(element):
        return False
    hoverable = DECORATION["hoverable_class"]
    if hoverable in element.classes:
        return False
    element.add_class(hoverable)
    return True


def set_marker(element: LiveElement, marker: str) -> None:
    element.set_attribute(marker, "")
