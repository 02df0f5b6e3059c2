"""
Live tree model shared by the Overlay and Clean views.
"""

from propsync.dom.nodes import LiveDocument, LiveElement, LiveNode, LiveText, as_root, is_custom_tag
from propsync.dom.markup import parse_markup, parse_fragment
from propsync.dom.decoration import clean_attributes, is_chrome, strip_decoration
from propsync.dom.locator import Locator, find_matching, locator_for, resolve

__all__ = [
    "LiveDocument",
    "LiveElement",
    "LiveNode",
    "LiveText",
    "as_root",
    "is_custom_tag",
    "parse_markup",
    "parse_fragment",
    "clean_attributes",
    "is_chrome",
    "strip_decoration",
    "Locator",
    "find_matching",
    "locator_for",
    "resolve",
]
