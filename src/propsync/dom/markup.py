"""
HTML markup to live nodes, using BeautifulSoup.
"""

from typing import List

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from propsync.dom.nodes import LiveElement, LiveNode, LiveText


def _convert(node) -> List[LiveNode]:
    if isinstance(node, Tag):
        attributes = {
            name: "" if value is None else str(value)
            for name, value in node.attrs.items()
        }
        element = LiveElement(node.name, attributes)
        for child in node.children:
            for converted in _convert(child):
                element.append(converted)
        return [element]

    # Comments, doctypes, CDATA and processing instructions
    if isinstance(node, PreformattedString):
        return []

    if isinstance(node, NavigableString):
        return [LiveText(str(node))]

    return []


def parse_markup(markup: str) -> List[LiveNode]:
    """
    Parse HTML text into detached live nodes.

    A full document contributes only its <body> children.
    """
    soup = BeautifulSoup(markup, "html.parser", multi_valued_attributes=None)
    container = soup.body if soup.body is not None else soup

    nodes: List[LiveNode] = []
    for child in container.children:
        nodes.extend(_convert(child))
    return nodes


def parse_fragment(markup: str) -> List[LiveNode]:
    """Parse markup meant for insertion, dropping whitespace-only text at the edges."""
    nodes = parse_markup(markup)
    while nodes and isinstance(nodes[0], LiveText) and not nodes[0].data.strip():
        nodes.pop(0)
    while nodes and isinstance(nodes[-1], LiveText) and not nodes[-1].data.strip():
        nodes.pop()
    return nodes
