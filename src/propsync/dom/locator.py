"""
Locators: stable path descriptors that address the same node in both views.

A locator is rendered as segments joined by " > ". A segment is `#id` when
the element's id is unique in its tree, otherwise `tag[.firstClass][:n]`,
where n is the 1-based position among sibling elements sharing the tag and
first class, omitted when that group has a single member.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from propsync.dom.decoration import first_class, is_chrome, is_decoration_class
from propsync.dom.nodes import LiveDocument, LiveElement, as_root
from propsync.exceptions import LocatorError

SEPARATOR = " > "

_SEGMENT_RE = re.compile(
    r"^(?P<tag>[A-Za-z][\w-]*)(?:\.(?P<cls>[^\s:>]+))?(?::(?P<ordinal>\d+))?$"
)


@dataclass(frozen=True)
class Segment:
    tag: Optional[str] = None
    cls: Optional[str] = None
    ordinal: Optional[int] = None
    element_id: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "Segment":
        text = text.strip()
        if text.startswith("#"):
            if len(text) == 1:
                raise LocatorError(text, "empty id segment")
            return cls(element_id=text[1:])
        match = _SEGMENT_RE.match(text)
        if not match:
            raise LocatorError(text, "segment must be '#id' or 'tag[.class][:n]'")
        ordinal = match.group("ordinal")
        if ordinal is not None and int(ordinal) < 1:
            raise LocatorError(text, "ordinals start at 1")
        return cls(
            tag=match.group("tag").lower(),
            cls=match.group("cls"),
            ordinal=int(ordinal) if ordinal is not None else None,
        )

    def __str__(self) -> str:
        if self.element_id is not None:
            return f"#{self.element_id}"
        text = self.tag or ""
        if self.cls:
            text += f".{self.cls}"
        if self.ordinal is not None:
            text += f":{self.ordinal}"
        return text


@dataclass(frozen=True)
class Locator:
    segments: Tuple[Segment, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "Locator":
        """Parse the rendered form. An empty string addresses the root."""
        text = text.strip()
        if not text:
            return cls()
        return cls(tuple(Segment.parse(part) for part in text.split(">")))

    @property
    def is_root(self) -> bool:
        return not self.segments

    def __str__(self) -> str:
        return SEPARATOR.join(str(s) for s in self.segments)


def _visible_children(parent: LiveElement) -> List[LiveElement]:
    return [c for c in parent.element_children if not is_chrome(c)]


def _elements_with_id(root: LiveElement, element_id: str) -> List[LiveElement]:
    return [e for e in root.iter() if not is_chrome(e) and e.get("id") == element_id]


def _segment_for(element: LiveElement, root: LiveElement) -> Segment:
    element_id = element.get("id")
    if element_id and len(_elements_with_id(root, element_id)) == 1:
        return Segment(element_id=element_id)

    cls = first_class(element)
    group = [
        sibling
        for sibling in _visible_children(element.parent)
        if sibling.tag == element.tag and first_class(sibling) == cls
    ]
    ordinal = None
    if len(group) > 1:
        ordinal = next(i for i, s in enumerate(group, start=1) if s is element)
    return Segment(tag=element.tag, cls=cls, ordinal=ordinal)


def locator_for(element: LiveElement) -> Locator:
    """
    Compute the locator of an element relative to its tree root.

    The walk stops at the first ancestor-or-self with a unique id.
    """
    root = element.root()
    segments: List[Segment] = []
    node = element
    while node is not root and node.parent is not None:
        segment = _segment_for(node, root)
        segments.append(segment)
        if segment.element_id is not None:
            break
        node = node.parent
    return Locator(tuple(reversed(segments)))


def resolve(
    container: Union[LiveDocument, LiveElement],
    locator: Union[Locator, str],
) -> Optional[LiveElement]:
    """
    Find the element a locator addresses, or None.

    A segment without ordinal that matches several siblings is ambiguous
    and does not resolve.
    """
    if isinstance(locator, str):
        locator = Locator.parse(locator)

    root = as_root(container)
    current = root
    for segment in locator.segments:
        if segment.element_id is not None:
            matches = _elements_with_id(root, segment.element_id)
            if len(matches) != 1:
                return None
            current = matches[0]
            continue

        candidates = [
            child
            for child in _visible_children(current)
            if child.tag == segment.tag and first_class(child) == segment.cls
        ]
        if segment.ordinal is not None:
            if segment.ordinal > len(candidates):
                return None
            current = candidates[segment.ordinal - 1]
        elif len(candidates) == 1:
            current = candidates[0]
        else:
            return None
    return current


def _class_set(value: Optional[str]) -> List[str]:
    return sorted(c for c in (value or "").split() if not is_decoration_class(c))


def find_matching(
    container: Union[LiveDocument, LiveElement],
    tag: str,
    attributes: Dict[str, str],
) -> Optional[LiveElement]:
    """
    Secondary match by tag and attributes, first hit in document order.

    Used to re-resolve a selection once a move has shifted ordinals. Every
    given attribute must match; class lists compare as sets with decoration
    classes ignored.
    """
    tag = tag.lower()
    for element in as_root(container).iter():
        if element.parent is None or is_chrome(element) or element.tag != tag:
            continue
        matched = True
        for name, value in attributes.items():
            if name == "class":
                matched = _class_set(element.get("class")) == _class_set(value)
            else:
                matched = element.get(name) == value
            if not matched:
                break
        if matched:
            return element
    return None
