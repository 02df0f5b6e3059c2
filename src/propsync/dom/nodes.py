"""
Mutable live tree used for both views of an editing session.

The tree mirrors the small part of a browser DOM the sync engine relies
on: ordered children with parent links, ordered attributes, custom
element upgrade through component definitions, and structural-change
notifications.
"""

import html
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from propsync.logging_config import logger


VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

RAW_TEXT_TAGS = frozenset({"script", "style"})

ComponentFactory = Callable[["LiveElement"], Any]
ChangeListener = Callable[[List["LiveNode"]], None]


def is_custom_tag(tag: str) -> bool:
    """Custom elements are marked by a hyphen in the tag name."""
    return "-" in tag


class LiveNode:
    """Base class for nodes of a live tree."""

    def __init__(self):
        self.parent: Optional["LiveElement"] = None

    def detach(self) -> "LiveNode":
        if self.parent is not None:
            self.parent.remove(self)
        return self

    def root(self) -> "LiveNode":
        node: LiveNode = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def owner_document(self) -> Optional["LiveDocument"]:
        return getattr(self.root(), "_document", None)

    def clone(self, deep: bool = True) -> "LiveNode":
        raise NotImplementedError

    def outer_html(self) -> str:
        raise NotImplementedError


class LiveText(LiveNode):
    def __init__(self, data: str):
        super().__init__()
        self.data = data

    def clone(self, deep: bool = True) -> "LiveText":
        return LiveText(self.data)

    def outer_html(self) -> str:
        if self.parent is not None and self.parent.tag in RAW_TEXT_TAGS:
            return self.data
        return html.escape(self.data, quote=False)

    def __repr__(self) -> str:
        return f"LiveText({self.data!r})"


class LiveElement(LiveNode):
    """
    An element with ordered attributes and children.

    `instance` holds the runtime object of an upgraded custom element.
    It is never copied by clone().
    """

    def __init__(
        self,
        tag: str,
        attributes: Optional[Dict[str, str]] = None,
        children: Optional[List[LiveNode]] = None,
    ):
        super().__init__()
        self.tag = tag.lower()
        self.attributes: Dict[str, str] = dict(attributes or {})
        self.children: List[LiveNode] = []
        self.instance: Any = None
        for child in children or []:
            self.append(child)

    # Structure

    @property
    def is_custom(self) -> bool:
        return is_custom_tag(self.tag)

    @property
    def element_children(self) -> List["LiveElement"]:
        return [c for c in self.children if isinstance(c, LiveElement)]

    def index_of(self, child: LiveNode) -> int:
        for index, candidate in enumerate(self.children):
            if candidate is child:
                return index
        raise ValueError(f"{child!r} is not a child of <{self.tag}>")

    def insert(self, index: int, child: LiveNode) -> LiveNode:
        child.detach()
        self.children.insert(index, child)
        child.parent = self
        return child

    def append(self, child: LiveNode) -> LiveNode:
        return self.insert(len(self.children), child)

    def insert_before(self, child: LiveNode, reference: LiveNode) -> LiveNode:
        # Detach first: the reference index shifts when moving within one parent
        child.detach()
        return self.insert(self.index_of(reference), child)

    def insert_after(self, child: LiveNode, reference: LiveNode) -> LiveNode:
        child.detach()
        return self.insert(self.index_of(reference) + 1, child)

    def remove(self, child: LiveNode) -> None:
        del self.children[self.index_of(child)]
        child.parent = None

    def replace_children(self, children: List[LiveNode]) -> None:
        for child in list(self.children):
            self.remove(child)
        for child in children:
            self.append(child)

    def iter(self) -> Iterator["LiveElement"]:
        """Yield this element and every descendant element in document order."""
        yield self
        for child in self.children:
            if isinstance(child, LiveElement):
                yield from child.iter()

    def contains(self, other: LiveNode) -> bool:
        node: Optional[LiveNode] = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    # Attributes

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name, default)

    def set_attribute(self, name: str, value: str) -> None:
        self.attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)

    @property
    def classes(self) -> List[str]:
        return self.attributes.get("class", "").split()

    @classes.setter
    def classes(self, names: List[str]) -> None:
        if names:
            self.attributes["class"] = " ".join(names)
        else:
            self.attributes.pop("class", None)

    def add_class(self, name: str) -> None:
        names = self.classes
        if name not in names:
            self.classes = names + [name]

    @property
    def text_content(self) -> str:
        parts = []
        for child in self.children:
            if isinstance(child, LiveText):
                parts.append(child.data)
            elif isinstance(child, LiveElement):
                parts.append(child.text_content)
        return "".join(parts)

    # Rendering

    def clone(self, deep: bool = True) -> "LiveElement":
        copy = LiveElement(self.tag, self.attributes)
        if deep:
            for child in self.children:
                copy.append(child.clone(deep=True))
        return copy

    def inner_html(self) -> str:
        return "".join(child.outer_html() for child in self.children)

    def outer_html(self) -> str:
        attrs = "".join(
            f' {name}="{html.escape(value, quote=True)}"' if value != "" else f" {name}"
            for name, value in self.attributes.items()
        )
        if self.tag in VOID_TAGS:
            return f"<{self.tag}{attrs}>"
        return f"<{self.tag}{attrs}>{self.inner_html()}</{self.tag}>"

    def __repr__(self) -> str:
        return f"LiveElement(<{self.tag}>, {len(self.children)} children)"


class LiveDocument:
    """
    Owner of a live tree: the body root, component definitions used to
    upgrade custom elements, and structural-change listeners.
    """

    def __init__(self, definitions: Optional[Dict[str, ComponentFactory]] = None):
        self.definitions: Dict[str, ComponentFactory] = dict(definitions or {})
        self.body = LiveElement("body")
        self.body._document = self
        self._listeners: List[ChangeListener] = []

    @classmethod
    def from_markup(
        cls,
        markup: str,
        definitions: Optional[Dict[str, ComponentFactory]] = None,
        upgrade: bool = True,
    ) -> "LiveDocument":
        from propsync.dom.markup import parse_markup

        document = cls(definitions)
        for node in parse_markup(markup):
            document.body.append(node)
        if upgrade:
            document.upgrade(document.body)
        return document

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify(self, added: List[LiveNode]) -> None:
        """Report nodes added by a structural mutation to every listener."""
        for listener in list(self._listeners):
            listener(added)

    def upgrade(self, node: LiveNode) -> int:
        """
        Instantiate component definitions for custom elements in a subtree.

        Elements that already have an instance are left alone, so moved
        elements keep their state. A factory may render children into its
        element; those children are upgraded as well.

        Returns:
            Number of elements upgraded
        """
        if not isinstance(node, LiveElement):
            return 0

        upgraded = 0
        if node.is_custom and node.instance is None:
            factory = self.definitions.get(node.tag)
            if factory is not None:
                node.instance = factory(node)
                upgraded += 1
                logger.debug(f"Upgraded <{node.tag}>")

        for child in list(node.children):
            upgraded += self.upgrade(child)
        return upgraded

    def outer_html(self) -> str:
        return self.body.inner_html()


def as_root(container: Union[LiveDocument, LiveElement]) -> LiveElement:
    """Accept either a document or an element and return the element to work on."""
    if isinstance(container, LiveDocument):
        return container.body
    return container
