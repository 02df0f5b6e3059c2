"""
Snapshot Serializer: live Clean tree to canonical snapshot nodes.
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Union

from propsync.config import SYNC_CONFIG
from propsync.dom.decoration import clean_attributes, is_chrome
from propsync.dom.nodes import LiveDocument, LiveElement, LiveNode, LiveText
from propsync.logging_config import logger
from propsync.schemas import SnapshotElement, SnapshotNode, SnapshotText
from propsync.snapshot.probe import probe_runtime_properties

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


class SnapshotSerializer:
    """
    Captures a decoration-free snapshot of a live tree.

    Custom elements are encapsulated leaves: their live children belong to
    their own source and are not traversed, unless the tag is listed in
    `transparent_tags` (the component being authored renders itself into
    the preview, and its children are what the author wrote).
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        transparent_tags: Iterable[str] = (),
    ):
        config = config or SYNC_CONFIG
        self.reserved_attributes = set(config.get("reserved_attributes", SYNC_CONFIG["reserved_attributes"]))
        self.skipped_tags = set(config.get("skipped_tags", SYNC_CONFIG["skipped_tags"]))
        self.transparent_tags = {t.lower() for t in transparent_tags}

    def capture(self, root: Union[LiveDocument, LiveElement]) -> List[SnapshotNode]:
        """
        Snapshot a document, its body, or a single element.

        Returns:
            Top-level snapshot nodes; a single element yields a one-item list
        """
        if isinstance(root, LiveDocument):
            root = root.body

        if root.tag == "body":
            nodes = self._capture_children(root.children)
        else:
            node = self._capture_element(root)
            nodes = [node] if node is not None else []

        logger.debug(f"Captured snapshot with {len(nodes)} top-level nodes")
        return nodes

    def _skipped(self, element: LiveElement) -> bool:
        return element.tag in self.skipped_tags or is_chrome(element)

    def _capture_element(self, element: LiveElement) -> Optional[SnapshotElement]:
        if self._skipped(element):
            return None

        attributes = {
            name: value
            for name, value in clean_attributes(element).items()
            if name not in self.reserved_attributes
        }

        runtime_properties: Dict[str, str] = {}
        children: List[SnapshotNode] = []
        if element.is_custom:
            runtime_properties = probe_runtime_properties(element.instance)
            if element.tag in self.transparent_tags:
                children = self._capture_children(element.children)
        else:
            children = self._capture_children(element.children)

        return SnapshotElement(
            tag=element.tag,
            attributes=attributes,
            runtime_properties=runtime_properties,
            children=children,
        )

    def _capture_children(self, nodes: List[LiveNode]) -> List[SnapshotNode]:
        """Capture child nodes, merging adjacent text and dropping empty text."""
        result: List[SnapshotNode] = []
        pending: List[str] = []

        def flush() -> None:
            text = normalize_text("".join(pending))
            pending.clear()
            if text:
                result.append(SnapshotText(content=text))

        for node in nodes:
            if isinstance(node, LiveText):
                pending.append(node.data)
            elif isinstance(node, LiveElement):
                if self._skipped(node):
                    continue
                flush()
                captured = self._capture_element(node)
                if captured is not None:
                    result.append(captured)
        flush()
        return result

