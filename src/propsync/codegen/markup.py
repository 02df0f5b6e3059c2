"""
Markup Generator: snapshot nodes to plain HTML body lines, for authored
`.html` pages whose source is the markup itself.
"""

import html
from typing import Any, Dict, List, Optional

from propsync.config import SYNC_CONFIG
from propsync.dom.nodes import VOID_TAGS
from propsync.logging_config import logger
from propsync.schemas import GeneratedCode, SnapshotElement, SnapshotNode, SnapshotText

MARKUP_EXTENSIONS = (".html", ".htm")


def is_markup_source(path: Optional[str]) -> bool:
    return bool(path) and path.lower().endswith(MARKUP_EXTENSIONS)


class MarkupGenerator:
    """
    Emits one element per line, nested by the indent unit. An element
    whose only child is text keeps it on the same line.

    Plain HTML has no imports and no construction symbols, so every tag is
    emitted. Runtime properties have no markup form and are not written.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = config or SYNC_CONFIG
        self.indent_unit = config.get("indent_unit", SYNC_CONFIG["indent_unit"])
        self.reserved_attributes = set(config.get("reserved_attributes", SYNC_CONFIG["reserved_attributes"]))

    def generate(self, nodes: List[SnapshotNode]) -> GeneratedCode:
        body_lines: List[str] = []
        for node in nodes:
            body_lines.extend(self._render(node))
        logger.debug(f"Generated {len(body_lines)} markup lines")
        return GeneratedCode(imports=[], body_lines=body_lines)

    def _open_tag(self, node: SnapshotElement) -> str:
        attrs = "".join(
            f' {name}="{html.escape(value, quote=True)}"' if value != "" else f" {name}"
            for name, value in node.attributes.items()
            if name not in self.reserved_attributes
        )
        return f"<{node.tag}{attrs}>"

    def _render(self, node: SnapshotNode) -> List[str]:
        if isinstance(node, SnapshotText):
            return [html.escape(node.content, quote=False)]

        open_tag = self._open_tag(node)
        if node.tag in VOID_TAGS:
            return [open_tag]

        close_tag = f"</{node.tag}>"
        # Custom element children belong to the custom element's own source
        children = [] if "-" in node.tag else node.children

        if not children:
            return [open_tag + close_tag]
        if len(children) == 1 and isinstance(children[0], SnapshotText):
            return [open_tag + html.escape(children[0].content, quote=False) + close_tag]

        lines = [open_tag]
        for child in children:
            lines.extend(self.indent_unit + line for line in self._render(child))
        lines.append(close_tag)
        return lines
