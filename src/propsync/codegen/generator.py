"""
Code Generator: snapshot nodes to construction source text.

Each element becomes `new Symbol({ key: value, ... })`. Children are
encoded deterministically: none are omitted, a lone text child collapses
to the text-content argument, anything else becomes a `content` list.
"""

import re
from typing import Any, Dict, List, Optional, Tuple, Union

from propsync.codegen.imports import build_import_statements
from propsync.config import SYNC_CONFIG
from propsync.logging_config import logger
from propsync.registry.registry import ElementRegistry
from propsync.schemas import (
    GeneratedCode,
    ImportRequirement,
    RegistryEntry,
    SnapshotElement,
    SnapshotNode,
    SnapshotText,
)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")

# Expanded child: a text literal, or an element with its registry entry
_Item = Union[str, Tuple[SnapshotElement, RegistryEntry]]


def escape_string(value: str) -> str:
    # No raw "]" in literals: the render body ends at the first "];"
    return (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\r", "\\r")
        .replace("\n", "\\n")
        .replace("]", "\\x5d")
    )


def quote(value: str) -> str:
    return f"'{escape_string(value)}'"


def format_key(key: str) -> str:
    return key if _IDENTIFIER_RE.match(key) else quote(key)


class _Pass:
    """Per-generation state; requirements are never reused across passes."""

    def __init__(self, component_symbol: Optional[str], component_tag: Optional[str]):
        self.component_symbol = component_symbol
        self.component_tag = component_tag.lower() if component_tag else None
        self.requirements: Dict[Tuple[str, Optional[str]], ImportRequirement] = {}
        self.unresolved: List[str] = []

    def require(self, entry: RegistryEntry) -> None:
        key = (entry.symbol, entry.origin_path)
        if key not in self.requirements:
            self.requirements[key] = ImportRequirement(
                symbol=entry.symbol,
                origin_kind=entry.origin_kind,
                origin_path=entry.origin_path,
            )


class CodeGenerator:
    def __init__(self, registry: ElementRegistry, config: Optional[Dict[str, Any]] = None):
        config = config or SYNC_CONFIG
        self.registry = registry
        self.shared_module = config.get("shared_module", SYNC_CONFIG["shared_module"])
        self.indent_unit = config.get("indent_unit", SYNC_CONFIG["indent_unit"])
        self.key_map = config.get("attribute_key_map", SYNC_CONFIG["attribute_key_map"])
        self.text_key = config.get("text_content_key", SYNC_CONFIG["text_content_key"])
        self.children_key = config.get("children_key", SYNC_CONFIG["children_key"])
        self.reserved_attributes = set(config.get("reserved_attributes", SYNC_CONFIG["reserved_attributes"]))

    def generate(
        self,
        nodes: List[SnapshotNode],
        component_symbol: Optional[str] = None,
        authored_path: Optional[str] = None,
        component_tag: Optional[str] = None,
    ) -> GeneratedCode:
        """
        Generate imports and render body lines for a snapshot.

        Args:
            nodes: Top-level snapshot nodes
            component_symbol: Class name of the component being authored;
                nodes resolving to it are replaced by their children
            authored_path: File the code is written into, for relative imports
            component_tag: Tag the authored component is defined under

        Returns:
            GeneratedCode with body lines at relative indentation
        """
        state = _Pass(component_symbol, component_tag)
        items = self._expand(nodes, state)

        body_lines: List[str] = []
        for index, item in enumerate(items):
            lines = self._render(item, state)
            if index < len(items) - 1:
                lines[-1] += ","
            body_lines.extend(lines)

        requirements = list(state.requirements.values())
        imports = build_import_statements(requirements, self.shared_module, authored_path)

        logger.debug(
            f"Generated {len(body_lines)} body lines, {len(imports)} import statements, "
            f"{len(state.unresolved)} unresolved tags"
        )
        return GeneratedCode(
            imports=imports,
            body_lines=body_lines,
            requirements=requirements,
            unresolved=state.unresolved,
        )

    def _is_self(self, node: SnapshotElement, entry: Optional[RegistryEntry], state: _Pass) -> bool:
        if state.component_tag and node.tag == state.component_tag:
            return True
        return bool(entry and state.component_symbol and entry.symbol == state.component_symbol)

    def _expand(self, nodes: List[SnapshotNode], state: _Pass) -> List[_Item]:
        """Resolve nodes to renderable items, splicing self-references and dropping unresolved tags."""
        items: List[_Item] = []
        for node in nodes:
            if isinstance(node, SnapshotText):
                if node.content:
                    items.append(node.content)
                continue

            entry = self.registry.resolve(node.tag)
            if self._is_self(node, entry, state):
                logger.debug(f"Splicing children of self-reference <{node.tag}>")
                items.extend(self._expand(node.children, state))
                continue

            if entry is None:
                logger.warning(f"No registry entry for <{node.tag}>; omitting it from generated code")
                if node.tag not in state.unresolved:
                    state.unresolved.append(node.tag)
                continue

            items.append((node, entry))
        return items

    def _arguments(self, node: SnapshotElement) -> List[str]:
        args: List[str] = []
        supplied = set()
        for name, value in node.attributes.items():
            if name in self.reserved_attributes:
                continue
            key = self.key_map.get(name, name)
            supplied.update((name, key))
            args.append(f"{format_key(key)}: {quote(value)}")

        if "-" in node.tag:
            for name, value in node.runtime_properties.items():
                if name in supplied:
                    continue
                args.append(f"{format_key(name)}: {quote(value)}")
        return args

    def _render(self, item: _Item, state: _Pass) -> List[str]:
        if isinstance(item, str):
            return [quote(item)]

        node, entry = item
        state.require(entry)
        args = self._arguments(node)

        # Custom element children belong to the custom element's own source
        children = [] if "-" in node.tag else self._expand(node.children, state)

        if not children:
            return [f"new {entry.symbol}({self._object(args)})"]

        if len(children) == 1 and isinstance(children[0], str):
            args.append(f"{self.text_key}: {quote(children[0])}")
            return [f"new {entry.symbol}({self._object(args)})"]

        lines = [f"new {entry.symbol}({{ {', '.join(args + [f'{self.children_key}: ['])}"]
        for index, child in enumerate(children):
            child_lines = self._render(child, state)
            if index < len(children) - 1:
                child_lines[-1] += ","
            lines.extend(self.indent_unit + line for line in child_lines)
        lines.append("] })")
        return lines

    @staticmethod
    def _object(args: List[str]) -> str:
        return f"{{ {', '.join(args)} }}" if args else "{}"
