"""
Round trip: snapshot, generate, patch, then read the patched render body
back with tree-sitter and rebuild the structure it constructs.
"""

import ast

import pytest

from propsync.config import SYNC_CONFIG
from propsync.dom.nodes import LiveDocument
from propsync.registry.builtins import STANDARD_TAGS, builtin_class_name
from propsync.schemas import SnapshotElement, SnapshotText
from propsync.sync import SourceSynchronizer

pytestmark = pytest.mark.integration

MARKUP = (
    '<home-page>'
    '<div class="card" id="main">'
    '<h1>It\'s "quoted"</h1>'
    '<p>Hello <b>bold</b> see arr]; ok</p>'
    '<ul><li>one</li><li data-index="2">two\\back</li></ul>'
    '<x-counter></x-counter>'
    '</div>'
    '<br>'
    '</home-page>'
)


def literal(tree, node):
    """Decode a single-quoted string literal node."""
    return ast.literal_eval(tree.node_text(node))


def render_array(tree):
    """The array returned by the render body."""
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type == "return_statement":
            value = node.named_children[0] if node.named_children else None
            if value is not None and value.type == "array":
                return value
        stack.extend(reversed(node.children))
    return None


class Rebuilder:
    """Turns `new X({ ... })` calls back into snapshot nodes."""

    def __init__(self, tree, registry):
        self.tree = tree
        self.tags = {builtin_class_name(tag): tag for tag in STANDARD_TAGS}
        self.tags.update({entry.symbol: entry.tag for entry in registry.custom_entries()})
        self.attribute_names = {key: name for name, key in SYNC_CONFIG["attribute_key_map"].items()}

    def nodes(self, array):
        result = []
        for item in array.named_children:
            if item.type == "string":
                result.append(SnapshotText(content=literal(self.tree, item)))
            elif item.type == "new_expression":
                result.append(self.element(item))
        return result

    def element(self, node):
        symbol = self.tree.node_text(node.child_by_field_name("constructor"))
        tag = self.tags[symbol]
        arguments = node.child_by_field_name("arguments").named_children
        pairs = arguments[0].named_children if arguments else []

        attributes = {}
        runtime_properties = {}
        children = []
        for pair in pairs:
            if pair.type != "pair":
                continue
            key_node = pair.child_by_field_name("key")
            value_node = pair.child_by_field_name("value")
            key = literal(self.tree, key_node) if key_node.type == "string" else self.tree.node_text(key_node)

            if key == SYNC_CONFIG["children_key"]:
                children = self.nodes(value_node)
            elif key == SYNC_CONFIG["text_content_key"]:
                children = [SnapshotText(content=literal(self.tree, value_node))]
            elif "-" in tag:
                runtime_properties[key] = literal(self.tree, value_node)
            else:
                attributes[self.attribute_names.get(key, key)] = literal(self.tree, value_node)

        return SnapshotElement(
            tag=tag,
            attributes=attributes,
            runtime_properties=runtime_properties,
            children=children,
        )


class TestRoundTrip:
    """The patched render body constructs exactly the captured structure."""

    def test_patched_body_rebuilds_snapshot(self, registry, ts_parser, sync_config, definitions, component_source):
        synchronizer = SourceSynchronizer(registry, ts_parser, sync_config, authored_path="/project/src/pages/home.ts")
        document = LiveDocument.from_markup(MARKUP, definitions)

        result = synchronizer.synchronize(component_source, document)

        assert result.success is True
        snapshot = synchronizer.last_snapshot
        assert [node.tag for node in snapshot] == ["home-page"]

        tree = ts_parser.parse(result.source)
        assert not tree.has_errors
        array = render_array(tree)
        assert array is not None

        rebuilt = Rebuilder(tree, registry).nodes(array)

        # The authoring component is spliced: its children are the body
        assert rebuilt == snapshot[0].children

    def test_rebuilt_structure_is_stable_across_passes(self, registry, ts_parser, sync_config, definitions, component_source):
        synchronizer = SourceSynchronizer(registry, ts_parser, sync_config, authored_path="/project/src/pages/home.ts")
        document = LiveDocument.from_markup(MARKUP, definitions)

        first = synchronizer.synchronize(component_source, document)
        second = synchronizer.synchronize(first.source, document)

        assert second.success is True
        assert second.source == first.source
