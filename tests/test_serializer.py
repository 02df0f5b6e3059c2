"""
Tests for the Snapshot Serializer and the runtime property probe.
"""

import pytest

from propsync.dom.nodes import LiveDocument
from propsync.schemas import Snapshot, SnapshotElement, SnapshotText
from propsync.snapshot import SnapshotSerializer, normalize_text, probe_runtime_properties, to_transport

pytestmark = pytest.mark.fast


def capture(markup, definitions=None, **kwargs):
    document = LiveDocument.from_markup(markup, definitions)
    return SnapshotSerializer(**kwargs).capture(document)


class TestTextNormalization:
    """Whitespace collapse and text merging."""

    def test_button_text_collapses(self):
        """Indentation inside a button becomes a single text leaf."""
        nodes = capture("<button>\n    Click\n    me   </button>")

        assert nodes == [SnapshotElement(tag="button", children=[SnapshotText(content="Click me")])]

    def test_whitespace_only_text_is_dropped(self):
        nodes = capture("<div>\n  <span>a</span>\n</div>")

        assert [type(c) for c in nodes[0].children] == [SnapshotElement]

    def test_text_merges_across_skipped_elements(self):
        """A skipped script between two text runs does not split them."""
        nodes = capture("<p>Hello <script>track()</script>world</p>")

        assert nodes[0].children == [SnapshotText(content="Hello world")]

    def test_normalize_text(self):
        assert normalize_text("  a\t\n b  ") == "a b"


class TestElementCapture:
    """Attributes, skipping and encapsulation."""

    def test_reserved_attributes_removed(self):
        nodes = capture('<div is="fancy-div" title="t" id="a"></div>')

        assert nodes[0].attributes == {"id": "a"}

    def test_decoration_removed(self):
        nodes = capture('<div class="wb-hoverable card" wb-id="3" data-layers-selected>x</div>')

        assert nodes[0].attributes == {"class": "card"}

    def test_chrome_and_style_skipped(self):
        nodes = capture('<div data-editor-inject="toolbar">t</div><style>p{}</style><p>y</p>')

        assert [n.tag for n in nodes] == ["p"]

    def test_custom_element_children_not_traversed(self, definitions):
        """A custom element's live children belong to its own source."""
        nodes = capture('<x-badge tone="warn"><b>light</b></x-badge>', definitions)

        badge = nodes[0]
        assert badge.tag == "x-badge"
        assert badge.attributes == {"tone": "warn"}
        assert badge.children == []
        assert badge.runtime_properties == {"tone": "info"}

    def test_transparent_tag_is_traversed(self):
        nodes = capture(
            "<home-page><p>Hi</p></home-page>",
            transparent_tags=["home-page"],
        )

        assert nodes[0].children == [
            SnapshotElement(tag="p", children=[SnapshotText(content="Hi")])
        ]

    def test_capture_single_element(self):
        document = LiveDocument.from_markup("<div><p>a</p><p>b</p></div>")
        div = document.body.element_children[0]

        nodes = SnapshotSerializer().capture(div)

        assert len(nodes) == 1
        assert [c.tag for c in nodes[0].children] == ["p", "p"]

    def test_snapshot_json_round_trip(self):
        nodes = capture('<div class="a"><x-unknown></x-unknown>text</div>')

        restored = Snapshot.model_validate_json(Snapshot(nodes=nodes).model_dump_json()).nodes

        assert restored == nodes


class Widget:
    def __init__(self):
        self.count = 3
        self.enabled = True
        self.ratio = 0.5
        self.label = _Box("hi")
        self.computed = lambda: 5
        self.options = {"a": 1}
        self.items = [1, 2]
        self.broken = _Broken()
        self.nothing = None
        self._private = "secret"

    def describe(self):
        return "class members are not probed"


class _Box:
    def __init__(self, value):
        self.value = value

    def get(self):
        return self.value


class _Broken:
    def get(self):
        raise RuntimeError("not ready")


class TestRuntimeProbe:
    """Reading runtime properties off component instances."""

    def test_capability_chain(self):
        assert probe_runtime_properties(Widget()) == {
            "count": "3",
            "enabled": "true",
            "ratio": "0.5",
            "label": "hi",
            "computed": "5",
        }

    def test_no_instance(self):
        assert probe_runtime_properties(None) == {}

    def test_instance_without_dict(self):
        assert probe_runtime_properties(42) == {}

    def test_transport_of_booleans(self):
        assert to_transport(False) == "false"
        assert to_transport(7) == "7"
