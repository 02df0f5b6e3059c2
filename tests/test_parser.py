"""
Tests for the tree-sitter source parser: imports, component metadata and
syntax errors.
"""

import pytest

from propsync.exceptions import ParserError

pytestmark = pytest.mark.fast

IMPORTS_SOURCE = """// héllo wörld
import HTMLProps from '@html-props/core';
import { Div, Span as S } from '@html-props/built-ins';
import type { Props } from './types.ts';
import * as util from './util.ts';
import './side-effect.ts';
import Default, { Named } from './mixed.ts';

export const x = 1;
"""


class TestImportStatements:
    """Structural view of top-level imports."""

    def test_import_kinds(self, ts_parser):
        statements = ts_parser.parse(IMPORTS_SOURCE).import_statements()

        assert [s.module for s in statements] == [
            "@html-props/core",
            "@html-props/built-ins",
            "./types.ts",
            "./util.ts",
            "./side-effect.ts",
            "./mixed.ts",
        ]
        core, builtins, types, util, side_effect, mixed = statements

        assert core.default_name == "HTMLProps" and core.named == []
        assert builtins.named == ["Div", "Span"]
        assert types.type_only is True and types.named == ["Props"]
        assert util.namespace_name == "util"
        assert side_effect.named == [] and side_effect.default_name is None
        assert mixed.default_name == "Default" and mixed.named == ["Named"]

    def test_offsets_are_character_offsets(self, ts_parser):
        """Offsets index the str even after non-ASCII text."""
        statements = ts_parser.parse(IMPORTS_SOURCE).import_statements()

        for statement in statements:
            assert IMPORTS_SOURCE[statement.start_offset:statement.end_offset] == statement.text

    def test_line_numbers(self, ts_parser):
        statements = ts_parser.parse(IMPORTS_SOURCE).import_statements()

        assert statements[0].start_line == 1
        assert statements[1].end_line == 2


class TestComponentMetadata:
    """Component class and defined tag."""

    def test_component_symbol_and_tag(self, ts_parser, component_source):
        tree = ts_parser.parse(component_source)

        assert tree.component_symbol() == "HomePage"
        assert tree.defined_tag("HomePage") == "home-page"

    def test_exported_component(self, ts_parser):
        source = (
            "export class Card extends HTMLPropsMixin(HTMLElement) {\n"
            "  render() { return []; }\n"
            "}\n"
            "customElements.define('x-card', Card);\n"
        )
        tree = ts_parser.parse(source)

        assert tree.component_symbol() == "Card"
        assert tree.defined_tag("Card") == "x-card"
        assert tree.defined_tag("Other") is None

    def test_plain_class_is_not_a_component(self, ts_parser):
        tree = ts_parser.parse("class Helper extends Base {}\n")

        assert tree.component_symbol() is None
        assert tree.defined_tag() is None


class TestSyntaxErrors:
    """Error node detection."""

    def test_valid_source(self, ts_parser, component_source):
        assert ts_parser.parse(component_source).has_errors is False

    def test_broken_source(self, ts_parser):
        tree = ts_parser.parse("class Broken {\n  render() {\n    return [\n")

        assert tree.has_errors is True
        assert tree.error_messages()[0].startswith("Syntax error at line")

    def test_tsx_dialect(self, ts_parser):
        tree = ts_parser.parse("const a = <div>hi</div>;\n", dialect="tsx")

        assert tree.has_errors is False
        assert tree.dialect == "tsx"

    def test_unknown_dialect(self, ts_parser):
        with pytest.raises(ParserError):
            ts_parser.parse("const a = 1;", dialect="cobol")

    def test_parse_file(self, ts_parser, temp_dir, component_source):
        path = temp_dir / "home.ts"
        path.write_text(component_source, encoding="utf-8")

        assert ts_parser.parse_file(path).component_symbol() == "HomePage"

    def test_parse_missing_file(self, ts_parser, temp_dir):
        with pytest.raises(ParserError):
            ts_parser.parse_file(temp_dir / "missing.ts")
