"""
Source Patcher: rewrites only the machine-owned regions of an authored
component file (generated imports and the render body).

Patching is all-or-nothing. Any failure returns the original text
untouched together with the reasons.
"""

from typing import Any, Dict, List, Optional, Tuple

from propsync.config import SYNC_CONFIG
from propsync.exceptions import AnchorNotFoundError, ParserError
from propsync.logging_config import logger
from propsync.parser.typescript_parser import SourceTree, TypeScriptSourceParser
from propsync.patcher.boundary import (
    BodyRenderBoundary,
    RenderBoundary,
    TextualRenderBoundary,
    detect_line_ending,
)
from propsync.schemas import ImportStatement, PatchResult


def _is_comment_line(stripped: str) -> bool:
    return stripped.startswith("//") or stripped.startswith("/*") or stripped.startswith("*")


class SourcePatcher:
    """
    Replace generated imports and the render body of a source document.

    Generated imports are recognized structurally: named-only import
    statements whose module is not a preserved module. Type-only, default
    and namespace imports are never touched.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        boundary: Optional[RenderBoundary] = None,
        parser: Optional[TypeScriptSourceParser] = None,
    ):
        self.config = {**SYNC_CONFIG, **(config or {})}
        self.boundary = boundary or TextualRenderBoundary(
            self.config["render_open_marker"],
            self.config["render_close_marker"],
        )
        self.parser = parser
        self.preserved_modules = set(self.config.get("preserved_modules") or [])
        self.preserved_modules.add(self.config["mixin_module"])

    def is_generated_import(self, statement: ImportStatement) -> bool:
        return (
            bool(statement.named)
            and not statement.type_only
            and statement.default_name is None
            and statement.namespace_name is None
            and statement.module not in self.preserved_modules
        )

    def patch(
        self,
        source: str,
        tree: Optional[SourceTree],
        imports: List[str],
        body_lines: List[str],
    ) -> PatchResult:
        """
        Apply generated imports and body lines to a source document.

        Args:
            source: Original source text
            tree: Parsed form of `source`
            imports: Generated import statements
            body_lines: Generated body lines at relative indentation

        Returns:
            PatchResult; on failure `source` is the untouched original
        """
        try:
            if tree is None:
                if self.parser is None:
                    raise ParserError("<source>", "no syntax tree and no parser available")
                tree = self.parser.parse(source)

            # Fail before editing anything if the render body cannot be found
            self.boundary.locate(source)

            patched, removed = self._remove_generated_imports(source, tree)
            patched = self._insert_imports(patched, imports)
            patched = self.boundary.replace(patched, body_lines, self.config["indent_unit"])
        except AnchorNotFoundError as e:
            logger.warning(f"Source left unchanged: {e}")
            return PatchResult(success=False, source=source, errors=[str(e)])
        except Exception as e:
            logger.error(f"Source left unchanged after {type(e).__name__}: {e}")
            return PatchResult(success=False, source=source, errors=[f"{type(e).__name__}: {e}"])

        errors = self._check_syntax(tree, patched)
        if errors:
            logger.warning(f"Rejected patch that introduces {len(errors)} syntax errors")
            return PatchResult(success=False, source=source, errors=errors)

        return PatchResult(
            success=True,
            source=patched,
            removed_imports=removed,
            added_imports=list(imports),
        )

    def _check_syntax(self, original: SourceTree, patched: str) -> List[str]:
        if self.parser is None or not self.config.get("reject_new_syntax_errors", True):
            return []
        try:
            patched_tree = self.parser.parse(patched, original.dialect)
        except ParserError as e:
            return [str(e)]
        if len(patched_tree.error_nodes()) > len(original.error_nodes()):
            return patched_tree.error_messages()
        return []

    def _remove_generated_imports(self, source: str, tree: SourceTree) -> Tuple[str, List[str]]:
        generated = [s for s in tree.import_statements() if self.is_generated_import(s)]
        removed: List[str] = []
        text = source

        for statement in sorted(generated, key=lambda s: s.start_offset, reverse=True):
            start, end = statement.start_offset, statement.end_offset
            line_start = text.rfind("\n", 0, start) + 1
            line_end = text.find("\n", end)
            if line_end == -1:
                line_end = len(text)

            owns_lines = not text[line_start:start].strip() and not text[end:line_end].strip()
            if not owns_lines:
                text = text[:start] + text[end:]
                removed.append(statement.text)
                continue

            text = text[:line_start] + text[line_end + 1:]
            removed.append(statement.text)
            text = self._drop_dangling_blank(text, line_start)

        removed.reverse()
        return text, removed

    @staticmethod
    def _drop_dangling_blank(text: str, position: int) -> str:
        """
        Remove the blank line at `position` when it sits at the start of the
        file or directly after another blank line.
        """
        line_end = text.find("\n", position)
        if line_end == -1 or text[position:line_end].strip():
            return text
        previous_start = text.rfind("\n", 0, max(position - 1, 0)) + 1
        at_start = position == 0
        after_blank = not at_start and not text[previous_start:position].strip()
        if at_start or after_blank:
            return text[:position] + text[line_end + 1:]
        return text

    def find_import_insertion_point(self, text: str) -> int:
        """
        Offset of the first line that is not blank, a comment, or a
        default import.
        """
        offset = 0
        for line in text.splitlines(keepends=True):
            stripped = line.strip()
            skippable = (
                not stripped
                or _is_comment_line(stripped)
                or (stripped.startswith("import ") and "{" not in stripped)
            )
            if not skippable:
                return offset
            offset += len(line)
        return offset

    def _insert_imports(self, text: str, imports: List[str]) -> str:
        if not imports:
            return text

        newline = detect_line_ending(text)
        point = self.find_import_insertion_point(text)
        if point == len(text) and text and not text.endswith("\n"):
            text += newline
            point = len(text)

        block = newline.join(imports) + newline
        following = text[point:].split("\n", 1)[0]
        if following.strip():
            block += newline
        return text[:point] + block + text[point:]


class MarkupPatcher:
    """
    Replace the body content of a plain HTML page.

    Pages carry no generated imports. A patch is rejected when the
    patched page no longer has a locatable body.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        boundary: Optional[RenderBoundary] = None,
    ):
        self.config = {**SYNC_CONFIG, **(config or {})}
        self.boundary = boundary or BodyRenderBoundary()

    def patch(self, source: str, body_lines: List[str]) -> PatchResult:
        try:
            self.boundary.locate(source)
            patched = self.boundary.replace(source, body_lines, self.config["indent_unit"])
            self.boundary.locate(patched)
        except AnchorNotFoundError as e:
            logger.warning(f"Page left unchanged: {e}")
            return PatchResult(success=False, source=source, errors=[str(e)])
        except Exception as e:
            logger.error(f"Page left unchanged after {type(e).__name__}: {e}")
            return PatchResult(success=False, source=source, errors=[f"{type(e).__name__}: {e}"])

        return PatchResult(success=True, source=patched)
