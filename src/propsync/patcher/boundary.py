"""
Render boundary strategies: where the regenerable construction body lives
inside an authored source document.
"""

import re
from abc import ABC, abstractmethod
from typing import List, Tuple

from propsync.config import SYNC_CONFIG
from propsync.exceptions import AnchorNotFoundError


def detect_line_ending(content: str) -> str:
    return "\r\n" if "\r\n" in content else "\n"


def line_indent(source: str, offset: int) -> str:
    """Leading whitespace of the line containing `offset`."""
    line_start = source.rfind("\n", 0, offset) + 1
    prefix = source[line_start:offset]
    return prefix[: len(prefix) - len(prefix.lstrip())]


class RenderBoundary(ABC):
    """Locates and rewrites the render body of a source document."""

    @abstractmethod
    def locate(self, source: str) -> Tuple[int, int]:
        """
        Returns:
            (start, end) character offsets of the whole boundary region

        Raises:
            AnchorNotFoundError: If the boundary cannot be found
        """

    @abstractmethod
    def replace(self, source: str, body_lines: List[str], indent_unit: str) -> str:
        """Return `source` with the boundary region holding `body_lines`."""


class TextualRenderBoundary(RenderBoundary):
    """
    Literal scan for an opening marker and the first closing marker after it.

    Render bodies reshaped by hand into anything other than a returned list
    are not recognized; the patch then fails and the source is left alone.
    """

    def __init__(
        self,
        open_marker: str = SYNC_CONFIG["render_open_marker"],
        close_marker: str = SYNC_CONFIG["render_close_marker"],
    ):
        self.open_marker = open_marker
        self.close_marker = close_marker

    def locate(self, source: str) -> Tuple[int, int]:
        start = source.find(self.open_marker)
        if start == -1:
            raise AnchorNotFoundError(self.open_marker, "render body opening not found")
        close = source.find(self.close_marker, start + len(self.open_marker))
        if close == -1:
            raise AnchorNotFoundError(self.close_marker, "render body is never closed")
        return start, close + len(self.close_marker)

    def replace(self, source: str, body_lines: List[str], indent_unit: str) -> str:
        start, end = self.locate(source)
        newline = detect_line_ending(source)

        base_indent = line_indent(source, start)

        if not body_lines:
            replacement = self.open_marker + self.close_marker
        else:
            indented = [
                (base_indent + indent_unit + line) if line else line
                for line in body_lines
            ]
            replacement = newline.join(
                [self.open_marker] + indented + [base_indent + self.close_marker]
            )
        return source[:start] + replacement + source[end:]


class BodyRenderBoundary(RenderBoundary):
    """
    The children of `<body>` in a plain HTML page. The body tag itself,
    attributes included, is kept as written.
    """

    OPEN_RE = re.compile(r"<body\b[^>]*>", re.IGNORECASE)
    CLOSE_RE = re.compile(r"</body\s*>", re.IGNORECASE)

    def _match(self, source: str) -> Tuple["re.Match", "re.Match"]:
        opening = self.OPEN_RE.search(source)
        if opening is None:
            raise AnchorNotFoundError("<body>", "page has no body element")
        closings = list(self.CLOSE_RE.finditer(source, opening.end()))
        if not closings:
            raise AnchorNotFoundError("</body>", "body element is never closed")
        return opening, closings[-1]

    def locate(self, source: str) -> Tuple[int, int]:
        opening, closing = self._match(source)
        return opening.start(), closing.end()

    def replace(self, source: str, body_lines: List[str], indent_unit: str) -> str:
        opening, closing = self._match(source)
        newline = detect_line_ending(source)
        base_indent = line_indent(source, opening.start())

        if not body_lines:
            replacement = opening.group(0) + closing.group(0)
        else:
            indented = [
                (base_indent + indent_unit + line) if line else line
                for line in body_lines
            ]
            replacement = newline.join(
                [opening.group(0)] + indented + [base_indent + closing.group(0)]
            )
        return source[:opening.start()] + replacement + source[closing.end():]
