"""
SourceWriter: atomic writes of patched component files.
"""

import difflib
import os
import tempfile
from pathlib import Path
from typing import List

from propsync.logging_config import logger


class SourceWriter:
    """
    Write patched sources back to disk.

    Features:
    - Atomic writes (temp file + rename)
    - Line ending preservation (LF/CRLF)
    - Unified diff previews
    """

    def read(self, file_path: Path) -> str:
        # newline="" keeps CRLF intact so patching sees the real line endings
        with open(file_path, "r", encoding="utf-8", newline="") as f:
            return f.read()

    def write(self, file_path: Path, original_content: str, modified_content: str) -> bool:
        """
        Write `modified_content` with the line endings of `original_content`.

        Returns:
            True if successful
        """
        line_ending = self._detect_line_ending(original_content)
        content = self._normalize_line_endings(modified_content, line_ending)
        success = self._atomic_write(Path(file_path), content)
        if success:
            logger.info(f"Wrote {file_path}")
        else:
            logger.error(f"Failed to write changes to {file_path}")
        return success

    def _atomic_write(self, path: Path, content: str) -> bool:
        try:
            # Temp file in the target directory keeps the rename on one filesystem
            fd, temp_path = tempfile.mkstemp(
                dir=str(path.parent),
                prefix=f".{path.name}.",
                suffix=".tmp"
            )
        except OSError as e:
            logger.error(f"Could not create temp file next to {path}: {e}")
            return False

        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(temp_path, str(path))
            logger.debug(f"Atomic write completed: {path}")
            return True
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            logger.error(f"Failed during atomic write: {e}")
            return False

    @staticmethod
    def _detect_line_ending(content: str) -> str:
        if "\r\n" in content:
            return "\r\n"
        return "\n"

    @staticmethod
    def _normalize_line_endings(content: str, line_ending: str) -> str:
        content = content.replace("\r\n", "\n")
        if line_ending == "\r\n":
            content = content.replace("\n", "\r\n")
        return content

    def unified_diff(
        self,
        file_path: str,
        original_content: str,
        modified_content: str,
        max_diff_lines: int = 200
    ) -> str:
        """
        Unified diff between original and modified content, truncated after
        `max_diff_lines` lines.
        """
        diff_lines: List[str] = list(difflib.unified_diff(
            original_content.splitlines(keepends=True),
            modified_content.splitlines(keepends=True),
            fromfile=f"a/{file_path}",
            tofile=f"b/{file_path}",
        ))
        if len(diff_lines) > max_diff_lines:
            hidden = len(diff_lines) - max_diff_lines
            diff_lines = diff_lines[:max_diff_lines] + [f"\n[... {hidden} diff lines truncated ...]\n"]
        return "".join(diff_lines)
