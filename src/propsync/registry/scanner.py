"""
Discovers custom element definitions in component source files.
"""

import os
import re
from pathlib import Path
from typing import List, Optional, Tuple

import pathspec

from propsync.logging_config import logger
from propsync.registry.registry import ElementRegistry
from propsync.tracing import trace

DEFAULT_EXTENSIONS = [".js", ".ts", ".jsx", ".tsx"]

DEFAULT_IGNORE_PATTERNS = [
    ".git/",
    "node_modules/",
    "dist/",
    "build/",
    "coverage/",
    ".propsync/",
    "*.d.ts",
    "*.test.ts",
    "*.test.js",
]

# customElements.define('tag', ClassName)
_STANDARD_DEFINE_RE = re.compile(r"customElements\.define\s*\(\s*['\"`]([^'\"`]+)['\"`]\s*,\s*(\w+)")
# ClassName.define('tag')
_MIXIN_DEFINE_RE = re.compile(r"(\w+)\.define\s*\(\s*['\"`]([^'\"`]+)['\"`]\s*\)")


def extract_definitions(content: str) -> List[Tuple[str, str]]:
    """
    Find (tag, class name) pairs defined in a source file, in file order.
    """
    found: List[Tuple[int, str, str]] = []
    for match in _STANDARD_DEFINE_RE.finditer(content):
        found.append((match.start(), match.group(1), match.group(2)))
    for match in _MIXIN_DEFINE_RE.finditer(content):
        if match.group(1) == "customElements":
            continue
        found.append((match.start(), match.group(2), match.group(1)))
    found.sort()
    return [(tag.lower(), symbol) for _, tag, symbol in found if "-" in tag]


class CustomElementScanner:
    """
    Walks component directories and registers every custom element
    definition it finds into an ElementRegistry.
    """

    def __init__(
        self,
        registry: Optional[ElementRegistry] = None,
        extensions: Optional[List[str]] = None,
        respect_gitignore: bool = True,
    ):
        self.registry = registry or ElementRegistry()
        self.extensions = set(extensions or DEFAULT_EXTENSIONS)
        self.respect_gitignore = respect_gitignore

    def _ignore_spec(self, directory: Path) -> pathspec.PathSpec:
        all_patterns = list(DEFAULT_IGNORE_PATTERNS)
        if self.respect_gitignore:
            gitignore_path = directory / ".gitignore"
            if gitignore_path.is_file():
                try:
                    with open(gitignore_path, "r", encoding="utf-8") as f:
                        gitignore_patterns = f.read().splitlines()
                    all_patterns.extend(gitignore_patterns)
                    logger.debug(f"Loaded {len(gitignore_patterns)} patterns from '{gitignore_path}'")
                except OSError as e:
                    logger.warning(f"Could not read .gitignore at '{gitignore_path}': {e}")
        return pathspec.PathSpec.from_lines("gitignore", all_patterns)

    def iter_files(self, directory: Path) -> List[Path]:
        spec = self._ignore_spec(directory)
        found: List[Path] = []

        for root, dirs, files in os.walk(directory):
            root_path = Path(root)

            # Prune ignored directories in place so os.walk skips them
            kept = []
            for d in sorted(dirs):
                relative_dir = (root_path / d).relative_to(directory).as_posix() + "/"
                if spec.match_file(relative_dir):
                    logger.debug(f"Ignoring directory '{relative_dir}'")
                else:
                    kept.append(d)
            dirs[:] = kept

            for file_name in sorted(files):
                file_path = root_path / file_name
                relative_path = file_path.relative_to(directory).as_posix()
                if spec.match_file(relative_path):
                    continue
                if file_path.suffix not in self.extensions:
                    continue
                found.append(file_path)
        return found

    @trace
    def scan(self, directory: Path) -> ElementRegistry:
        """
        Scan a directory tree and register the custom elements it defines.

        Returns:
            The registry that was filled
        """
        directory = Path(directory)
        if not directory.is_dir():
            logger.warning(f"Component directory '{directory}' does not exist")
            return self.registry

        logger.info(f"Scanning '{directory}' for custom elements")
        registered = 0
        for file_path in self.iter_files(directory):
            try:
                content = file_path.read_text(encoding="utf-8", errors="ignore")
            except OSError as e:
                logger.warning(f"Could not read '{file_path}'. Skipping. Error: {e}")
                continue

            for tag, symbol in extract_definitions(content):
                if self.registry.register(tag, symbol, file_path.resolve()):
                    registered += 1
                    logger.debug(f"Registered <{tag}> as {symbol} from '{file_path}'")

        logger.info(f"Scan complete. Registered {registered} custom elements")
        return self.registry
