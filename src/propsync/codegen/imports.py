"""
Import statements for generated construction code.
"""

import os
from pathlib import PurePosixPath
from typing import Dict, List, Optional

from propsync.logging_config import logger
from propsync.schemas import ImportRequirement


def relative_import_path(origin_path: str, authored_path: Optional[str]) -> str:
    """
    Express a local origin relative to the authored file's directory.

    Returns:
        A POSIX, dot-prefixed module path ("./button.ts", "../md3/card.ts")
    """
    if not authored_path:
        logger.warning(f"No authored file path; using raw import path '{origin_path}'")
        return origin_path

    relative = os.path.relpath(origin_path, os.path.dirname(os.path.abspath(authored_path)))
    import_path = relative.replace("\\", "/")
    if not import_path.startswith("."):
        import_path = "./" + import_path
    if not PurePosixPath(import_path).suffix:
        import_path += ".ts"
    return import_path


def build_import_statements(
    requirements: List[ImportRequirement],
    shared_module: str,
    authored_path: Optional[str] = None,
) -> List[str]:
    """
    Group requirements into statements: one combined statement for the
    shared module, then one statement per distinct local module, ordered
    by path. Symbols inside a statement are sorted.
    """
    shared: set = set()
    local: Dict[str, set] = {}

    for requirement in requirements:
        if requirement.origin_kind == "shared":
            shared.add(requirement.symbol)
        else:
            path = relative_import_path(requirement.origin_path or "", authored_path)
            local.setdefault(path, set()).add(requirement.symbol)

    statements: List[str] = []
    if shared:
        statements.append(f"import {{ {', '.join(sorted(shared))} }} from '{shared_module}';")
    for path in sorted(local):
        statements.append(f"import {{ {', '.join(sorted(local[path]))} }} from '{path}';")
    return statements
