"""
propsync - Visual-edit-to-source synchronization engine

Keeps an interactive Overlay view and a Clean render of a component in
lockstep and writes structural edits back into the authored source.
"""

__version__ = "0.3.0"

# Core exports
from propsync.schemas import (
    BroadcastPayload,
    EditResult,
    GeneratedCode,
    PatchResult,
    SnapshotElement,
    SnapshotText,
    StructuralEdit,
)
from propsync.registry import CustomElementScanner, ElementRegistry
from propsync.snapshot import SnapshotSerializer
from propsync.codegen import CodeGenerator
from propsync.patcher import SourcePatcher
from propsync.adapter import DualView
from propsync.sync import EditingSession, SourceSynchronizer

__all__ = [
    "__version__",
    "BroadcastPayload",
    "EditResult",
    "GeneratedCode",
    "PatchResult",
    "SnapshotElement",
    "SnapshotText",
    "StructuralEdit",
    "CustomElementScanner",
    "ElementRegistry",
    "SnapshotSerializer",
    "CodeGenerator",
    "SourcePatcher",
    "DualView",
    "EditingSession",
    "SourceSynchronizer",
]
