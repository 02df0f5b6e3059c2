"""
SourceSynchronizer: Clean tree -> snapshot -> generated code -> patched source.
"""

from typing import Any, Callable, Dict, List, Optional, Union

from propsync.codegen.generator import CodeGenerator
from propsync.codegen.markup import MarkupGenerator, is_markup_source
from propsync.config import SYNC_CONFIG
from propsync.dom.nodes import LiveDocument, LiveElement
from propsync.logging_config import logger
from propsync.parser.typescript_parser import TypeScriptSourceParser
from propsync.patcher.patcher import MarkupPatcher, SourcePatcher
from propsync.registry.registry import ElementRegistry
from propsync.schemas import GeneratedCode, PatchResult, SnapshotNode
from propsync.snapshot.serializer import SnapshotSerializer
from propsync.tracing import trace


class SourceSynchronizer:
    """
    One synchronization pass, as a function of the current Clean tree.

    The authoring component's symbol and tag are read from the source on
    every pass, so renaming the class or its tag needs no extra wiring.
    """

    def __init__(
        self,
        registry: ElementRegistry,
        parser: Optional[TypeScriptSourceParser] = None,
        config: Optional[Dict[str, Any]] = None,
        authored_path: Optional[str] = None,
    ):
        self.config = {**SYNC_CONFIG, **(config or {})}
        self.registry = registry
        self.parser = parser or TypeScriptSourceParser(self.config["component_base_prefix"])
        self.generator = CodeGenerator(registry, self.config)
        self.patcher = SourcePatcher(self.config, parser=self.parser)
        self.authored_path = authored_path
        self.dialect = "tsx" if authored_path and authored_path.endswith((".tsx", ".jsx")) else "typescript"
        # Plain HTML pages are their own markup: body content, no imports
        self.markup_style = is_markup_source(authored_path)
        self.markup_generator = MarkupGenerator(self.config)
        self.markup_patcher = MarkupPatcher(self.config)

        self.component_tag: Optional[str] = None
        self.last_snapshot: List[SnapshotNode] = []
        self.last_generated: Optional[GeneratedCode] = None

    def capture(self, clean_root: Union[LiveDocument, LiveElement]) -> List[SnapshotNode]:
        """Snapshot the Clean tree, traversing into the authoring component's own tag."""
        tags = [self.component_tag] if self.component_tag else []
        return SnapshotSerializer(self.config, transparent_tags=tags).capture(clean_root)

    @trace
    def synchronize(self, source_text: str, clean_root: Union[LiveDocument, LiveElement]) -> PatchResult:
        """
        Regenerate the machine-owned regions of `source_text` from the
        Clean tree.

        Never raises: any failure yields a PatchResult carrying the
        original text.
        """
        return self._run(source_text, lambda: self.capture(clean_root))

    @trace
    def synchronize_snapshot(self, source_text: str, nodes: List[SnapshotNode]) -> PatchResult:
        """Same as synchronize(), from an already captured snapshot."""
        return self._run(source_text, lambda: list(nodes))

    def _run(self, source_text: str, take_snapshot: Callable[[], List[SnapshotNode]]) -> PatchResult:
        try:
            if self.markup_style:
                self.component_tag = None
                self.last_snapshot = take_snapshot()
                self.last_generated = self.markup_generator.generate(self.last_snapshot)
                return self.markup_patcher.patch(source_text, self.last_generated.body_lines)

            tree = self.parser.parse(source_text, self.dialect, self.authored_path or "<source>")
            symbol = tree.component_symbol()
            tag = tree.defined_tag(symbol)
            self.component_tag = tag
            if symbol is None:
                logger.warning("No component class found in source; self-reference guard disabled")

            self.last_snapshot = take_snapshot()
            self.last_generated = self.generator.generate(
                self.last_snapshot,
                component_symbol=symbol,
                authored_path=self.authored_path,
                component_tag=tag,
            )
            return self.patcher.patch(
                source_text,
                tree,
                self.last_generated.imports,
                self.last_generated.body_lines,
            )
        except Exception as e:
            logger.error(f"Synchronization failed with {type(e).__name__}: {e}")
            return PatchResult(success=False, source=source_text, errors=[f"{type(e).__name__}: {e}"])

    def regenerate_source(self, source_text: str, clean_root: Union[LiveDocument, LiveElement]) -> str:
        """Updated source text, or `source_text` unchanged when the pass fails."""
        return self.synchronize(source_text, clean_root).source
