"""
EditingSession: the surface the host editor talks to.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from propsync.adapter.dual_view import DualView
from propsync.config import get_sync_config
from propsync.dom.nodes import ComponentFactory, LiveDocument
from propsync.logging_config import logger
from propsync.parser.typescript_parser import TypeScriptSourceParser
from propsync.registry.registry import ElementRegistry
from propsync.schemas import BroadcastPayload, EditResult, StructuralEdit
from propsync.sync.pipeline import SourceSynchronizer
from propsync.sync.scheduler import Observer, SyncScheduler
from propsync.sync.surface import RenderSurface


class EditingSession:
    """
    One authored component file being edited visually.

    Usage:
        session = EditingSession(source, registry, definitions, authored_path="src/home.ts")
        await session.load(markup)
        await session.apply_structural_edit("div > button", "delete")
        session.source_text  # updated source
    """

    def __init__(
        self,
        source_text: str,
        registry: Optional[ElementRegistry] = None,
        definitions: Optional[Dict[str, ComponentFactory]] = None,
        authored_path: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        parser: Optional[TypeScriptSourceParser] = None,
    ):
        if config is None:
            project_root = Path(authored_path).resolve().parent if authored_path else None
            config = get_sync_config(project_root)
        self.config = config
        self.registry = registry or ElementRegistry(config["shared_module"])

        self.surface = RenderSurface(definitions)
        self.view = DualView(LiveDocument(self.surface.definitions), self.surface.document)
        self.synchronizer = SourceSynchronizer(self.registry, parser, config, authored_path)
        self.scheduler = SyncScheduler(self.view, self.surface, self.synchronizer, source_text, config)

    @property
    def source_text(self) -> str:
        return self.scheduler.source_text

    @property
    def selection(self) -> Optional[str]:
        return self.scheduler.selection

    @property
    def last_payload(self) -> Optional[BroadcastPayload]:
        return self.scheduler.last_payload

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        return self.scheduler.subscribe(observer)

    async def load(self, markup: str) -> BroadcastPayload:
        """Full-content load of both views."""
        return await self.scheduler.reload(markup)

    async def edit(self, edit: StructuralEdit) -> EditResult:
        return await self.scheduler.apply(edit)

    async def apply_structural_edit(
        self,
        locator: str,
        operation: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Apply one structural edit to both views and resynchronize the source.

        Args:
            locator: Locator of the element to edit
            operation: insert_before, insert_after, insert_inside, delete,
                duplicate, move or update
            payload: Operation arguments (markup, target, position, name, value)

        Returns:
            True if the edit was applied to both views
        """
        try:
            edit = StructuralEdit(operation=operation, locator=locator, **(payload or {}))
        except (ValidationError, TypeError) as e:
            logger.warning(f"Invalid structural edit '{operation}' at '{locator}': {e}")
            return False
        result = await self.edit(edit)
        return result.success

    def regenerate_source(self, source_text: str) -> str:
        """Regenerate from the current Clean tree. Never raises."""
        return self.synchronizer.regenerate_source(source_text, self.view.clean.document)

    async def select(self, locator: Optional[str]) -> BroadcastPayload:
        return await self.scheduler.select(locator)

    async def hover(self, locator: Optional[str]) -> BroadcastPayload:
        return await self.scheduler.hover(locator)
