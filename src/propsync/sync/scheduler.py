"""
SyncScheduler: sequences edits, reloads, synchronization and broadcasts on
one asyncio event loop.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

from propsync.adapter.dual_view import DualView
from propsync.config import DECORATION, SYNC_CONFIG
from propsync.dom.decoration import set_marker
from propsync.dom.locator import locator_for, resolve
from propsync.dom.nodes import LiveDocument, LiveNode
from propsync.exceptions import LocatorError
from propsync.logging_config import logger
from propsync.schemas import BroadcastPayload, EditResult, StructuralEdit
from propsync.snapshot.probe import probe_runtime_properties
from propsync.sync.pipeline import SourceSynchronizer
from propsync.sync.surface import RenderSurface

Observer = Callable[[BroadcastPayload], None]


class SyncScheduler:
    """
    Serializes every operation behind one asyncio.Lock.

    An operation is accepted only after the previous one has completed;
    there is no queue beyond the lock's waiters and no cancellation.
    """

    def __init__(
        self,
        view: DualView,
        surface: RenderSurface,
        synchronizer: SourceSynchronizer,
        source_text: str = "",
        config: Optional[Dict[str, Any]] = None,
    ):
        self.config = {**SYNC_CONFIG, **(config or {})}
        self.view = view
        self.surface = surface
        self.synchronizer = synchronizer
        self.source_text = source_text

        self.selection: Optional[str] = None
        self.hovered: Optional[str] = None
        self.last_payload: Optional[BroadcastPayload] = None

        self._lock = asyncio.Lock()
        self._observers: List[Observer] = []
        self._debounce_handle: Optional[asyncio.TimerHandle] = None
        self.sync_passes = 0

    # Observers

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer panel. Returns a function that unsubscribes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _broadcast(self, payload: BroadcastPayload) -> None:
        self.last_payload = payload
        for observer in list(self._observers):
            try:
                observer(payload)
            except Exception as e:
                logger.error(f"Observer {observer!r} failed: {type(e).__name__}: {e}")

    # Overlay behaviors

    def on_overlay_change(self, added: List[LiveNode]) -> None:
        """Coalesce structural-change notifications before re-attaching behaviors."""
        loop = asyncio.get_running_loop()
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        self._debounce_handle = loop.call_later(self.config["debounce_seconds"], self._attach_behaviors)

    def _attach_behaviors(self) -> None:
        self._debounce_handle = None
        count = self.view.attach_behaviors()
        if count:
            logger.debug(f"Attached behaviors to {count} overlay elements")

    @property
    def behaviors_pending(self) -> bool:
        return self._debounce_handle is not None

    # Operations

    async def reload(self, markup: str) -> BroadcastPayload:
        """
        Replace both views wholesale. Capture waits for the render surface
        load signal plus the settle delay, so self-rendering custom
        elements are complete.
        """
        async with self._lock:
            overlay = LiveDocument.from_markup(markup, self.surface.definitions)
            overlay.add_listener(self.on_overlay_change)

            self.surface.replace_content(markup)
            try:
                await self.surface.wait_loaded(self.config["load_timeout_seconds"])
            except asyncio.TimeoutError:
                # The surface already shows the new content; keep both views on it
                logger.error("Render surface did not signal load completion")
                self.view.reload(overlay, self.surface.document)
                self.selection = None
                self.hovered = None
                payload = self._payload(error="Render surface did not finish loading")
                self._broadcast(payload)
                return payload
            await asyncio.sleep(self.config["settle_seconds"])

            self.view.reload(overlay, self.surface.document)
            self.view.attach_behaviors()
            self.selection = None
            self.hovered = None
            return self._synchronize_and_broadcast()

    async def apply(self, edit: StructuralEdit) -> EditResult:
        async with self._lock:
            result = self.view.apply(edit)
            if not result.success:
                self._broadcast(self._payload(error="; ".join(result.errors)))
                return result

            self.selection = result.selection
            self._synchronize_and_broadcast()
            return result

    async def select(self, locator: Optional[str]) -> BroadcastPayload:
        async with self._lock:
            self.selection = locator
            payload = self._payload()
            self._broadcast(payload)
            return payload

    async def hover(self, locator: Optional[str]) -> BroadcastPayload:
        async with self._lock:
            self.hovered = locator
            payload = self._payload()
            self._broadcast(payload)
            return payload

    def _synchronize_and_broadcast(self) -> BroadcastPayload:
        self.sync_passes += 1
        with logger.contextualize(sync_pass=self.sync_passes):
            logger.trace(f"Sync pass {self.sync_passes} started")
            result = self.synchronizer.synchronize(self.source_text, self.view.clean.document)
            error = None
            if result.success:
                self.source_text = result.source
            else:
                error = "; ".join(result.errors) or "Source could not be updated"
            logger.trace(
                f"Sync pass {self.sync_passes} finished: success={result.success}, "
                f"added_imports={len(result.added_imports)}, removed_imports={len(result.removed_imports)}"
            )
        payload = self._payload(error=error)
        self._broadcast(payload)
        return payload

    # Payload

    def _decorated_markup(self) -> str:
        """Clean markup with transient selection/hover markers on a throwaway clone."""
        clone = self.view.clean.document.body.clone()
        for locator, marker in (
            (self.selection, DECORATION["selected_marker"]),
            (self.hovered, DECORATION["hovered_marker"]),
        ):
            if not locator:
                continue
            try:
                target = resolve(clone, locator)
            except LocatorError:
                target = None
            if target is not None and target is not clone:
                set_marker(target, marker)
        return clone.inner_html()

    def _runtime_properties(self) -> Dict[str, Dict[str, str]]:
        properties: Dict[str, Dict[str, str]] = {}
        for element in self.view.clean.document.body.iter():
            if element.instance is None:
                continue
            values = probe_runtime_properties(element.instance)
            if values:
                properties[str(locator_for(element))] = values
        return properties

    def _payload(self, error: Optional[str] = None) -> BroadcastPayload:
        return BroadcastPayload(
            decorated_tree_markup=self._decorated_markup(),
            snapshot=self.synchronizer.capture(self.view.clean.document),
            runtime_properties=self._runtime_properties(),
            source=self.source_text,
            error=error,
        )
