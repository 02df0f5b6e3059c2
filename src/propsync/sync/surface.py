"""
RenderSurface: hosts the Clean view and reports when a full-content
replacement has finished loading.
"""

import asyncio
from typing import Callable, Dict, List, Optional

from propsync.dom.nodes import ComponentFactory, LiveDocument
from propsync.logging_config import logger


class RenderSurface:
    """
    The isolated render of the authored page.

    Custom elements initialize after the load signal, the way they do in a
    freshly loaded frame, so anything that inspects the tree after a
    replacement has to wait for wait_loaded().
    """

    def __init__(self, definitions: Optional[Dict[str, ComponentFactory]] = None):
        self.definitions: Dict[str, ComponentFactory] = dict(definitions or {})
        self.document = LiveDocument(self.definitions)
        self._generation = 0
        self._loaded = asyncio.Event()
        self._load_listeners: List[Callable[[LiveDocument], None]] = []

    def add_load_listener(self, listener: Callable[[LiveDocument], None]) -> None:
        self._load_listeners.append(listener)

    @property
    def is_loaded(self) -> bool:
        return self._loaded.is_set()

    def replace_content(self, markup: str) -> LiveDocument:
        """
        Install a fresh document built from markup. Must run on the event
        loop; the load signal fires on a later iteration.
        """
        loop = asyncio.get_running_loop()
        self._generation += 1
        generation = self._generation

        document = LiveDocument.from_markup(markup, self.definitions, upgrade=False)
        self.document = document
        self._loaded = asyncio.Event()
        loop.call_soon(self._finish_load, generation, document, self._loaded)
        logger.debug(f"Render surface replaced content (load #{generation})")
        return document

    def _finish_load(self, generation: int, document: LiveDocument, loaded: asyncio.Event) -> None:
        # A newer replacement supersedes this one; it never signals
        if generation != self._generation:
            logger.debug(f"Dropping superseded load #{generation}")
            return
        upgraded = document.upgrade(document.body)
        loaded.set()
        logger.debug(f"Render surface load #{generation} complete, {upgraded} custom elements upgraded")
        for listener in list(self._load_listeners):
            listener(document)

    async def wait_loaded(self, timeout: Optional[float] = None) -> LiveDocument:
        """
        Wait for the current load to complete.

        Raises:
            asyncio.TimeoutError: If the signal does not arrive in time
        """
        await asyncio.wait_for(self._loaded.wait(), timeout)
        return self.document
