"""
DualView: keeps the Overlay and Clean trees in lockstep.
"""

from typing import List, Optional

from propsync.adapter.tree_adapter import TreeAdapter
from propsync.dom.decoration import clean_attributes
from propsync.dom.locator import find_matching, locator_for
from propsync.dom.nodes import LiveDocument, LiveElement
from propsync.exceptions import StructuralEditError
from propsync.logging_config import logger
from propsync.schemas import EditResult, StructuralEdit


class DualView:
    """
    Routes every structural edit through one TreeAdapter call per view.

    Both trees are checked before either is touched, so a locator that
    fails in one view leaves both views unchanged. An edit that fails
    while being applied is rolled back in both views.
    """

    def __init__(self, overlay: LiveDocument, clean: LiveDocument):
        self.overlay = TreeAdapter(overlay, decorated=True)
        self.clean = TreeAdapter(clean)

    def reload(self, overlay: LiveDocument, clean: LiveDocument) -> None:
        """Swap in freshly built trees after a full-content replacement."""
        self.overlay = TreeAdapter(overlay, decorated=True)
        self.clean = TreeAdapter(clean)

    def apply(self, edit: StructuralEdit) -> EditResult:
        errors = self.overlay.check(edit) + self.clean.check(edit)
        if errors:
            logger.warning(f"Rejected {edit.operation} at '{edit.locator}': {'; '.join(errors)}")
            return EditResult(success=False, operation=edit.operation, locator=edit.locator, errors=errors)

        # Identity of the moved node, in case the Clean view hands back no reference
        moved_tag: Optional[str] = None
        moved_attributes = {}
        if edit.operation == "move":
            source = self.clean.resolve(edit.locator)
            moved_tag = source.tag
            moved_attributes = clean_attributes(source)

        applied: List[TreeAdapter] = []
        touched: Optional[LiveElement] = None
        try:
            for adapter in (self.overlay, self.clean):
                touched = adapter.apply(edit)
                applied.append(adapter)
        except StructuralEditError as e:
            # A view that failed has already undone itself; revert the ones that succeeded
            for adapter in reversed(applied):
                adapter.rollback()
            logger.error(f"{edit.operation} at '{edit.locator}' failed after validation: {e}")
            return EditResult(success=False, operation=edit.operation, locator=edit.locator, errors=[str(e)])

        if moved_tag is not None and (touched is None or not self.clean.document.body.contains(touched)):
            touched = find_matching(self.clean.document, moved_tag, moved_attributes)

        selection = str(locator_for(touched)) if touched is not None else None
        logger.info(f"Applied {edit.operation} at '{edit.locator}'")
        return EditResult(
            success=True,
            operation=edit.operation,
            locator=edit.locator,
            selection=selection,
        )

    def attach_behaviors(self) -> int:
        return self.overlay.attach_behaviors()
