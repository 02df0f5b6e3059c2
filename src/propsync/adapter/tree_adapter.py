"""
TreeAdapter: structural edits against one live tree.

Both views of a session are driven through the same adapter methods, so
the Overlay and Clean trees can only differ by decoration.
"""

from typing import Any, Callable, List, Optional

from propsync.dom.decoration import decorate, is_chrome, is_decoration_class, strip_decoration
from propsync.dom.locator import Locator, resolve as resolve_locator
from propsync.dom.markup import parse_fragment
from propsync.dom.nodes import LiveDocument, LiveElement, LiveNode, LiveText
from propsync.exceptions import LocatorError, StructuralEditError
from propsync.logging_config import logger
from propsync.schemas import StructuralEdit
from propsync.snapshot.probe import PRIMITIVES

INSERT_OPERATIONS = ("insert_before", "insert_after", "insert_inside")
TEXT_NAMES = ("text", "textContent")


def coerce_like(current: Any, value: str) -> Any:
    """Convert a transported string to the type of the value it replaces."""
    if isinstance(current, bool):
        return value.strip().lower() in ("true", "1", "yes", "on")
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return value


def _runtime_member(element: LiveElement, name: str) -> Any:
    """Current value of a public member on the element's component instance, or None."""
    if element.instance is None or name.startswith("_"):
        return None
    try:
        return vars(element.instance).get(name)
    except TypeError:
        return None


class TreeAdapter:
    def __init__(self, document: LiveDocument, decorated: bool = False):
        self.document = document
        self.decorated = decorated
        self._undo: List[Callable[[], None]] = []

    @property
    def label(self) -> str:
        return "overlay" if self.decorated else "clean"

    def resolve(self, locator: str) -> Optional[LiveElement]:
        try:
            return resolve_locator(self.document, Locator.parse(locator))
        except LocatorError:
            return None

    def check(self, edit: StructuralEdit) -> List[str]:
        """
        Validate an edit against this tree without mutating it.

        Returns:
            Error messages; empty when the edit can be applied
        """
        errors: List[str] = []
        try:
            locator = Locator.parse(edit.locator)
        except LocatorError as e:
            return [str(e)]

        element = resolve_locator(self.document, locator)
        if element is None:
            return [f"{self.label}: locator '{edit.locator}' does not resolve"]

        if edit.operation in ("insert_before", "insert_after", "delete", "duplicate", "move") and locator.is_root:
            errors.append(f"{self.label}: '{edit.operation}' cannot target the root")

        if edit.operation in INSERT_OPERATIONS:
            if not edit.markup or not parse_fragment(edit.markup):
                errors.append(f"{self.label}: '{edit.operation}' needs markup to insert")

        elif edit.operation == "move":
            target = self.resolve(edit.target or "") if edit.target is not None else None
            if target is None:
                errors.append(f"{self.label}: move target '{edit.target}' does not resolve")
            elif target is element:
                errors.append(f"{self.label}: cannot move an element relative to itself")
            elif element.contains(target):
                errors.append(f"{self.label}: cannot move an element into its own subtree")
            elif edit.position != "inside" and target.parent is None:
                errors.append(f"{self.label}: cannot move next to the root")

        elif edit.operation == "update":
            if not edit.name:
                errors.append(f"{self.label}: update needs a name")
            elif edit.value is not None:
                current = _runtime_member(element, edit.name)
                if isinstance(current, PRIMITIVES):
                    try:
                        coerce_like(current, edit.value)
                    except ValueError:
                        errors.append(f"{self.label}: '{edit.value}' is not a valid value for '{edit.name}'")

        return errors

    def apply(self, edit: StructuralEdit) -> Optional[LiveElement]:
        """
        Apply an edit. Call check() first.

        A failure part way through is undone before the error is raised,
        so the tree is either fully edited or untouched. The last
        successful edit can be reverted with rollback().

        Returns:
            The element the edit produced or touched (None after delete)

        Raises:
            StructuralEditError: If the edit cannot be applied
        """
        errors = self.check(edit)
        if errors:
            raise StructuralEditError(edit.operation, "; ".join(errors))

        self._undo = []
        try:
            return self._dispatch(edit)
        except StructuralEditError:
            self.rollback()
            raise
        except Exception as e:
            self.rollback()
            raise StructuralEditError(edit.operation, f"{type(e).__name__}: {e}") from e

    def rollback(self) -> None:
        """Revert the most recent apply(), newest step first."""
        steps, self._undo = self._undo, []
        while steps:
            step = steps.pop()
            try:
                step()
            except Exception as e:
                logger.error(f"{self.label}: rollback step failed: {type(e).__name__}: {e}")
        logger.debug(f"{self.label}: rolled back last edit")

    def _dispatch(self, edit: StructuralEdit) -> Optional[LiveElement]:
        element = self.resolve(edit.locator)
        if edit.operation in INSERT_OPERATIONS:
            position = edit.operation[len("insert_"):]
            return self.insert(element, edit.markup or "", position)
        if edit.operation == "delete":
            self.delete(element)
            return None
        if edit.operation == "duplicate":
            return self.duplicate(element)
        if edit.operation == "move":
            return self.move(element, self.resolve(edit.target or ""), edit.position)
        if edit.operation == "update":
            return self.update(element, edit.name or "", edit.value)
        raise StructuralEditError(edit.operation, "unknown operation")

    # Undo journal

    def _remember_position(self, node: LiveNode) -> None:
        parent = node.parent
        index = parent.index_of(node)
        self._undo.append(lambda: parent.insert(index, node))

    def _remember_detach(self, nodes: List[LiveNode]) -> None:
        def detach_all() -> None:
            for node in nodes:
                node.detach()

        self._undo.append(detach_all)

    def _remember_element(self, element: LiveElement) -> None:
        attributes = dict(element.attributes)
        children = list(element.children)

        def restore() -> None:
            element.attributes = attributes
            element.replace_children(children)

        self._undo.append(restore)

    # Operations

    def _place(self, nodes: List[LiveNode], reference: LiveElement, position: str) -> None:
        if position == "inside":
            for node in nodes:
                reference.append(node)
        elif position == "before":
            for node in nodes:
                reference.parent.insert_before(node, reference)
        elif position == "after":
            anchor: LiveNode = reference
            for node in nodes:
                reference.parent.insert_after(node, anchor)
                anchor = node
        else:
            raise StructuralEditError("insert", f"unknown position '{position}'")

    def _added(self, nodes: List[LiveNode]) -> None:
        for node in nodes:
            self.document.upgrade(node)
        self.document.notify(nodes)

    def insert(self, reference: LiveElement, markup: str, position: str) -> Optional[LiveElement]:
        nodes = parse_fragment(markup)
        if not self.decorated:
            for node in nodes:
                if isinstance(node, LiveElement):
                    strip_decoration(node)
        self._remember_detach(nodes)
        self._place(nodes, reference, position)
        self._added(nodes)
        logger.debug(f"{self.label}: inserted {len(nodes)} nodes {position} <{reference.tag}>")
        return next((n for n in nodes if isinstance(n, LiveElement)), None)

    def delete(self, element: LiveElement) -> None:
        self._remember_position(element)
        element.detach()
        logger.debug(f"{self.label}: deleted <{element.tag}>")

    def duplicate(self, element: LiveElement) -> LiveElement:
        # Clones carry no component instance; upgrade creates a fresh one
        clone = strip_decoration(element.clone())
        self._remember_detach([clone])
        element.parent.insert_after(clone, element)
        self._added([clone])
        logger.debug(f"{self.label}: duplicated <{element.tag}>")
        return clone

    def move(self, element: LiveElement, target: LiveElement, position: str) -> LiveElement:
        """Relocate the existing node; its component instance travels with it."""
        self._remember_position(element)
        self._place([element], target, position)
        self.document.notify([element])
        logger.debug(f"{self.label}: moved <{element.tag}> {position} <{target.tag}>")
        return element

    def update(self, element: LiveElement, name: str, value: Optional[str]) -> LiveElement:
        self._remember_element(element)
        if value is not None:
            self._set_runtime_property(element, name, value)

        if name in TEXT_NAMES:
            element.replace_children([LiveText(value or "")])
        elif name == "class":
            kept = [c for c in element.classes if is_decoration_class(c)]
            element.classes = (value or "").split() + kept
        elif value is None:
            element.remove_attribute(name)
        else:
            element.set_attribute(name, value)
        return element

    def _set_runtime_property(self, element: LiveElement, name: str, value: str) -> None:
        current = _runtime_member(element, name)
        if current is None:
            return
        instance = element.instance
        try:
            setter = getattr(current, "set", None)
            if callable(setter) and not isinstance(current, (dict,) + PRIMITIVES):
                getter = getattr(current, "get", None)
                if callable(getter):
                    previous = getter()
                    self._undo.append(lambda: setter(previous))
                setter(value)
            elif isinstance(current, PRIMITIVES):
                self._undo.append(lambda: setattr(instance, name, current))
                setattr(instance, name, coerce_like(current, value))
        except (TypeError, ValueError) as e:
            raise StructuralEditError("update", f"cannot set runtime property '{name}': {e}") from e

    def attach_behaviors(self) -> int:
        """
        Make every Overlay element interactive.

        Returns:
            Number of elements newly decorated
        """
        if not self.decorated:
            return 0
        count = 0
        stack = list(reversed(self.document.body.element_children))
        while stack:
            element = stack.pop()
            if is_chrome(element):
                continue
            if decorate(element):
                count += 1
            stack.extend(reversed(element.element_children))
        return count
