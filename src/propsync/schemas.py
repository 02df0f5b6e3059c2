from pydantic import BaseModel, Field
from typing import Annotated, Dict, List, Optional, Literal, Union


class SnapshotText(BaseModel):
    """
    A normalized, non-empty text leaf of a snapshot.
    """
    kind: Literal["text"] = "text"
    content: str


class SnapshotElement(BaseModel):
    """
    An element of a snapshot: decoration-free attributes plus, for custom
    elements, the values read off the live component instance.
    """
    kind: Literal["element"] = "element"
    tag: str
    attributes: Dict[str, str] = Field(default_factory=dict)
    runtime_properties: Dict[str, str] = Field(default_factory=dict)
    children: List["SnapshotNode"] = Field(default_factory=list)


SnapshotNode = Annotated[Union[SnapshotElement, SnapshotText], Field(discriminator="kind")]

SnapshotElement.model_rebuild()


class Snapshot(BaseModel):
    """
    Top-level sibling list, used when snapshots travel as JSON.
    """
    nodes: List[SnapshotNode] = Field(default_factory=list)


class RegistryEntry(BaseModel):
    """
    Where the construction symbol for a tag comes from.
    """
    tag: str
    symbol: str
    origin_kind: Literal["shared", "local"]
    origin_path: Optional[str] = None  # Module path for local origins


class ImportRequirement(BaseModel):
    """
    One symbol the generated body needs imported. Rebuilt every pass.
    """
    symbol: str
    origin_kind: Literal["shared", "local"]
    origin_path: Optional[str] = None


class GeneratedCode(BaseModel):
    """
    Output of one code generation pass.
    """
    imports: List[str] = Field(default_factory=list)
    body_lines: List[str] = Field(default_factory=list)  # Relative indentation
    requirements: List[ImportRequirement] = Field(default_factory=list)
    unresolved: List[str] = Field(default_factory=list)  # Tags skipped with a warning


class ImportStatement(BaseModel):
    """
    A top-level import statement found by the source parser.
    """
    module: str
    default_name: Optional[str] = None
    namespace_name: Optional[str] = None
    named: List[str] = Field(default_factory=list)
    type_only: bool = False
    text: str
    start_offset: int  # Character offsets into the source text
    end_offset: int
    start_line: int  # 0-based rows
    end_line: int


class PatchResult(BaseModel):
    """
    Result of patching a source document. On failure `source` is the
    untouched original.
    """
    success: bool
    source: str
    errors: List[str] = Field(default_factory=list)
    removed_imports: List[str] = Field(default_factory=list)
    added_imports: List[str] = Field(default_factory=list)


EditOperation = Literal[
    "insert_before",
    "insert_after",
    "insert_inside",
    "delete",
    "duplicate",
    "move",
    "update",
]


class StructuralEdit(BaseModel):
    """
    One structural edit addressed by locator, applied to both views.
    """
    operation: EditOperation
    locator: str
    target: Optional[str] = None  # move: destination locator
    position: Literal["before", "after", "inside"] = "inside"  # move
    markup: Optional[str] = None  # insert_*: HTML to insert
    name: Optional[str] = None  # update: attribute or property name
    value: Optional[str] = None  # update: new value (None removes the attribute)


class EditResult(BaseModel):
    """
    Outcome of a structural edit.
    """
    success: bool
    operation: str
    locator: str
    errors: List[str] = Field(default_factory=list)
    selection: Optional[str] = None  # Re-resolved locator of the edited node


class BroadcastPayload(BaseModel):
    """
    What observer panels receive after every synchronization.
    """
    decorated_tree_markup: str
    snapshot: List[SnapshotNode] = Field(default_factory=list)
    runtime_properties: Dict[str, Dict[str, str]] = Field(default_factory=dict)  # locator -> props
    source: Optional[str] = None
    error: Optional[str] = None
