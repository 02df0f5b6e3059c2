"""
Structured source parsing for authored component files, using tree-sitter
with the TypeScript grammar.
"""

from pathlib import Path
from typing import List, Optional

try:
    from tree_sitter import Parser, Language, Node
    import tree_sitter_typescript as tstypescript
    TREE_SITTER_AVAILABLE = True
except ImportError:
    TREE_SITTER_AVAILABLE = False

from propsync.config import SYNC_CONFIG
from propsync.exceptions import GrammarNotFoundError, ParserError
from propsync.logging_config import logger
from propsync.schemas import ImportStatement

CLASS_NODE_TYPES = ("class_declaration", "abstract_class_declaration", "class")


class SourceTree:
    """
    A parsed source document with the queries the patcher and session need.
    """

    def __init__(
        self,
        source: str,
        tree,
        component_base_prefix: str = SYNC_CONFIG["component_base_prefix"],
        dialect: str = "typescript",
    ):
        self.source = source
        self.dialect = dialect
        self.source_bytes = source.encode("utf-8")
        self.tree = tree
        self.component_base_prefix = component_base_prefix

    @property
    def root_node(self) -> "Node":
        return self.tree.root_node

    def node_text(self, node: "Node") -> str:
        return self.source_bytes[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def char_offset(self, byte_offset: int) -> int:
        return len(self.source_bytes[:byte_offset].decode("utf-8", errors="replace"))

    # Errors

    def error_nodes(self) -> List["Node"]:
        errors = []
        stack = [self.root_node]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                errors.append(node)
            stack.extend(reversed(node.children))
        return errors

    @property
    def has_errors(self) -> bool:
        return bool(self.error_nodes())

    def error_messages(self) -> List[str]:
        return [
            f"Syntax error at line {node.start_point[0] + 1}, column {node.start_point[1] + 1}"
            for node in self.error_nodes()
        ]

    # Imports

    def import_statements(self) -> List[ImportStatement]:
        """List the top-level import statements in document order."""
        statements: List[ImportStatement] = []
        for node in self.root_node.children:
            if node.type != "import_statement":
                continue

            source_node = node.child_by_field_name("source")
            module = self.node_text(source_node).strip("'\"`") if source_node is not None else ""

            default_name = None
            namespace_name = None
            named: List[str] = []
            type_only = False

            for child in node.children:
                if child.type == "type":
                    type_only = True
                elif child.type == "import_clause":
                    for part in child.named_children:
                        if part.type == "identifier":
                            default_name = self.node_text(part)
                        elif part.type == "namespace_import":
                            identifiers = [n for n in part.named_children if n.type == "identifier"]
                            if identifiers:
                                namespace_name = self.node_text(identifiers[-1])
                        elif part.type == "named_imports":
                            for specifier in part.named_children:
                                if specifier.type != "import_specifier":
                                    continue
                                name_node = specifier.child_by_field_name("name")
                                named.append(self.node_text(name_node if name_node is not None else specifier))

            statements.append(ImportStatement(
                module=module,
                default_name=default_name,
                namespace_name=namespace_name,
                named=named,
                type_only=type_only,
                text=self.node_text(node),
                start_offset=self.char_offset(node.start_byte),
                end_offset=self.char_offset(node.end_byte),
                start_line=node.start_point[0],
                end_line=node.end_point[0],
            ))
        return statements

    # Component metadata

    def _walk(self):
        stack = [self.root_node]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def component_symbol(self) -> Optional[str]:
        """
        Name of the class that extends the component base (HTMLProps...).
        """
        for node in self._walk():
            if node.type not in CLASS_NODE_TYPES:
                continue
            name_node = node.child_by_field_name("name")
            if name_node is None:
                continue
            for child in node.children:
                if child.type != "class_heritage":
                    continue
                heritage = self.node_text(child).strip()
                if heritage.startswith("extends"):
                    heritage = heritage[len("extends"):].strip()
                if heritage.startswith(self.component_base_prefix):
                    return self.node_text(name_node)
        return None

    def defined_tag(self, symbol: Optional[str] = None) -> Optional[str]:
        """
        Tag registered by `Symbol.define('tag')` or
        `customElements.define('tag', Symbol)`. Without a symbol, the first
        definition in the file is returned.
        """
        for node in self._walk():
            if node.type != "call_expression":
                continue
            function = node.child_by_field_name("function")
            arguments = node.child_by_field_name("arguments")
            if function is None or arguments is None or function.type != "member_expression":
                continue
            property_node = function.child_by_field_name("property")
            object_node = function.child_by_field_name("object")
            if property_node is None or object_node is None or self.node_text(property_node) != "define":
                continue

            args = arguments.named_children
            if not args or args[0].type not in ("string", "template_string"):
                continue
            tag = self.node_text(args[0]).strip("'\"`")
            owner = self.node_text(object_node)

            if owner == "customElements":
                owner = self.node_text(args[1]) if len(args) > 1 else None
            if symbol is None or owner == symbol:
                return tag
        return None


class TypeScriptSourceParser:
    """
    Parses TypeScript/TSX source text into SourceTree objects.
    """

    def __init__(self, component_base_prefix: str = SYNC_CONFIG["component_base_prefix"]):
        if not TREE_SITTER_AVAILABLE:
            raise GrammarNotFoundError("typescript", "pip install tree-sitter tree-sitter-typescript")

        self.component_base_prefix = component_base_prefix
        self.parsers = {}
        typescript_parser = Parser()
        typescript_parser.language = Language(tstypescript.language_typescript())
        self.parsers["typescript"] = typescript_parser

        tsx_parser = Parser()
        tsx_parser.language = Language(tstypescript.language_tsx())
        self.parsers["tsx"] = tsx_parser
        logger.debug("TypeScriptSourceParser initialized parsers")

    def parse(self, text: str, dialect: str = "typescript", file_path: str = "<source>") -> SourceTree:
        parser = self.parsers.get(dialect)
        if parser is None:
            raise ParserError(file_path, f"unsupported dialect '{dialect}'")
        try:
            tree = parser.parse(bytes(text, "utf8"))
        except Exception as e:
            raise ParserError(file_path, str(e)) from e
        return SourceTree(text, tree, self.component_base_prefix, dialect)

    def parse_file(self, file_path: Path) -> SourceTree:
        file_path = Path(file_path)
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ParserError(str(file_path), str(e)) from e
        dialect = "tsx" if file_path.suffix in (".tsx", ".jsx") else "typescript"
        return self.parse(text, dialect, str(file_path))
