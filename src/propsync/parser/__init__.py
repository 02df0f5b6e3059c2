from propsync.parser.typescript_parser import SourceTree, TypeScriptSourceParser

__all__ = ["SourceTree", "TypeScriptSourceParser"]
