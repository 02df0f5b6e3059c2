from propsync.codegen.generator import CodeGenerator, escape_string, format_key, quote
from propsync.codegen.imports import build_import_statements, relative_import_path
from propsync.codegen.markup import MarkupGenerator, is_markup_source

__all__ = [
    "CodeGenerator",
    "escape_string",
    "format_key",
    "quote",
    "build_import_statements",
    "relative_import_path",
    "MarkupGenerator",
    "is_markup_source",
]
