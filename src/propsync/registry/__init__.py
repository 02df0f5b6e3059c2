from propsync.registry.builtins import builtin_class_name
from propsync.registry.registry import ElementRegistry
from propsync.registry.scanner import CustomElementScanner, extract_definitions

__all__ = [
    "builtin_class_name",
    "ElementRegistry",
    "CustomElementScanner",
    "extract_definitions",
]
