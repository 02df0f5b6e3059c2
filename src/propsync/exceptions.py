# Custom exceptions for propsync

class PropSyncError(Exception):
    """Base exception for all application-specific errors."""
    pass

class ConfigError(PropSyncError):
    """Raised for configuration-related problems."""
    pass

class ParserError(PropSyncError):
    """Raised when source text cannot be parsed by tree-sitter."""
    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        self.message = message
        super().__init__(f"Failed to parse {file_path}: {message}")

class GrammarNotFoundError(PropSyncError):
    """Raised when the tree-sitter grammar cannot be loaded."""
    def __init__(self, language: str, install_command: str):
        self.language = language
        self.install_command = install_command
        super().__init__(f"Grammar for '{language}' not found. Install it with: {install_command}")

class LocatorError(PropSyncError):
    """Raised when a locator string is malformed."""
    def __init__(self, locator: str, message: str):
        self.locator = locator
        super().__init__(f"Invalid locator '{locator}': {message}")


class AnchorNotFoundError(PropSyncError):
    """Raised when the render boundary or import boundary cannot be located."""

    def __init__(self, anchor: str, message: str = ""):
        self.anchor = anchor
        text = f"Anchor '{anchor}' not found in source"
        if message:
            text += f": {message}"
        super().__init__(text)


class StructuralEditError(PropSyncError):
    """Raised when a structural edit cannot be applied to a live tree."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")
