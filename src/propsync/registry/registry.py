"""
Element Registry: read-only lookup from tag to construction symbol and
origin module.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

from propsync.config import SYNC_CONFIG
from propsync.logging_config import logger
from propsync.registry.builtins import builtin_class_name
from propsync.schemas import RegistryEntry


class ElementRegistry:
    """
    Resolves standard tags to the shared built-ins module and registered
    custom elements to the local files that define them.
    """

    def __init__(self, shared_module: str = SYNC_CONFIG["shared_module"]):
        self.shared_module = shared_module
        self._custom: Dict[str, RegistryEntry] = {}

    def register(self, tag: str, symbol: str, origin_path: Union[str, Path]) -> bool:
        """
        Register a custom element. The first definition of a tag wins.

        Returns:
            True if the tag was newly registered
        """
        tag = tag.lower()
        if tag in self._custom:
            existing = self._custom[tag]
            logger.debug(
                f"Ignoring duplicate definition of <{tag}> in {origin_path}; "
                f"already defined by {existing.symbol} in {existing.origin_path}"
            )
            return False

        self._custom[tag] = RegistryEntry(
            tag=tag,
            symbol=symbol,
            origin_kind="local",
            origin_path=str(origin_path),
        )
        return True

    def resolve(self, tag: str) -> Optional[RegistryEntry]:
        tag = tag.lower()
        if tag in self._custom:
            return self._custom[tag]

        symbol = builtin_class_name(tag)
        if symbol is not None:
            return RegistryEntry(tag=tag, symbol=symbol, origin_kind="shared", origin_path=self.shared_module)
        return None

    def custom_entries(self) -> List[RegistryEntry]:
        return list(self._custom.values())

    def __contains__(self, tag: str) -> bool:
        return self.resolve(tag) is not None

    def __len__(self) -> int:
        return len(self._custom)
