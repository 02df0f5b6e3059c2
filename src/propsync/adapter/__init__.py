from propsync.adapter.tree_adapter import TreeAdapter
from propsync.adapter.dual_view import DualView

__all__ = ["TreeAdapter", "DualView"]
