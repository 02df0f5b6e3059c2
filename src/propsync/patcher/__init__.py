from propsync.patcher.boundary import BodyRenderBoundary, RenderBoundary, TextualRenderBoundary
from propsync.patcher.patcher import MarkupPatcher, SourcePatcher
from propsync.patcher.writer import SourceWriter

__all__ = [
    "BodyRenderBoundary",
    "RenderBoundary",
    "TextualRenderBoundary",
    "MarkupPatcher",
    "SourcePatcher",
    "SourceWriter",
]
