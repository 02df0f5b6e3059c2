from propsync.sync.surface import RenderSurface
from propsync.sync.pipeline import SourceSynchronizer
from propsync.sync.scheduler import SyncScheduler
from propsync.sync.session import EditingSession

__all__ = ["RenderSurface", "SourceSynchronizer", "SyncScheduler", "EditingSession"]
