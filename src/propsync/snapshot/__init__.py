from propsync.snapshot.serializer import SnapshotSerializer, normalize_text
from propsync.snapshot.probe import probe_runtime_properties, to_transport

__all__ = [
    "SnapshotSerializer",
    "normalize_text",
    "probe_runtime_properties",
    "to_transport",
]
