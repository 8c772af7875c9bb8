"""Service layer package.

Exports high-level services consumed by the CLI and by embedding applications.
"""

from .sync_engine import SyncEngine, SyncEngineConfig

__all__ = ["SyncEngine", "SyncEngineConfig"]
