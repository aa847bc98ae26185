from .rolling_store import RollingStore

__all__ = ["RollingStore"]
