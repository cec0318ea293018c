from .base import Backend, Connection, wrap_exceptions
from .sync import SyncBackend, SyncConnection

__all__ = [
    "Backend",
    "Connection",
    "SyncBackend",
    "SyncConnection",
    "wrap_exceptions",
]


def get_backend() -> Backend:
    """Gets the backend used when a 'ClientConfig' doesn't specify one."""
    return SyncBackend()
