# storage package
from .state_store import StateStore, InMemoryStateStore, JsonFileStateStore

__all__ = [
    'StateStore',
    'InMemoryStateStore',
    'JsonFileStateStore'
]
