"""
Entity Store - Estado operacional compartilhado.

- EntityCollection: uma coleção por tipo de entidade
- EntityStore: dono das cinco coleções (open/close)
- StoreUnitOfWork: escrita atômica em várias coleções
- SnapshotWriter: persistência write-through com retry
"""

from .collections import EntityCollection
from .memory import InMemorySnapshotStore
from .store import COLLECTION_ORDER, EntityStore
from .unit_of_work import StoreUnitOfWork
from .writer import SnapshotWriter

__all__ = [
    "COLLECTION_ORDER",
    "EntityCollection",
    "EntityStore",
    "InMemorySnapshotStore",
    "SnapshotWriter",
    "StoreUnitOfWork",
]
