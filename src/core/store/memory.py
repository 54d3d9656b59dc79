"""
SnapshotStore em memória.

Usado em testes e em desenvolvimento local sem banco. Guarda cópias
profundas, como um armazenamento real faria ao serializar.
"""

from copy import deepcopy
from typing import Dict, List, Optional

from src.core.shared.interfaces import CollectionSnapshot, SnapshotStore


class InMemorySnapshotStore(SnapshotStore):
    def __init__(self):
        self._snapshots: Dict[str, CollectionSnapshot] = {}
        self.saved: List[str] = []

    def load(self, name: str) -> Optional[CollectionSnapshot]:
        snapshot = self._snapshots.get(name)
        return deepcopy(snapshot) if snapshot is not None else None

    def save(self, snapshot: CollectionSnapshot) -> None:
        self._snapshots[snapshot.name] = deepcopy(snapshot)
        self.saved.append(snapshot.name)

    def saves_of(self, name: str) -> int:
        """Quantas vezes a coleção foi gravada."""
        return self.saved.count(name)

    def clear(self) -> None:
        self._snapshots.clear()
        self.saved.clear()
