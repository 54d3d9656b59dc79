"""
SnapshotStores Django.

Implementam o port SnapshotStore definido no Core.
São DRIVEN ADAPTERS: o EntityStore chama save() a cada escrita
e load() na abertura.

Implementações:
- DjangoSnapshotStore: grava direto no banco (write-through)
- CelerySnapshotStore: enfileira a gravação (write-behind)

Cada coleção ocupa uma única linha em collection_snapshots.
Snapshots com versão menor que a gravada são descartados, o que
torna a gravação assíncrona segura quando tarefas chegam fora
de ordem.
"""

from typing import Any, Dict, List, Optional
import logging

from django.db import transaction

from src.core.shared.interfaces import CollectionSnapshot, SnapshotStore

from .mappers import SnapshotMapper
from .models import CollectionSnapshotModel

logger = logging.getLogger(__name__)


class DjangoSnapshotStore(SnapshotStore):
    """
    Persistência de snapshots via Django ORM.

    Example:
        store = EntityStore(DjangoSnapshotStore())
        store.open()
    """

    def load(self, name: str) -> Optional[CollectionSnapshot]:
        try:
            model = CollectionSnapshotModel.objects.get(pk=name)
        except CollectionSnapshotModel.DoesNotExist:
            return None
        return SnapshotMapper.to_snapshot(model)

    def save(self, snapshot: CollectionSnapshot) -> None:
        self.save_payload(
            name=snapshot.name,
            sequence=snapshot.sequence,
            version=snapshot.version,
            payload=SnapshotMapper.to_payload(snapshot),
        )

    @staticmethod
    def save_payload(name: str, sequence: int, version: int, payload: List[Dict[str, Any]]) -> bool:
        """
        Grava payload já serializado.

        Returns:
            False se a linha gravada tem versão mais nova (snapshot descartado)
        """
        with transaction.atomic():
            current = (
                CollectionSnapshotModel.objects
                .select_for_update()
                .filter(pk=name)
                .only("version")
                .first()
            )
            if current is not None and current.version > version:
                logger.info(
                    f"Snapshot '{name}' v{version} ignorado "
                    f"(gravado: v{current.version})"
                )
                return False

            CollectionSnapshotModel.objects.update_or_create(
                name=name,
                defaults={
                    "sequence": sequence,
                    "version": version,
                    "payload": payload,
                },
            )

        logger.debug(f"Snapshot '{name}' v{version} gravado ({len(payload)} itens)")
        return True


class CelerySnapshotStore(SnapshotStore):
    """
    Write-behind: a gravação vira uma tarefa na fila 'snapshots'.

    A leitura continua síncrona, direto no banco. Falha ao enfileirar
    é propagada para que o SnapshotWriter aplique o retry.
    """

    def __init__(self, reader: Optional[DjangoSnapshotStore] = None):
        self._reader = reader or DjangoSnapshotStore()

    def load(self, name: str) -> Optional[CollectionSnapshot]:
        return self._reader.load(name)

    def save(self, snapshot: CollectionSnapshot) -> None:
        from src.adapters.django_app.events.handlers import persist_collection_snapshot

        message = SnapshotMapper.to_message(snapshot)
        persist_collection_snapshot.delay(**message)
        logger.debug(f"Snapshot '{snapshot.name}' v{snapshot.version} enfileirado")
