"""
EntityStore - Dono das cinco coleções do sistema.

Ciclo de vida explícito:
    store = EntityStore(snapshot_store)
    store.open()    # carrega snapshots (semeia templates na 1ª vez)
    ...
    store.close()   # grava snapshot final de cada coleção

Ordem global de locks (multi-coleção): tickets → work_orders →
templates → filled_forms → notifications.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Dict, Iterable, Iterator, List, Optional
import logging

from src.core.forms.entities import FilledFormEntity, PdfTemplateEntity
from src.core.forms.fixtures import default_templates
from src.core.notifications.entities import NotificationEntity
from src.core.shared.interfaces import SnapshotStore
from src.core.tickets.entities import SupportTicketEntity
from src.core.work_orders.entities import WorkOrderEntity

from .collections import EntityCollection
from .writer import SnapshotWriter

logger = logging.getLogger(__name__)

COLLECTION_ORDER = ("tickets", "work_orders", "templates", "filled_forms", "notifications")

ENTITY_CLASSES = {
    "tickets": SupportTicketEntity,
    "work_orders": WorkOrderEntity,
    "templates": PdfTemplateEntity,
    "filled_forms": FilledFormEntity,
    "notifications": NotificationEntity,
}

TemplateSeed = Callable[[], List[PdfTemplateEntity]]


class EntityStore:
    """
    Store operacional compartilhado.

    Args:
        snapshot_store: Port de persistência local
        template_seed: Fábrica dos templates iniciais (None = não semear)
        max_retries / retry_delay: Política de retry do SnapshotWriter
        clock: Fonte de tempo das coleções
    """

    def __init__(
        self,
        snapshot_store: SnapshotStore,
        template_seed: Optional[TemplateSeed] = default_templates,
        max_retries: int = 3,
        retry_delay: float = 0.1,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.snapshot_store = snapshot_store
        self.template_seed = template_seed
        self.writer = SnapshotWriter(snapshot_store, max_retries=max_retries, retry_delay=retry_delay)
        self._collections: Dict[str, EntityCollection] = {
            name: EntityCollection(name, ENTITY_CLASSES[name], self.writer, clock)
            for name in COLLECTION_ORDER
        }
        self._opened = False

    @property
    def tickets(self) -> EntityCollection[SupportTicketEntity]:
        return self._collections["tickets"]

    @property
    def work_orders(self) -> EntityCollection[WorkOrderEntity]:
        return self._collections["work_orders"]

    @property
    def templates(self) -> EntityCollection[PdfTemplateEntity]:
        return self._collections["templates"]

    @property
    def filled_forms(self) -> EntityCollection[FilledFormEntity]:
        return self._collections["filled_forms"]

    @property
    def notifications(self) -> EntityCollection[NotificationEntity]:
        return self._collections["notifications"]

    @property
    def is_open(self) -> bool:
        return self._opened

    def collection(self, name: str) -> EntityCollection:
        try:
            return self._collections[name]
        except KeyError:
            raise KeyError(f"Coleção desconhecida: {name}")

    def open(self) -> "EntityStore":
        """Carrega cada coleção do seu snapshot."""
        if self._opened:
            return self

        for name in COLLECTION_ORDER:
            collection = self._collections[name]
            snapshot = self.snapshot_store.load(name)
            if snapshot is not None:
                collection.load(snapshot)
            elif name == "templates" and self.template_seed is not None:
                seeded = [collection.create(draft) for draft in self.template_seed()]
                logger.info(f"Templates padrão semeados: {len(seeded)}")

        self._opened = True
        logger.info(
            "EntityStore aberto: "
            + ", ".join(f"{name}={self._collections[name].count()}" for name in COLLECTION_ORDER)
        )
        return self

    def close(self) -> None:
        """Grava snapshot final de todas as coleções."""
        if not self._opened:
            return
        for name in COLLECTION_ORDER:
            self._collections[name].flush()
        self._opened = False
        logger.info("EntityStore fechado")

    @contextmanager
    def locked(self, names: Iterable[str] = COLLECTION_ORDER) -> Iterator["EntityStore"]:
        """Segura os locks das coleções pedidas, na ordem global."""
        ordered = ordered_collections(names)
        acquired = []
        try:
            for name in ordered:
                self._collections[name].lock.acquire()
                acquired.append(name)
            yield self
        finally:
            for name in reversed(acquired):
                self._collections[name].lock.release()

    def __enter__(self) -> "EntityStore":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


def ordered_collections(names: Iterable[str]) -> List[str]:
    """
    Ordena nomes de coleção pela ordem global de locks.

    Raises:
        KeyError: Se algum nome é desconhecido
    """
    names = set(names)
    unknown = names - set(COLLECTION_ORDER)
    if unknown:
        raise KeyError(f"Coleções desconhecidas: {', '.join(sorted(unknown))}")
    return [name for name in COLLECTION_ORDER if name in names]
