"""
Unit of Work sobre o EntityStore.

Escritas em várias coleções dentro do bloco são atômicas: se o
bloco levanta exceção, todas as coleções voltam ao checkpoint.

Sequência do commit:
1. Um snapshot por coleção alterada
2. Liberação dos locks (ordem inversa da aquisição)
3. Publicação dos eventos enfileirados
"""

from typing import Iterable, List, Optional
import logging

from src.core.shared.interfaces import EventPublisher, UnitOfWork

from .store import COLLECTION_ORDER, EntityStore, ordered_collections

logger = logging.getLogger(__name__)


class StoreUnitOfWork(UnitOfWork):
    """
    Example:
        with StoreUnitOfWork(store, publisher, collections=("tickets", "work_orders")) as uow:
            order = store.work_orders.create(draft)
            store.tickets.save(ticket)
            uow.publish_event(TicketConvertedEvent(...))
    """

    def __init__(
        self,
        store: EntityStore,
        event_publisher: Optional[EventPublisher] = None,
        collections: Iterable[str] = COLLECTION_ORDER,
    ):
        super().__init__()
        self.store = store
        self.event_publisher = event_publisher
        self._names = ordered_collections(collections)
        self._entered: List[str] = []

    def _begin_transaction(self) -> None:
        self.clear_events()
        for name in self._names:
            self.store.collection(name).begin_batch()
            self._entered.append(name)

    def commit(self) -> None:
        entered, self._entered = self._entered, []
        for name in entered:
            self.store.collection(name).commit_batch()
        for name in reversed(entered):
            self.store.collection(name).release_batch()

        events = self.collect_events()
        self.clear_events()
        if events and self.event_publisher is not None:
            self.event_publisher.publish_batch(events)

    def rollback(self) -> None:
        entered, self._entered = self._entered, []
        for name in reversed(entered):
            collection = self.store.collection(name)
            collection.rollback_batch()
            collection.release_batch()
        if self._events:
            logger.debug(f"Rollback descartou {len(self._events)} evento(s)")
        self.clear_events()
