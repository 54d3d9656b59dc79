"""
Interfaces (Ports) - Contratos entre Core e Adapters.

Este módulo define as interfaces que os Adapters devem implementar.
São os "Ports" da Arquitetura Hexagonal.

Tipos de Ports:
- UnitOfWork: escrita atômica em uma ou mais coleções
- EventPublisher: entrega de Domain Events a sinks
- SnapshotStore: persistência local de snapshots por coleção

Princípio: Core define interfaces; Adapters implementam.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .events import DomainEvent


class UnitOfWork(ABC):
    """
    Unit of Work - Coordena escritas atômicas.

    Pattern: Context Manager
        with uow:
            store.work_orders.create(draft)
            store.tickets.save(ticket)
            uow.publish_event(event)
        # Commit automático ao sair sem erro
        # Rollback automático se exceção

    Eventos enfileirados só são entregues após commit bem-sucedido.
    Em rollback são descartados.
    """

    def __init__(self):
        self._events: List[DomainEvent] = []

    def __enter__(self) -> "UnitOfWork":
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False  # Não suprime exceções

    @abstractmethod
    def _begin_transaction(self) -> None:
        """Inicia uma nova transação."""
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """
        Persiste todas as mudanças e publica eventos.

        Ordem de execução:
        1. Persistência dos snapshots das coleções alteradas
        2. Liberação dos locks
        3. Publicação de eventos enfileirados
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Desfaz todas as mudanças e descarta eventos."""
        raise NotImplementedError

    def publish_event(self, event: DomainEvent) -> None:
        """
        Enfileira evento para publicação após commit.

        Args:
            event: Evento de domínio a ser publicado
        """
        self._events.append(event)

    def collect_events(self) -> List[DomainEvent]:
        """Retorna eventos enfileirados."""
        return list(self._events)

    def clear_events(self) -> None:
        """Limpa fila de eventos."""
        self._events.clear()


class EventPublisher(ABC):
    """
    Interface para publicação de eventos.

    Implementações:
    - EventDispatcher: entrega síncrona em processo (core)
    - LoggingEventPublisher / CeleryEventPublisher (adapters)
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """Publica um único evento."""
        raise NotImplementedError

    def publish_batch(self, events: List[DomainEvent]) -> None:
        """Publica múltiplos eventos, na ordem."""
        for event in events:
            self.publish(event)


@dataclass
class CollectionSnapshot:
    """
    Fotografia serializável de uma coleção.

    Attributes:
        name: Nome lógico da coleção (ex: "work_orders")
        items: Entidades na ordem de inserção
        sequence: Contador corrente de números de negócio
        version: Incrementado a cada escrita; permite descartar
            snapshots antigos em modo write-behind
    """

    name: str
    items: List[Any] = field(default_factory=list)
    sequence: int = 0
    version: int = 0


class SnapshotStore(ABC):
    """
    Port de persistência local por coleção.

    Cada coleção tem um único registro lógico, sobrescrito a cada
    escrita (write-through). Não há replicação nem consistência
    entre processos.
    """

    @abstractmethod
    def load(self, name: str) -> Optional[CollectionSnapshot]:
        """Carrega último snapshot da coleção, ou None se nunca salvo."""
        raise NotImplementedError

    @abstractmethod
    def save(self, snapshot: CollectionSnapshot) -> None:
        """
        Persiste snapshot.

        Raises:
            Exception: Falhas de I/O são propagadas; o retry fica na
                fronteira de escrita (SnapshotWriter).
        """
        raise NotImplementedError
