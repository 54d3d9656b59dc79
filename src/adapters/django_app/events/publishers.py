"""
Event Publishers - Publicadores de Eventos de Domínio.

Responsável por entregar eventos aos sinks depois do commit.
Implementações:
- LoggingEventPublisher: Loga e despacha para handlers em processo
- CeleryEventPublisher: Publica via Celery (efeitos externos)
- InMemoryEventPublisher: Para testes
- CompositeEventPublisher: Vários destinos

O NotificationSink fica sempre em processo: as notificações do
store precisam existir assim que o caso de uso retorna.
"""

from typing import List, Optional
import json
import logging

from src.core.shared.dispatcher import EventDispatcher
from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher
from src.core.store import EntityStore
from src.core.tickets.handlers import NotificationSink

logger = logging.getLogger(__name__)


class LoggingEventPublisher(EventDispatcher):
    """
    Dispatcher em processo que também loga cada evento.

    Usado em desenvolvimento e como publisher padrão (modo sync).
    """

    def __init__(self, log_level: int = logging.INFO):
        super().__init__()
        self._log_level = log_level

    def publish(self, event: DomainEvent) -> None:
        logger.log(
            self._log_level,
            f"[EVENT] {event.event_type} | "
            f"aggregate={event.aggregate_id} | "
            f"data={json.dumps(event.to_dict()['data'], default=str)}"
        )
        self._dispatch_to_handlers(event)


class CeleryEventPublisher(EventPublisher):
    """
    Publisher que envia eventos para Celery.

    Falha ao enfileirar é logada e não quebra o fluxo principal:
    as escritas que originaram o evento já foram confirmadas.
    """

    def __init__(self, also_log: bool = True):
        self._also_log = also_log

    def publish(self, event: DomainEvent) -> None:
        if self._also_log:
            logger.info(
                f"[EVENT->CELERY] {event.event_type} | "
                f"aggregate={event.aggregate_id}"
            )

        try:
            from src.adapters.django_app.events.handlers import dispatch_domain_event
            dispatch_domain_event.delay(event.event_type, event.to_dict())
        except Exception as e:
            logger.error(f"Falha ao publicar evento no Celery: {e}", exc_info=True)


class InMemoryEventPublisher(EventDispatcher):
    """
    Publisher em memória para testes.

    Armazena eventos publicados e ainda entrega aos handlers
    registrados.
    """

    def __init__(self):
        super().__init__()
        self._published_events: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self._published_events.append(event)
        self._dispatch_to_handlers(event)

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events.copy()

    def clear(self) -> None:
        self._published_events.clear()

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        return [e for e in self._published_events if e.event_type == event_type]


class CompositeEventPublisher(EventPublisher):
    """
    Publisher que delega para múltiplos publishers, na ordem.

    Erro em um destino é logado e não impede os demais.
    """

    def __init__(self, publishers: Optional[List[EventPublisher]] = None):
        self._publishers = list(publishers or [])

    @property
    def publishers(self) -> List[EventPublisher]:
        return list(self._publishers)

    def add_publisher(self, publisher: EventPublisher) -> None:
        self._publishers.append(publisher)

    def publish(self, event: DomainEvent) -> None:
        for publisher in self._publishers:
            try:
                publisher.publish(event)
            except Exception as e:
                logger.error(f"Erro ao publicar em {publisher.__class__.__name__}: {e}")


def get_event_publisher(store: EntityStore, mode: str = "sync") -> EventPublisher:
    """
    Factory do publisher da aplicação.

    Args:
        store: Store onde o NotificationSink grava notificações
        mode: "sync" (só em processo) ou "celery" (também envia ao Celery)

    Returns:
        Publisher configurado
    """
    local = NotificationSink(store).register(LoggingEventPublisher())

    if mode == "celery":
        return CompositeEventPublisher([local, CeleryEventPublisher(also_log=False)])
    if mode != "sync":
        logger.warning(f"EVENT_PUBLISHER_MODE desconhecido '{mode}', usando sync")
    return local
