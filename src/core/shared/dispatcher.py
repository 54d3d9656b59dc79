"""
Dispatcher em processo para Domain Events.

Entrega cada evento, de forma síncrona, aos handlers registrados
para o seu tipo. É o ponto onde as notificações derivadas nascem:
o motor de workflow apenas produz eventos e o NotificationSink,
registrado aqui, transforma-os em linhas da coleção de notificações.

Falha de um handler é registrada em log e não impede os demais;
as escritas que originaram o evento já estão confirmadas.
"""

from typing import Callable, Dict, List
import logging

from .events import DomainEvent
from .interfaces import EventPublisher

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class EventDispatcher(EventPublisher):
    """
    Publisher que roteia eventos para handlers locais.

    Example:
        dispatcher = EventDispatcher()
        dispatcher.register_handler("TicketCreatedEvent", sink.on_ticket_created)
        dispatcher.publish(event)
    """

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}

    def register_handler(self, event_type: str, handler: EventHandler) -> None:
        """Registra handler para tipo de evento."""
        self._handlers.setdefault(event_type, []).append(handler)

    def handlers_for(self, event_type: str) -> List[EventHandler]:
        return list(self._handlers.get(event_type, []))

    def publish(self, event: DomainEvent) -> None:
        self._dispatch_to_handlers(event)

    def _dispatch_to_handlers(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Erro em handler para {event.event_type}: {e}",
                    exc_info=True,
                )
