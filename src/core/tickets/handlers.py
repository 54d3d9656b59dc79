"""
NotificationSink - Notificações derivadas do workflow de tickets.

Notificações nunca são criadas diretamente por quem chama o core:
elas são efeito colateral dos eventos de ticket, entregues pelo
EventDispatcher depois do commit. Textos em espanhol, como na
interface do sistema.
"""

from typing import List
import logging

from src.core.notifications.entities import NotificationEntity, NotificationType
from src.core.shared.dispatcher import EventDispatcher
from src.core.store import EntityStore

from .events import TicketAssignedEvent, TicketConvertedEvent, TicketCreatedEvent

logger = logging.getLogger(__name__)


class NotificationSink:
    """
    Example:
        dispatcher = EventDispatcher()
        NotificationSink(store).register(dispatcher)
    """

    def __init__(self, store: EntityStore):
        self.store = store

    def register(self, dispatcher: EventDispatcher) -> EventDispatcher:
        dispatcher.register_handler("TicketCreatedEvent", self.on_ticket_created)
        dispatcher.register_handler("TicketAssignedEvent", self.on_ticket_assigned)
        dispatcher.register_handler("TicketConvertedEvent", self.on_ticket_converted)
        return dispatcher

    def on_ticket_created(self, event: TicketCreatedEvent) -> NotificationEntity:
        return self._notify(
            NotificationEntity(
                user_id=event.recipient_id,
                title="Nuevo ticket de soporte",
                message=f"Nuevo ticket {event.ticket_number} creado por {event.client_name}",
                type=NotificationType.INFO,
                ticket_id=event.aggregate_id,
            )
        )

    def on_ticket_assigned(self, event: TicketAssignedEvent) -> NotificationEntity:
        return self._notify(
            NotificationEntity(
                user_id=event.technician_id,
                title="Ticket asignado",
                message=f"Se te ha asignado el ticket {event.ticket_number}",
                type=NotificationType.INFO,
                ticket_id=event.aggregate_id,
            )
        )

    def on_ticket_converted(self, event: TicketConvertedEvent) -> List[NotificationEntity]:
        return [
            self._notify(
                NotificationEntity(
                    user_id=technician_id,
                    title="Nueva orden de trabajo",
                    message=(
                        f"Se te ha asignado la orden {event.work_order_number} "
                        f"(ticket {event.ticket_number})"
                    ),
                    type=NotificationType.INFO,
                    work_order_id=event.work_order_id,
                    ticket_id=event.aggregate_id,
                )
            )
            for technician_id in event.technician_ids
        ]

    def _notify(self, draft: NotificationEntity) -> NotificationEntity:
        notification = self.store.notifications.create(draft)
        logger.debug(f"Notificação para {notification.user_id}: {notification.message}")
        return notification


def build_dispatcher(store: EntityStore) -> EventDispatcher:
    """Dispatcher em processo com o NotificationSink registrado."""
    return NotificationSink(store).register(EventDispatcher())
