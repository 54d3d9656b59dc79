"""
Use Cases de Notificações.

Notificações são criadas pelo NotificationSink; aqui só se marca
como lida. Marcar como lida é idempotente.
"""

from typing import Optional

from src.core.shared.interfaces import EventPublisher
from src.core.store import EntityStore, StoreUnitOfWork

from .entities import NotificationEntity


class MarkNotificationReadService:
    def __init__(self, store: EntityStore, event_publisher: Optional[EventPublisher] = None):
        self.store = store
        self.event_publisher = event_publisher

    def execute(self, notification_id: str) -> NotificationEntity:
        """
        Raises:
            EntityNotFoundError: Se notificação não existe
        """
        with StoreUnitOfWork(self.store, self.event_publisher, collections=("notifications",)):
            notification = self.store.notifications.get_or_raise(notification_id)
            if notification.read:
                return notification
            return self.store.notifications.update(notification_id, read=True)


class MarkAllNotificationsReadService:
    def __init__(self, store: EntityStore, event_publisher: Optional[EventPublisher] = None):
        self.store = store
        self.event_publisher = event_publisher

    def execute(self, user_id: str) -> int:
        """Marca todas as não lidas do usuário. Retorna quantas mudaram."""
        with StoreUnitOfWork(self.store, self.event_publisher, collections=("notifications",)):
            unread = self.store.notifications.query(lambda n: n.user_id == user_id and not n.read)
            for notification in unread:
                self.store.notifications.update(notification.id, read=True)
        return len(unread)
