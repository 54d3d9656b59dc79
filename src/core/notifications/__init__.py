"""
Domínio de Notificações.
"""

from .entities import NotificationEntity, NotificationType

__all__ = ["NotificationEntity", "NotificationType"]
