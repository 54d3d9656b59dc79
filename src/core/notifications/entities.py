"""
Entidade de Notificação.

Notificações nascem apenas como efeito colateral de eventos do
workflow de tickets. Depois de criadas, só o campo `read` muda.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, FrozenSet, Optional

from src.core.shared.entities import ChoiceEnum, Entity, require_text


class NotificationType(ChoiceEnum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class NotificationEntity(Entity):
    user_id: str = ""
    title: str = ""
    message: str = ""
    type: NotificationType = NotificationType.INFO
    read: bool = False
    created_at: Optional[datetime] = None
    work_order_id: Optional[str] = None
    ticket_id: Optional[str] = None

    ENTITY_TYPE: ClassVar[str] = "Notification"
    UPDATED_FIELD: ClassVar[Optional[str]] = None
    IMMUTABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset(
        {"user_id", "title", "message", "type", "work_order_id", "ticket_id"}
    )

    def validate(self) -> None:
        self.user_id = require_text(self.user_id, "user_id", "Destinatário")
        self.title = require_text(self.title, "title", "Título")
        self.message = self.message or ""
        self.type = NotificationType.coerce(self.type, "type")
        self.read = bool(self.read)

    def __repr__(self) -> str:
        return f"NotificationEntity(user={self.user_id}, title='{self.title}', read={self.read})"
