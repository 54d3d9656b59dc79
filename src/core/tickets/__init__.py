"""
Domínio de Tickets de Suporte.

- Entidades (SupportTicketEntity, TicketStatus)
- Domain Events (TicketCreated, TicketAssigned, TicketConverted)
- DTOs de entrada/saída
- Use Cases em `use_cases` e NotificationSink em `handlers`
  (importados diretamente para evitar ciclo com o store)
"""

from .entities import SupportTicketEntity, TicketStatus, TICKET_TRANSITIONS
from .events import (
    TicketCreatedEvent,
    TicketAssignedEvent,
    TicketConvertedEvent,
    TicketStatusChangedEvent,
)
from .dtos import (
    CreateTicketInputDTO,
    CreateTicketOutputDTO,
    ConvertTicketInputDTO,
    TicketOutputDTO,
)

__all__ = [
    # Entities
    "SupportTicketEntity",
    "TicketStatus",
    "TICKET_TRANSITIONS",
    # Events
    "TicketCreatedEvent",
    "TicketAssignedEvent",
    "TicketConvertedEvent",
    "TicketStatusChangedEvent",
    # DTOs
    "CreateTicketInputDTO",
    "CreateTicketOutputDTO",
    "ConvertTicketInputDTO",
    "TicketOutputDTO",
]
