"""
Domain Events do Domínio de Tickets.

Eventos:
- TicketCreatedEvent: Cliente abriu um ticket
- TicketAssignedEvent: Ticket atribuído a técnico
- TicketConvertedEvent: Ticket convertido em ordem de trabalho
- TicketStatusChangedEvent: Transição de status validada

Uso:
    Os use cases enfileiram eventos no StoreUnitOfWork; o dispatcher
    os entrega após o commit. O NotificationSink transforma os três
    primeiros em notificações.

    with uow:
        ticket = store.tickets.create(draft)
        uow.publish_event(TicketCreatedEvent(aggregate_id=ticket.id, ...))
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from src.core.shared.events import DomainEvent


@dataclass
class TicketCreatedEvent(DomainEvent):
    """
    Evento: Ticket foi criado.

    Attributes:
        ticket_number: Número TIC-NNNNN
        client_name: Quem abriu o ticket
        recipient_id: Supervisor que deve ser notificado
        category / priority: Classificação informada
    """

    ticket_number: str = ""
    client_name: str = ""
    recipient_id: str = ""
    category: str = ""
    priority: str = ""

    @property
    def aggregate_type(self) -> str:
        return "SupportTicket"


@dataclass
class TicketAssignedEvent(DomainEvent):
    """Evento: Ticket foi atribuído (ou reatribuído) a um técnico."""

    ticket_number: str = ""
    technician_id: str = ""
    assigned_by: Optional[str] = None

    @property
    def aggregate_type(self) -> str:
        return "SupportTicket"


@dataclass
class TicketConvertedEvent(DomainEvent):
    """
    Evento: Ticket virou ordem de trabalho.

    Attributes:
        ticket_number: Número do ticket de origem
        work_order_id / work_order_number: Ordem criada
        technician_ids: Técnicos da ordem (cada um recebe notificação)
        supervisor_id: Supervisor que fez a conversão
        client_name: Cliente do ticket
    """

    ticket_number: str = ""
    work_order_id: str = ""
    work_order_number: str = ""
    technician_ids: Tuple[str, ...] = field(default_factory=tuple)
    supervisor_id: str = ""
    client_name: str = ""

    def __post_init__(self):
        super().__post_init__()
        self.technician_ids = tuple(self.technician_ids)

    @property
    def aggregate_type(self) -> str:
        return "SupportTicket"


@dataclass
class TicketStatusChangedEvent(DomainEvent):
    ticket_number: str = ""
    previous_status: str = ""
    new_status: str = ""
    changed_by: Optional[str] = None

    @property
    def aggregate_type(self) -> str:
        return "SupportTicket"
