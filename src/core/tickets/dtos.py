"""
Data Transfer Objects (DTOs) do Domínio de Tickets.

- Input DTOs: dados já recebidos da camada de apresentação
- Output DTOs: o que os use cases devolvem
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from src.core.shared.events import DomainEvent
from src.core.work_orders.entities import WorkOrderEntity

from .entities import SupportTicketEntity


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class CreateTicketInputDTO:
    """
    DTO de entrada para abrir ticket (formulário público de suporte).

    Status, anexos, notas internas e visibilidade não são aceitos
    aqui: todo ticket novo nasce aberto e visível ao cliente.
    """

    client_name: str
    client_email: str = ""
    client_phone: str = ""
    client_company: Optional[str] = None
    subject: str = ""
    description: str = ""
    category: str = "general"
    priority: str = "medium"

    def to_dict(self) -> dict:
        return {
            "client_name": self.client_name,
            "client_email": self.client_email,
            "client_phone": self.client_phone,
            "client_company": self.client_company,
            "subject": self.subject,
            "description": self.description,
            "category": self.category,
            "priority": self.priority,
        }


@dataclass(frozen=True)
class ConvertTicketInputDTO:
    """
    DTO de entrada para converter ticket em ordem de trabalho.

    Attributes:
        ticket_id: Ticket de origem
        assigned_technicians: Técnicos da nova ordem
        scheduled_date: Data agendada
        notes: Observações para a ordem
        acting_supervisor_id: Quem converte (vira created_by e
            supervisor_id da ordem). None usa o supervisor padrão.
    """

    ticket_id: str
    assigned_technicians: Tuple[str, ...] = field(default_factory=tuple)
    scheduled_date: Optional[datetime] = None
    notes: str = ""
    acting_supervisor_id: Optional[str] = None


@dataclass(frozen=True)
class ChangeTicketStatusInputDTO:
    ticket_id: str
    new_status: str
    resolution_notes: Optional[str] = None
    changed_by: Optional[str] = None


@dataclass(frozen=True)
class UpdateTicketInputDTO:
    """
    Campos editáveis pela equipe. None = não alterar.

    Status não é editável aqui (ver ChangeTicketStatusService).
    """

    ticket_id: str
    internal_notes: Optional[str] = None
    client_visible: Optional[bool] = None
    attachments: Optional[Tuple[str, ...]] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_company: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None

    def changes(self) -> Dict[str, object]:
        result = {}
        for name in (
            "internal_notes",
            "client_visible",
            "client_email",
            "client_phone",
            "client_company",
            "subject",
            "description",
            "priority",
        ):
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        if self.attachments is not None:
            result["attachments"] = list(self.attachments)
        return result


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class CreateTicketOutputDTO:
    """
    Resultado da abertura de ticket.

    Attributes:
        ticket_number: Número mostrado ao cliente
        ticket: Cópia do ticket criado
        events: Eventos emitidos (já entregues ao dispatcher)
    """

    ticket_number: str
    ticket: SupportTicketEntity
    events: List[DomainEvent] = field(default_factory=list)


@dataclass
class ConvertTicketOutputDTO:
    ticket: SupportTicketEntity
    work_order: WorkOrderEntity
    events: List[DomainEvent] = field(default_factory=list)


@dataclass
class TicketOutputDTO:
    """DTO de saída de um ticket (serializável)."""

    id: str
    ticket_number: str
    client_name: str
    client_email: str
    client_phone: str
    client_company: Optional[str]
    subject: str
    description: str
    category: str
    priority: str
    status: str
    assigned_to: Optional[str]
    attachments: List[str]
    internal_notes: str
    resolution_notes: Optional[str]
    client_visible: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, entity: SupportTicketEntity) -> "TicketOutputDTO":
        return cls(
            id=entity.id,
            ticket_number=entity.ticket_number,
            client_name=entity.client_name,
            client_email=entity.client_email,
            client_phone=entity.client_phone,
            client_company=entity.client_company,
            subject=entity.subject,
            description=entity.description,
            category=entity.category,
            priority=entity.priority.value,
            status=entity.status.value,
            assigned_to=entity.assigned_to,
            attachments=list(entity.attachments),
            internal_notes=entity.internal_notes,
            resolution_notes=entity.resolution_notes,
            client_visible=entity.client_visible,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_number": self.ticket_number,
            "client_name": self.client_name,
            "client_email": self.client_email,
            "client_phone": self.client_phone,
            "client_company": self.client_company,
            "subject": self.subject,
            "description": self.description,
            "category": self.category,
            "priority": self.priority,
            "status": self.status,
            "assigned_to": self.assigned_to,
            "attachments": list(self.attachments),
            "internal_notes": self.internal_notes,
            "resolution_notes": self.resolution_notes,
            "client_visible": self.client_visible,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
