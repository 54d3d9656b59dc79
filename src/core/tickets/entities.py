"""
Entidades do Domínio de Tickets de Suporte.

Entidades:
- SupportTicketEntity: Solicitação enviada pelo cliente
- TicketStatus: Estados possíveis de um ticket

Regras de Negócio Encapsuladas:
- Ticket novo sempre nasce aberto e visível ao cliente
- Atribuição move o ticket para ASSIGNED
- Transições de status controladas
- Conversão em ordem de trabalho só a partir de OPEN/ASSIGNED
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, List, Optional

from src.core.shared.entities import ChoiceEnum, Entity, Priority, require_text
from src.core.shared.exceptions import (
    ValidationError,
    BusinessRuleViolationError,
)
from src.core.shared.identifiers import TICKET_PREFIX


class TicketStatus(ChoiceEnum):
    """
    Estados possíveis de um ticket.

    Fluxo de Estados:
        OPEN → ASSIGNED → IN_PROGRESS → RESOLVED → CLOSED
                                ↑           │
                                └───────────┘ (reabrir)

    OPEN → ASSIGNED acontece por atribuição a técnico ou por
    conversão em ordem de trabalho.
    """

    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


# Transições permitidas por change_status(). OPEN → ASSIGNED não está
# aqui: só acontece via assign_to() ou mark_converted().
TICKET_TRANSITIONS = {
    TicketStatus.OPEN: (),
    TicketStatus.ASSIGNED: (TicketStatus.IN_PROGRESS,),
    TicketStatus.IN_PROGRESS: (TicketStatus.RESOLVED,),
    TicketStatus.RESOLVED: (TicketStatus.CLOSED, TicketStatus.IN_PROGRESS),
    TicketStatus.CLOSED: (),
}

CONVERTIBLE_STATUSES = (TicketStatus.OPEN, TicketStatus.ASSIGNED)


@dataclass
class SupportTicketEntity(Entity):
    """
    Entidade de Domínio: Ticket de Suporte.

    Invariantes:
    - client_name é obrigatório
    - ticket_number é atribuído pelo store (TIC-NNNNN) e nunca muda
    - Ticket resolvido ou fechado não pode ser atribuído

    Attributes:
        ticket_number: Número legível (handle externo do ticket)
        client_name / client_email / client_phone / client_company: Contato
        subject: Assunto
        description: Descrição do problema
        category: Categoria informada pelo cliente (ex: "installation")
        priority: Prioridade
        status: Estado atual
        assigned_to: ID do técnico responsável
        attachments: URLs de anexos
        internal_notes: Notas internas (não visíveis ao cliente)
        resolution_notes: Notas de resolução
        client_visible: Se o cliente enxerga o ticket no seu painel

    Example:
        ticket = SupportTicketEntity(
            client_name="María González",
            client_email="maria@empresa.com",
            subject="Aire acondicionado",
            category="hardware",
            priority=Priority.HIGH,
        )
        created = store.tickets.create(ticket)
        created.ticket_number  # "TIC-00001"
    """

    ticket_number: str = ""

    client_name: str = ""
    client_email: str = ""
    client_phone: str = ""
    client_company: Optional[str] = None

    subject: str = ""
    description: str = ""
    category: str = "general"
    priority: Priority = Priority.MEDIUM

    status: TicketStatus = TicketStatus.OPEN
    assigned_to: Optional[str] = None

    attachments: List[str] = field(default_factory=list)
    internal_notes: str = ""
    resolution_notes: Optional[str] = None
    client_visible: bool = True

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    ENTITY_TYPE: ClassVar[str] = "SupportTicket"
    NUMBER_FIELD: ClassVar[str] = "ticket_number"
    NUMBER_PREFIX: ClassVar[str] = TICKET_PREFIX

    def validate(self) -> None:
        self.client_name = require_text(self.client_name, "client_name", "Nome do cliente")
        self.category = (self.category or "general").strip().lower()
        self.priority = Priority.coerce(self.priority, "priority")
        self.status = TicketStatus.coerce(self.status, "status")
        if self.attachments is None or isinstance(self.attachments, str):
            raise ValidationError("attachments deve ser uma lista", field="attachments")
        self.attachments = list(self.attachments)
        self.internal_notes = self.internal_notes or ""
        self.client_visible = bool(self.client_visible)

    def assign_to(self, technician_id: str) -> None:
        """
        Atribui ticket a um técnico.

        Regras:
        - Ticket resolvido/fechado não pode ser atribuído
        - Atribuição (ou reatribuição) muda status para ASSIGNED

        Raises:
            ValidationError: Se technician_id vazio
            BusinessRuleViolationError: Se ticket resolvido/fechado
        """
        if not technician_id:
            raise ValidationError("ID do técnico é obrigatório", field="technician_id")

        if self.status in (TicketStatus.RESOLVED, TicketStatus.CLOSED):
            raise BusinessRuleViolationError(
                f"Não é possível atribuir ticket {self.status.value}",
                rule="finished_ticket_cannot_be_assigned",
            )

        self.assigned_to = technician_id
        self.status = TicketStatus.ASSIGNED

    def change_status(
        self,
        new_status: TicketStatus,
        resolution_notes: Optional[str] = None,
    ) -> None:
        """
        Altera status do ticket com validação de transição.

        Transições válidas:
        - ASSIGNED → IN_PROGRESS
        - IN_PROGRESS → RESOLVED
        - RESOLVED → CLOSED, IN_PROGRESS (reabrir)

        Raises:
            BusinessRuleViolationError: Se transição inválida
        """
        new_status = TicketStatus.coerce(new_status, "status")

        if new_status not in TICKET_TRANSITIONS[self.status]:
            raise BusinessRuleViolationError(
                f"Transição de {self.status.value} para {new_status.value} não é permitida",
                rule="invalid_status_transition",
            )

        self.status = new_status
        if new_status == TicketStatus.RESOLVED and resolution_notes:
            self.resolution_notes = resolution_notes.strip()

    def mark_converted(self) -> None:
        """
        Marca ticket como convertido em ordem de trabalho.

        Raises:
            BusinessRuleViolationError: Se ticket já saiu de OPEN/ASSIGNED
        """
        if self.status not in CONVERTIBLE_STATUSES:
            raise BusinessRuleViolationError(
                f"Ticket {self.status.value} não pode ser convertido em ordem de trabalho",
                rule="ticket_not_convertible",
            )
        self.status = TicketStatus.ASSIGNED

    @property
    def client_contact(self) -> str:
        """Contato sintetizado usado na ordem de trabalho: "email - telefone"."""
        return f"{self.client_email} - {self.client_phone}"

    @property
    def is_assigned(self) -> bool:
        return self.assigned_to is not None

    def __repr__(self) -> str:
        return (
            f"SupportTicketEntity("
            f"ticket_number={self.ticket_number or '-'}, "
            f"client='{self.client_name[:20]}', "
            f"status={self.status}, "
            f"priority={self.priority}"
            f")"
        )
