"""
Use Cases (Application Services) do Domínio de Tickets.

Motor de workflow de tickets:
- CreateTicketService: Abre ticket (status forçado para OPEN)
- AssignTicketService: Atribui ticket a técnico
- ConvertTicketToWorkOrderService: Gera ordem de trabalho a partir do ticket
- ChangeTicketStatusService: Transições validadas de status
- UpdateTicketService: Edição de campos não-estruturais
- GetTicketService / TicketStatisticsService: Consultas

Cada serviço recebe o EntityStore e um EventPublisher opcional;
as escritas acontecem dentro de um StoreUnitOfWork e os eventos só
são entregues depois do commit.
"""

from typing import Dict, Optional
import logging

from src.core.shared.interfaces import EventPublisher
from src.core.store import EntityStore, StoreUnitOfWork
from src.core.work_orders.entities import WorkOrderEntity, WorkOrderStatus
from src.core.work_orders.events import WorkOrderCreatedEvent

from .dtos import (
    ChangeTicketStatusInputDTO,
    ConvertTicketInputDTO,
    ConvertTicketOutputDTO,
    CreateTicketInputDTO,
    CreateTicketOutputDTO,
    TicketOutputDTO,
    UpdateTicketInputDTO,
)
from .entities import SupportTicketEntity, TicketStatus
from .events import (
    TicketAssignedEvent,
    TicketConvertedEvent,
    TicketCreatedEvent,
    TicketStatusChangedEvent,
)

logger = logging.getLogger(__name__)

DEFAULT_SUPERVISOR_ID = "2"
DEFAULT_WORK_ORDER_FORMAT = "orden-trabajo"
DEFAULT_CLIENT_ADDRESS = "Por definir"

SERVICE_TYPE_BY_CATEGORY = {
    "installation": "Instalación",
    "maintenance": "Mantenimiento",
}
DEFAULT_SERVICE_TYPE = "Soporte Técnico"


def service_type_for(category: str) -> str:
    """Tipo de serviço da ordem a partir da categoria do ticket."""
    return SERVICE_TYPE_BY_CATEGORY.get((category or "").lower(), DEFAULT_SERVICE_TYPE)


class _TicketService:
    COLLECTIONS = ("tickets",)

    def __init__(self, store: EntityStore, event_publisher: Optional[EventPublisher] = None):
        self.store = store
        self.event_publisher = event_publisher

    def _unit_of_work(self) -> StoreUnitOfWork:
        return StoreUnitOfWork(self.store, self.event_publisher, collections=self.COLLECTIONS)


class CreateTicketService(_TicketService):
    """
    Use Case: Abrir ticket de suporte.

    Fluxo:
    1. Montar rascunho (status OPEN, sem anexos, visível ao cliente)
    2. Criar no store (número TIC-NNNNN atribuído lá)
    3. Enfileirar TicketCreatedEvent para o supervisor configurado
    4. Após commit, o NotificationSink cria a notificação

    Example:
        service = CreateTicketService(store, dispatcher)
        output = service.execute(CreateTicketInputDTO(
            client_name="María González",
            category="hardware",
            priority="high",
        ))
        output.ticket_number  # "TIC-00001"
    """

    def __init__(
        self,
        store: EntityStore,
        event_publisher: Optional[EventPublisher] = None,
        supervisor_id: str = DEFAULT_SUPERVISOR_ID,
    ):
        super().__init__(store, event_publisher)
        self.supervisor_id = supervisor_id

    def execute(self, input_dto: CreateTicketInputDTO) -> CreateTicketOutputDTO:
        """
        Raises:
            ValidationError: Se rascunho inválido (nada é criado)
        """
        draft = SupportTicketEntity(
            client_name=input_dto.client_name,
            client_email=input_dto.client_email,
            client_phone=input_dto.client_phone,
            client_company=input_dto.client_company,
            subject=input_dto.subject,
            description=input_dto.description,
            category=input_dto.category,
            priority=input_dto.priority,
            status=TicketStatus.OPEN,
            attachments=[],
            internal_notes="",
            client_visible=True,
        )

        with self._unit_of_work() as uow:
            ticket = self.store.tickets.create(draft)
            event = TicketCreatedEvent(
                aggregate_id=ticket.id,
                ticket_number=ticket.ticket_number,
                client_name=ticket.client_name,
                recipient_id=self.supervisor_id,
                category=ticket.category,
                priority=ticket.priority.value,
            )
            uow.publish_event(event)

        logger.info(f"Ticket {ticket.ticket_number} criado por {ticket.client_name}")
        return CreateTicketOutputDTO(
            ticket_number=ticket.ticket_number,
            ticket=ticket,
            events=[event],
        )


class AssignTicketService(_TicketService):
    """
    Use Case: Atribuir ticket a um técnico.

    Raises:
        EntityNotFoundError: Se ticket não existe
        BusinessRuleViolationError: Se ticket resolvido/fechado
    """

    def execute(
        self,
        ticket_id: str,
        technician_id: str,
        assigned_by: Optional[str] = None,
    ) -> TicketOutputDTO:
        with self._unit_of_work() as uow:
            ticket = self.store.tickets.get_or_raise(ticket_id)
            ticket.assign_to(technician_id)
            ticket = self.store.tickets.save(ticket)

            uow.publish_event(
                TicketAssignedEvent(
                    aggregate_id=ticket.id,
                    ticket_number=ticket.ticket_number,
                    technician_id=technician_id,
                    assigned_by=assigned_by,
                )
            )

        logger.info(f"Ticket {ticket.ticket_number} atribuído a {technician_id}")
        return TicketOutputDTO.from_entity(ticket)


class ConvertTicketToWorkOrderService(_TicketService):
    """
    Use Case: Converter ticket em ordem de trabalho.

    Fluxo (atômico sobre tickets e work_orders):
    1. Buscar ticket e verificar que está OPEN/ASSIGNED
    2. Criar ordem com dados copiados do ticket
    3. Mover ticket para ASSIGNED
    4. Enfileirar TicketConvertedEvent e WorkOrderCreatedEvent

    Qualquer falha restaura as duas coleções.

    Raises:
        EntityNotFoundError: Se ticket não existe
        BusinessRuleViolationError: Se ticket já em andamento/resolvido/fechado
        ValidationError: Se dados da ordem inválidos
    """

    COLLECTIONS = ("tickets", "work_orders")

    def __init__(
        self,
        store: EntityStore,
        event_publisher: Optional[EventPublisher] = None,
        supervisor_id: str = DEFAULT_SUPERVISOR_ID,
        default_format: str = DEFAULT_WORK_ORDER_FORMAT,
    ):
        super().__init__(store, event_publisher)
        self.supervisor_id = supervisor_id
        self.default_format = default_format

    def execute(self, input_dto: ConvertTicketInputDTO) -> ConvertTicketOutputDTO:
        supervisor_id = input_dto.acting_supervisor_id or self.supervisor_id

        with self._unit_of_work() as uow:
            ticket = self.store.tickets.get_or_raise(input_dto.ticket_id)
            ticket.mark_converted()

            work_order = self.store.work_orders.create(
                self._build_work_order(ticket, input_dto, supervisor_id)
            )
            ticket = self.store.tickets.save(ticket)

            events = [
                TicketConvertedEvent(
                    aggregate_id=ticket.id,
                    ticket_number=ticket.ticket_number,
                    work_order_id=work_order.id,
                    work_order_number=work_order.number,
                    technician_ids=tuple(work_order.assigned_technicians),
                    supervisor_id=supervisor_id,
                    client_name=ticket.client_name,
                ),
                WorkOrderCreatedEvent(
                    aggregate_id=work_order.id,
                    number=work_order.number,
                    client_name=work_order.client_name,
                    service_type=work_order.service_type,
                    priority=work_order.priority.value,
                    created_by=work_order.created_by,
                    technician_ids=tuple(work_order.assigned_technicians),
                    source_ticket_id=ticket.id,
                ),
            ]
            for event in events:
                uow.publish_event(event)

        logger.info(f"Ticket {ticket.ticket_number} convertido em {work_order.number}")
        return ConvertTicketOutputDTO(ticket=ticket, work_order=work_order, events=events)

    def _build_work_order(
        self,
        ticket: SupportTicketEntity,
        input_dto: ConvertTicketInputDTO,
        supervisor_id: str,
    ) -> WorkOrderEntity:
        return WorkOrderEntity(
            client_name=ticket.client_name,
            client_contact=ticket.client_contact,
            client_address=ticket.client_company or DEFAULT_CLIENT_ADDRESS,
            description=f"{ticket.subject}\n\nDescripción: {ticket.description}",
            service_type=service_type_for(ticket.category),
            priority=ticket.priority,
            status=WorkOrderStatus.ASSIGNED,
            assigned_technicians=list(input_dto.assigned_technicians),
            assigned_formats=[self.default_format],
            created_by=supervisor_id,
            supervisor_id=supervisor_id,
            scheduled_date=input_dto.scheduled_date,
            notes=input_dto.notes,
            evidences=[],
        )


class ChangeTicketStatusService(_TicketService):
    """
    Use Case: Alterar status com validação de transição.

    Raises:
        EntityNotFoundError: Se ticket não existe
        BusinessRuleViolationError: Se transição inválida
        ValidationError: Se status desconhecido
    """

    def execute(self, input_dto: ChangeTicketStatusInputDTO) -> TicketOutputDTO:
        with self._unit_of_work() as uow:
            ticket = self.store.tickets.get_or_raise(input_dto.ticket_id)
            previous = ticket.status
            ticket.change_status(input_dto.new_status, input_dto.resolution_notes)
            ticket = self.store.tickets.save(ticket)

            uow.publish_event(
                TicketStatusChangedEvent(
                    aggregate_id=ticket.id,
                    ticket_number=ticket.ticket_number,
                    previous_status=previous.value,
                    new_status=ticket.status.value,
                    changed_by=input_dto.changed_by,
                )
            )

        return TicketOutputDTO.from_entity(ticket)


class UpdateTicketService(_TicketService):
    """Use Case: Editar notas internas, visibilidade, anexos e contato."""

    def execute(self, input_dto: UpdateTicketInputDTO) -> TicketOutputDTO:
        changes = input_dto.changes()
        with self._unit_of_work():
            if changes:
                ticket = self.store.tickets.update(input_dto.ticket_id, **changes)
            else:
                ticket = self.store.tickets.get_or_raise(input_dto.ticket_id)
        return TicketOutputDTO.from_entity(ticket)


class GetTicketService(_TicketService):
    def execute(self, ticket_id: str) -> TicketOutputDTO:
        return TicketOutputDTO.from_entity(self.store.tickets.get_or_raise(ticket_id))


class TicketStatisticsService(_TicketService):
    """Contagem de tickets por status (todos os status presentes, zero incluso)."""

    def execute(self) -> Dict[str, object]:
        by_status = {status.value: 0 for status in TicketStatus}
        tickets = self.store.tickets.query()
        for ticket in tickets:
            by_status[ticket.status.value] += 1
        return {"total": len(tickets), "by_status": by_status}
