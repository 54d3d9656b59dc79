"""
Testes do motor de workflow de tickets.

Estratégia de Teste:
- EntityStore com InMemorySnapshotStore
- Dispatcher em processo com NotificationSink (notificações reais)
- Verifica eventos emitidos e notificações derivadas

Coverage:
- CreateTicketService
- AssignTicketService
- ConvertTicketToWorkOrderService
- ChangeTicketStatusService
- UpdateTicketService / TicketStatisticsService
"""

import pytest

from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    ValidationError,
)
from src.core.tickets.dtos import (
    ChangeTicketStatusInputDTO,
    ConvertTicketInputDTO,
    CreateTicketInputDTO,
    UpdateTicketInputDTO,
)
from src.core.tickets.entities import TicketStatus
from src.core.tickets.events import TicketConvertedEvent, TicketCreatedEvent
from src.core.tickets.use_cases import (
    AssignTicketService,
    ChangeTicketStatusService,
    ConvertTicketToWorkOrderService,
    CreateTicketService,
    GetTicketService,
    TicketStatisticsService,
    UpdateTicketService,
)
from src.core.work_orders.entities import WorkOrderStatus
from src.core.work_orders.events import WorkOrderCreatedEvent


def _ticket_input(**kwargs) -> CreateTicketInputDTO:
    values = dict(
        client_name="María González",
        client_email="maria@empresa.com",
        client_phone="3001112233",
        subject="Impresora no imprime",
        description="La impresora de recepción no responde",
        category="hardware",
        priority="high",
    )
    values.update(kwargs)
    return CreateTicketInputDTO(**values)


@pytest.fixture
def create_ticket(store, dispatcher):
    def create(**kwargs):
        return CreateTicketService(store, dispatcher, supervisor_id="2").execute(_ticket_input(**kwargs))
    return create


class TestCreateTicketService:

    def test_criar_primeiro_ticket(self, store, create_ticket):
        """Primeiro ticket recebe TIC-00001 e nasce aberto."""
        output = create_ticket()

        assert output.ticket_number == "TIC-00001"
        assert output.ticket.status == TicketStatus.OPEN
        assert output.ticket.client_visible is True
        assert store.tickets.get(output.ticket.id).ticket_number == "TIC-00001"

    def test_criar_ticket_notifica_supervisor(self, store, create_ticket):
        """Supervisor recebe notificação mencionando o número."""
        output = create_ticket()

        notifications = store.notifications.query(lambda n: n.user_id == "2")
        assert len(notifications) == 1
        assert notifications[0].title == "Nuevo ticket de soporte"
        assert "TIC-00001" in notifications[0].message
        assert notifications[0].ticket_id == output.ticket.id
        assert notifications[0].read is False

    def test_criar_ticket_retorna_eventos(self, create_ticket):
        output = create_ticket()

        assert len(output.events) == 1
        assert isinstance(output.events[0], TicketCreatedEvent)
        assert output.events[0].recipient_id == "2"

    def test_criar_ticket_sem_nome_erro(self, store, create_ticket):
        """Rascunho inválido não cria ticket nem notificação."""
        with pytest.raises(ValidationError):
            create_ticket(client_name="")

        assert store.tickets.count() == 0
        assert store.notifications.count() == 0

    def test_criar_ticket_prioridade_invalida_erro(self, create_ticket):
        with pytest.raises(ValidationError) as exc_info:
            create_ticket(priority="altissima")

        assert exc_info.value.field == "priority"

    def test_numeracao_sequencial(self, create_ticket):
        numbers = [create_ticket().ticket_number for _ in range(3)]

        assert numbers == ["TIC-00001", "TIC-00002", "TIC-00003"]


class TestAssignTicketService:

    def test_atribuir_ticket(self, store, dispatcher, create_ticket):
        ticket = create_ticket().ticket

        output = AssignTicketService(store, dispatcher).execute(ticket.id, "3", assigned_by="2")

        assert output.status == "assigned"
        assert output.assigned_to == "3"
        notification = store.notifications.first(lambda n: n.user_id == "3")
        assert notification.title == "Ticket asignado"
        assert ticket.ticket_number in notification.message

    def test_atribuir_ticket_inexistente_erro(self, store, dispatcher):
        with pytest.raises(EntityNotFoundError):
            AssignTicketService(store, dispatcher).execute("nao-existe", "3")

    def test_atribuir_ticket_fechado_erro(self, store, dispatcher, create_ticket):
        ticket = create_ticket().ticket
        store.tickets.update(ticket.id, status="closed")

        with pytest.raises(BusinessRuleViolationError):
            AssignTicketService(store, dispatcher).execute(ticket.id, "3")

        assert store.tickets.get(ticket.id).assigned_to is None

    def test_atribuir_tecnico_vazio_erro(self, store, dispatcher, create_ticket):
        ticket = create_ticket().ticket

        with pytest.raises(ValidationError):
            AssignTicketService(store, dispatcher).execute(ticket.id, "")


class TestConvertTicketToWorkOrderService:

    def _convert(self, store, dispatcher, ticket_id, technicians=("3",)):
        service = ConvertTicketToWorkOrderService(store, dispatcher, supervisor_id="2")
        return service.execute(ConvertTicketInputDTO(ticket_id=ticket_id, assigned_technicians=technicians))

    def test_converter_ticket_de_instalacao(self, store, dispatcher, create_ticket):
        """Ordem criada com dados do ticket; ticket passa a assigned."""
        ticket = create_ticket(category="installation", client_company="Clínica Norte").ticket

        output = self._convert(store, dispatcher, ticket.id)

        order = output.work_order
        assert order.number == "OT-00001"
        assert order.service_type == "Instalación"
        assert order.status == WorkOrderStatus.ASSIGNED
        assert order.assigned_technicians == ["3"]
        assert order.assigned_formats == ["orden-trabajo"]
        assert order.client_name == "María González"
        assert order.client_contact == "maria@empresa.com - 3001112233"
        assert order.client_address == "Clínica Norte"
        assert order.supervisor_id == "2"
        assert output.ticket.status == TicketStatus.ASSIGNED
        assert store.tickets.get(ticket.id).status == TicketStatus.ASSIGNED

    def test_converter_ticket_sem_empresa_usa_endereco_padrao(self, store, dispatcher, create_ticket):
        ticket = create_ticket(category="network").ticket

        order = self._convert(store, dispatcher, ticket.id).work_order

        assert order.client_address == "Por definir"
        assert order.service_type == "Soporte Técnico"

    def test_converter_notifica_cada_tecnico(self, store, dispatcher, create_ticket):
        ticket = create_ticket().ticket

        self._convert(store, dispatcher, ticket.id, technicians=("3", "4"))

        for technician_id in ("3", "4"):
            notification = store.notifications.first(lambda n: n.user_id == technician_id)
            assert notification.title == "Nueva orden de trabajo"
            assert "OT-00001" in notification.message

    def test_converter_emite_eventos(self, store, dispatcher, create_ticket):
        ticket = create_ticket().ticket

        output = self._convert(store, dispatcher, ticket.id)

        assert isinstance(output.events[0], TicketConvertedEvent)
        assert isinstance(output.events[1], WorkOrderCreatedEvent)
        assert output.events[1].source_ticket_id == ticket.id

    def test_converter_ticket_inexistente_erro(self, store, dispatcher):
        with pytest.raises(EntityNotFoundError):
            self._convert(store, dispatcher, "nao-existe")

        assert store.work_orders.count() == 0

    def test_converter_ticket_em_andamento_erro(self, store, dispatcher, create_ticket):
        """Nada muda em nenhuma das duas coleções."""
        ticket = create_ticket().ticket
        store.tickets.update(ticket.id, status="in_progress")

        with pytest.raises(BusinessRuleViolationError):
            self._convert(store, dispatcher, ticket.id)

        assert store.work_orders.count() == 0
        assert store.work_orders.sequence == 0
        assert store.tickets.get(ticket.id).status == TicketStatus.IN_PROGRESS

    def test_supervisor_da_conversao_sobrepoe_padrao(self, store, dispatcher, create_ticket):
        ticket = create_ticket().ticket
        service = ConvertTicketToWorkOrderService(store, dispatcher, supervisor_id="2")

        output = service.execute(ConvertTicketInputDTO(
            ticket_id=ticket.id,
            assigned_technicians=("3",),
            acting_supervisor_id="9",
        ))

        assert output.work_order.supervisor_id == "9"
        assert output.work_order.created_by == "9"


class TestChangeTicketStatusService:

    def test_fluxo_completo_ate_fechar(self, store, dispatcher, create_ticket):
        ticket = create_ticket().ticket
        AssignTicketService(store, dispatcher).execute(ticket.id, "3")
        service = ChangeTicketStatusService(store, dispatcher)

        service.execute(ChangeTicketStatusInputDTO(ticket_id=ticket.id, new_status="in_progress"))
        resolved = service.execute(ChangeTicketStatusInputDTO(
            ticket_id=ticket.id,
            new_status="resolved",
            resolution_notes="Se cambió el cable de red",
        ))
        closed = service.execute(ChangeTicketStatusInputDTO(ticket_id=ticket.id, new_status="closed"))

        assert resolved.resolution_notes == "Se cambió el cable de red"
        assert closed.status == "closed"

    def test_transicao_invalida_erro(self, store, dispatcher, create_ticket):
        ticket = create_ticket().ticket

        with pytest.raises(BusinessRuleViolationError):
            ChangeTicketStatusService(store, dispatcher).execute(
                ChangeTicketStatusInputDTO(ticket_id=ticket.id, new_status="resolved")
            )

        assert store.tickets.get(ticket.id).status == TicketStatus.OPEN

    def test_reabrir_ticket_resolvido(self, store, dispatcher, create_ticket):
        ticket = create_ticket().ticket
        store.tickets.update(ticket.id, status="resolved")

        output = ChangeTicketStatusService(store, dispatcher).execute(
            ChangeTicketStatusInputDTO(ticket_id=ticket.id, new_status="in_progress")
        )

        assert output.status == "in_progress"


class TestConsultasDeTickets:

    def test_atualizar_notas_internas(self, store, dispatcher, create_ticket):
        ticket = create_ticket().ticket

        output = UpdateTicketService(store, dispatcher).execute(
            UpdateTicketInputDTO(ticket_id=ticket.id, internal_notes="Cliente VIP", client_visible=False)
        )

        assert output.internal_notes == "Cliente VIP"
        assert output.client_visible is False

    def test_obter_ticket(self, store, create_ticket):
        ticket = create_ticket().ticket

        output = GetTicketService(store).execute(ticket.id)

        assert output.ticket_number == "TIC-00001"
        assert output.to_dict()["priority"] == "high"

    def test_estatisticas_por_status(self, store, dispatcher, create_ticket):
        first = create_ticket().ticket
        create_ticket()
        AssignTicketService(store, dispatcher).execute(first.id, "3")

        stats = TicketStatisticsService(store).execute()

        assert stats["total"] == 2
        assert stats["by_status"]["open"] == 1
        assert stats["by_status"]["assigned"] == 1
        assert stats["by_status"]["closed"] == 0
