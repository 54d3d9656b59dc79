"""
Testes dos serviços de Ordens de Trabalho.

Coverage:
- CreateWorkOrderService / UpdateWorkOrderService / DeleteWorkOrderService
- AddEvidenceService
- WorkOrderStatisticsService
"""

from datetime import datetime

import pytest

from src.adapters.django_app.events.publishers import InMemoryEventPublisher
from src.core.forms.dtos import SubmitFilledFormInputDTO
from src.core.forms.use_cases import SubmitFilledFormService
from src.core.shared.exceptions import EntityNotFoundError, ValidationError
from src.core.work_orders.dtos import (
    AddEvidenceInputDTO,
    CreateWorkOrderInputDTO,
    StatisticsQueryDTO,
    UpdateWorkOrderInputDTO,
)
from src.core.work_orders.entities import WorkOrderStatus
from src.core.work_orders.use_cases import (
    AddEvidenceService,
    CreateWorkOrderService,
    DeleteWorkOrderService,
    GetWorkOrderService,
    UpdateWorkOrderService,
    WorkOrderStatisticsService,
)


@pytest.fixture
def publisher():
    return InMemoryEventPublisher()


@pytest.fixture
def create_order(store, publisher):
    def create(**kwargs):
        values = dict(client_name="Ferretería El Tornillo", created_by="2")
        values.update(kwargs)
        return CreateWorkOrderService(store, publisher).execute(CreateWorkOrderInputDTO(**values))
    return create


class TestCreateWorkOrderService:

    def test_criar_ordem(self, create_order, publisher):
        order = create_order(
            service_type="Mantenimiento",
            assigned_technicians=("3", "3", "4"),
            priority="urgent",
        )

        assert order.number == "OT-00001"
        assert order.status == "pending"
        assert order.priority == "urgent"
        assert order.assigned_technicians == ["3", "4"]
        assert order.created_at == order.updated_at
        assert publisher.get_events_by_type("WorkOrderCreatedEvent")[0].number == "OT-00001"

    def test_criar_ordem_nao_gera_notificacao(self, store, create_order):
        create_order(assigned_technicians=("3",))

        assert store.notifications.count() == 0

    def test_criar_ordem_sem_cliente_erro(self, store, create_order):
        with pytest.raises(ValidationError):
            create_order(client_name="")

        assert store.work_orders.count() == 0


class TestUpdateWorkOrderService:

    def test_completar_carimba_data(self, store, publisher, create_order):
        order = create_order()

        updated = UpdateWorkOrderService(store, publisher).execute(
            UpdateWorkOrderInputDTO(work_order_id=order.id, changes={"status": "completed"})
        )

        assert updated.status == "completed"
        assert updated.completed_date is not None
        event = publisher.get_events_by_type("WorkOrderStatusChangedEvent")[0]
        assert (event.previous_status, event.new_status) == ("pending", "completed")

    def test_atualizar_sem_mudar_status_nao_emite_evento(self, store, publisher, create_order):
        order = create_order()

        UpdateWorkOrderService(store, publisher).execute(
            UpdateWorkOrderInputDTO(work_order_id=order.id, changes={"notes": "Llevar escalera"})
        )

        assert publisher.get_events_by_type("WorkOrderStatusChangedEvent") == []

    def test_atualizar_numero_erro(self, store, publisher, create_order):
        order = create_order()

        with pytest.raises(ValidationError):
            UpdateWorkOrderService(store, publisher).execute(
                UpdateWorkOrderInputDTO(work_order_id=order.id, changes={"number": "OT-00099"})
            )

    def test_atualizar_inexistente_erro(self, store, publisher):
        with pytest.raises(EntityNotFoundError):
            UpdateWorkOrderService(store, publisher).execute(
                UpdateWorkOrderInputDTO(work_order_id="nao-existe", changes={"notes": "x"})
            )


class TestDeleteWorkOrderService:

    def test_remover_ordem(self, store, create_order):
        order = create_order()

        assert DeleteWorkOrderService(store).execute(order.id) is True
        assert store.work_orders.get(order.id) is None

    def test_remover_inexistente_retorna_false(self, store):
        assert DeleteWorkOrderService(store).execute("nao-existe") is False

    def test_remover_nao_apaga_formularios(self, store, create_order):
        order = create_order()
        template = store.templates.first(lambda t: t.slug == "orden-trabajo")
        SubmitFilledFormService(store).execute(
            SubmitFilledFormInputDTO(work_order_id=order.id, template_id=template.id, filled_by="3")
        )

        DeleteWorkOrderService(store).execute(order.id)

        assert store.filled_forms.count(lambda f: f.work_order_id == order.id) == 1


class TestAddEvidenceService:

    def test_anexar_evidencia(self, store, create_order):
        order = create_order()

        updated = AddEvidenceService(store).execute(AddEvidenceInputDTO(
            work_order_id=order.id,
            type="photo",
            url="https://files.example.com/ot-1/antes.jpg",
            uploaded_by="3",
            description="Antes del mantenimiento",
        ))

        assert len(updated.evidences) == 1
        assert updated.evidences[0]["type"] == "photo"
        assert GetWorkOrderService(store).execute(order.id).evidences[0]["uploaded_by"] == "3"

    def test_anexar_evidencia_tipo_invalido_erro(self, store, create_order):
        order = create_order()

        with pytest.raises(ValidationError):
            AddEvidenceService(store).execute(AddEvidenceInputDTO(
                work_order_id=order.id, type="video", url="x", uploaded_by="3",
            ))

        assert store.work_orders.get(order.id).evidences == []


class TestWorkOrderStatisticsService:

    def test_estatisticas_gerais(self, store, create_order):
        create_order(service_type="Instalación")
        second = create_order(service_type="Instalación")
        create_order()
        store.work_orders.update(second.id, status=WorkOrderStatus.COMPLETED)
        template = store.templates.first(lambda t: t.slug == "orden-trabajo")
        SubmitFilledFormService(store).execute(
            SubmitFilledFormInputDTO(work_order_id=second.id, template_id=template.id, filled_by="3")
        )

        stats = WorkOrderStatisticsService(store).execute()

        assert stats.total == 3
        assert stats.by_status["completed"] == 1
        assert stats.by_status["cancelled"] == 0
        assert stats.by_service_type == {"Instalación": 2, "Sin tipo": 1}
        assert stats.completion_rate == 33.3
        assert stats.total_forms == 1
        assert stats.template_usage["orden-trabajo"] == 1
        assert stats.template_usage["listado-maestro-documentos"] == 0
        assert list(stats.by_month.values()) == [3]

    def test_estatisticas_filtradas_por_status(self, store, create_order):
        order = create_order()
        create_order()
        store.work_orders.update(order.id, status="in_progress")

        stats = WorkOrderStatisticsService(store).execute(StatisticsQueryDTO(status="in_progress"))

        assert stats.total == 1
        assert stats.completion_rate == 0.0

    def test_uso_de_templates_respeita_filtros(self, store, create_order):
        """Deve contar em template_usage os mesmos formulários de total_forms."""
        pending = create_order()
        started = create_order()
        store.work_orders.update(started.id, status="in_progress")
        template = store.templates.first(lambda t: t.slug == "orden-trabajo")
        service = SubmitFilledFormService(store)
        for order in (pending, started):
            service.execute(
                SubmitFilledFormInputDTO(work_order_id=order.id, template_id=template.id, filled_by="3")
            )

        stats = WorkOrderStatisticsService(store).execute(StatisticsQueryDTO(status="in_progress"))

        assert stats.total_forms == 1
        assert stats.template_usage["orden-trabajo"] == 1
        assert sum(stats.template_usage.values()) == stats.total_forms

    def test_estatisticas_filtradas_por_data(self, store, create_order):
        create_order()

        stats = WorkOrderStatisticsService(store).execute(
            StatisticsQueryDTO(date_from=datetime(2999, 1, 1))
        )

        assert stats.total == 0
        assert stats.by_month == {}
