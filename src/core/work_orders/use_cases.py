"""
Use Cases do Domínio de Ordens de Trabalho.

- CreateWorkOrderService / UpdateWorkOrderService / DeleteWorkOrderService
- AddEvidenceService: Anexa evidência à ordem
- GetWorkOrderService
- WorkOrderStatisticsService: Relatório agregado (status, tipo de
  serviço, mês, uso de templates)
"""

from collections import Counter
from datetime import datetime
from typing import Optional
import logging

from src.core.shared.interfaces import EventPublisher
from src.core.store import EntityStore, StoreUnitOfWork

from .dtos import (
    AddEvidenceInputDTO,
    CreateWorkOrderInputDTO,
    StatisticsQueryDTO,
    UpdateWorkOrderInputDTO,
    WorkOrderOutputDTO,
    WorkOrderStatisticsDTO,
)
from .entities import EvidenceEntity, WorkOrderEntity, WorkOrderStatus
from .events import WorkOrderCreatedEvent, WorkOrderStatusChangedEvent

logger = logging.getLogger(__name__)


class _WorkOrderService:
    def __init__(self, store: EntityStore, event_publisher: Optional[EventPublisher] = None):
        self.store = store
        self.event_publisher = event_publisher

    def _unit_of_work(self) -> StoreUnitOfWork:
        return StoreUnitOfWork(self.store, self.event_publisher, collections=("work_orders",))


class CreateWorkOrderService(_WorkOrderService):
    """
    Use Case: Criar ordem de trabalho.

    O número OT-NNNNN é atribuído pelo store, em ordem de criação.

    Raises:
        ValidationError: Se client_name vazio ou valores inválidos
    """

    def execute(self, input_dto: CreateWorkOrderInputDTO) -> WorkOrderOutputDTO:
        draft = WorkOrderEntity(
            client_name=input_dto.client_name,
            client_contact=input_dto.client_contact,
            client_address=input_dto.client_address,
            description=input_dto.description,
            service_type=input_dto.service_type,
            priority=input_dto.priority,
            status=input_dto.status,
            assigned_technicians=list(input_dto.assigned_technicians),
            assigned_formats=list(input_dto.assigned_formats),
            created_by=input_dto.created_by,
            supervisor_id=input_dto.supervisor_id,
            scheduled_date=input_dto.scheduled_date,
            notes=input_dto.notes,
        )

        with self._unit_of_work() as uow:
            order = self.store.work_orders.create(draft)
            uow.publish_event(
                WorkOrderCreatedEvent(
                    aggregate_id=order.id,
                    number=order.number,
                    client_name=order.client_name,
                    service_type=order.service_type,
                    priority=order.priority.value,
                    created_by=order.created_by,
                    technician_ids=tuple(order.assigned_technicians),
                )
            )

        logger.info(f"Ordem {order.number} criada para {order.client_name}")
        return WorkOrderOutputDTO.from_entity(order)


class UpdateWorkOrderService(_WorkOrderService):
    """
    Use Case: Atualização parcial de ordem.

    Mudar status para COMPLETED carimba completed_date (se não
    informado). Mudança de status emite WorkOrderStatusChangedEvent.

    Raises:
        EntityNotFoundError: Se ordem não existe
        ValidationError: Campo desconhecido/imutável ou valor inválido
    """

    def execute(self, input_dto: UpdateWorkOrderInputDTO) -> WorkOrderOutputDTO:
        changes = dict(input_dto.changes)

        with self._unit_of_work() as uow:
            current = self.store.work_orders.get_or_raise(input_dto.work_order_id)

            new_status = None
            if "status" in changes:
                new_status = WorkOrderStatus.coerce(changes["status"], "status")
                changes["status"] = new_status
                if new_status == WorkOrderStatus.COMPLETED and not changes.get("completed_date"):
                    changes["completed_date"] = current.completed_date or datetime.now()

            order = self.store.work_orders.update(current.id, **changes)

            if new_status is not None and new_status != current.status:
                uow.publish_event(
                    WorkOrderStatusChangedEvent(
                        aggregate_id=order.id,
                        number=order.number,
                        previous_status=current.status.value,
                        new_status=new_status.value,
                    )
                )

        return WorkOrderOutputDTO.from_entity(order)


class DeleteWorkOrderService(_WorkOrderService):
    """
    Use Case: Remover ordem.

    Sem cascata: formulários preenchidos mantêm work_order_id.
    Retorna False se a ordem não existe.
    """

    def execute(self, work_order_id: str) -> bool:
        with self._unit_of_work():
            deleted = self.store.work_orders.delete(work_order_id)
        if deleted:
            logger.info(f"Ordem {work_order_id} removida")
        return deleted


class AddEvidenceService(_WorkOrderService):
    """
    Use Case: Anexar evidência (foto, documento, assinatura).

    Raises:
        EntityNotFoundError: Se ordem não existe
        ValidationError: Tipo inválido, URL ou autor vazio
    """

    def execute(self, input_dto: AddEvidenceInputDTO) -> WorkOrderOutputDTO:
        evidence = EvidenceEntity(
            type=input_dto.type,
            url=input_dto.url,
            description=input_dto.description,
            uploaded_by=input_dto.uploaded_by,
        )
        with self._unit_of_work():
            order = self.store.work_orders.get_or_raise(input_dto.work_order_id)
            order.add_evidence(evidence)
            order = self.store.work_orders.save(order)
        return WorkOrderOutputDTO.from_entity(order)


class GetWorkOrderService(_WorkOrderService):
    def execute(self, work_order_id: str) -> WorkOrderOutputDTO:
        return WorkOrderOutputDTO.from_entity(self.store.work_orders.get_or_raise(work_order_id))


class WorkOrderStatisticsService(_WorkOrderService):
    """
    Relatório agregado de ordens de trabalho.

    Filtros (StatisticsQueryDTO):
    - date_from / date_to sobre created_at
    - status específico ("all" = sem filtro)

    template_usage lista todos os templates (por slug), contando os
    formulários das ordens que passaram nos filtros, como total_forms.
    """

    def execute(self, query: Optional[StatisticsQueryDTO] = None) -> WorkOrderStatisticsDTO:
        query = query or StatisticsQueryDTO()
        status = None
        if query.status and query.status != "all":
            status = WorkOrderStatus.coerce(query.status, "status")

        def matches(order: WorkOrderEntity) -> bool:
            if query.date_from and order.created_at < query.date_from:
                return False
            if query.date_to and order.created_at > query.date_to:
                return False
            return status is None or order.status == status

        orders = self.store.work_orders.query(matches)
        order_ids = {order.id for order in orders}
        forms = self.store.filled_forms.query(lambda f: f.work_order_id in order_ids)

        by_status = {s.value: 0 for s in WorkOrderStatus}
        for order in orders:
            by_status[order.status.value] += 1

        by_service_type = Counter(order.service_type or "Sin tipo" for order in orders)
        by_month = Counter(order.created_at.strftime("%Y-%m") for order in orders)

        usage = Counter(form.template_id for form in forms)
        template_usage = {
            template.slug: usage.get(template.id, 0)
            for template in self.store.templates.query()
        }

        total = len(orders)
        completed = by_status[WorkOrderStatus.COMPLETED.value]
        return WorkOrderStatisticsDTO(
            total=total,
            by_status=by_status,
            by_service_type=dict(by_service_type),
            by_month=dict(sorted(by_month.items())),
            template_usage=template_usage,
            total_forms=len(forms),
            completion_rate=round(completed * 100.0 / total, 1) if total else 0.0,
        )
