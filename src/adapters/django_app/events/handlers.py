"""
Event Handlers - Processadores de Eventos de Domínio.

Handlers são executados de forma assíncrona via Celery quando
Domain Events são publicados com EVENT_PUBLISHER_MODE=celery.
As notificações do store já foram criadas em processo pelo
NotificationSink; aqui ficam apenas efeitos externos:

- Notificação: email/push para técnicos e supervisores
- Agregação: métricas de tickets e ordens de trabalho
- Persistência: gravação write-behind de snapshots
- Relatórios: resumo diário (Celery Beat)

Padrão:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        # event_data é o resultado de DomainEvent.to_dict()
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from celery import shared_task

logger = logging.getLogger(__name__)


def _payload(event_data: Dict[str, Any]) -> Dict[str, Any]:
    """Campos específicos do evento (chave 'data' de to_dict())."""
    return event_data.get("data") or {}


# =============================================================================
# Event Handlers - Tickets
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    acks_late=True,
)
def handle_ticket_created(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para TicketCreatedEvent.

    Ações:
    - Avisar o supervisor por email
    - Registrar métrica por categoria e prioridade
    """
    ticket_id = event_data.get("aggregate_id")
    data = _payload(event_data)
    ticket_number = data.get("ticket_number")
    priority = data.get("priority", "medium")

    logger.info(
        f"[HANDLER] TicketCreated: {ticket_number} ({ticket_id}) | "
        f"Cliente: {data.get('client_name')}"
    )

    if data.get("recipient_id"):
        notify_user.delay(
            user_id=data["recipient_id"],
            message=f"Nuevo ticket {ticket_number} creado por {data.get('client_name')}",
            channel="push" if priority == "urgent" else "email",
        )

    record_metric.delay(
        metric_name="tickets_created",
        value=1,
        tags={"priority": priority, "category": data.get("category", "")},
    )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_assigned(self, event_data: Dict[str, Any]) -> None:
    """Handler para TicketAssignedEvent: avisa o técnico."""
    data = _payload(event_data)
    technician_id = data.get("technician_id")

    logger.info(
        f"[HANDLER] TicketAssigned: {data.get('ticket_number')} | "
        f"Técnico: {technician_id}"
    )

    notify_user.delay(
        user_id=technician_id,
        message=f"Se te ha asignado el ticket {data.get('ticket_number')}",
        channel="email",
    )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_converted(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para TicketConvertedEvent.

    Ações:
    - Avisar cada técnico da nova ordem
    - Registrar métrica de conversão
    """
    data = _payload(event_data)
    work_order_number = data.get("work_order_number")
    technician_ids: List[str] = data.get("technician_ids") or []

    logger.info(
        f"[HANDLER] TicketConverted: {data.get('ticket_number')} -> "
        f"{work_order_number} | Técnicos: {technician_ids}"
    )

    for technician_id in technician_ids:
        notify_user.delay(
            user_id=technician_id,
            message=f"Se te ha asignado la orden {work_order_number}",
            channel="email",
        )

    record_metric.delay(metric_name="tickets_converted", value=1, tags={})


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_status_changed(self, event_data: Dict[str, Any]) -> None:
    data = _payload(event_data)
    logger.info(
        f"[HANDLER] TicketStatusChanged: {data.get('ticket_number')} | "
        f"{data.get('previous_status')} -> {data.get('new_status')}"
    )
    record_metric.delay(
        metric_name="ticket_transitions",
        value=1,
        tags={"to": data.get("new_status", "")},
    )


# =============================================================================
# Event Handlers - Work Orders
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_work_order_created(self, event_data: Dict[str, Any]) -> None:
    """Handler para WorkOrderCreatedEvent: métrica por tipo de serviço."""
    data = _payload(event_data)

    logger.info(
        f"[HANDLER] WorkOrderCreated: {data.get('number')} | "
        f"Servicio: {data.get('service_type') or '-'} | "
        f"Origen: {data.get('source_ticket_id') or 'directa'}"
    )

    record_metric.delay(
        metric_name="work_orders_created",
        value=1,
        tags={
            "service_type": data.get("service_type", ""),
            "priority": data.get("priority", ""),
        },
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_work_order_status_changed(self, event_data: Dict[str, Any]) -> None:
    data = _payload(event_data)
    new_status = data.get("new_status")

    logger.info(
        f"[HANDLER] WorkOrderStatusChanged: {data.get('number')} | "
        f"{data.get('previous_status')} -> {new_status}"
    )

    if new_status == "completed":
        record_metric.delay(metric_name="work_orders_completed", value=1, tags={})


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

EVENT_ROUTES = {
    "TicketCreatedEvent": handle_ticket_created,
    "TicketAssignedEvent": handle_ticket_assigned,
    "TicketConvertedEvent": handle_ticket_converted,
    "TicketStatusChangedEvent": handle_ticket_status_changed,
    "WorkOrderCreatedEvent": handle_work_order_created,
    "WorkOrderStatusChangedEvent": handle_work_order_status_changed,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> bool:
    """
    Dispatcher central para Domain Events.

    Roteia eventos para os handlers apropriados. É o ponto de
    entrada de todos os eventos publicados pelo CeleryEventPublisher.

    Returns:
        True se havia handler para o tipo
    """
    handler = EVENT_ROUTES.get(event_type)

    if handler is None:
        logger.warning(f"[DISPATCHER] Handler não encontrado para {event_type}")
        return False

    logger.info(f"[DISPATCHER] Roteando {event_type} para {handler.name}")
    handler.delay(event_data)
    return True


# =============================================================================
# Notification / Metric Tasks
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=120)
def notify_user(self, user_id: str, message: str, channel: str = "email", **kwargs) -> None:
    """
    Notifica usuário fora do sistema.

    Args:
        user_id: ID do usuário
        message: Mensagem a enviar
        channel: Canal (email, push)
    """
    logger.info(f"[NOTIFICATION] {channel.upper()} para {user_id}: {message}")


@shared_task(bind=True, ignore_result=True)
def record_metric(self, metric_name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
    logger.info(f"[METRIC] {metric_name}={value} | tags={tags or {}}")


# =============================================================================
# Snapshot Persistence (write-behind)
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(Exception,),
    acks_late=True,
)
def persist_collection_snapshot(
    self,
    name: str,
    sequence: int,
    version: int,
    payload: List[Dict[str, Any]],
) -> bool:
    """
    Grava snapshot enfileirado pelo CelerySnapshotStore.

    Tarefas fora de ordem são seguras: versões mais antigas que a
    gravada são ignoradas.

    Returns:
        False se o snapshot foi descartado por ser antigo
    """
    from src.adapters.django_app.snapshots.repositories import DjangoSnapshotStore

    return DjangoSnapshotStore.save_payload(
        name=name,
        sequence=sequence,
        version=version,
        payload=payload,
    )


# =============================================================================
# Scheduled Tasks (Beat)
# =============================================================================

@shared_task(bind=True)
def generate_daily_report(self) -> Dict[str, Any]:
    """
    Gera relatório diário de tickets e ordens de trabalho.

    Executada diariamente pelo Celery Beat.

    Returns:
        Dados do relatório
    """
    logger.info("[SCHEDULED] Gerando relatório diário...")

    from src.config.container import get_container

    container = get_container()
    tickets = container.ticket_statistics_service().execute()
    work_orders = container.work_order_statistics_service().execute()

    report = {
        "date": datetime.now().isoformat(),
        "tickets": tickets,
        "work_orders": work_orders.to_dict(),
    }

    logger.info(
        f"[SCHEDULED] Relatório gerado: {tickets.get('total', 0)} tickets, "
        f"{work_orders.total} ordens ({work_orders.completion_rate}% completadas)"
    )
    return report
