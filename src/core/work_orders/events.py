"""
Domain Events do Domínio de Ordens de Trabalho.

Não geram notificações no store; são encaminhados ao sink Celery
(métricas, integrações externas) quando configurado.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from src.core.shared.events import DomainEvent


@dataclass
class WorkOrderCreatedEvent(DomainEvent):
    number: str = ""
    client_name: str = ""
    service_type: str = ""
    priority: str = ""
    created_by: str = ""
    technician_ids: Tuple[str, ...] = field(default_factory=tuple)
    source_ticket_id: Optional[str] = None

    def __post_init__(self):
        super().__post_init__()
        self.technician_ids = tuple(self.technician_ids)

    @property
    def aggregate_type(self) -> str:
        return "WorkOrder"


@dataclass
class WorkOrderStatusChangedEvent(DomainEvent):
    number: str = ""
    previous_status: str = ""
    new_status: str = ""

    @property
    def aggregate_type(self) -> str:
        return "WorkOrder"
