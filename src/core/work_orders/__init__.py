"""
Domínio de Ordens de Trabalho.

Use cases ficam em `use_cases` (importados diretamente).
"""

from .entities import EvidenceEntity, EvidenceType, WorkOrderEntity, WorkOrderStatus
from .events import WorkOrderCreatedEvent, WorkOrderStatusChangedEvent

__all__ = [
    "EvidenceEntity",
    "EvidenceType",
    "WorkOrderEntity",
    "WorkOrderStatus",
    "WorkOrderCreatedEvent",
    "WorkOrderStatusChangedEvent",
]
