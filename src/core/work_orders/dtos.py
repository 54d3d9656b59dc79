"""
DTOs do Domínio de Ordens de Trabalho.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .entities import EvidenceEntity, WorkOrderEntity


@dataclass(frozen=True)
class CreateWorkOrderInputDTO:
    """
    DTO de entrada para criar ordem de trabalho.

    Attributes:
        client_name: Cliente (obrigatório)
        created_by: Quem cria a ordem
        assigned_technicians / assigned_formats: tuplas (hashable)
    """

    client_name: str
    created_by: str
    client_contact: str = ""
    client_address: str = ""
    description: str = ""
    service_type: str = ""
    priority: str = "medium"
    status: str = "pending"
    assigned_technicians: Tuple[str, ...] = field(default_factory=tuple)
    assigned_formats: Tuple[str, ...] = field(default_factory=tuple)
    supervisor_id: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class UpdateWorkOrderInputDTO:
    """
    Atualização parcial. `changes` usa os nomes de campo da entidade.

    Example:
        UpdateWorkOrderInputDTO(work_order_id=order.id, changes={"status": "completed"})
    """

    work_order_id: str
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AddEvidenceInputDTO:
    work_order_id: str
    type: str
    url: str
    uploaded_by: str
    description: str = ""


@dataclass(frozen=True)
class StatisticsQueryDTO:
    """
    Filtros do relatório.

    Attributes:
        date_from / date_to: Intervalo sobre created_at (inclusivo)
        status: Restringe a um status ("all" ou None = todos)
    """

    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    status: Optional[str] = None


@dataclass
class WorkOrderOutputDTO:
    id: str
    number: str
    client_name: str
    client_contact: str
    client_address: str
    description: str
    service_type: str
    priority: str
    status: str
    assigned_technicians: List[str]
    assigned_formats: List[str]
    created_by: str
    supervisor_id: Optional[str]
    scheduled_date: Optional[datetime]
    completed_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    evidences: List[Dict[str, Any]]
    notes: Optional[str]

    @classmethod
    def from_entity(cls, entity: WorkOrderEntity) -> "WorkOrderOutputDTO":
        return cls(
            id=entity.id,
            number=entity.number,
            client_name=entity.client_name,
            client_contact=entity.client_contact,
            client_address=entity.client_address,
            description=entity.description,
            service_type=entity.service_type,
            priority=entity.priority.value,
            status=entity.status.value,
            assigned_technicians=list(entity.assigned_technicians),
            assigned_formats=list(entity.assigned_formats),
            created_by=entity.created_by,
            supervisor_id=entity.supervisor_id,
            scheduled_date=entity.scheduled_date,
            completed_date=entity.completed_date,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            evidences=[_evidence_dict(e) for e in entity.evidences],
            notes=entity.notes,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "client_name": self.client_name,
            "client_contact": self.client_contact,
            "client_address": self.client_address,
            "description": self.description,
            "service_type": self.service_type,
            "priority": self.priority,
            "status": self.status,
            "assigned_technicians": list(self.assigned_technicians),
            "assigned_formats": list(self.assigned_formats),
            "created_by": self.created_by,
            "supervisor_id": self.supervisor_id,
            "scheduled_date": self.scheduled_date.isoformat() if self.scheduled_date else None,
            "completed_date": self.completed_date.isoformat() if self.completed_date else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "evidences": list(self.evidences),
            "notes": self.notes,
        }


def _evidence_dict(evidence: EvidenceEntity) -> Dict[str, Any]:
    return {
        "id": evidence.id,
        "type": evidence.type.value,
        "url": evidence.url,
        "description": evidence.description,
        "uploaded_by": evidence.uploaded_by,
        "uploaded_at": evidence.uploaded_at.isoformat(),
    }


@dataclass
class WorkOrderStatisticsDTO:
    """
    Relatório agregado de ordens de trabalho.

    Attributes:
        total: Ordens no recorte
        by_status: status → quantidade (todos os status)
        by_service_type: tipo de serviço → quantidade
        by_month: "AAAA-MM" → quantidade (ordem cronológica)
        template_usage: slug → quantidade de formulários preenchidos
        total_forms: Formulários das ordens no recorte
        completion_rate: % de ordens concluídas (0-100, uma casa)
    """

    total: int
    by_status: Dict[str, int]
    by_service_type: Dict[str, int]
    by_month: Dict[str, int]
    template_usage: Dict[str, int]
    total_forms: int
    completion_rate: float

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "by_status": dict(self.by_status),
            "by_service_type": dict(self.by_service_type),
            "by_month": dict(self.by_month),
            "template_usage": dict(self.template_usage),
            "total_forms": self.total_forms,
            "completion_rate": self.completion_rate,
        }
