"""
Entidades do Domínio de Ordens de Trabalho.

Entidades:
- WorkOrderEntity: Unidade de trabalho de campo agendada para um cliente
- EvidenceEntity: Foto/documento/assinatura anexado à ordem
- WorkOrderStatus, EvidenceType: Enums de domínio

A ordem é dona exclusiva da sua lista de evidências: evidências
não existem fora dela e somem junto com a ordem.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, List, Optional
import uuid

from src.core.shared.entities import (
    ChoiceEnum,
    Entity,
    Priority,
    require_text,
    unique_list,
)
from src.core.shared.exceptions import ValidationError
from src.core.shared.identifiers import WORK_ORDER_PREFIX


class WorkOrderStatus(ChoiceEnum):
    """Estados possíveis de uma ordem de trabalho."""

    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EvidenceType(ChoiceEnum):
    PHOTO = "photo"
    DOCUMENT = "document"
    SIGNATURE = "signature"


@dataclass
class EvidenceEntity:
    """
    Evidência do trabalho realizado.

    Attributes:
        id: Identificador único
        type: photo | document | signature
        url: Local do arquivo (opaco para o core)
        description: Descrição livre
        uploaded_by: ID do usuário que anexou
        uploaded_at: Momento do upload
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    type: EvidenceType = EvidenceType.PHOTO
    url: str = ""
    description: str = ""
    uploaded_by: str = ""
    uploaded_at: datetime = field(default_factory=datetime.now)

    def validate(self) -> None:
        self.type = EvidenceType.coerce(self.type, "evidence_type")
        self.url = require_text(self.url, "url", "URL da evidência")
        self.uploaded_by = require_text(self.uploaded_by, "uploaded_by", "Autor da evidência")


@dataclass
class WorkOrderEntity(Entity):
    """
    Entidade de Domínio: Ordem de Trabalho.

    Invariantes:
    - number (OT-NNNNN) é único e estritamente crescente na ordem de criação
    - updated_at >= created_at
    - assigned_technicians e assigned_formats não têm duplicados

    Attributes:
        number: Número legível atribuído pelo store
        client_name / client_contact / client_address: Dados do cliente
        description: Descrição do serviço
        service_type: Tipo de serviço (ex: "Instalación")
        priority: low | medium | high | urgent
        status: pending | assigned | in_progress | completed | cancelled
        assigned_technicians: IDs dos técnicos
        assigned_formats: Slugs dos templates a preencher
        created_by: ID de quem criou
        supervisor_id: ID do supervisor responsável
        scheduled_date: Data agendada
        completed_date: Data de conclusão
        evidences: Evidências anexadas (ordem de upload)
        notes: Observações
    """

    number: str = ""

    client_name: str = ""
    client_contact: str = ""
    client_address: str = ""

    description: str = ""
    service_type: str = ""
    priority: Priority = Priority.MEDIUM
    status: WorkOrderStatus = WorkOrderStatus.PENDING

    assigned_technicians: List[str] = field(default_factory=list)
    assigned_formats: List[str] = field(default_factory=list)

    created_by: str = ""
    supervisor_id: Optional[str] = None

    scheduled_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    evidences: List[EvidenceEntity] = field(default_factory=list)
    notes: Optional[str] = None

    ENTITY_TYPE: ClassVar[str] = "WorkOrder"
    NUMBER_FIELD: ClassVar[str] = "number"
    NUMBER_PREFIX: ClassVar[str] = WORK_ORDER_PREFIX

    def validate(self) -> None:
        self.client_name = require_text(self.client_name, "client_name", "Nome do cliente")
        self.priority = Priority.coerce(self.priority, "priority")
        self.status = WorkOrderStatus.coerce(self.status, "status")
        self.assigned_technicians = unique_list(
            self.assigned_technicians, "assigned_technicians"
        )
        self.assigned_formats = unique_list(self.assigned_formats, "assigned_formats")

        if self.evidences is None:
            self.evidences = []
        for evidence in self.evidences:
            if not isinstance(evidence, EvidenceEntity):
                raise ValidationError("Evidência inválida", field="evidences")
            evidence.validate()

    def add_evidence(self, evidence: EvidenceEntity) -> None:
        """Anexa evidência ao final da lista."""
        evidence.validate()
        if any(e.id == evidence.id for e in self.evidences):
            raise ValidationError(f"Evidência {evidence.id} já anexada", field="evidences")
        self.evidences.append(evidence)

    def is_assigned_to(self, user_id: str) -> bool:
        return user_id in self.assigned_technicians

    @property
    def is_finished(self) -> bool:
        return self.status in (WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED)

    def __repr__(self) -> str:
        return (
            f"WorkOrderEntity("
            f"number={self.number or '-'}, "
            f"client='{self.client_name[:20]}', "
            f"status={self.status}"
            f")"
        )
