"""
Mappers para conversão entre entidades (Core) e payload JSON (Django).

Responsabilidades:
- Entity → dict JSON (enums viram valores, datas viram ISO 8601)
- dict JSON → Entity (reconstrói objetos aninhados e revalida)
- CollectionSnapshot ↔ CollectionSnapshotModel

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
- Campos desconhecidos no payload são ignorados
"""

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from src.core.forms.entities import FilledFormEntity, FormField, PdfTemplateEntity, Signatures
from src.core.notifications.entities import NotificationEntity
from src.core.shared.entities import Entity
from src.core.shared.interfaces import CollectionSnapshot
from src.core.store.store import ENTITY_CLASSES
from src.core.tickets.entities import SupportTicketEntity
from src.core.work_orders.entities import EvidenceEntity, WorkOrderEntity

from .models import CollectionSnapshotModel

DATETIME_FIELDS = {
    SupportTicketEntity: ("created_at", "updated_at"),
    WorkOrderEntity: ("scheduled_date", "completed_date", "created_at", "updated_at"),
    PdfTemplateEntity: ("created_at", "updated_at"),
    FilledFormEntity: ("filled_at",),
    NotificationEntity: ("created_at",),
}


def _encode(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _encode(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {key: _encode(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    return value


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _known(entity_class: type, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(entity_class)}
    return {key: value for key, value in data.items() if key in names}


class EntityMapper:
    """
    Mapper genérico Entity ↔ dict.

    - to_dict(): Entity → dict JSON
    - to_entity(): dict JSON → Entity (validada)
    """

    @staticmethod
    def to_dict(entity: Entity) -> Dict[str, Any]:
        return _encode(entity)

    @staticmethod
    def to_entity(entity_class: Type[Entity], data: Dict[str, Any]) -> Entity:
        values = _known(entity_class, data)

        for name in DATETIME_FIELDS.get(entity_class, ()):
            if name in values:
                values[name] = _parse_datetime(values[name])

        if entity_class is WorkOrderEntity:
            values["evidences"] = [
                EvidenceMapper.to_entity(item) for item in values.get("evidences") or []
            ]
        elif entity_class is PdfTemplateEntity:
            values["fields"] = [FormField.from_dict(item) for item in values.get("fields") or []]
        elif entity_class is FilledFormEntity:
            values["signatures"] = Signatures.from_dict(values.get("signatures"))

        entity = entity_class(**values)
        entity.validate()
        return entity


class EvidenceMapper:
    @staticmethod
    def to_entity(data: Dict[str, Any]) -> EvidenceEntity:
        values = _known(EvidenceEntity, data)
        if "uploaded_at" in values:
            values["uploaded_at"] = _parse_datetime(values["uploaded_at"])
        return EvidenceEntity(**values)


class SnapshotMapper:
    """
    Mapper CollectionSnapshot ↔ CollectionSnapshotModel.
    """

    @staticmethod
    def to_payload(snapshot: CollectionSnapshot) -> List[Dict[str, Any]]:
        return [EntityMapper.to_dict(item) for item in snapshot.items]

    @staticmethod
    def to_snapshot(model: CollectionSnapshotModel) -> CollectionSnapshot:
        """
        Raises:
            KeyError: Se o registro não corresponde a uma coleção conhecida
        """
        entity_class = ENTITY_CLASSES[model.name]
        return CollectionSnapshot(
            name=model.name,
            items=[EntityMapper.to_entity(entity_class, item) for item in model.payload or []],
            sequence=model.sequence,
            version=model.version,
        )

    @staticmethod
    def to_message(snapshot: CollectionSnapshot) -> Dict[str, Any]:
        """Formato enviado à tarefa Celery de gravação."""
        return {
            "name": snapshot.name,
            "sequence": snapshot.sequence,
            "version": snapshot.version,
            "payload": SnapshotMapper.to_payload(snapshot),
        }
