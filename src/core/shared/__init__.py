"""
Shared Domain Components.

Componentes compartilhados entre todos os domínios:
- Exceções de domínio
- Interfaces (Ports) e dispatcher de eventos
- Base classes para entidades e Domain Events
- Gerador de números de negócio
"""

from .exceptions import (
    DomainException,
    ValidationError,
    EntityNotFoundError,
    ConflictError,
    BusinessRuleViolationError,
)
from .events import DomainEvent
from .interfaces import (
    CollectionSnapshot,
    EventPublisher,
    SnapshotStore,
    UnitOfWork,
)
from .dispatcher import EventDispatcher
from .entities import ChoiceEnum, Entity, Priority
from .identifiers import next_number

__all__ = [
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "ConflictError",
    "BusinessRuleViolationError",
    "DomainEvent",
    "CollectionSnapshot",
    "EventPublisher",
    "SnapshotStore",
    "UnitOfWork",
    "EventDispatcher",
    "ChoiceEnum",
    "Entity",
    "Priority",
    "next_number",
]
