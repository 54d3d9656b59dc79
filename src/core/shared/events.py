"""
Domain Events - Comunicação desacoplada entre componentes.

Transições de estado relevantes (criação de ticket, atribuição,
conversão em ordem de trabalho) são modeladas como eventos explícitos.
O caso de uso apenas enfileira o evento no Unit of Work; a entrega
aos sinks (notificações, Celery, logs) é feita por um dispatcher
separado após o commit.

Características:
- Auto-geração de ID e timestamp
- Serializáveis para transporte (Celery) e logging
- Rastreáveis via aggregate_id
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict
import uuid


@dataclass
class DomainEvent(ABC):
    """
    Classe base abstrata para Domain Events.

    Eventos são nomeados no passado (TicketCreated, não CreateTicket)
    e carregam os dados necessários para que os handlers não precisem
    consultar o store novamente.

    Attributes:
        event_id: Identificador único do evento
        aggregate_id: ID do agregado que gerou o evento
        occurred_at: Momento em que o evento ocorreu
        version: Versão do schema do evento

    Example:
        @dataclass
        class TicketCreatedEvent(DomainEvent):
            ticket_number: str = ""

            @property
            def aggregate_type(self) -> str:
                return "SupportTicket"
    """

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    aggregate_id: str = ""
    occurred_at: datetime = field(default_factory=datetime.now)
    version: int = 1

    def __post_init__(self):
        if not self.aggregate_id:
            raise ValueError("aggregate_id é obrigatório")

    @property
    @abstractmethod
    def aggregate_type(self) -> str:
        """Tipo do agregado que gerou este evento."""
        ...

    @property
    def event_type(self) -> str:
        """Tipo do evento (nome da classe)."""
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializa evento para dicionário.

        Usado para envio via Celery e para logging estruturado.
        """
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self._get_event_data(),
        }

    def _get_event_data(self) -> Dict[str, Any]:
        """Dados específicos do evento (campos além dos da classe base)."""
        base_fields = {"event_id", "aggregate_id", "occurred_at", "version"}
        return {
            key: list(value) if isinstance(value, tuple) else value
            for key, value in self.__dict__.items()
            if key not in base_fields and not key.startswith("_")
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DomainEvent":
        """Reconstrói evento a partir do dicionário gerado por to_dict()."""
        event_data = data.get("data", {})
        return cls(
            event_id=data.get("event_id", str(uuid.uuid4())),
            aggregate_id=data["aggregate_id"],
            occurred_at=datetime.fromisoformat(data["occurred_at"]),
            version=data.get("version", 1),
            **event_data,
        )

    def __repr__(self) -> str:
        return (
            f"{self.event_type}("
            f"event_id={self.event_id[:8]}..., "
            f"aggregate_id={self.aggregate_id}, "
            f"occurred_at={self.occurred_at.isoformat()}"
            f")"
        )
