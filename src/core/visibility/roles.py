"""
Papéis e identidade do usuário.

A identidade vem do provedor de sessão e é aceita como está; o
core só usa o papel para decidir o que cada usuário enxerga.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from src.core.shared.entities import ChoiceEnum

logger = logging.getLogger(__name__)


class UserRole(ChoiceEnum):
    """
    Papéis do sistema.

    O valor "tecnician" é o usado pelos dados existentes;
    "technician" é aceito como sinônimo.
    """

    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    TECNICIAN = "tecnician"
    CLIENT = "client"

    @classmethod
    def resolve(cls, value) -> "UserRole":
        """
        Converte string em papel.

        Papéis desconhecidos recebem a regra mais restritiva (técnico).
        """
        if isinstance(value, str) and value.strip().lower() == "technician":
            return cls.TECNICIAN
        try:
            return cls.from_string(value)
        except ValueError:
            logger.warning(f"Papel desconhecido '{value}', aplicando regra de técnico")
            return cls.TECNICIAN


@dataclass(frozen=True)
class Identity:
    """
    Usuário autenticado.

    Attributes:
        user_id: ID do usuário
        role: Papel (string é convertida via UserRole.resolve)
        display_name: Nome exibido
        email: Usado para casar tickets do cliente
    """

    user_id: str
    role: UserRole
    display_name: str = ""
    email: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "role", UserRole.resolve(self.role))
