"""
Base comum das entidades armazenadas no EntityStore.

O store é genérico: ele descobre pela própria classe da entidade
quais campos deve carimbar (id, número de negócio, timestamps) e
quais campos nunca podem ser alterados por um update parcial.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import ClassVar, FrozenSet, Optional, Set, Type, TypeVar

from .exceptions import ValidationError

E = TypeVar("E", bound="ChoiceEnum")


class ChoiceEnum(str, Enum):
    """
    Enum de domínio com valor string.

    Herdar de str permite comparar diretamente com o valor
    (`status == "assigned"`) e serializar sem conversão.
    """

    @classmethod
    def from_string(cls: Type[E], value) -> E:
        """
        Converte string (nome ou valor) para o enum.

        Raises:
            ValueError: Se valor inválido
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"{cls.__name__} inválido: {value!r}")
        try:
            return cls[value.strip().upper()]
        except KeyError:
            pass
        for member in cls:
            if member.value == value.strip().lower():
                return member
        raise ValueError(f"{cls.__name__} inválido: {value}")

    @classmethod
    def coerce(cls: Type[E], value, field: str) -> E:
        """Como from_string, mas levanta ValidationError do domínio."""
        try:
            return cls.from_string(value)
        except ValueError:
            raise ValidationError(f"Valor inválido para {field}: {value}", field=field)

    def __str__(self) -> str:
        return self.value


class Priority(ChoiceEnum):
    """Prioridade comum a ordens de trabalho e tickets."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


@dataclass
class Entity:
    """
    Entidade base.

    Class attributes (lidos pelo EntityCollection):
        ENTITY_TYPE: Nome usado em mensagens de erro
        NUMBER_FIELD / NUMBER_PREFIX: Número de negócio sequencial
        CREATED_FIELD / UPDATED_FIELD: Timestamps carimbados pelo store
        IMMUTABLE_FIELDS: Campos extras que update não pode tocar
    """

    id: str = ""

    ENTITY_TYPE: ClassVar[str] = "Entity"
    NUMBER_FIELD: ClassVar[Optional[str]] = None
    NUMBER_PREFIX: ClassVar[Optional[str]] = None
    CREATED_FIELD: ClassVar[str] = "created_at"
    UPDATED_FIELD: ClassVar[Optional[str]] = "updated_at"
    IMMUTABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset()

    def validate(self) -> None:
        """
        Normaliza e valida a entidade.

        Chamado pelo store antes de qualquer escrita. Subclasses
        convertem strings em enums e verificam campos obrigatórios.

        Raises:
            ValidationError: Se dados inválidos
        """

    @classmethod
    def field_names(cls) -> Set[str]:
        return {f.name for f in fields(cls)}

    @classmethod
    def protected_fields(cls) -> Set[str]:
        """Campos carimbados pelo store ou imutáveis."""
        protected = {"id", cls.CREATED_FIELD} | set(cls.IMMUTABLE_FIELDS)
        if cls.NUMBER_FIELD:
            protected.add(cls.NUMBER_FIELD)
        if cls.UPDATED_FIELD:
            protected.add(cls.UPDATED_FIELD)
        return protected

    @property
    def business_number(self) -> Optional[str]:
        if self.NUMBER_FIELD:
            return getattr(self, self.NUMBER_FIELD)
        return None


def require_text(value: Optional[str], field: str, label: str) -> str:
    """Valida campo texto obrigatório e retorna valor sem espaços nas pontas."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} é obrigatório", field=field)
    return value.strip()


def unique_list(values, field: str) -> list:
    """Remove duplicados preservando a ordem; rejeita valores vazios."""
    if values is None:
        return []
    if isinstance(values, str):
        raise ValidationError(f"{field} deve ser uma lista", field=field)
    result = []
    for value in values:
        if not value:
            raise ValidationError(f"{field} contém valor vazio", field=field)
        if value not in result:
            result.append(value)
    return result
