"""
DTOs do Domínio de Formulários.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .entities import FormField

FieldInput = Union[FormField, Dict[str, Any]]


def build_fields(fields: Tuple[FieldInput, ...]) -> List[FormField]:
    return [f if isinstance(f, FormField) else FormField.from_dict(f) for f in fields]


@dataclass(frozen=True)
class CreateTemplateInputDTO:
    """
    Attributes:
        fields: FormField ou dicionários (mesmas chaves de FormField)
    """

    name: str
    slug: str
    created_by: str
    description: str = ""
    category: str = "general"
    fields: Tuple[FieldInput, ...] = field(default_factory=tuple)
    is_active: bool = True


@dataclass(frozen=True)
class UpdateTemplateInputDTO:
    template_id: str
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    fields: Optional[Tuple[FieldInput, ...]] = None
    is_active: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        result = {}
        for name in ("name", "slug", "description", "category", "is_active"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        if self.fields is not None:
            result["fields"] = build_fields(self.fields)
        return result


@dataclass(frozen=True)
class SubmitFilledFormInputDTO:
    """
    Attributes:
        data: nome do campo → valor (não precisa cobrir todos os campos)
        signatures: slots technician / client / supervisor
        status: "draft" ou "completed"
    """

    work_order_id: str
    template_id: str
    filled_by: str
    data: Dict[str, Any] = field(default_factory=dict)
    signatures: Dict[str, Optional[str]] = field(default_factory=dict)
    status: str = "draft"


@dataclass(frozen=True)
class UpdateFilledFormInputDTO:
    """
    Atualiza rascunho. `data` é mesclado sobre o existente; `status`
    só aceita "completed" (finalizar).
    """

    form_id: str
    data: Optional[Dict[str, Any]] = None
    signatures: Optional[Dict[str, Optional[str]]] = None
    status: Optional[str] = None
