"""
Entidades do Domínio de Formulários.

Entidades:
- PdfTemplateEntity: Modelo de formulário (lista ordenada de campos)
- FormField / FieldValidation: Definição de campo
- FilledFormEntity: Formulário preenchido para uma ordem de trabalho
- Signatures: Slots de assinatura (técnico, cliente, supervisor)

Referências de FilledForm para WorkOrder e PdfTemplate são fracas:
apagar o template não apaga os formulários preenchidos.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional
import re

from src.core.shared.entities import ChoiceEnum, Entity, require_text
from src.core.shared.exceptions import BusinessRuleViolationError, ValidationError

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
SIGNATURE_SUFFIX = "_signature"


class FieldType(ChoiceEnum):
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    SELECT = "select"
    CHECKBOX = "checkbox"
    SIGNATURE = "signature"
    PHOTO = "photo"


class FormStatus(ChoiceEnum):
    """
    Estados de um formulário preenchido.

    Fluxo:
        DRAFT → COMPLETED → APPROVED
                          → REJECTED
    """

    DRAFT = "draft"
    COMPLETED = "completed"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class FieldValidation:
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None


@dataclass
class FormField:
    """
    Campo de um template.

    Attributes:
        id: Identificador do campo dentro do template
        name: Chave usada em FilledForm.data
        label: Rótulo exibido
        type: Tipo do campo
        required: Obrigatório ao completar o formulário
        options: Opções válidas (select)
        default_value: Valor sugerido
        validation: Limites numéricos / padrão regex
    """

    id: str = ""
    name: str = ""
    label: str = ""
    type: FieldType = FieldType.TEXT
    required: bool = False
    options: Optional[List[str]] = None
    default_value: Any = None
    validation: Optional[FieldValidation] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormField":
        """Monta campo a partir do dicionário vindo da interface."""
        validation = data.get("validation")
        if isinstance(validation, dict):
            validation = FieldValidation(
                min=validation.get("min"),
                max=validation.get("max"),
                pattern=validation.get("pattern"),
            )
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            label=data.get("label", ""),
            type=data.get("type", FieldType.TEXT),
            required=bool(data.get("required", False)),
            options=list(data["options"]) if data.get("options") else None,
            default_value=data.get("default_value"),
            validation=validation,
        )

    def validate(self) -> None:
        self.name = require_text(self.name, "fields", "Nome do campo")
        self.id = self.id or self.name
        self.label = self.label or self.name
        self.type = FieldType.coerce(self.type, "fields")
        if self.type == FieldType.SELECT and not self.options:
            raise ValidationError(
                f"Campo '{self.name}' do tipo select precisa de opções",
                field="fields",
            )
        if self.validation is not None and self.validation.pattern:
            try:
                re.compile(self.validation.pattern)
            except re.error:
                raise ValidationError(
                    f"Padrão inválido no campo '{self.name}'",
                    field="fields",
                )

    @property
    def signature_slot(self) -> Optional[str]:
        """Slot de Signatures que satisfaz este campo, se houver."""
        if self.type != FieldType.SIGNATURE:
            return None
        slot = self.name[: -len(SIGNATURE_SUFFIX)] if self.name.endswith(SIGNATURE_SUFFIX) else self.name
        return slot if slot in Signatures.SLOTS else None

    def check_value(self, value: Any) -> Optional[str]:
        """
        Verifica valor contra o tipo e as regras do campo.

        Returns:
            Mensagem de erro, ou None se o valor é aceito
        """
        if self.type == FieldType.NUMBER:
            if isinstance(value, bool):
                return f"{self.label} deve ser numérico"
            try:
                number = float(value)
            except (TypeError, ValueError):
                return f"{self.label} deve ser numérico"
            if self.validation is not None:
                if self.validation.min is not None and number < self.validation.min:
                    return f"{self.label} deve ser >= {self.validation.min}"
                if self.validation.max is not None and number > self.validation.max:
                    return f"{self.label} deve ser <= {self.validation.max}"
            return None

        if self.type == FieldType.SELECT:
            if value not in (self.options or []):
                return f"{self.label}: opção inválida '{value}'"
            return None

        if self.type == FieldType.CHECKBOX:
            if not isinstance(value, bool):
                return f"{self.label} deve ser verdadeiro ou falso"
            return None

        if self.type == FieldType.DATE:
            if isinstance(value, (date, datetime)):
                return None
            try:
                date.fromisoformat(str(value)[:10])
            except ValueError:
                return f"{self.label} deve ser uma data (AAAA-MM-DD)"
            return None

        if self.validation is not None and self.validation.pattern:
            if not re.fullmatch(self.validation.pattern, str(value)):
                return f"{self.label} não corresponde ao formato esperado"
        return None


@dataclass
class PdfTemplateEntity(Entity):
    """
    Entidade de Domínio: Template de Formulário.

    Invariantes:
    - slug obedece a ^[a-z0-9]+(-[a-z0-9]+)*$
    - slug é único na coleção (verificado pelos use cases)
    - nomes de campo são únicos dentro do template
    """

    name: str = ""
    description: str = ""
    slug: str = ""
    category: str = "general"
    fields: List[FormField] = field(default_factory=list)
    created_by: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_active: bool = True

    ENTITY_TYPE: ClassVar[str] = "PdfTemplate"

    def validate(self) -> None:
        self.name = require_text(self.name, "name", "Nome do template")
        self.slug = require_text(self.slug, "slug", "Slug").lower()
        if not SLUG_PATTERN.match(self.slug):
            raise ValidationError(f"Slug inválido: {self.slug}", field="slug")
        self.category = (self.category or "general").strip().lower()

        seen = set()
        for form_field in self.fields or []:
            if not isinstance(form_field, FormField):
                raise ValidationError("Campo inválido", field="fields")
            form_field.validate()
            if form_field.name in seen:
                raise ValidationError(
                    f"Campo duplicado: {form_field.name}",
                    field="fields",
                )
            seen.add(form_field.name)
        self.fields = list(self.fields or [])

    def get_field(self, name: str) -> Optional[FormField]:
        for form_field in self.fields:
            if form_field.name == name:
                return form_field
        return None

    @property
    def required_fields(self) -> List[FormField]:
        return [f for f in self.fields if f.required]

    def validate_submission(self, data: Dict[str, Any], signatures: "Signatures") -> None:
        """
        Valida dados de um formulário completo contra este template.

        Campos de assinatura são satisfeitos por data[name] ou pelo
        slot correspondente em signatures (ex: technician_signature
        → signatures.technician).

        Raises:
            ValidationError: Com todos os problemas encontrados
        """
        problems = []
        for form_field in self.fields:
            value = data.get(form_field.name)
            if form_field.type == FieldType.SIGNATURE and _is_blank(value):
                slot = form_field.signature_slot
                value = signatures.get(slot) if slot else None

            if _is_blank(value):
                if form_field.required:
                    problems.append(f"{form_field.label} é obrigatório")
                continue

            problem = form_field.check_value(value)
            if problem:
                problems.append(problem)

        if problems:
            raise ValidationError("; ".join(problems), field="data")


@dataclass
class Signatures:
    """Assinaturas capturadas (payloads de imagem opacos)."""

    technician: Optional[str] = None
    client: Optional[str] = None
    supervisor: Optional[str] = None

    SLOTS: ClassVar[FrozenSet[str]] = frozenset({"technician", "client", "supervisor"})

    def get(self, slot: str) -> Optional[str]:
        return getattr(self, slot) if slot in self.SLOTS else None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Signatures":
        data = data or {}
        unknown = set(data) - cls.SLOTS
        if unknown:
            raise ValidationError(
                f"Slots de assinatura desconhecidos: {', '.join(sorted(unknown))}",
                field="signatures",
            )
        return cls(**data)


@dataclass
class FilledFormEntity(Entity):
    """
    Entidade de Domínio: Formulário Preenchido.

    Não tem updated_at: filled_at é o único timestamp. work_order_id e
    template_id nunca mudam depois de criado.
    """

    work_order_id: str = ""
    template_id: str = ""
    filled_by: str = ""
    filled_at: Optional[datetime] = None
    data: Dict[str, Any] = field(default_factory=dict)
    signatures: Signatures = field(default_factory=Signatures)
    status: FormStatus = FormStatus.DRAFT
    pdf_url: Optional[str] = None

    ENTITY_TYPE: ClassVar[str] = "FilledForm"
    CREATED_FIELD: ClassVar[str] = "filled_at"
    UPDATED_FIELD: ClassVar[Optional[str]] = None
    IMMUTABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"work_order_id", "template_id"})

    def validate(self) -> None:
        self.work_order_id = require_text(self.work_order_id, "work_order_id", "Ordem de trabalho")
        self.template_id = require_text(self.template_id, "template_id", "Template")
        self.filled_by = require_text(self.filled_by, "filled_by", "Responsável pelo preenchimento")
        self.status = FormStatus.coerce(self.status, "status")
        if self.data is None:
            self.data = {}
        if not isinstance(self.data, dict):
            raise ValidationError("data deve ser um mapeamento", field="data")
        if isinstance(self.signatures, dict):
            self.signatures = Signatures.from_dict(self.signatures)
        elif self.signatures is None:
            self.signatures = Signatures()

    def complete(self) -> None:
        if self.status != FormStatus.DRAFT:
            raise BusinessRuleViolationError(
                f"Formulário {self.status.value} não pode ser completado",
                rule="only_draft_can_be_completed",
            )
        self.status = FormStatus.COMPLETED

    def approve(self) -> None:
        self._review(FormStatus.APPROVED)

    def reject(self) -> None:
        self._review(FormStatus.REJECTED)

    def _review(self, new_status: FormStatus) -> None:
        if self.status != FormStatus.COMPLETED:
            raise BusinessRuleViolationError(
                f"Apenas formulários completos podem ser revisados (atual: {self.status.value})",
                rule="only_completed_can_be_reviewed",
            )
        self.status = new_status

    @property
    def is_live(self) -> bool:
        """Formulário conta para a unicidade (ordem, template)."""
        return self.status != FormStatus.REJECTED

    @property
    def is_final(self) -> bool:
        return self.status in (FormStatus.COMPLETED, FormStatus.APPROVED)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, dict)) and not value:
        return True
    return False
