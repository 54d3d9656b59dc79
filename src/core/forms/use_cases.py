"""
Use Cases do Domínio de Formulários.

Templates:
- CreateTemplateService / UpdateTemplateService / DeleteTemplateService

Formulários preenchidos:
- SubmitFilledFormService: Rascunho ou formulário completo
- UpdateFilledFormService: Edita rascunho / finaliza
- ReviewFilledFormService: Aprova ou rejeita formulário completo
- ListFormsByWorkOrderService

Regras:
- slug de template é único (ConflictError)
- no máximo um formulário não rejeitado por (ordem, template)
- apagar template não apaga formulários (template_id fica órfão)
"""

from typing import List, Optional
import logging

from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ConflictError,
    ValidationError,
)
from src.core.shared.interfaces import EventPublisher
from src.core.store import EntityStore, StoreUnitOfWork

from .dtos import (
    CreateTemplateInputDTO,
    SubmitFilledFormInputDTO,
    UpdateFilledFormInputDTO,
    UpdateTemplateInputDTO,
    build_fields,
)
from .entities import (
    FilledFormEntity,
    FormStatus,
    PdfTemplateEntity,
    Signatures,
)

logger = logging.getLogger(__name__)

SUBMITTABLE_STATUSES = (FormStatus.DRAFT, FormStatus.COMPLETED)


class _FormsService:
    COLLECTIONS = ("templates",)

    def __init__(self, store: EntityStore, event_publisher: Optional[EventPublisher] = None):
        self.store = store
        self.event_publisher = event_publisher

    def _unit_of_work(self) -> StoreUnitOfWork:
        return StoreUnitOfWork(self.store, self.event_publisher, collections=self.COLLECTIONS)

    def _ensure_unique_slug(self, slug: str, exclude_id: Optional[str] = None) -> None:
        slug = (slug or "").strip().lower()
        clash = self.store.templates.first(lambda t: t.slug == slug and t.id != exclude_id)
        if clash is not None:
            raise ConflictError(f"Já existe template com slug '{slug}'", resource="slug")


# =============================================================================
# Templates
# =============================================================================

class CreateTemplateService(_FormsService):
    """
    Raises:
        ValidationError: Nome/slug inválido, campos inválidos
        ConflictError: Slug já usado
    """

    def execute(self, input_dto: CreateTemplateInputDTO) -> PdfTemplateEntity:
        draft = PdfTemplateEntity(
            name=input_dto.name,
            description=input_dto.description,
            slug=input_dto.slug,
            category=input_dto.category,
            fields=build_fields(input_dto.fields),
            created_by=input_dto.created_by,
            is_active=input_dto.is_active,
        )
        with self._unit_of_work():
            self._ensure_unique_slug(draft.slug)
            template = self.store.templates.create(draft)

        logger.info(f"Template '{template.slug}' criado")
        return template


class UpdateTemplateService(_FormsService):
    def execute(self, input_dto: UpdateTemplateInputDTO) -> PdfTemplateEntity:
        changes = input_dto.changes()
        with self._unit_of_work():
            if "slug" in changes:
                self._ensure_unique_slug(changes["slug"], exclude_id=input_dto.template_id)
            if not changes:
                return self.store.templates.get_or_raise(input_dto.template_id)
            return self.store.templates.update(input_dto.template_id, **changes)


class DeleteTemplateService(_FormsService):
    """Remove template. Formulários existentes mantêm o template_id."""

    def execute(self, template_id: str) -> bool:
        with self._unit_of_work():
            deleted = self.store.templates.delete(template_id)
            orphans = self.store.filled_forms.count(lambda f: f.template_id == template_id)
        if deleted and orphans:
            logger.warning(
                f"Template {template_id} removido com {orphans} formulário(s) associados"
            )
        return deleted


# =============================================================================
# Formulários preenchidos
# =============================================================================

class SubmitFilledFormService(_FormsService):
    """
    Use Case: Registrar formulário para uma ordem de trabalho.

    Fluxo:
    1. Ordem e template precisam existir; template ativo
    2. Não pode haver outro formulário vivo para o par (ordem, template)
    3. Se status COMPLETED, dados validados contra o template

    Raises:
        EntityNotFoundError: Ordem ou template inexistente
        ConflictError: Já existe formulário não rejeitado para o par
        BusinessRuleViolationError: Template inativo
        ValidationError: Dados incompletos/inválidos
    """

    COLLECTIONS = ("work_orders", "templates", "filled_forms")

    def execute(self, input_dto: SubmitFilledFormInputDTO) -> FilledFormEntity:
        status = FormStatus.coerce(input_dto.status, "status")
        if status not in SUBMITTABLE_STATUSES:
            raise ValidationError(
                f"Formulário novo deve ser draft ou completed, não {status.value}",
                field="status",
            )
        signatures = Signatures.from_dict(input_dto.signatures)

        with self._unit_of_work():
            order = self.store.work_orders.get_or_raise(input_dto.work_order_id)
            template = self.store.templates.get_or_raise(input_dto.template_id)
            if not template.is_active:
                raise BusinessRuleViolationError(
                    f"Template '{template.slug}' está inativo",
                    rule="inactive_template",
                )

            existing = self.store.filled_forms.first(
                lambda f: f.work_order_id == order.id and f.template_id == template.id and f.is_live
            )
            if existing is not None:
                raise ConflictError(
                    f"Ordem {order.number} já tem formulário '{template.slug}' ({existing.status.value})",
                    resource="filled_form",
                )

            if status == FormStatus.COMPLETED:
                template.validate_submission(input_dto.data, signatures)

            form = self.store.filled_forms.create(
                FilledFormEntity(
                    work_order_id=order.id,
                    template_id=template.id,
                    filled_by=input_dto.filled_by,
                    data=dict(input_dto.data),
                    signatures=signatures,
                    status=status,
                )
            )

        logger.info(f"Formulário '{template.slug}' ({status.value}) registrado para {order.number}")
        return form


class UpdateFilledFormService(_FormsService):
    """
    Use Case: Editar rascunho e/ou finalizar.

    Raises:
        EntityNotFoundError: Formulário inexistente; ou template
            removido ao finalizar
        BusinessRuleViolationError: Formulário não está em rascunho
        ValidationError: Dados inválidos ao finalizar
    """

    COLLECTIONS = ("templates", "filled_forms")

    def execute(self, input_dto: UpdateFilledFormInputDTO) -> FilledFormEntity:
        with self._unit_of_work():
            form = self.store.filled_forms.get_or_raise(input_dto.form_id)
            if form.status != FormStatus.DRAFT:
                raise BusinessRuleViolationError(
                    f"Formulário {form.status.value} não pode ser editado",
                    rule="only_draft_editable",
                )

            if input_dto.data:
                form.data.update(input_dto.data)
            if input_dto.signatures:
                captured = Signatures.from_dict(input_dto.signatures)
                for slot in Signatures.SLOTS:
                    if captured.get(slot) is not None:
                        setattr(form.signatures, slot, captured.get(slot))

            if input_dto.status is not None:
                target = FormStatus.coerce(input_dto.status, "status")
                if target != FormStatus.COMPLETED:
                    raise ValidationError(
                        "Rascunho só pode ser finalizado (completed)",
                        field="status",
                    )
                template = self.store.templates.get_or_raise(form.template_id)
                template.validate_submission(form.data, form.signatures)
                form.complete()

            return self.store.filled_forms.save(form)


class ReviewFilledFormService(_FormsService):
    """Aprova ou rejeita formulário completo."""

    COLLECTIONS = ("filled_forms",)

    def execute(self, form_id: str, approve: bool) -> FilledFormEntity:
        with self._unit_of_work():
            form = self.store.filled_forms.get_or_raise(form_id)
            if approve:
                form.approve()
            else:
                form.reject()
            form = self.store.filled_forms.save(form)
        logger.info(f"Formulário {form_id} {form.status.value}")
        return form


class ListFormsByWorkOrderService(_FormsService):
    def execute(self, work_order_id: str) -> List[FilledFormEntity]:
        return self.store.filled_forms.query(lambda f: f.work_order_id == work_order_id)
