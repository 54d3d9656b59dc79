"""
Document Composition Service.

Carrega ordem, template e formulário, delega a composição ao
DocumentComposer externo e registra pdf_url no formulário quando
o artefato expõe um URI.
"""

from typing import Callable, Optional
import logging

from src.core.forms.entities import FormStatus
from src.core.shared.exceptions import BusinessRuleViolationError
from src.core.shared.interfaces import EventPublisher
from src.core.store import EntityStore, StoreUnitOfWork

from .ports import DocumentArtifact, DocumentComposer, DocumentRequest

logger = logging.getLogger(__name__)

NameResolver = Callable[[str], Optional[str]]


class ComposeDocumentService:
    """
    Use Case: Gerar documento de um formulário preenchido.

    Args:
        store: EntityStore
        composer: Implementação externa de DocumentComposer
        resolve_user_name: user_id → nome exibido (opcional)

    Raises:
        EntityNotFoundError: Formulário, ordem ou template inexistente
            (inclui template_id órfão de template removido)
        BusinessRuleViolationError: Formulário ainda em rascunho ou rejeitado

    Se o formulário for removido enquanto o compositor trabalha, o
    artefato é devolvido mesmo assim e pdf_url não é gravado.
    """

    def __init__(
        self,
        store: EntityStore,
        composer: DocumentComposer,
        event_publisher: Optional[EventPublisher] = None,
        resolve_user_name: Optional[NameResolver] = None,
    ):
        self.store = store
        self.composer = composer
        self.event_publisher = event_publisher
        self.resolve_user_name = resolve_user_name

    def execute(self, form_id: str) -> DocumentArtifact:
        form = self.store.filled_forms.get_or_raise(form_id)
        work_order = self.store.work_orders.get_or_raise(form.work_order_id)
        template = self.store.templates.get_or_raise(form.template_id)

        if form.status not in (FormStatus.COMPLETED, FormStatus.APPROVED):
            raise BusinessRuleViolationError(
                f"Formulário {form.status.value} não gera documento",
                rule="document_requires_completed_form",
            )

        technician_name = form.filled_by
        if self.resolve_user_name is not None:
            technician_name = self.resolve_user_name(form.filled_by) or form.filled_by

        artifact = self.composer.compose(
            DocumentRequest(
                work_order=work_order,
                template=template,
                filled_form=form,
                technician_name=technician_name,
                client_name=work_order.client_name,
            )
        )

        if artifact.uri:
            self._record_uri(form.id, artifact.uri)
            logger.info(f"Documento de {work_order.number}/{template.slug}: {artifact.uri}")

        return artifact

    def _record_uri(self, form_id: str, uri: str) -> None:
        """Grava pdf_url; formulário removido durante a composição só gera warning."""
        with StoreUnitOfWork(self.store, self.event_publisher, collections=("filled_forms",)):
            if self.store.filled_forms.get(form_id) is None:
                logger.warning(f"Formulário {form_id} removido durante a composição; documento {uri} sem vínculo")
                return
            self.store.filled_forms.update(form_id, pdf_url=uri)
