"""
Contrato do compositor de documentos.

A renderização real (PDF, imagem) fica fora do core. O compositor
recebe as três entidades já carregadas e devolve um artefato opaco.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from src.core.forms.entities import FilledFormEntity, PdfTemplateEntity
from src.core.work_orders.entities import WorkOrderEntity


@dataclass(frozen=True)
class DocumentRequest:
    work_order: WorkOrderEntity
    template: PdfTemplateEntity
    filled_form: FilledFormEntity
    technician_name: str
    client_name: str


@dataclass(frozen=True)
class DocumentArtifact:
    """
    Resultado da composição.

    Attributes:
        uri: Onde o documento ficou disponível (gravado em pdf_url)
        content: Bytes do documento, quando gerado em memória
        filename: Nome sugerido para download
    """

    uri: Optional[str] = None
    content: Optional[bytes] = None
    filename: str = ""


class DocumentComposer(ABC):
    @abstractmethod
    def compose(self, request: DocumentRequest) -> DocumentArtifact:
        raise NotImplementedError


class RecordingDocumentComposer(DocumentComposer):
    """
    Compositor para testes e desenvolvimento.

    Não renderiza nada: guarda os pedidos e devolve um URI
    determinístico por formulário.
    """

    def __init__(self, base_uri: str = "memory://documents"):
        self.base_uri = base_uri.rstrip("/")
        self.requests: List[DocumentRequest] = []

    def compose(self, request: DocumentRequest) -> DocumentArtifact:
        self.requests.append(request)
        filename = f"{request.work_order.number}-{request.template.slug}.pdf"
        return DocumentArtifact(uri=f"{self.base_uri}/{filename}", filename=filename)
