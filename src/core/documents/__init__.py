"""
Composição de documentos (contrato + orquestração).
"""

from .ports import DocumentArtifact, DocumentComposer, DocumentRequest

__all__ = ["DocumentArtifact", "DocumentComposer", "DocumentRequest"]
