"""
Domínio de Formulários: templates e formulários preenchidos.
"""

from .entities import (
    FieldType,
    FieldValidation,
    FilledFormEntity,
    FormField,
    FormStatus,
    PdfTemplateEntity,
    Signatures,
)

__all__ = [
    "FieldType",
    "FieldValidation",
    "FilledFormEntity",
    "FormField",
    "FormStatus",
    "PdfTemplateEntity",
    "Signatures",
]
