"""
Django Model para snapshots de coleções.

Este model é um ADAPTER: cada linha guarda a fotografia serializada
de uma coleção inteira do EntityStore (tickets, work_orders, ...).

IMPORTANTE:
- Model NÃO contém lógica de negócio
- O conteúdo de `payload` é produzido pelos mappers
"""

from django.db import models


class CollectionSnapshotModel(models.Model):
    """
    Fields:
        name: Nome lógico da coleção (primary key)
        sequence: Contador de números de negócio (OT/TIC)
        version: Versão da coleção no momento do snapshot
        payload: Lista de entidades serializadas (JSON)
        saved_at: Última gravação
    """

    name = models.CharField(
        max_length=50,
        primary_key=True,
        help_text="Nome da coleção"
    )

    sequence = models.PositiveIntegerField(
        default=0,
        help_text="Último número de negócio emitido"
    )

    version = models.PositiveIntegerField(
        default=0,
        help_text="Versão da coleção (descarta snapshots antigos)"
    )

    payload = models.JSONField(
        default=list,
        help_text="Entidades serializadas, em ordem de inserção"
    )

    saved_at = models.DateTimeField(
        auto_now=True,
        help_text="Data/hora da última gravação"
    )

    class Meta:
        db_table = 'collection_snapshots'
        verbose_name = 'Snapshot de Coleção'
        verbose_name_plural = 'Snapshots de Coleções'
        ordering = ['name']

    def __str__(self) -> str:
        return f"{self.name} v{self.version} ({len(self.payload or [])} registros)"
