"""
Configuração do Django App de snapshots.
"""

from django.apps import AppConfig


class SnapshotsConfig(AppConfig):
    """App que guarda um registro por coleção do EntityStore."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.snapshots'
    label = 'snapshots'
    verbose_name = 'Snapshots do Store Operacional'
