"""
Migration inicial dos snapshots.

Cria a tabela:
- collection_snapshots: um registro por coleção do EntityStore
"""

from django.db import migrations, models


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='CollectionSnapshotModel',
            fields=[
                ('name', models.CharField(
                    max_length=50,
                    primary_key=True,
                    serialize=False,
                    help_text='Nome da coleção'
                )),
                ('sequence', models.PositiveIntegerField(
                    default=0,
                    help_text='Último número de negócio emitido'
                )),
                ('version', models.PositiveIntegerField(
                    default=0,
                    help_text='Versão da coleção (descarta snapshots antigos)'
                )),
                ('payload', models.JSONField(
                    default=list,
                    help_text='Entidades serializadas, em ordem de inserção'
                )),
                ('saved_at', models.DateTimeField(
                    auto_now=True,
                    help_text='Data/hora da última gravação'
                )),
            ],
            options={
                'verbose_name': 'Snapshot de Coleção',
                'verbose_name_plural': 'Snapshots de Coleções',
                'db_table': 'collection_snapshots',
                'ordering': ['name'],
            },
        ),
    ]
