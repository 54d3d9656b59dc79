"""
Core Domain Layer - O Hexágono.

Store operacional (cinco coleções), motor de workflow de tickets,
visões por papel e composição de documentos. Nada aqui importa
Django ou Celery: persistência e efeitos externos entram pelos
ports SnapshotStore, EventPublisher e DocumentComposer.
"""
