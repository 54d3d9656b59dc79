"""
Configuração do Celery para processamento assíncrono.

O Celery é usado para:
- Efeitos externos dos Domain Events (notificações, métricas)
- Gravação write-behind de snapshots (SNAPSHOT_WRITE_MODE=celery)
- Relatório diário (Celery Beat)

Arquitetura:
- Broker: RabbitMQ
- Backend: Redis (resultados de tarefas)
- Workers: Processos que executam as tarefas

Uso:
    celery -A src.config.celery worker -l INFO -Q default,events,notifications,snapshots
    celery -A src.config.celery beat -l INFO
"""

import os
from celery import Celery
from celery.schedules import crontab
from kombu import Queue, Exchange

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

app = Celery('fieldops')

# Configurações CELERY_* do settings.py
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',

    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    result_expires=3600,

    worker_send_task_events=True,
    task_send_sent_event=True,
)

app.conf.task_default_queue = 'default'

app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
    Queue('notifications', Exchange('notifications'), routing_key='notifications.#'),
    # Gravação de snapshots: um worker só, para manter a ordem
    Queue('snapshots', Exchange('snapshots'), routing_key='snapshots.#'),
)

_HANDLERS = 'src.adapters.django_app.events.handlers'

app.conf.task_routes = {
    f'{_HANDLERS}.persist_collection_snapshot': {'queue': 'snapshots'},
    f'{_HANDLERS}.notify_user': {'queue': 'notifications'},
    f'{_HANDLERS}.generate_daily_report': {'queue': 'default'},
    f'{_HANDLERS}.*': {'queue': 'events'},
}

app.autodiscover_tasks([
    'src.adapters.django_app.events',
], related_name='handlers')

app.conf.beat_schedule = {
    # Relatório diário às 7h
    'daily-report': {
        'task': f'{_HANDLERS}.generate_daily_report',
        'schedule': crontab(hour=7, minute=0),
    },
}
