"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Resource: EntityStore (open na inicialização, close no shutdown)
- Selector: SnapshotStore escolhido por SNAPSHOT_WRITE_MODE
- Singleton: Event publisher (um NotificationSink por store)
- Factory: Nova instância por chamada (services)

Adapters Django são importados sob demanda: o core e os testes
em memória não precisam do ORM configurado.
"""

from typing import Callable, Iterator, List, Optional

from dependency_injector import containers, providers

from src.core.forms.entities import PdfTemplateEntity
from src.core.store import EntityStore, InMemorySnapshotStore
from src.core.shared.interfaces import SnapshotStore


def _lazy(module: str, name: str) -> Callable:
    """Construtor importado só na primeira chamada."""
    def build(*args, **kwargs):
        return getattr(__import__(module, fromlist=[name]), name)(*args, **kwargs)
    build.__name__ = name
    return build


def _resolve_seed(dotted_path: Optional[str]) -> Optional[Callable[[], List[PdfTemplateEntity]]]:
    if not dotted_path:
        return None
    from django.utils.module_loading import import_string
    return import_string(dotted_path)


def _init_store(
    snapshot_store: SnapshotStore,
    template_seed,
    max_retries: int,
    retry_delay: float,
) -> Iterator[EntityStore]:
    store = EntityStore(
        snapshot_store,
        template_seed=template_seed,
        max_retries=max_retries,
        retry_delay=retry_delay,
    ).open()
    yield store
    store.close()


_TICKETS = 'src.core.tickets.use_cases'
_WORK_ORDERS = 'src.core.work_orders.use_cases'
_FORMS = 'src.core.forms.use_cases'
_NOTIFICATIONS = 'src.core.notifications.use_cases'
_SNAPSHOTS = 'src.adapters.django_app.snapshots.repositories'


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: Valores do settings.py
    - Infrastructure: SnapshotStore, EntityStore, publisher
    - Services: Use Cases

    Example:
        container = get_container()
        service = container.create_ticket_service()
        output = service.execute(input_dto)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration()

    # =========================================================================
    # Infrastructure
    # =========================================================================

    snapshot_store = providers.Selector(
        config.snapshot_write_mode,
        sync=providers.Singleton(_lazy(_SNAPSHOTS, 'DjangoSnapshotStore')),
        celery=providers.Singleton(_lazy(_SNAPSHOTS, 'CelerySnapshotStore')),
        memory=providers.Singleton(InMemorySnapshotStore),
    )

    store = providers.Resource(
        _init_store,
        snapshot_store=snapshot_store,
        template_seed=providers.Callable(_resolve_seed, config.template_seed),
        max_retries=config.snapshot_max_retries.as_int(),
        retry_delay=config.snapshot_retry_delay.as_float(),
    )

    event_publisher = providers.Singleton(
        _lazy('src.adapters.django_app.events.publishers', 'get_event_publisher'),
        store=store,
        mode=config.event_publisher_mode,
    )

    # Substituível por um compositor real de PDF
    document_composer = providers.Singleton(
        _lazy('src.core.documents.ports', 'RecordingDocumentComposer'),
    )

    # =========================================================================
    # Services - Tickets
    # =========================================================================

    create_ticket_service = providers.Factory(
        _lazy(_TICKETS, 'CreateTicketService'),
        store=store,
        event_publisher=event_publisher,
        supervisor_id=config.support_supervisor_id,
    )

    assign_ticket_service = providers.Factory(
        _lazy(_TICKETS, 'AssignTicketService'),
        store=store,
        event_publisher=event_publisher,
    )

    convert_ticket_service = providers.Factory(
        _lazy(_TICKETS, 'ConvertTicketToWorkOrderService'),
        store=store,
        event_publisher=event_publisher,
        supervisor_id=config.support_supervisor_id,
        default_format=config.default_work_order_format,
    )

    change_ticket_status_service = providers.Factory(
        _lazy(_TICKETS, 'ChangeTicketStatusService'),
        store=store,
        event_publisher=event_publisher,
    )

    update_ticket_service = providers.Factory(
        _lazy(_TICKETS, 'UpdateTicketService'),
        store=store,
        event_publisher=event_publisher,
    )

    get_ticket_service = providers.Factory(_lazy(_TICKETS, 'GetTicketService'), store=store)

    ticket_statistics_service = providers.Factory(
        _lazy(_TICKETS, 'TicketStatisticsService'),
        store=store,
    )

    # =========================================================================
    # Services - Work Orders
    # =========================================================================

    create_work_order_service = providers.Factory(
        _lazy(_WORK_ORDERS, 'CreateWorkOrderService'),
        store=store,
        event_publisher=event_publisher,
    )

    update_work_order_service = providers.Factory(
        _lazy(_WORK_ORDERS, 'UpdateWorkOrderService'),
        store=store,
        event_publisher=event_publisher,
    )

    delete_work_order_service = providers.Factory(
        _lazy(_WORK_ORDERS, 'DeleteWorkOrderService'),
        store=store,
        event_publisher=event_publisher,
    )

    add_evidence_service = providers.Factory(
        _lazy(_WORK_ORDERS, 'AddEvidenceService'),
        store=store,
        event_publisher=event_publisher,
    )

    get_work_order_service = providers.Factory(_lazy(_WORK_ORDERS, 'GetWorkOrderService'), store=store)

    work_order_statistics_service = providers.Factory(
        _lazy(_WORK_ORDERS, 'WorkOrderStatisticsService'),
        store=store,
    )

    # =========================================================================
    # Services - Forms
    # =========================================================================

    create_template_service = providers.Factory(
        _lazy(_FORMS, 'CreateTemplateService'),
        store=store,
        event_publisher=event_publisher,
    )

    update_template_service = providers.Factory(
        _lazy(_FORMS, 'UpdateTemplateService'),
        store=store,
        event_publisher=event_publisher,
    )

    delete_template_service = providers.Factory(
        _lazy(_FORMS, 'DeleteTemplateService'),
        store=store,
        event_publisher=event_publisher,
    )

    submit_filled_form_service = providers.Factory(
        _lazy(_FORMS, 'SubmitFilledFormService'),
        store=store,
        event_publisher=event_publisher,
    )

    update_filled_form_service = providers.Factory(
        _lazy(_FORMS, 'UpdateFilledFormService'),
        store=store,
        event_publisher=event_publisher,
    )

    review_filled_form_service = providers.Factory(
        _lazy(_FORMS, 'ReviewFilledFormService'),
        store=store,
        event_publisher=event_publisher,
    )

    list_forms_service = providers.Factory(_lazy(_FORMS, 'ListFormsByWorkOrderService'), store=store)

    compose_document_service = providers.Factory(
        _lazy('src.core.documents.use_cases', 'ComposeDocumentService'),
        store=store,
        composer=document_composer,
        event_publisher=event_publisher,
    )

    # =========================================================================
    # Services - Notifications / Visibility
    # =========================================================================

    mark_notification_read_service = providers.Factory(
        _lazy(_NOTIFICATIONS, 'MarkNotificationReadService'),
        store=store,
        event_publisher=event_publisher,
    )

    mark_all_notifications_read_service = providers.Factory(
        _lazy(_NOTIFICATIONS, 'MarkAllNotificationsReadService'),
        store=store,
        event_publisher=event_publisher,
    )

    view_builder = providers.Factory(
        _lazy('src.core.visibility.views', 'RoleScopedViewBuilder'),
        store=store,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def build_config() -> dict:
    """Lê as chaves do container a partir do settings.py do Django."""
    from django.conf import settings

    return {
        'snapshot_write_mode': settings.SNAPSHOT_WRITE_MODE,
        'snapshot_max_retries': settings.SNAPSHOT_MAX_RETRIES,
        'snapshot_retry_delay': settings.SNAPSHOT_RETRY_DELAY,
        'template_seed': settings.TEMPLATE_SEED,
        'event_publisher_mode': settings.EVENT_PUBLISHER_MODE,
        'support_supervisor_id': settings.SUPPORT_SUPERVISOR_ID,
        'default_work_order_format': settings.DEFAULT_WORK_ORDER_FORMAT,
    }


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization). O EntityStore só é
    aberto no primeiro uso de um service.
    """
    global _container

    if _container is None:
        container = Container()
        container.config.from_dict(build_config())
        _container = container

    return _container


def reset_container() -> None:
    """
    Fecha o store (flush final) e descarta o container global.
    """
    global _container

    if _container is not None:
        _container.shutdown_resources()
    _container = None
