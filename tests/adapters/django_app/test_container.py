"""
Testes do container de DI com snapshots em memória.
"""

import pytest

from src.config.container import get_container, reset_container
from src.core.store import InMemorySnapshotStore
from src.core.tickets.dtos import ConvertTicketInputDTO, CreateTicketInputDTO
from src.core.visibility.roles import Identity


@pytest.fixture
def container(settings):
    settings.SNAPSHOT_WRITE_MODE = "memory"
    settings.EVENT_PUBLISHER_MODE = "sync"
    settings.SUPPORT_SUPERVISOR_ID = "2"
    return get_container()


class TestContainer:

    def test_store_compartilhado_e_semeado(self, container):
        store = container.store()

        assert store is container.store()
        assert store.is_open
        assert store.templates.count() == 8
        assert isinstance(container.snapshot_store(), InMemorySnapshotStore)

    def test_fluxo_ticket_para_ordem(self, container):
        created = container.create_ticket_service().execute(CreateTicketInputDTO(
            client_name="María González",
            client_email="maria@empresa.com",
            subject="Sin red",
            category="network",
        ))
        container.convert_ticket_service().execute(
            ConvertTicketInputDTO(ticket_id=created.ticket.id, assigned_technicians=("3",))
        )

        views = container.view_builder()
        orders = views.work_orders_for(Identity("3", "tecnician"))
        assert [o.number for o in orders] == ["OT-00001"]
        assert orders[0].assigned_formats == ["orden-trabajo"]
        assert views.unread_count("2") == 1
        assert views.unread_count("3") == 1

    def test_reset_fecha_o_store(self, container):
        store = container.store()

        reset_container()

        assert not store.is_open
        assert get_container() is not container
