"""
Testes dos publishers de eventos e do roteamento Celery.

Celery não é executado: `.delay` é substituído por mocks.
"""

import logging
from unittest.mock import Mock, patch

import pytest

from src.adapters.django_app.events import handlers
from src.adapters.django_app.events.publishers import (
    CeleryEventPublisher,
    CompositeEventPublisher,
    InMemoryEventPublisher,
    LoggingEventPublisher,
    get_event_publisher,
)
from src.core.tickets.events import TicketConvertedEvent, TicketCreatedEvent
from src.core.work_orders.events import WorkOrderStatusChangedEvent


@pytest.fixture
def created_event():
    return TicketCreatedEvent(
        aggregate_id="ticket-1",
        ticket_number="TIC-00001",
        client_name="María González",
        recipient_id="2",
        category="hardware",
        priority="urgent",
    )


class TestLoggingEventPublisher:

    def test_loga_e_despacha(self, created_event, caplog):
        publisher = LoggingEventPublisher()
        handler = Mock()
        publisher.register_handler("TicketCreatedEvent", handler)

        with caplog.at_level(logging.INFO, logger="src.adapters.django_app.events.publishers"):
            publisher.publish(created_event)

        handler.assert_called_once_with(created_event)
        assert "[EVENT] TicketCreatedEvent" in caplog.text
        assert "TIC-00001" in caplog.text

    def test_erro_em_handler_nao_impede_os_demais(self, created_event):
        publisher = LoggingEventPublisher()
        second = Mock()
        publisher.register_handler("TicketCreatedEvent", Mock(side_effect=RuntimeError("falhou")))
        publisher.register_handler("TicketCreatedEvent", second)

        publisher.publish(created_event)

        second.assert_called_once()


class TestCompositeEventPublisher:

    def test_entrega_a_todos_mesmo_com_falha(self, created_event):
        broken = Mock()
        broken.publish.side_effect = RuntimeError("broker fora")
        memory = InMemoryEventPublisher()
        composite = CompositeEventPublisher([broken])
        composite.add_publisher(memory)

        composite.publish(created_event)

        assert memory.published_events == [created_event]
        assert len(composite.publishers) == 2


class TestCeleryEventPublisher:

    def test_enfileira_evento_serializado(self, created_event):
        with patch.object(handlers.dispatch_domain_event, "delay") as delay:
            CeleryEventPublisher(also_log=False).publish(created_event)

        event_type, event_data = delay.call_args[0]
        assert event_type == "TicketCreatedEvent"
        assert event_data["data"]["ticket_number"] == "TIC-00001"

    def test_falha_no_broker_nao_propaga(self, created_event):
        with patch.object(handlers.dispatch_domain_event, "delay", side_effect=ConnectionError("amqp")):
            CeleryEventPublisher().publish(created_event)


class TestGetEventPublisher:

    def test_modo_sync_notifica_em_processo(self, store, created_event):
        publisher = get_event_publisher(store, mode="sync")

        publisher.publish(created_event)

        assert isinstance(publisher, LoggingEventPublisher)
        assert store.notifications.first(lambda n: n.user_id == "2").ticket_id == "ticket-1"

    def test_modo_celery_tambem_enfileira(self, store, created_event):
        publisher = get_event_publisher(store, mode="celery")

        with patch.object(handlers.dispatch_domain_event, "delay") as delay:
            publisher.publish(created_event)

        assert isinstance(publisher, CompositeEventPublisher)
        assert store.notifications.count() == 1
        delay.assert_called_once()

    def test_modo_desconhecido_usa_sync(self, store, caplog):
        with caplog.at_level(logging.WARNING):
            publisher = get_event_publisher(store, mode="kafka")

        assert isinstance(publisher, LoggingEventPublisher)
        assert "kafka" in caplog.text


class TestCeleryHandlers:

    def test_dispatch_roteia_para_handler(self, created_event):
        with patch.object(handlers.handle_ticket_created, "delay") as delay:
            routed = handlers.dispatch_domain_event(created_event.event_type, created_event.to_dict())

        assert routed is True
        delay.assert_called_once_with(created_event.to_dict())

    def test_dispatch_evento_sem_handler(self):
        assert handlers.dispatch_domain_event("EventoInexistente", {}) is False

    def test_ticket_urgente_notifica_por_push(self, created_event):
        with patch.object(handlers.notify_user, "delay") as notify, \
                patch.object(handlers.record_metric, "delay") as metric:
            handlers.handle_ticket_created(created_event.to_dict())

        assert notify.call_args.kwargs["user_id"] == "2"
        assert notify.call_args.kwargs["channel"] == "push"
        assert metric.call_args.kwargs["metric_name"] == "tickets_created"

    def test_conversao_notifica_cada_tecnico(self):
        event = TicketConvertedEvent(
            aggregate_id="ticket-1",
            ticket_number="TIC-00001",
            work_order_id="order-1",
            work_order_number="OT-00001",
            technician_ids=("3", "4"),
            supervisor_id="2",
        )

        with patch.object(handlers.notify_user, "delay") as notify, \
                patch.object(handlers.record_metric, "delay"):
            handlers.handle_ticket_converted(event.to_dict())

        assert [c.kwargs["user_id"] for c in notify.call_args_list] == ["3", "4"]

    def test_ordem_completada_registra_metrica(self):
        event = WorkOrderStatusChangedEvent(
            aggregate_id="order-1",
            number="OT-00001",
            previous_status="in_progress",
            new_status="completed",
        )

        with patch.object(handlers.notify_user, "delay"), \
                patch.object(handlers.record_metric, "delay") as metric:
            handlers.handle_work_order_status_changed(event.to_dict())

        metric.assert_called_once_with(metric_name="work_orders_completed", value=1, tags={})
