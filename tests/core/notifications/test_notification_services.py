"""
Testes dos serviços de Notificações.
"""

import pytest

from src.core.notifications.entities import NotificationEntity
from src.core.notifications.use_cases import (
    MarkAllNotificationsReadService,
    MarkNotificationReadService,
)
from src.core.shared.exceptions import ValidationError, EntityNotFoundError


@pytest.fixture
def notify(store):
    def create(user_id="2", title="Nuevo ticket de soporte"):
        return store.notifications.create(NotificationEntity(user_id=user_id, title=title))
    return create


class TestMarkNotificationReadService:

    def test_marcar_como_lida(self, store, notify):
        notification = notify()

        output = MarkNotificationReadService(store).execute(notification.id)

        assert output.read is True
        assert store.notifications.get(notification.id).read is True

    def test_marcar_duas_vezes_e_idempotente(self, store, notify):
        notification = notify()
        service = MarkNotificationReadService(store)
        service.execute(notification.id)
        version = store.notifications.version

        output = service.execute(notification.id)

        assert output.read is True
        assert store.notifications.version == version

    def test_notificacao_inexistente_erro(self, store):
        with pytest.raises(EntityNotFoundError):
            MarkNotificationReadService(store).execute("nao-existe")

    def test_so_read_pode_mudar(self, store, notify):
        notification = notify()

        with pytest.raises(ValidationError):
            store.notifications.update(notification.id, title="Otro título")


class TestMarkAllNotificationsReadService:

    def test_marcar_todas_do_usuario(self, store, notify):
        first = notify()
        notify()
        notify(user_id="3")
        MarkNotificationReadService(store).execute(first.id)

        changed = MarkAllNotificationsReadService(store).execute("2")

        assert changed == 1
        assert store.notifications.count(lambda n: n.user_id == "2" and not n.read) == 0
        assert store.notifications.count(lambda n: n.user_id == "3" and not n.read) == 1

    def test_sem_pendentes_retorna_zero(self, store):
        assert MarkAllNotificationsReadService(store).execute("2") == 0
