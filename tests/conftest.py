"""
Configurações globais do Pytest para FieldOps.

Este arquivo é carregado automaticamente pelo pytest e
fornece fixtures compartilhadas. Django é configurado pelo
pytest-django (DJANGO_SETTINGS_MODULE no pyproject.toml).

Testes do core usam InMemorySnapshotStore e o dispatcher em
processo; só os testes de adapters tocam o banco.
"""

from datetime import datetime, timedelta

import pytest

from src.core.store import EntityStore, InMemorySnapshotStore
from src.core.tickets.handlers import build_dispatcher


class FrozenClock:
    """Relógio controlado: só avança quando o teste manda."""

    def __init__(self, start: datetime = datetime(2024, 3, 1, 9, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def snapshot_store():
    return InMemorySnapshotStore()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def store(snapshot_store):
    """Store aberto, com os templates padrão semeados."""
    store = EntityStore(snapshot_store, retry_delay=0).open()
    yield store
    store.close()


@pytest.fixture
def empty_store(snapshot_store):
    """Store aberto sem templates."""
    store = EntityStore(snapshot_store, template_seed=None, retry_delay=0).open()
    yield store
    store.close()


@pytest.fixture
def dispatcher(store):
    """Dispatcher com o NotificationSink ligado ao store."""
    return build_dispatcher(store)


@pytest.fixture(autouse=True)
def reset_container():
    """Container global limpo entre testes."""
    yield
    from src.config.container import reset_container
    reset_container()
