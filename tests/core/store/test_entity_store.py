"""
Testes do EntityStore e das coleções.

Coverage:
- Numeração OT/TIC sequencial, contadores independentes, sem reuso
- Timestamps estritamente crescentes
- Leituras devolvem cópias; query sem efeito colateral
- Validação antes de qualquer mutação
- StoreUnitOfWork: commit, rollback e eventos
- SnapshotWriter: retry e falha registrada como warning
- Reabertura a partir de snapshots
- Concorrência: numeração sem duplicados, locks do unit of work
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.core.forms.fixtures import default_templates
from src.core.shared.exceptions import EntityNotFoundError, ValidationError
from src.core.store import EntityStore, InMemorySnapshotStore, SnapshotWriter, StoreUnitOfWork
from src.core.shared.interfaces import CollectionSnapshot
from src.core.tickets.dtos import ConvertTicketInputDTO, CreateTicketInputDTO
from src.core.tickets.entities import SupportTicketEntity, TicketStatus
from src.core.tickets.events import TicketCreatedEvent
from src.core.tickets.use_cases import ConvertTicketToWorkOrderService, CreateTicketService
from src.core.work_orders.entities import WorkOrderEntity, WorkOrderStatus
from src.adapters.django_app.events.publishers import InMemoryEventPublisher


def _order(client="Acme S.A.S.", **kwargs) -> WorkOrderEntity:
    return WorkOrderEntity(client_name=client, created_by="1", **kwargs)


class FlakySnapshotStore(InMemorySnapshotStore):
    """Falha nas primeiras `failures` gravações."""

    def __init__(self, failures: int):
        super().__init__()
        self.failures = failures
        self.attempts = 0

    def save(self, snapshot: CollectionSnapshot) -> None:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise IOError("disco cheio")
        super().save(snapshot)


class TestNumeracao:
    """Números de negócio atribuídos pelo store."""

    def test_criar_ordens_numeradas_em_sequencia(self, empty_store):
        """Deve numerar OT-00001, OT-00002, OT-00003 em ordem de criação."""
        numbers = [empty_store.work_orders.create(_order(f"Cliente {i}")).number for i in range(3)]

        assert numbers == ["OT-00001", "OT-00002", "OT-00003"]

    def test_contadores_independentes_por_colecao(self, empty_store):
        """Tickets e ordens têm sequências separadas."""
        empty_store.work_orders.create(_order())
        empty_store.work_orders.create(_order())
        ticket = empty_store.tickets.create(SupportTicketEntity(client_name="María"))

        assert ticket.ticket_number == "TIC-00001"

    def test_numero_nao_reutilizado_apos_remocao(self, empty_store):
        """Apagar a última ordem não libera o número."""
        empty_store.work_orders.create(_order())
        second = empty_store.work_orders.create(_order())
        empty_store.work_orders.delete(second.id)

        third = empty_store.work_orders.create(_order())

        assert third.number == "OT-00003"

    def test_numero_informado_no_rascunho_e_ignorado(self, empty_store):
        """O store sempre carimba o número."""
        created = empty_store.work_orders.create(_order(number="OT-99999"))

        assert created.number == "OT-00001"
        assert created.id


class TestTimestamps:

    def test_updated_at_estritamente_crescente_com_relogio_parado(self, snapshot_store, clock):
        """Duas escritas no mesmo instante ainda avançam updated_at."""
        store = EntityStore(snapshot_store, template_seed=None, retry_delay=0, clock=clock).open()
        order = store.work_orders.create(_order())

        first = store.work_orders.update(order.id, notes="primeira")
        second = store.work_orders.update(order.id, notes="segunda")

        assert order.created_at == order.updated_at
        assert first.updated_at > order.updated_at
        assert second.updated_at > first.updated_at

    def test_updated_at_segue_relogio_quando_avanca(self, snapshot_store, clock):
        store = EntityStore(snapshot_store, template_seed=None, retry_delay=0, clock=clock).open()
        order = store.work_orders.create(_order())
        clock.advance(minutes=5)

        updated = store.work_orders.update(order.id, status="in_progress")

        assert updated.updated_at == clock.now
        assert updated.created_at == order.created_at


class TestLeitura:

    def test_get_devolve_copia(self, empty_store):
        """Mutar o objeto retornado não altera o store."""
        order = empty_store.work_orders.create(_order(assigned_technicians=["3"]))

        copy = empty_store.work_orders.get(order.id)
        copy.assigned_technicians.append("4")
        copy.client_name = "Outro"

        stored = empty_store.work_orders.get(order.id)
        assert stored.assigned_technicians == ["3"]
        assert stored.client_name == "Acme S.A.S."

    def test_query_sem_efeito_colateral(self, empty_store, snapshot_store):
        """Consultar não grava snapshot nem altera versão."""
        empty_store.work_orders.create(_order())
        saves = snapshot_store.saves_of("work_orders")
        version = empty_store.work_orders.version

        results = empty_store.work_orders.query(lambda o: o.status == WorkOrderStatus.PENDING)
        results[0].notes = "mutado"

        assert snapshot_store.saves_of("work_orders") == saves
        assert empty_store.work_orders.version == version
        assert empty_store.work_orders.query()[0].notes is None

    def test_get_inexistente_retorna_none(self, empty_store):
        assert empty_store.work_orders.get("nao-existe") is None

    def test_get_or_raise_inexistente_erro(self, empty_store):
        with pytest.raises(EntityNotFoundError) as exc_info:
            empty_store.work_orders.get_or_raise("nao-existe")

        assert exc_info.value.entity_type == "WorkOrder"
        assert exc_info.value.entity_id == "nao-existe"


class TestEscrita:

    def test_criar_rascunho_invalido_nao_altera_colecao(self, empty_store):
        """Validação acontece antes da mutação."""
        with pytest.raises(ValidationError) as exc_info:
            empty_store.work_orders.create(_order(client="   "))

        assert exc_info.value.field == "client_name"
        assert empty_store.work_orders.count() == 0
        assert empty_store.work_orders.sequence == 0

    def test_atualizar_campo_desconhecido_erro(self, empty_store):
        order = empty_store.work_orders.create(_order())

        with pytest.raises(ValidationError):
            empty_store.work_orders.update(order.id, color="azul")

    def test_atualizar_numero_erro(self, empty_store):
        """Número, id e created_at são protegidos."""
        order = empty_store.work_orders.create(_order())

        with pytest.raises(ValidationError):
            empty_store.work_orders.update(order.id, number="OT-00042")

        assert empty_store.work_orders.get(order.id).number == "OT-00001"

    def test_atualizar_valor_invalido_mantem_registro(self, empty_store):
        order = empty_store.work_orders.create(_order())

        with pytest.raises(ValidationError):
            empty_store.work_orders.update(order.id, status="archivada")

        assert empty_store.work_orders.get(order.id).status == WorkOrderStatus.PENDING

    def test_atualizar_inexistente_erro(self, empty_store):
        with pytest.raises(EntityNotFoundError):
            empty_store.work_orders.update("nao-existe", notes="x")

    def test_remover_inexistente_sem_efeito(self, empty_store):
        assert empty_store.work_orders.delete("nao-existe") is False

    def test_save_mantem_numero_armazenado(self, empty_store):
        order = empty_store.work_orders.create(_order())
        order.number = "OT-77777"
        order.notes = "revisado"

        saved = empty_store.work_orders.save(order)

        assert saved.number == "OT-00001"
        assert saved.notes == "revisado"


class TestUnitOfWork:

    def test_rollback_restaura_colecoes(self, empty_store, snapshot_store):
        """Exceção no bloco desfaz todas as escritas e não grava snapshot."""
        saves = len(snapshot_store.saved)

        with pytest.raises(RuntimeError):
            with StoreUnitOfWork(empty_store, collections=("tickets", "work_orders")):
                empty_store.work_orders.create(_order())
                empty_store.tickets.create(SupportTicketEntity(client_name="María"))
                raise RuntimeError("falha no meio")

        assert empty_store.work_orders.count() == 0
        assert empty_store.tickets.count() == 0
        assert empty_store.work_orders.sequence == 0
        assert len(snapshot_store.saved) == saves

    def test_commit_grava_um_snapshot_por_colecao(self, empty_store, snapshot_store):
        with StoreUnitOfWork(empty_store, collections=("work_orders",)):
            empty_store.work_orders.create(_order())
            empty_store.work_orders.create(_order())

        assert snapshot_store.saves_of("work_orders") == 1
        assert empty_store.work_orders.count() == 2

    def test_eventos_publicados_apos_commit(self, empty_store):
        publisher = InMemoryEventPublisher()

        with StoreUnitOfWork(empty_store, publisher, collections=("tickets",)) as uow:
            ticket = empty_store.tickets.create(SupportTicketEntity(client_name="María"))
            uow.publish_event(TicketCreatedEvent(aggregate_id=ticket.id, ticket_number=ticket.ticket_number))
            assert publisher.published_events == []

        assert [e.event_type for e in publisher.published_events] == ["TicketCreatedEvent"]

    def test_eventos_descartados_em_rollback(self, empty_store):
        publisher = InMemoryEventPublisher()

        with pytest.raises(ValidationError):
            with StoreUnitOfWork(empty_store, publisher, collections=("tickets",)) as uow:
                ticket = empty_store.tickets.create(SupportTicketEntity(client_name="María"))
                uow.publish_event(TicketCreatedEvent(aggregate_id=ticket.id))
                empty_store.tickets.create(SupportTicketEntity(client_name=""))

        assert publisher.published_events == []
        assert empty_store.tickets.count() == 0

    def test_colecao_desconhecida_erro(self, empty_store):
        with pytest.raises(KeyError):
            StoreUnitOfWork(empty_store, collections=("facturas",))


class TestSnapshotWriter:

    def test_retry_ate_gravar(self):
        flaky = FlakySnapshotStore(failures=2)
        writer = SnapshotWriter(flaky, max_retries=3, retry_delay=0)

        assert writer.write(CollectionSnapshot(name="tickets")) is True
        assert flaky.attempts == 3
        assert flaky.saves_of("tickets") == 1

    def test_falha_esgotada_registra_warning(self, caplog):
        flaky = FlakySnapshotStore(failures=10)
        writer = SnapshotWriter(flaky, max_retries=2, retry_delay=0)

        with caplog.at_level(logging.WARNING, logger="src.core.store.writer"):
            result = writer.write(CollectionSnapshot(name="tickets", version=7))

        assert result is False
        assert flaky.attempts == 3
        assert "não persistido" in caplog.text

    def test_espera_entre_tentativas(self):
        sleeps = []
        writer = SnapshotWriter(FlakySnapshotStore(failures=1), max_retries=1, retry_delay=0.5, sleep=sleeps.append)

        writer.write(CollectionSnapshot(name="tickets"))

        assert sleeps == [0.5]

    def test_falha_de_gravacao_mantem_estado_em_memoria(self):
        store = EntityStore(FlakySnapshotStore(failures=100), template_seed=None, retry_delay=0).open()

        order = store.work_orders.create(_order())

        assert store.work_orders.get(order.id).number == "OT-00001"


class TestAberturaEFechamento:

    def test_primeira_abertura_semeia_templates(self, store):
        slugs = [t.slug for t in store.templates.query()]

        assert len(slugs) == len(default_templates())
        assert "orden-trabajo" in slugs

    def test_reabrir_nao_semeia_de_novo(self, store, snapshot_store):
        store.close()

        reopened = EntityStore(snapshot_store, retry_delay=0).open()

        assert reopened.templates.count() == len(default_templates())

    def test_reabrir_continua_sequencia(self, empty_store, snapshot_store):
        empty_store.work_orders.create(_order())
        removed = empty_store.work_orders.create(_order())
        empty_store.work_orders.delete(removed.id)
        empty_store.close()

        reopened = EntityStore(snapshot_store, template_seed=None, retry_delay=0).open()
        created = reopened.work_orders.create(_order())

        assert created.number == "OT-00003"

    def test_sequencia_nunca_abaixo_do_maior_numero(self, snapshot_store):
        """Snapshot com contador defasado não gera número repetido."""
        legacy = _order()
        legacy.id = "legacy-1"
        legacy.number = "OT-00010"
        snapshot_store.save(CollectionSnapshot(name="work_orders", items=[legacy], sequence=2))

        store = EntityStore(snapshot_store, template_seed=None, retry_delay=0).open()

        assert store.work_orders.create(_order()).number == "OT-00011"

    def test_fechar_grava_todas_as_colecoes(self, empty_store, snapshot_store):
        snapshot_store.clear()

        empty_store.close()

        assert sorted(snapshot_store.saved) == sorted(
            ["tickets", "work_orders", "templates", "filled_forms", "notifications"]
        )


class TestConcorrencia:

    def test_criacoes_e_conversoes_simultaneas_nao_repetem_numero(self, store, dispatcher):
        """Ordens diretas e conversões disputam a mesma sequência OT."""
        direct, conversions = 20, 20
        tickets = [
            store.tickets.create(SupportTicketEntity(client_name=f"Cliente {i}", category="installation"))
            for i in range(conversions)
        ]
        convert = ConvertTicketToWorkOrderService(store, dispatcher, supervisor_id="2")
        start = threading.Barrier(direct + conversions)

        def create_direct(i):
            start.wait()
            return store.work_orders.create(_order(client=f"Directa {i}")).number

        def convert_ticket(ticket):
            start.wait()
            return convert.execute(
                ConvertTicketInputDTO(ticket_id=ticket.id, assigned_technicians=("3",))
            ).work_order.number

        with ThreadPoolExecutor(max_workers=direct + conversions) as executor:
            futures = [executor.submit(create_direct, i) for i in range(direct)]
            futures += [executor.submit(convert_ticket, ticket) for ticket in tickets]
            numbers = [future.result() for future in futures]

        total = direct + conversions
        assert sorted(numbers) == [f"OT-{n:05d}" for n in range(1, total + 1)]
        assert store.work_orders.sequence == total
        assert all(t.status == TicketStatus.ASSIGNED for t in store.tickets.query())
        assert store.notifications.count(lambda n: n.user_id == "3") == conversions

    def test_tickets_simultaneos_tem_numeros_unicos(self, store, dispatcher):
        threads = 30
        service = CreateTicketService(store, dispatcher, supervisor_id="2")
        start = threading.Barrier(threads)

        def create(i):
            start.wait()
            return service.execute(CreateTicketInputDTO(client_name=f"Cliente {i}")).ticket_number

        with ThreadPoolExecutor(max_workers=threads) as executor:
            numbers = list(executor.map(create, range(threads)))

        assert len(set(numbers)) == threads
        assert sorted(numbers) == [f"TIC-{n:05d}" for n in range(1, threads + 1)]
        assert store.notifications.count(lambda n: n.user_id == "2") == threads

    def test_unit_of_work_segura_locks_ate_o_commit(self, empty_store):
        """Locks adquiridos em ordem global e mantidos durante todo o bloco."""
        acquired = {}

        def try_locks():
            for name in ("tickets", "work_orders"):
                lock = empty_store.collection(name).lock
                acquired[name] = lock.acquire(blocking=False)
                if acquired[name]:
                    lock.release()

        with StoreUnitOfWork(empty_store, collections=("work_orders", "tickets")):
            empty_store.work_orders.create(_order())
            other = threading.Thread(target=try_locks)
            other.start()
            other.join()

        assert acquired == {"tickets": False, "work_orders": False}
        try_locks()
        assert acquired == {"tickets": True, "work_orders": True}
