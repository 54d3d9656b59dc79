"""
EntityCollection - Coleção em memória com snapshot write-through.

Regras:
- Toda leitura devolve cópias profundas; ninguém fora da coleção
  segura referência para o estado armazenado.
- Toda escrita substitui o objeto armazenado (nunca muta no lugar),
  por isso um checkpoint é só uma cópia rasa do dicionário.
- Id, número de negócio e timestamps são carimbados aqui.
- Números vêm de uma sequência persistida junto com o snapshot;
  apagar entidades não faz números serem reutilizados.
"""

from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Generic, List, Optional, Type, TypeVar
import logging
import threading
import uuid

from src.core.shared.entities import Entity
from src.core.shared.exceptions import EntityNotFoundError, ValidationError
from src.core.shared.identifiers import next_number, parse_number
from src.core.shared.interfaces import CollectionSnapshot

from .writer import SnapshotWriter

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)

MIN_TICK = timedelta(microseconds=1)


@dataclass
class _Checkpoint:
    items: Dict[str, Entity]
    sequence: int
    version: int
    dirty: bool


class EntityCollection(Generic[E]):
    """
    Coleção de um tipo de entidade.

    Args:
        name: Nome lógico (chave do snapshot)
        entity_class: Subclasse de Entity armazenada
        writer: Fronteira de escrita de snapshots
        clock: Fonte de tempo (datetime.now por padrão)

    Example:
        orders = EntityCollection("work_orders", WorkOrderEntity, writer)
        order = orders.create(WorkOrderEntity(client_name="ACME"))
        order.number  # "OT-00001"
    """

    def __init__(
        self,
        name: str,
        entity_class: Type[E],
        writer: SnapshotWriter,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.name = name
        self.entity_class = entity_class
        self._writer = writer
        self._clock = clock

        self._items: Dict[str, E] = {}
        self._sequence = 0
        self._version = 0

        self._lock = threading.RLock()
        self._checkpoints: List[_Checkpoint] = []
        self._dirty = False

    # =========================================================================
    # Leitura
    # =========================================================================

    def get(self, entity_id: str) -> Optional[E]:
        with self._lock:
            entity = self._items.get(entity_id)
            return deepcopy(entity) if entity is not None else None

    def get_or_raise(self, entity_id: str) -> E:
        entity = self.get(entity_id)
        if entity is None:
            raise self._not_found(entity_id)
        return entity

    def query(self, predicate: Optional[Callable[[E], bool]] = None) -> List[E]:
        """Cópias das entidades que satisfazem o predicado, em ordem de inserção."""
        with self._lock:
            items = deepcopy(list(self._items.values()))
        if predicate is None:
            return items
        return [item for item in items if predicate(item)]

    def first(self, predicate: Callable[[E], bool]) -> Optional[E]:
        for item in self.query(predicate):
            return item
        return None

    def count(self, predicate: Optional[Callable[[E], bool]] = None) -> int:
        if predicate is None:
            with self._lock:
                return len(self._items)
        return len(self.query(predicate))

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def version(self) -> int:
        return self._version

    # =========================================================================
    # Escrita
    # =========================================================================

    def create(self, draft: E) -> E:
        """
        Valida e insere novo registro.

        Raises:
            ValidationError: Se draft inválido (nada é alterado)
        """
        self._check_type(draft)
        entity = deepcopy(draft)
        entity.validate()

        with self._lock:
            entity.id = str(uuid.uuid4())
            sequence = self._sequence
            if entity.NUMBER_FIELD:
                setattr(entity, entity.NUMBER_FIELD, next_number(entity.NUMBER_PREFIX, sequence))
                sequence += 1

            now = self._clock()
            setattr(entity, entity.CREATED_FIELD, now)
            if entity.UPDATED_FIELD:
                setattr(entity, entity.UPDATED_FIELD, now)

            self._items[entity.id] = entity
            self._sequence = sequence
            self._changed()

            logger.debug(f"[{self.name}] criado {entity.id} {entity.business_number or ''}".rstrip())
            return deepcopy(entity)

    def update(self, entity_id: str, **fields) -> E:
        """
        Atualização parcial.

        Raises:
            ValidationError: Campo desconhecido, imutável ou valor inválido
            EntityNotFoundError: Se entidade não existe
        """
        unknown = set(fields) - self.entity_class.field_names()
        if unknown:
            raise ValidationError(
                f"Campos desconhecidos: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        protected = set(fields) & self.entity_class.protected_fields()
        if protected:
            raise ValidationError(
                f"Campos não podem ser alterados: {', '.join(sorted(protected))}",
                field=sorted(protected)[0],
            )

        with self._lock:
            current = self._require(entity_id)
            entity = deepcopy(current)
            for name, value in fields.items():
                setattr(entity, name, deepcopy(value))
            return self._replace(current, entity)

    def save(self, entity: E) -> E:
        """
        Substitui registro existente pela entidade inteira.

        Id, número e timestamp de criação são mantidos do registro
        armazenado.

        Raises:
            ValidationError: Se um campo imutável foi alterado
            EntityNotFoundError: Se entidade não existe
        """
        self._check_type(entity)
        with self._lock:
            current = self._require(entity.id)
            for name in self.entity_class.IMMUTABLE_FIELDS:
                if getattr(entity, name) != getattr(current, name):
                    raise ValidationError(f"Campo não pode ser alterado: {name}", field=name)

            replacement = deepcopy(entity)
            if self.entity_class.NUMBER_FIELD:
                setattr(replacement, self.entity_class.NUMBER_FIELD, current.business_number)
            setattr(
                replacement,
                self.entity_class.CREATED_FIELD,
                getattr(current, self.entity_class.CREATED_FIELD),
            )
            return self._replace(current, replacement)

    def delete(self, entity_id: str) -> bool:
        """Remove registro. Retorna False (sem efeito) se não existe."""
        with self._lock:
            if entity_id not in self._items:
                return False
            del self._items[entity_id]
            self._changed()
            logger.debug(f"[{self.name}] removido {entity_id}")
            return True

    def _replace(self, current: E, entity: E) -> E:
        entity.validate()
        updated_field = self.entity_class.UPDATED_FIELD
        if updated_field:
            setattr(entity, updated_field, self._next_timestamp(getattr(current, updated_field)))
        self._items[entity.id] = entity
        self._changed()
        return deepcopy(entity)

    def _next_timestamp(self, previous: Optional[datetime]) -> datetime:
        now = self._clock()
        if previous is not None and now <= previous:
            return previous + MIN_TICK
        return now

    def _require(self, entity_id: str) -> E:
        entity = self._items.get(entity_id)
        if entity is None:
            raise self._not_found(entity_id)
        return entity

    def _not_found(self, entity_id: str) -> EntityNotFoundError:
        entity_type = self.entity_class.ENTITY_TYPE
        return EntityNotFoundError(
            f"{entity_type} com ID {entity_id} não encontrado",
            entity_type=entity_type,
            entity_id=entity_id,
        )

    def _check_type(self, entity) -> None:
        if not isinstance(entity, self.entity_class):
            raise ValidationError(
                f"Coleção {self.name} aceita apenas {self.entity_class.__name__}",
                field="entity",
            )

    # =========================================================================
    # Snapshot
    # =========================================================================

    def _changed(self) -> None:
        self._version += 1
        if self._checkpoints:
            self._dirty = True
        else:
            self._persist()

    def _persist(self) -> bool:
        return self._writer.write(self.snapshot())

    def snapshot(self) -> CollectionSnapshot:
        """Fotografia do estado atual (os objetos armazenados nunca são mutados)."""
        with self._lock:
            return CollectionSnapshot(
                name=self.name,
                items=list(self._items.values()),
                sequence=self._sequence,
                version=self._version,
            )

    def load(self, snapshot: CollectionSnapshot) -> None:
        """Substitui o conteúdo pelo snapshot carregado, sem persistir."""
        with self._lock:
            self._items = {item.id: item for item in snapshot.items}
            highest = 0
            if self.entity_class.NUMBER_FIELD:
                for item in snapshot.items:
                    highest = max(
                        highest,
                        parse_number(self.entity_class.NUMBER_PREFIX, item.business_number or ""),
                    )
            self._sequence = max(snapshot.sequence, highest)
            self._version = snapshot.version
            logger.debug(
                f"[{self.name}] carregado: {len(self._items)} registros, "
                f"sequência {self._sequence}, versão {self._version}"
            )

    def flush(self) -> bool:
        with self._lock:
            self._dirty = False
            return self._persist()

    # =========================================================================
    # Lote (usado pelo StoreUnitOfWork)
    # =========================================================================

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def begin_batch(self) -> None:
        """Adquire o lock e registra checkpoint; persistência fica suspensa."""
        self._lock.acquire()
        self._checkpoints.append(
            _Checkpoint(dict(self._items), self._sequence, self._version, self._dirty)
        )

    def commit_batch(self) -> None:
        """Fecha o lote; o lote mais externo grava snapshot se houve escrita."""
        self._checkpoints.pop()
        if not self._checkpoints and self._dirty:
            self._dirty = False
            self._persist()

    def rollback_batch(self) -> None:
        """Restaura o checkpoint do lote."""
        checkpoint = self._checkpoints.pop()
        self._items = checkpoint.items
        self._sequence = checkpoint.sequence
        self._version = checkpoint.version
        self._dirty = checkpoint.dirty
        logger.debug(f"[{self.name}] lote desfeito")

    def release_batch(self) -> None:
        self._lock.release()

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        return f"EntityCollection({self.name}, {len(self._items)} registros)"
