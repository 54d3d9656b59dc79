"""
Fronteira de escrita de snapshots.

Toda escrita de snapshot passa por aqui. Falhas do SnapshotStore
são repetidas algumas vezes; esgotadas as tentativas, a falha é
registrada como warning e o estado em memória é mantido (o próximo
write bem-sucedido da coleção grava tudo de novo).
"""

from typing import Callable
import logging
import time

from src.core.shared.interfaces import CollectionSnapshot, SnapshotStore

logger = logging.getLogger(__name__)


class SnapshotWriter:
    """
    Escreve snapshots com retry.

    Args:
        snapshot_store: Port de persistência
        max_retries: Tentativas extras após a primeira falha
        retry_delay: Espera (segundos) entre tentativas
    """

    def __init__(
        self,
        snapshot_store: SnapshotStore,
        max_retries: int = 3,
        retry_delay: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.snapshot_store = snapshot_store
        self.max_retries = max(0, int(max_retries))
        self.retry_delay = retry_delay
        self._sleep = sleep

    def write(self, snapshot: CollectionSnapshot) -> bool:
        """
        Persiste snapshot.

        Returns:
            True se gravado, False se todas as tentativas falharam
        """
        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                self.snapshot_store.save(snapshot)
                return True
            except Exception as e:
                logger.warning(
                    f"Falha ao gravar snapshot '{snapshot.name}' "
                    f"(tentativa {attempt}/{attempts}): {e}"
                )
                if attempt < attempts and self.retry_delay:
                    self._sleep(self.retry_delay)

        logger.warning(
            f"Snapshot '{snapshot.name}' v{snapshot.version} não persistido; "
            f"mantendo estado em memória"
        )
        return False
