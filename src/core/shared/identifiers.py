"""
Gerador de identificadores de negócio.

Números legíveis no formato dos documentos em papel:
    OT-00001, OT-00002, ...   (ordens de trabalho)
    TIC-00001, TIC-00002, ... (tickets de suporte)

A função é pura. Quem chama deve ler o contador e anexar a entidade
dentro da mesma seção crítica (ver EntityCollection.create).
"""

WORK_ORDER_PREFIX = "OT"
TICKET_PREFIX = "TIC"

NUMBER_WIDTH = 5


def next_number(prefix: str, current_count: int) -> str:
    """
    Formata o próximo número da sequência.

    Args:
        prefix: Prefixo do documento (ex: "OT")
        current_count: Quantidade já emitida

    Returns:
        String no formato "{prefix}-{count+1}" com zero-padding de 5 dígitos

    Example:
        >>> next_number("OT", 0)
        'OT-00001'
    """
    return f"{prefix}-{current_count + 1:0{NUMBER_WIDTH}d}"


def parse_number(prefix: str, number: str) -> int:
    """
    Extrai a parte numérica de um identificador de negócio.

    Retorna 0 se o identificador não pertence ao prefixo.

    >>> parse_number("TIC", "TIC-00042")
    42
    """
    head, sep, tail = number.partition("-")
    if head != prefix or not sep or not tail.isdigit():
        return 0
    return int(tail)
