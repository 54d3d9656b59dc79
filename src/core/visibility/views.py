"""
Role-Scoped View Builder.

Projeções somente leitura, recalculadas a cada chamada sobre o
estado atual do store. Nada aqui escreve.

Regras de visibilidade de ordens de trabalho:
    admin       → todas
    supervisor  → supervisor_id == usuário ou created_by == usuário
    tecnician   → usuário ∈ assigned_technicians
    client      → usuário ∈ assigned_technicians

Os mapeamentos papel → regra são totais; isso é verificado na
importação do módulo.
"""

from typing import Callable, Dict, List, Union

from src.core.notifications.entities import NotificationEntity
from src.core.store import EntityStore
from src.core.tickets.entities import SupportTicketEntity
from src.core.work_orders.entities import WorkOrderEntity, WorkOrderStatus

from .roles import Identity, UserRole

WorkOrderRule = Callable[[WorkOrderEntity, Identity], bool]
TicketRule = Callable[[SupportTicketEntity, Identity], bool]

FORM_STATUSES = (WorkOrderStatus.ASSIGNED, WorkOrderStatus.IN_PROGRESS)


def _everything(entity, identity: Identity) -> bool:
    return True


def _supervised_or_created(order: WorkOrderEntity, identity: Identity) -> bool:
    return order.supervisor_id == identity.user_id or order.created_by == identity.user_id


def _assigned(order: WorkOrderEntity, identity: Identity) -> bool:
    return identity.user_id in order.assigned_technicians


WORK_ORDER_RULES: Dict[UserRole, WorkOrderRule] = {
    UserRole.ADMIN: _everything,
    UserRole.SUPERVISOR: _supervised_or_created,
    UserRole.TECNICIAN: _assigned,
    UserRole.CLIENT: _assigned,
}


def _ticket_assigned(ticket: SupportTicketEntity, identity: Identity) -> bool:
    return ticket.assigned_to == identity.user_id


def _own_ticket(ticket: SupportTicketEntity, identity: Identity) -> bool:
    if not identity.email or not ticket.client_visible:
        return False
    return ticket.client_email.strip().lower() == identity.email.strip().lower()


TICKET_RULES: Dict[UserRole, TicketRule] = {
    UserRole.ADMIN: _everything,
    UserRole.SUPERVISOR: _everything,
    UserRole.TECNICIAN: _ticket_assigned,
    UserRole.CLIENT: _own_ticket,
}


def _check_total(rules: Dict[UserRole, Callable], name: str) -> None:
    missing = [role.value for role in UserRole if role not in rules]
    if missing:
        raise RuntimeError(f"{name} sem regra para: {', '.join(missing)}")


_check_total(WORK_ORDER_RULES, "WORK_ORDER_RULES")
_check_total(TICKET_RULES, "TICKET_RULES")


class RoleScopedViewBuilder:
    """
    Example:
        views = RoleScopedViewBuilder(store)
        views.work_orders_for(Identity("3", "tecnician", "Luis"))
        views.unread_count("2")
    """

    def __init__(self, store: EntityStore):
        self.store = store

    def work_orders_for(self, identity: Identity) -> List[WorkOrderEntity]:
        """Ordens visíveis ao usuário, em ordem de criação."""
        rule = WORK_ORDER_RULES[identity.role]
        return self.store.work_orders.query(lambda order: rule(order, identity))

    def work_orders_for_forms(self, identity: Identity) -> List[WorkOrderEntity]:
        """
        Ordens em que o usuário pode preencher formulários.

        Atribuídas, supervisionadas ou criadas por ele (admin: todas),
        apenas em status assigned / in_progress.
        """
        def eligible(order: WorkOrderEntity) -> bool:
            if order.status not in FORM_STATUSES:
                return False
            if identity.role == UserRole.ADMIN:
                return True
            return _assigned(order, identity) or _supervised_or_created(order, identity)

        return self.store.work_orders.query(eligible)

    def tickets_for(self, identity: Identity) -> List[SupportTicketEntity]:
        rule = TICKET_RULES[identity.role]
        return self.store.tickets.query(lambda ticket: rule(ticket, identity))

    def notifications_for(self, identity: Union[Identity, str]) -> List[NotificationEntity]:
        """Notificações do usuário, mais recentes primeiro."""
        user_id = _user_id(identity)
        notifications = self.store.notifications.query(lambda n: n.user_id == user_id)
        notifications.reverse()
        notifications.sort(key=lambda n: n.created_at, reverse=True)
        return notifications

    def unread_count(self, identity: Union[Identity, str]) -> int:
        user_id = _user_id(identity)
        return self.store.notifications.count(lambda n: n.user_id == user_id and not n.read)


def _user_id(identity: Union[Identity, str]) -> str:
    return identity.user_id if isinstance(identity, Identity) else identity
