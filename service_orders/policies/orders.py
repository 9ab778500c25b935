from typing import Final

from account.models import Role, STAFF_ROLES


class ServiceOrderPolicy:
    """
    Who may do what on a service order.
    Stateless; every check takes an explicit Caller (None = anonymous).
    A caller whose role is unknown fails every check.
    """

    CREATOR_ROLES: Final[frozenset] = STAFF_ROLES | {Role.CLIENT}
    TAKER_ROLES: Final[frozenset] = frozenset({Role.OPERATOR})
    CHECKLIST_READER_ROLES: Final[frozenset] = STAFF_ROLES | {Role.OPERATOR}

    @staticmethod
    def _is_staff(caller) -> bool:
        return caller is not None and caller.is_staff_role

    @staticmethod
    def _is_assignee(caller, order) -> bool:
        return (
            caller is not None
            and caller.is_operator
            and order.operator_id is not None
            and order.operator_id == caller.id
        )

    @classmethod
    def can_create(cls, caller) -> bool:
        return caller is not None and caller.role in cls.CREATOR_ROLES

    @classmethod
    def can_create_for(cls, caller, client_id, vehicle) -> bool:
        if cls._is_staff(caller):
            return True
        # self-service: own account and own vehicle only
        return (
            caller is not None
            and caller.is_client
            and client_id == caller.id
            and vehicle.client_id == caller.id
        )

    @classmethod
    def can_take(cls, caller) -> bool:
        return caller is not None and caller.role in cls.TAKER_ROLES

    @staticmethod
    def can_release(caller, order) -> bool:
        # assignee only, admins included
        return caller is not None and order.operator_id is not None and order.operator_id == caller.id

    @classmethod
    def can_assign(cls, caller) -> bool:
        return cls._is_staff(caller)

    @classmethod
    def can_change_status(cls, caller, order) -> bool:
        return cls._is_staff(caller) or cls._is_assignee(caller, order)

    @classmethod
    def can_work_checklist(cls, caller, order) -> bool:
        return cls._is_staff(caller) or cls._is_assignee(caller, order)

    @classmethod
    def can_check_checklist(cls, caller) -> bool:
        return caller is not None and caller.role in cls.CHECKLIST_READER_ROLES
