# service_orders/services/lifecycle.py
"""
Service order state machine.

    pending → in_progress → completed → billed → closed
    in_progress → pending   (release only)

Every entry point takes an explicit Caller. Preconditions are checked under
a row lock before anything is written; a rejected call raises one of the
errors in service_orders.exceptions and leaves order and history untouched.
Each status change writes exactly one StatusHistory row in the same
transaction as the order update.
"""
import logging
from dataclasses import dataclass, field

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from account.models import Role
from core.numbering import next_order_number
from notifications.services import notify_order_completed
from vehicles.models import Vehicle

from ..exceptions import (
    AlreadyAssigned,
    Forbidden,
    InvalidTransition,
    NotFound,
    ServiceOrderError,
    ValidationFailed,
)
from ..models import OperatorAction, OrderStatus, Priority, ServiceOrder
from ..policies.orders import ServiceOrderPolicy
from ..selectors.orders import get_order_for
from .audit import record_transition
from .checklist import evaluate_checklist, instantiate_checklist

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.IN_PROGRESS},
    OrderStatus.IN_PROGRESS: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: {OrderStatus.BILLED},
    OrderStatus.BILLED: {OrderStatus.CLOSED},
    OrderStatus.CLOSED: set(),
}


@dataclass(frozen=True)
class StatusChangeCheck:
    can_change: bool
    reason: str = ""
    code: str = ""
    message: str = ""
    missing_items: list = field(default_factory=list)
    errors: list = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "can_change": self.can_change,
            "reason": self.reason,
            "code": self.code,
            "message": self.message,
            "missing_items": list(self.missing_items),
            "errors": list(self.errors),
        }


def _caller_id(caller):
    return getattr(caller, "id", None)


def _reject(exc: ServiceOrderError, op: str, order_id, caller) -> ServiceOrderError:
    logger.warning(
        "%s rejected (order=%s, user=%s): %s [%s]",
        op, order_id, _caller_id(caller), exc.message, exc.default_code,
    )
    return exc


def _lock_order(order_id) -> ServiceOrder:
    order = ServiceOrder.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise NotFound(f"Service order {order_id} not found.")
    return order


# =========================
#   CREATE
# =========================
def create_order(
    caller,
    *,
    vehicle_id,
    description: str,
    client_id=None,
    priority=None,
    estimated_cost=None,
) -> ServiceOrder:
    if not ServiceOrderPolicy.can_create(caller):
        raise _reject(Forbidden("Your role cannot create service orders."), "create", None, caller)

    if client_id is None and caller.is_client:
        client_id = caller.id

    fields = {}
    if not (description or "").strip():
        fields["description"] = "This field is required."
    if client_id is None:
        fields["client_id"] = "This field is required."
    parsed_priority = Priority.parse(priority)
    if parsed_priority is None:
        fields["priority"] = f"Unknown priority {priority!r}."
    if fields:
        raise _reject(ValidationFailed("Missing or invalid fields.", fields=fields), "create", None, caller)

    vehicle = Vehicle.objects.filter(pk=vehicle_id).first()
    if vehicle is None:
        raise _reject(NotFound(f"Vehicle {vehicle_id} not found."), "create", None, caller)
    if not get_user_model().objects.filter(pk=client_id).exists():
        raise _reject(NotFound(f"Client {client_id} not found."), "create", None, caller)
    if not ServiceOrderPolicy.can_create_for(caller, client_id, vehicle):
        raise _reject(Forbidden("Clients can only open orders for their own vehicles."), "create", None, caller)

    with transaction.atomic():
        order = ServiceOrder.objects.create(
            order_number=next_order_number(),
            client_id=client_id,
            vehicle=vehicle,
            description=description.strip(),
            priority=parsed_priority,
            estimated_cost=estimated_cost,
            status=OrderStatus.PENDING,
        )
        created_rows = instantiate_checklist(order)

    logger.info(
        "Order %s created by user %s (client=%s, vehicle=%s, checklist rows=%s)",
        order.order_number, caller.id, client_id, vehicle.pk, created_rows,
    )
    return order


# =========================
#   TAKE / RELEASE / ASSIGN
# =========================
def take_order(caller, order_id, *, notes: str | None = None) -> ServiceOrder:
    if not ServiceOrderPolicy.can_take(caller):
        raise _reject(Forbidden("Only operators can take orders."), "take", order_id, caller)

    with transaction.atomic():
        order = _lock_order(order_id)
        if order.operator_id is not None:
            raise _reject(AlreadyAssigned("This order is already assigned to another operator."), "take", order_id, caller)
        if order.status != OrderStatus.PENDING:
            raise _reject(
                InvalidTransition(f"Only pending orders can be taken (status is {order.status})."),
                "take", order_id, caller,
            )

        now = timezone.now()
        # compare-and-set: only one concurrent taker can match operator IS NULL
        updated = (
            ServiceOrder.objects
            .filter(pk=order.pk, operator__isnull=True, status=OrderStatus.PENDING)
            .update(
                operator_id=caller.id,
                taken_by_id=caller.id,
                taken_at=now,
                status=OrderStatus.IN_PROGRESS,
                start_date=order.start_date or now,
                updated_at=now,
            )
        )
        if updated != 1:
            raise _reject(AlreadyAssigned("This order was just taken by another operator."), "take", order_id, caller)

        record_transition(
            order,
            previous_status=OrderStatus.PENDING,
            new_status=OrderStatus.IN_PROGRESS,
            changed_by_id=caller.id,
            notes=notes or "Order taken by operator",
            action=OperatorAction.TAKE,
        )

    order.refresh_from_db()
    logger.info("Order %s taken by operator %s", order.order_number, caller.id)
    return order


def release_order(caller, order_id, *, notes: str) -> ServiceOrder:
    if caller is None:
        raise _reject(Forbidden("Authentication required."), "release", order_id, caller)

    with transaction.atomic():
        order = _lock_order(order_id)
        if not ServiceOrderPolicy.can_release(caller, order):
            raise _reject(Forbidden("Only the assigned operator can release this order."), "release", order_id, caller)
        if order.status != OrderStatus.IN_PROGRESS:
            raise _reject(
                InvalidTransition(f"Only in-progress orders can be released (status is {order.status})."),
                "release", order_id, caller,
            )
        if not (notes or "").strip():
            raise _reject(
                ValidationFailed("A reason is required to release an order.", fields={"notes": "This field is required."}),
                "release", order_id, caller,
            )

        previous = order.status
        order.operator = None
        order.taken_by = None
        order.taken_at = None
        order.status = OrderStatus.PENDING
        order.start_date = None
        order.completion_date = None
        order.save(update_fields=[
            "operator", "taken_by", "taken_at", "status",
            "start_date", "completion_date", "updated_at",
        ])

        record_transition(
            order,
            previous_status=previous,
            new_status=OrderStatus.PENDING,
            changed_by_id=caller.id,
            notes=notes.strip(),
            action=OperatorAction.RELEASE,
        )

    logger.info("Order %s released by operator %s", order.order_number, caller.id)
    return order


def assign_operator(caller, order_id, operator_id) -> ServiceOrder:
    """Admin pre-assignment. Status does not change, so no history row."""
    if not ServiceOrderPolicy.can_assign(caller):
        raise _reject(Forbidden("Only admins can assign operators."), "assign", order_id, caller)

    operator = get_user_model().objects.select_related("profile").filter(pk=operator_id).first()
    if operator is None:
        raise _reject(NotFound(f"User {operator_id} not found."), "assign", order_id, caller)
    prof = getattr(operator, "profile", None)
    if prof is None or Role.parse(prof.role) != Role.OPERATOR:
        raise _reject(
            ValidationFailed("The selected user is not an operator.", fields={"operator_id": "Not an operator."}),
            "assign", order_id, caller,
        )

    with transaction.atomic():
        order = _lock_order(order_id)
        if order.operator_id is not None:
            raise _reject(AlreadyAssigned("This order already has an operator."), "assign", order_id, caller)
        if order.status != OrderStatus.PENDING:
            raise _reject(
                InvalidTransition(f"Only pending orders can be assigned (status is {order.status})."),
                "assign", order_id, caller,
            )
        updated = (
            ServiceOrder.objects
            .filter(pk=order.pk, operator__isnull=True)
            .update(operator_id=operator.pk, updated_at=timezone.now())
        )
        if updated != 1:
            raise _reject(AlreadyAssigned("This order was just assigned."), "assign", order_id, caller)

    order.refresh_from_db()
    logger.info("Order %s assigned to operator %s by user %s", order.order_number, operator.pk, caller.id)
    return order


# =========================
#   STATUS CHANGE
# =========================
def _status_change_error(caller, order: ServiceOrder, new_status: str) -> ServiceOrderError | None:
    """First rule `new_status` breaks for this caller and order, or None."""
    if new_status not in OrderStatus.values:
        return ValidationFailed(
            "Invalid status. Valid statuses are: " + ", ".join(OrderStatus.values),
            fields={"status": f"Unknown status {new_status!r}."},
        )
    if not ServiceOrderPolicy.can_change_status(caller, order):
        return Forbidden("Only an admin or the assigned operator can change this order's status.")
    if new_status == order.status:
        return InvalidTransition(f"Order is already {order.status}.", reason=InvalidTransition.NO_OP)
    if new_status not in ALLOWED_TRANSITIONS.get(order.status, set()):
        hint = " Use release instead." if new_status == OrderStatus.PENDING else ""
        return InvalidTransition(f"Cannot change status from {order.status} to {new_status}.{hint}")
    if new_status == OrderStatus.IN_PROGRESS and order.operator_id is None:
        return InvalidTransition(
            "An operator must be assigned before the order can start.",
            reason=InvalidTransition.NO_OPERATOR,
        )
    if new_status == OrderStatus.COMPLETED:
        verdict = evaluate_checklist(order)
        if not verdict.is_valid:
            return InvalidTransition(
                "The checklist is not complete.",
                reason=InvalidTransition.CHECKLIST_INCOMPLETE,
                missing_items=verdict.missing_items,
                errors=verdict.errors,
            )
    return None


def check_status_change(caller, order_id, new_status: str) -> StatusChangeCheck:
    """Dry run of change_status: same rules, nothing written. Out-of-scope orders look missing."""
    order = get_order_for(caller, order_id)

    err = _status_change_error(caller, order, new_status)
    if err is None:
        return StatusChangeCheck(can_change=True)
    return StatusChangeCheck(
        can_change=False,
        reason=getattr(err, "reason", err.default_code),
        code=err.default_code,
        message=err.message,
        missing_items=getattr(err, "missing_items", []),
        errors=getattr(err, "errors", []),
    )


def change_status(caller, order_id, new_status: str, *, notes: str | None = None) -> ServiceOrder:
    with transaction.atomic():
        order = _lock_order(order_id)
        err = _status_change_error(caller, order, new_status)
        if err is not None:
            raise _reject(err, "change_status", order_id, caller)

        previous = order.status
        now = timezone.now()
        order.status = new_status
        update_fields = ["status", "updated_at"]
        if new_status == OrderStatus.IN_PROGRESS and order.start_date is None:
            order.start_date = now
            update_fields.append("start_date")
        if new_status == OrderStatus.COMPLETED:
            order.completion_date = now
            update_fields.append("completion_date")
        order.save(update_fields=update_fields)

        completing = new_status == OrderStatus.COMPLETED
        record_transition(
            order,
            previous_status=previous,
            new_status=new_status,
            changed_by_id=caller.id,
            notes=notes or "",
            action=OperatorAction.COMPLETE if completing else OperatorAction.STATUS_CHANGE,
        )
        if completing:
            notify_order_completed(order)

    logger.info("Order %s: %s → %s by user %s", order.order_number, previous, new_status, caller.id)
    return order
