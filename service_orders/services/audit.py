# service_orders/services/audit.py
from django.db.models import QuerySet

from ..models import StatusHistory


def record_transition(
    order,
    *,
    previous_status: str,
    new_status: str,
    changed_by_id,
    notes: str = "",
    action: str | None = None,
) -> StatusHistory:
    """
    Append one history row for a transition that was just written.
    Must run inside the caller's transaction.atomic block, after the order
    update, so a failure here rolls the order change back too.
    """
    return StatusHistory.objects.create(
        service_order=order,
        previous_status=previous_status,
        new_status=new_status,
        changed_by_id=changed_by_id,
        notes=notes or "",
        operator_action=action,
    )


def history_of(order_id) -> QuerySet:
    """Oldest first, acting user selected."""
    return (
        StatusHistory.objects
        .filter(service_order_id=order_id)
        .select_related("changed_by")
        .order_by("changed_at", "id")
    )
