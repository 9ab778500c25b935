# service_orders/services/checklist.py
import logging
from dataclasses import dataclass, field

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from ..exceptions import Forbidden, NotFound, ValidationFailed
from ..models import ChecklistItem, OrderStatus, ServiceOrder, ServiceOrderChecklist
from ..policies.orders import ServiceOrderPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChecklistValidation:
    is_valid: bool
    missing_items: list = field(default_factory=list)
    errors: list = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "missing_items": list(self.missing_items),
            "errors": list(self.errors),
        }


def required_items_for(order) -> QuerySet:
    type_id = order.vehicle.vehicle_type_id
    if type_id is None:
        return ChecklistItem.objects.none()
    return ChecklistItem.objects.filter(
        vehicle_type_id=type_id,
        is_required=True,
        is_active=True,
    ).order_by("order", "id")


def evaluate_checklist(order) -> ChecklistValidation:
    rows = {row.checklist_item_id: row for row in order.checklist.all()}
    missing, errors = [], []
    for item in required_items_for(order):
        row = rows.get(item.id)
        if row is None:
            missing.append(item.name)
        elif not row.is_completed:
            errors.append(f'Item "{item.name}" is not completed')
    return ChecklistValidation(is_valid=not missing and not errors, missing_items=missing, errors=errors)


def validate_checklist(order_id) -> ChecklistValidation:
    """Read-only verdict: may this order be completed as far as its checklist goes?"""
    order = ServiceOrder.objects.select_related("vehicle").filter(pk=order_id).first()
    if order is None:
        raise NotFound(f"Service order {order_id} not found.")
    return evaluate_checklist(order)


def instantiate_checklist(order) -> int:
    """
    Create the missing rows for the required items of the order's vehicle type.
    Safe to run again; returns the number of rows created.
    """
    existing = set(order.checklist.values_list("checklist_item_id", flat=True))
    rows = [
        ServiceOrderChecklist(service_order=order, checklist_item=item)
        for item in required_items_for(order)
        if item.id not in existing
    ]
    if rows:
        ServiceOrderChecklist.objects.bulk_create(rows)
    return len(rows)


def checklist_for(order) -> QuerySet:
    return (
        order.checklist
        .select_related("checklist_item", "completed_by")
        .order_by("checklist_item__order", "checklist_item_id")
    )


@transaction.atomic
def complete_checklist_item(caller, entry_id, *, notes: str | None = None) -> ServiceOrderChecklist:
    entry = (
        ServiceOrderChecklist.objects
        .select_for_update()
        .filter(pk=entry_id)
        .first()
    )
    if entry is None:
        raise NotFound(f"Checklist entry {entry_id} not found.")

    order = entry.service_order
    if not ServiceOrderPolicy.can_work_checklist(caller, order):
        raise Forbidden("Only an admin or the assigned operator can complete checklist items.")
    if order.status != OrderStatus.IN_PROGRESS:
        raise ValidationFailed("Checklist items can only be completed while the order is in progress.")

    entry.is_completed = True
    entry.completed_by_id = caller.id
    entry.completed_at = timezone.now()
    update_fields = ["is_completed", "completed_by", "completed_at"]
    if notes is not None:
        entry.notes = notes
        update_fields.append("notes")
    entry.save(update_fields=update_fields)

    logger.info("Checklist entry %s of order %s completed by user %s", entry.pk, order.pk, caller.id)
    return entry
