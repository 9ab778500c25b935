# service_orders/selectors/orders.py
from django.db.models import Q, QuerySet

from vehicles.selectors import owned_vehicle_ids

from ..exceptions import NotFound
from ..models import ServiceOrder, OrderStatus

ACTIVE_FILTER = "active"
CLIENT_ACTIVE_STATUSES = (OrderStatus.PENDING, OrderStatus.IN_PROGRESS)


def _base_qs() -> QuerySet:
    return ServiceOrder.objects.select_related("client", "vehicle", "operator")


def scope_for(caller):
    """
    Q restricting orders to what `caller` may read, or None for "nothing".
    - admin / superAdmin → everything
    - operator → operator == caller
    - client → client == caller OR vehicle owned by caller
      (vehicle clause dropped when the caller owns no vehicles)
    - anything else → None
    """
    if caller is None:
        return None
    if caller.is_staff_role:
        return Q()
    if caller.is_operator:
        return Q(operator_id=caller.id)
    if caller.is_client:
        cond = Q(client_id=caller.id)
        vehicle_ids = owned_vehicle_ids(caller.id)
        if vehicle_ids:
            cond |= Q(vehicle_id__in=vehicle_ids)
        return cond
    return None


def orders_visible_to(caller, *, status: str | None = None, limit: int | None = None) -> QuerySet:
    scope = scope_for(caller)
    if scope is None:
        return ServiceOrder.objects.none()

    qs = _base_qs().filter(scope)

    if status:
        if status == ACTIVE_FILTER and caller.is_client:
            qs = qs.filter(status__in=CLIENT_ACTIVE_STATUSES)
        else:
            qs = qs.filter(status=status)

    qs = qs.order_by("-created_at", "-id")
    if limit:
        qs = qs[:limit]
    return qs


def get_order_for(caller, order_id) -> ServiceOrder:
    """Single fetch through the same visibility rules; out of scope looks like missing."""
    scope = scope_for(caller)
    order = None
    if scope is not None:
        order = _base_qs().filter(scope).filter(pk=order_id).first()
    if order is None:
        raise NotFound(f"Service order {order_id} not found.")
    return order


def available_orders_for(caller, *, limit: int | None = None) -> QuerySet:
    """Pending orders nobody has been assigned to, for operators choosing work."""
    if caller is None or not (caller.is_staff_role or caller.is_operator):
        return ServiceOrder.objects.none()
    qs = (
        _base_qs()
        .filter(status=OrderStatus.PENDING, operator__isnull=True)
        .order_by("-created_at", "-id")
    )
    if limit:
        qs = qs[:limit]
    return qs
