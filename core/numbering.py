# core/numbering.py
import time

from django.conf import settings
from django.db import transaction

from .models import NumberSequence


def _epoch_millis() -> int:
    return int(time.time() * 1000)


@transaction.atomic
def next_sequence_value(app_label: str, code: str, *, prefix: str = "", padding: int = 4) -> NumberSequence:
    """
    Lock the sequence row (select_for_update), bump the counter and return the row.
    The row is created on first use.
    """
    seq, _ = NumberSequence.objects.select_for_update().get_or_create(
        app_label=app_label,
        code=code,
        defaults={"name": f"{app_label}/{code}", "prefix": prefix, "padding": padding},
    )
    seq.last_number += 1
    seq.save(update_fields=["last_number", "updated_at"])
    return seq


def next_order_number(*, now_millis: int | None = None) -> str:
    """SO-<epoch millis>-<zero padded sequence>, e.g. SO-1760000000000-0042."""
    cfg = settings.SERVICE_ORDERS
    seq = next_sequence_value(
        "service_orders",
        "SERVICE_ORDER",
        prefix=cfg.get("ORDER_NUMBER_PREFIX", "SO"),
        padding=cfg.get("ORDER_NUMBER_PADDING", 4),
    )
    if now_millis is None:
        now_millis = _epoch_millis()
    counter = str(seq.last_number).zfill(seq.padding)
    return f"{seq.prefix}-{now_millis}-{counter}"
