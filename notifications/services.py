# notifications/services.py
import logging

from django.utils import timezone

from .models import Notification, NotificationType

logger = logging.getLogger(__name__)


def notify_order_completed(order) -> Notification:
    """Stored for the client; nothing is pushed."""
    note = Notification.objects.create(
        to_user_id=order.client_id,
        service_order=order,
        type=NotificationType.ORDER_COMPLETED,
        title="Service order completed",
        message=f"Service order {order.order_number} has been completed.",
    )
    logger.info("Completion notice %s stored for user %s", note.pk, order.client_id)
    return note


def mark_read(notification: Notification) -> Notification:
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = timezone.now()
        notification.save(update_fields=["is_read", "read_at"])
    return notification
