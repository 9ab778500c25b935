"""HTTP surface: status codes and payloads rendered from service errors."""

import pytest
from django.urls import reverse

from account.identity import caller_from_user
from notifications.models import Notification
from service_orders.models import OrderStatus
from service_orders.services import lifecycle

pytestmark = pytest.mark.django_db


def _url(name, **kwargs):
    return reverse(f"service_orders:{name}", kwargs=kwargs)


class TestOrdersEndpoint:
    def test_requires_authentication(self, api) -> None:
        res = api.get(_url("order_list"))
        assert res.status_code in (401, 403)

    def test_admin_creates_order(self, api, boss, customer, vehicle) -> None:
        api.force_authenticate(boss)
        res = api.post(
            _url("order_list"),
            {"client_id": customer.id, "vehicle_id": vehicle.id, "description": "Noise", "priority": "high"},
            format="json",
        )
        assert res.status_code == 201
        body = res.json()
        assert body["status"] == "pending"
        assert body["priority"] == "high"
        assert body["operator_id"] is None
        assert body["vehicle_plate"] == "ABC123"
        assert body["order_number"].startswith("SO-")

    def test_create_validation_error(self, api, boss, customer, vehicle) -> None:
        api.force_authenticate(boss)
        res = api.post(
            _url("order_list"), {"client_id": customer.id, "vehicle_id": vehicle.id}, format="json",
        )
        assert res.status_code == 400
        body = res.json()
        assert body["code"] == "validation_failed"
        assert "description" in body["fields"]

    def test_list_is_scoped(self, api, order, operator_a, customer) -> None:
        api.force_authenticate(operator_a)
        assert api.get(_url("order_list")).json() == []

        api.force_authenticate(customer)
        rows = api.get(_url("order_list"), {"status": "active"}).json()
        assert [r["id"] for r in rows] == [order.pk]

    def test_detail_out_of_scope_is_404(self, api, order, operator_a) -> None:
        api.force_authenticate(operator_a)
        res = api.get(_url("order_detail", pk=order.pk))
        assert res.status_code == 404
        assert res.json()["code"] == "not_found"

    def test_available_is_for_operators(self, api, order, operator_a, customer) -> None:
        api.force_authenticate(customer)
        assert api.get(_url("order_available")).status_code == 403

        api.force_authenticate(operator_a)
        res = api.get(_url("order_available"))
        assert res.status_code == 200
        assert [r["id"] for r in res.json()] == [order.pk]


class TestLifecycleEndpoints:
    def test_take_then_conflict(self, api, order, operator_a, operator_b) -> None:
        api.force_authenticate(operator_a)
        res = api.post(_url("order_take", pk=order.pk), {}, format="json")
        assert res.status_code == 200
        assert res.json()["order"]["operator_id"] == operator_a.id

        api.force_authenticate(operator_b)
        res = api.post(_url("order_take", pk=order.pk), {}, format="json")
        assert res.status_code == 409
        assert res.json()["code"] == "already_assigned"

    def test_client_cannot_take(self, api, order, customer) -> None:
        api.force_authenticate(customer)
        res = api.post(_url("order_take", pk=order.pk), {}, format="json")
        assert res.status_code == 403
        assert res.json()["code"] == "forbidden"

    def test_release_requires_notes(self, api, order, operator_a) -> None:
        lifecycle.take_order(caller_from_user(operator_a), order.pk)
        api.force_authenticate(operator_a)

        res = api.post(_url("order_release", pk=order.pk), {}, format="json")
        assert res.status_code == 400
        assert res.json()["fields"] == {"notes": "This field is required."}

        res = api.post(_url("order_release", pk=order.pk), {"notes": "wrong car"}, format="json")
        assert res.status_code == 200
        assert res.json()["order"]["status"] == "pending"

    def test_completion_blocked_by_checklist(self, api, order, operator_a) -> None:
        lifecycle.take_order(caller_from_user(operator_a), order.pk)
        order.checklist.exclude(checklist_item__name="Lights and signals").update(is_completed=True)
        api.force_authenticate(operator_a)

        res = api.patch(_url("order_status", pk=order.pk), {"status": "completed"}, format="json")
        assert res.status_code == 409
        body = res.json()
        assert body["code"] == "invalid_transition"
        assert body["reason"] == "checklist_incomplete"
        assert body["missing_items"] == []
        assert body["errors"] == ['Item "Lights and signals" is not completed']

    def test_noop_status_change(self, api, order, boss) -> None:
        api.force_authenticate(boss)
        res = api.patch(_url("order_status", pk=order.pk), {"status": "pending"}, format="json")
        assert res.status_code == 409
        assert res.json()["reason"] == "no_op"

    def test_validate_status_change_dry_run(self, api, order, operator_a) -> None:
        lifecycle.take_order(caller_from_user(operator_a), order.pk)
        api.force_authenticate(operator_a)
        res = api.post(_url("order_validate_status", pk=order.pk), {"new_status": "completed"}, format="json")
        assert res.status_code == 200
        body = res.json()
        assert body["can_change"] is False
        assert len(body["errors"]) == 3
        order.refresh_from_db()
        assert order.status == OrderStatus.IN_PROGRESS

    def test_assign(self, api, order, boss, operator_a) -> None:
        api.force_authenticate(boss)
        res = api.post(_url("order_assign", pk=order.pk), {"operator_id": operator_a.id}, format="json")
        assert res.status_code == 200
        assert res.json()["operator_id"] == operator_a.id
        assert res.json()["status"] == "pending"


class TestHistoryAndChecklistEndpoints:
    def test_history_payload(self, api, order, operator_a, customer) -> None:
        lifecycle.take_order(caller_from_user(operator_a), order.pk)
        api.force_authenticate(customer)
        rows = api.get(_url("order_history", pk=order.pk)).json()
        assert len(rows) == 1
        assert rows[0]["previous_status"] == "pending"
        assert rows[0]["new_status"] == "in_progress"
        assert rows[0]["operator_action"] == "take"
        assert rows[0]["changed_by"]["id"] == operator_a.id
        assert rows[0]["changed_by"]["full_name"] == "Andres"

    def test_history_out_of_scope(self, api, order, operator_b) -> None:
        api.force_authenticate(operator_b)
        assert api.get(_url("order_history", pk=order.pk)).status_code == 404

    def test_checklist_and_validation(self, api, order, boss, customer) -> None:
        api.force_authenticate(boss)
        rows = api.get(_url("order_checklist", pk=order.pk)).json()
        assert [r["checklist_item"]["name"] for r in rows] == [
            "Engine oil level", "Brake pads", "Lights and signals",
        ]
        verdict = api.get(_url("order_checklist_validation", pk=order.pk)).json()
        assert verdict["is_valid"] is False

        api.force_authenticate(customer)
        assert api.get(_url("order_checklist_validation", pk=order.pk)).status_code == 403

    def test_unassigned_operator_sees_no_checklist_verdict(self, api, order, operator_a, operator_b) -> None:
        lifecycle.take_order(caller_from_user(operator_a), order.pk)
        api.force_authenticate(operator_b)

        res = api.get(_url("order_checklist_validation", pk=order.pk))
        assert res.status_code == 404
        assert res.json()["code"] == "not_found"
        assert "errors" not in res.json()

        res = api.post(_url("order_validate_status", pk=order.pk), {"new_status": "completed"}, format="json")
        assert res.status_code == 404
        assert res.json()["code"] == "not_found"

    def test_complete_entry(self, api, order, operator_a) -> None:
        lifecycle.take_order(caller_from_user(operator_a), order.pk)
        entry = order.checklist.get(checklist_item__name="Brake pads")
        api.force_authenticate(operator_a)
        res = api.patch(_url("checklist_complete", pk=entry.pk), {"notes": "replaced"}, format="json")
        assert res.status_code == 200
        assert res.json()["is_completed"] is True
        assert res.json()["completed_by_id"] == operator_a.id

    def test_items_by_type(self, api, sedan, operator_a) -> None:
        api.force_authenticate(operator_a)
        names = [i["name"] for i in api.get(_url("checklist_items", vehicle_type_id=sedan.pk)).json()]
        assert names == ["Engine oil level", "Brake pads", "Lights and signals", "Wiper blades"]
        assert api.get(_url("checklist_items", vehicle_type_id=999)).status_code == 404


class TestNotificationsEndpoint:
    def _complete(self, order, operator):
        op = caller_from_user(operator)
        lifecycle.take_order(op, order.pk)
        order.checklist.update(is_completed=True)
        lifecycle.change_status(op, order.pk, OrderStatus.COMPLETED)

    def test_client_reads_completion_notice(self, api, order, operator_a, customer) -> None:
        self._complete(order, operator_a)
        api.force_authenticate(customer)

        rows = api.get(reverse("notifications:list"), {"unread": "1"}).json()
        assert len(rows) == 1
        assert rows[0]["type"] == "service_order_completed"

        res = api.post(reverse("notifications:read", kwargs={"pk": rows[0]["id"]}))
        assert res.status_code == 200
        assert res.json()["is_read"] is True
        assert api.get(reverse("notifications:list"), {"unread": "1"}).json() == []

    def test_other_users_notice_is_404(self, api, order, operator_a) -> None:
        self._complete(order, operator_a)
        note = Notification.objects.get()
        api.force_authenticate(operator_a)
        assert api.post(reverse("notifications:read", kwargs={"pk": note.pk})).status_code == 404
