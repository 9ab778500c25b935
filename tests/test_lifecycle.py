"""Lifecycle engine: create, take, release, assign and status changes."""

import re

import pytest

from account.identity import Caller, caller_from_user
from account.models import Role
from notifications.models import Notification
from service_orders.exceptions import (
    AlreadyAssigned,
    Forbidden,
    InvalidTransition,
    NotFound,
    ValidationFailed,
)
from service_orders.models import OrderStatus, Priority, ServiceOrder, StatusHistory
from service_orders.services import lifecycle

pytestmark = pytest.mark.django_db


def _complete_checklist(order):
    order.checklist.update(is_completed=True)


def _start(order, operator):
    return lifecycle.take_order(caller_from_user(operator), order.pk)


# ===================================================================
# create
# ===================================================================

class TestCreate:
    def test_new_order_is_pending_and_unassigned(self, order) -> None:
        assert order.status == OrderStatus.PENDING
        assert order.operator_id is None
        assert order.taken_by_id is None
        assert order.start_date is None
        assert order.completion_date is None
        assert re.fullmatch(r"SO-\d{13}-\d{4}", order.order_number)

    def test_creation_writes_no_history(self, order) -> None:
        assert not StatusHistory.objects.filter(service_order=order).exists()

    def test_checklist_instantiated_from_required_items(self, order) -> None:
        names = set(order.checklist.values_list("checklist_item__name", flat=True))
        assert names == {"Engine oil level", "Brake pads", "Lights and signals"}

    def test_medium_priority_is_normal(self, boss, customer, vehicle) -> None:
        o = lifecycle.create_order(
            caller_from_user(boss), client_id=customer.id, vehicle_id=vehicle.id,
            description="Oil change", priority="medium",
        )
        assert o.priority == Priority.NORMAL

    def test_client_self_service_defaults_to_self(self, customer, vehicle) -> None:
        o = lifecycle.create_order(caller_from_user(customer), vehicle_id=vehicle.id, description="Check AC")
        assert o.client_id == customer.id

    def test_client_cannot_open_order_for_foreign_vehicle(self, make_user, customer, vehicle) -> None:
        other = make_user("diego", Role.CLIENT)
        with pytest.raises(Forbidden):
            lifecycle.create_order(caller_from_user(other), vehicle_id=vehicle.id, description="x")

    def test_operator_cannot_create(self, operator_a, customer, vehicle) -> None:
        with pytest.raises(Forbidden):
            lifecycle.create_order(
                caller_from_user(operator_a), client_id=customer.id, vehicle_id=vehicle.id, description="x",
            )

    def test_blank_description_rejected(self, boss, customer, vehicle) -> None:
        with pytest.raises(ValidationFailed) as exc:
            lifecycle.create_order(
                caller_from_user(boss), client_id=customer.id, vehicle_id=vehicle.id, description="  ",
            )
        assert "description" in exc.value.fields
        assert ServiceOrder.objects.count() == 0

    def test_unknown_priority_rejected(self, boss, customer, vehicle) -> None:
        with pytest.raises(ValidationFailed):
            lifecycle.create_order(
                caller_from_user(boss), client_id=customer.id, vehicle_id=vehicle.id,
                description="x", priority="whenever",
            )

    def test_unknown_vehicle(self, boss, customer) -> None:
        with pytest.raises(NotFound):
            lifecycle.create_order(caller_from_user(boss), client_id=customer.id, vehicle_id=9999, description="x")


# ===================================================================
# take
# ===================================================================

class TestTake:
    def test_take_assigns_and_starts(self, order, operator_a) -> None:
        taken = _start(order, operator_a)
        assert taken.status == OrderStatus.IN_PROGRESS
        assert taken.operator_id == operator_a.id
        assert taken.taken_by_id == operator_a.id
        assert taken.taken_at is not None
        assert taken.start_date is not None

        entries = list(StatusHistory.objects.filter(service_order=order))
        assert len(entries) == 1
        assert entries[0].previous_status == OrderStatus.PENDING
        assert entries[0].new_status == OrderStatus.IN_PROGRESS
        assert entries[0].operator_action == "take"
        assert entries[0].changed_by_id == operator_a.id

    def test_second_operator_gets_already_assigned(self, order, operator_a, operator_b) -> None:
        _start(order, operator_a)
        with pytest.raises(AlreadyAssigned):
            lifecycle.take_order(caller_from_user(operator_b), order.pk)
        order.refresh_from_db()
        assert order.operator_id == operator_a.id
        assert StatusHistory.objects.filter(service_order=order).count() == 1

    def test_lost_race_is_already_assigned(self, order, operator_a, operator_b, monkeypatch) -> None:
        # B read the row while it was still free, A committed first.
        # In-memory SQLite gives every thread the same connection, so a real
        # two-connection race can't run here; a stale locked row drives the
        # conditional UPDATE down the losing path instead.
        stale = ServiceOrder.objects.get(pk=order.pk)
        _start(order, operator_a)
        monkeypatch.setattr(lifecycle, "_lock_order", lambda order_id: stale)

        with pytest.raises(AlreadyAssigned):
            lifecycle.take_order(caller_from_user(operator_b), order.pk)

        order.refresh_from_db()
        assert order.operator_id == operator_a.id
        assert StatusHistory.objects.filter(service_order=order).count() == 1

    def test_only_operators_take(self, order, boss, customer) -> None:
        for user in (boss, customer):
            with pytest.raises(Forbidden):
                lifecycle.take_order(caller_from_user(user), order.pk)

    def test_unknown_role_cannot_take(self, order) -> None:
        with pytest.raises(Forbidden):
            lifecycle.take_order(Caller(id=12345, role=None), order.pk)

    def test_missing_order(self, operator_a) -> None:
        with pytest.raises(NotFound):
            lifecycle.take_order(caller_from_user(operator_a), 424242)

    def test_preassigned_order_cannot_be_taken(self, order, boss, operator_a, operator_b) -> None:
        lifecycle.assign_operator(caller_from_user(boss), order.pk, operator_a.id)
        with pytest.raises(AlreadyAssigned):
            lifecycle.take_order(caller_from_user(operator_b), order.pk)


# ===================================================================
# release
# ===================================================================

class TestRelease:
    def test_release_resets_order(self, order, operator_a) -> None:
        _start(order, operator_a)
        released = lifecycle.release_order(caller_from_user(operator_a), order.pk, notes="wrong order")

        assert released.status == OrderStatus.PENDING
        assert released.operator_id is None
        assert released.taken_by_id is None
        assert released.taken_at is None
        assert released.start_date is None
        assert released.completion_date is None

        last = StatusHistory.objects.filter(service_order=order).last()
        assert last.previous_status == OrderStatus.IN_PROGRESS
        assert last.new_status == OrderStatus.PENDING
        assert last.operator_action == "release"
        assert last.notes == "wrong order"

    def test_released_order_can_be_taken_again(self, order, operator_a, operator_b) -> None:
        _start(order, operator_a)
        lifecycle.release_order(caller_from_user(operator_a), order.pk, notes="shift over")
        retaken = lifecycle.take_order(caller_from_user(operator_b), order.pk)
        assert retaken.operator_id == operator_b.id

    def test_non_assignee_is_forbidden(self, order, operator_a, operator_b, boss) -> None:
        _start(order, operator_a)
        for user in (operator_b, boss):
            with pytest.raises(Forbidden):
                lifecycle.release_order(caller_from_user(user), order.pk, notes="nope")
        order.refresh_from_db()
        assert order.operator_id == operator_a.id

    def test_notes_are_mandatory(self, order, operator_a) -> None:
        _start(order, operator_a)
        with pytest.raises(ValidationFailed):
            lifecycle.release_order(caller_from_user(operator_a), order.pk, notes="   ")
        order.refresh_from_db()
        assert order.status == OrderStatus.IN_PROGRESS
        assert StatusHistory.objects.filter(service_order=order).count() == 1

    def test_completed_order_cannot_be_released(self, order, operator_a) -> None:
        _start(order, operator_a)
        _complete_checklist(order)
        lifecycle.change_status(caller_from_user(operator_a), order.pk, OrderStatus.COMPLETED)
        with pytest.raises(InvalidTransition):
            lifecycle.release_order(caller_from_user(operator_a), order.pk, notes="too late")


# ===================================================================
# assign
# ===================================================================

class TestAssign:
    def test_admin_preassigns_without_starting(self, order, boss, operator_a) -> None:
        assigned = lifecycle.assign_operator(caller_from_user(boss), order.pk, operator_a.id)
        assert assigned.operator_id == operator_a.id
        assert assigned.taken_by_id is None
        assert assigned.status == OrderStatus.PENDING
        assert not StatusHistory.objects.filter(service_order=order).exists()

    def test_target_must_be_operator(self, order, boss, customer) -> None:
        with pytest.raises(ValidationFailed):
            lifecycle.assign_operator(caller_from_user(boss), order.pk, customer.id)

    def test_operator_cannot_assign(self, order, operator_a, operator_b) -> None:
        with pytest.raises(Forbidden):
            lifecycle.assign_operator(caller_from_user(operator_a), order.pk, operator_b.id)


# ===================================================================
# change_status
# ===================================================================

class TestChangeStatus:
    def test_same_status_is_a_noop_rejection(self, order, boss) -> None:
        with pytest.raises(InvalidTransition) as exc:
            lifecycle.change_status(caller_from_user(boss), order.pk, OrderStatus.PENDING)
        assert exc.value.reason == InvalidTransition.NO_OP
        assert not StatusHistory.objects.filter(service_order=order).exists()

    def test_unknown_status(self, order, boss) -> None:
        with pytest.raises(ValidationFailed):
            lifecycle.change_status(caller_from_user(boss), order.pk, "active")

    def test_admin_forced_start_needs_operator(self, order, boss) -> None:
        with pytest.raises(InvalidTransition) as exc:
            lifecycle.change_status(caller_from_user(boss), order.pk, OrderStatus.IN_PROGRESS)
        assert exc.value.reason == InvalidTransition.NO_OPERATOR

    def test_admin_forced_start_after_preassignment(self, order, boss, operator_a) -> None:
        lifecycle.assign_operator(caller_from_user(boss), order.pk, operator_a.id)
        started = lifecycle.change_status(caller_from_user(boss), order.pk, OrderStatus.IN_PROGRESS)
        assert started.status == OrderStatus.IN_PROGRESS
        assert started.start_date is not None
        assert started.taken_by_id is None
        last = StatusHistory.objects.filter(service_order=order).last()
        assert last.operator_action == "status_change"

    def test_backward_move_via_status_is_illegal(self, order, operator_a) -> None:
        _start(order, operator_a)
        with pytest.raises(InvalidTransition) as exc:
            lifecycle.change_status(caller_from_user(operator_a), order.pk, OrderStatus.PENDING)
        assert exc.value.reason == InvalidTransition.ILLEGAL

    def test_cannot_skip_states(self, order, boss, operator_a) -> None:
        _start(order, operator_a)
        with pytest.raises(InvalidTransition):
            lifecycle.change_status(caller_from_user(boss), order.pk, OrderStatus.BILLED)

    def test_incomplete_checklist_blocks_completion(self, order, operator_a) -> None:
        _start(order, operator_a)
        order.checklist.exclude(checklist_item__name="Lights and signals").update(is_completed=True)

        with pytest.raises(InvalidTransition) as exc:
            lifecycle.change_status(caller_from_user(operator_a), order.pk, OrderStatus.COMPLETED)

        assert exc.value.reason == InvalidTransition.CHECKLIST_INCOMPLETE
        assert exc.value.missing_items == []
        assert exc.value.errors == ['Item "Lights and signals" is not completed']
        order.refresh_from_db()
        assert order.status == OrderStatus.IN_PROGRESS
        assert order.completion_date is None
        assert StatusHistory.objects.filter(service_order=order).count() == 1

    def test_missing_checklist_row_blocks_completion(self, order, operator_a) -> None:
        _start(order, operator_a)
        _complete_checklist(order)
        order.checklist.filter(checklist_item__name="Brake pads").delete()

        with pytest.raises(InvalidTransition) as exc:
            lifecycle.change_status(caller_from_user(operator_a), order.pk, OrderStatus.COMPLETED)
        assert exc.value.missing_items == ["Brake pads"]
        assert exc.value.errors == []

    def test_full_path_to_closed(self, order, boss, operator_a, customer) -> None:
        _start(order, operator_a)
        _complete_checklist(order)
        done = lifecycle.change_status(caller_from_user(operator_a), order.pk, OrderStatus.COMPLETED, notes="ok")
        assert done.completion_date is not None

        lifecycle.change_status(caller_from_user(boss), order.pk, OrderStatus.BILLED)
        closed = lifecycle.change_status(caller_from_user(boss), order.pk, OrderStatus.CLOSED)
        assert closed.status == OrderStatus.CLOSED
        assert closed.completion_date is not None

        actions = list(
            StatusHistory.objects.filter(service_order=order).values_list("operator_action", flat=True)
        )
        assert actions == ["take", "complete", "status_change", "status_change"]

        with pytest.raises(InvalidTransition):
            lifecycle.change_status(caller_from_user(boss), order.pk, OrderStatus.BILLED)

    def test_completion_notifies_client(self, order, operator_a, customer) -> None:
        _start(order, operator_a)
        _complete_checklist(order)
        lifecycle.change_status(caller_from_user(operator_a), order.pk, OrderStatus.COMPLETED)
        note = Notification.objects.get(to_user=customer)
        assert order.order_number in note.message
        assert note.service_order_id == order.pk

    def test_other_operator_and_client_forbidden(self, order, operator_a, operator_b, customer) -> None:
        _start(order, operator_a)
        _complete_checklist(order)
        for user in (operator_b, customer):
            with pytest.raises(Forbidden):
                lifecycle.change_status(caller_from_user(user), order.pk, OrderStatus.COMPLETED)


class TestCheckStatusChange:
    def test_reports_checklist_gaps_without_writing(self, order, operator_a) -> None:
        _start(order, operator_a)
        check = lifecycle.check_status_change(caller_from_user(operator_a), order.pk, OrderStatus.COMPLETED)
        assert check.can_change is False
        assert check.reason == InvalidTransition.CHECKLIST_INCOMPLETE
        assert len(check.errors) == 3
        order.refresh_from_db()
        assert order.status == OrderStatus.IN_PROGRESS

    def test_allowed_change(self, order, operator_a) -> None:
        _start(order, operator_a)
        _complete_checklist(order)
        check = lifecycle.check_status_change(caller_from_user(operator_a), order.pk, OrderStatus.COMPLETED)
        assert check.can_change is True
        assert check.as_dict()["missing_items"] == []

    def test_out_of_scope_order_looks_missing(self, order, operator_a, operator_b) -> None:
        _start(order, operator_a)
        with pytest.raises(NotFound):
            lifecycle.check_status_change(caller_from_user(operator_b), order.pk, OrderStatus.COMPLETED)

    def test_forbidden_is_reported(self, order, customer) -> None:
        check = lifecycle.check_status_change(caller_from_user(customer), order.pk, OrderStatus.IN_PROGRESS)
        assert check.can_change is False
        assert check.code == "forbidden"
