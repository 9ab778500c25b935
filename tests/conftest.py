"""Shared fixtures: users per role, a sedan with a three-item required checklist."""

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from account.identity import caller_from_user
from account.models import Role, UserProfile
from service_orders.models import ChecklistItem
from service_orders.services import lifecycle
from vehicles.models import Vehicle, VehicleType

User = get_user_model()


@pytest.fixture
def make_user(db):
    def _make(username: str, role: str = Role.CLIENT):
        user = User.objects.create_user(
            username=username,
            password="secret-pass",
            first_name=username.title(),
        )
        UserProfile.objects.create(user=user, role=role)
        return user

    return _make


@pytest.fixture
def boss(make_user):
    return make_user("boss", Role.ADMIN)


@pytest.fixture
def operator_a(make_user):
    return make_user("andres", Role.OPERATOR)


@pytest.fixture
def operator_b(make_user):
    return make_user("beatriz", Role.OPERATOR)


@pytest.fixture
def customer(make_user):
    return make_user("carla", Role.CLIENT)


@pytest.fixture
def sedan(db):
    vt = VehicleType.objects.create(name="sedan")
    for order, name in enumerate(["Engine oil level", "Brake pads", "Lights and signals"], start=1):
        ChecklistItem.objects.create(vehicle_type=vt, name=name, category="general", order=order)
    ChecklistItem.objects.create(
        vehicle_type=vt, name="Wiper blades", category="body", order=9, is_required=False,
    )
    return vt


@pytest.fixture
def vehicle(customer, sedan):
    return Vehicle.objects.create(
        client=customer, plate="ABC123", brand="Mazda", model="3", year=2019, vehicle_type=sedan,
    )


@pytest.fixture
def order(boss, customer, vehicle):
    return lifecycle.create_order(
        caller_from_user(boss),
        client_id=customer.id,
        vehicle_id=vehicle.id,
        description="Brake noise when stopping",
    )


@pytest.fixture
def api():
    return APIClient()
