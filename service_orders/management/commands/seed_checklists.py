from django.core.management.base import BaseCommand
from django.db import transaction

from service_orders.models import ChecklistItem
from vehicles.models import VehicleType

VEHICLE_TYPES = [
    ("sedan", "Four-door car with a separate trunk"),
    ("hatchback", "Compact car with a rear lift gate"),
    ("suv", "Sport utility vehicle"),
    ("pickup", "Cab with an open cargo bed"),
    ("van", "Passenger van"),
    ("moto", "Motorcycle"),
]

# (name, category, required)
CAR_ITEMS = [
    ("Engine oil level", "engine", True),
    ("Brake pads", "brakes", True),
    ("Lights and signals", "electrical", True),
    ("Tire pressure", "tires", True),
    ("Wiper blades", "body", False),
]

MOTO_ITEMS = [
    ("Engine oil level", "engine", True),
    ("Chain tension", "transmission", True),
    ("Brake pads", "brakes", True),
    ("Lights and signals", "electrical", True),
]


class Command(BaseCommand):
    help = "Seed default vehicle types and their inspection checklists."

    @transaction.atomic
    def handle(self, *args, **options):
        types_created = items_created = 0
        for name, description in VEHICLE_TYPES:
            vt, was_created = VehicleType.objects.get_or_create(name=name, defaults={"description": description})
            types_created += 1 if was_created else 0

            items = MOTO_ITEMS if name == "moto" else CAR_ITEMS
            for order, (item_name, category, required) in enumerate(items, start=1):
                _, was_created = ChecklistItem.objects.get_or_create(
                    vehicle_type=vt,
                    name=item_name,
                    defaults={"category": category, "is_required": required, "order": order},
                )
                items_created += 1 if was_created else 0

        self.stdout.write(self.style.SUCCESS(
            f"Checklist seeding done. New vehicle types: {types_created}, new items: {items_created}"
        ))
