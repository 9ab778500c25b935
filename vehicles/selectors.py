# vehicles/selectors.py
from .models import Vehicle


def owned_vehicle_ids(client_id) -> list[int]:
    """Ids of vehicles whose owner is `client_id`."""
    return list(Vehicle.objects.filter(client_id=client_id).values_list("id", flat=True))
