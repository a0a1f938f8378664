"""Closed enumerations shared across aggregates."""

from enum import Enum


class PickupSlot(Enum):
    """Fixed pickup windows. Offers advertise a subset; an order has exactly one."""

    EARLY_MORNING = "7-9 AM"
    MORNING = "9-11 AM"
    MIDDAY = "11-1 PM"
    EARLY_AFTERNOON = "1-3 PM"
    AFTERNOON = "3-5 PM"
    EVENING = "5-7 PM"
    NIGHT = "7-9 PM"


PICKUP_SLOT_LABELS = tuple(slot.value for slot in PickupSlot)


class ActorRole(Enum):
    VENDOR = "vendor"
    SUPPLIER = "supplier"


def invalid_pickup_slots(slots):
    """Return the labels in `slots` that are not canonical pickup slots."""
    return [slot for slot in slots or [] if slot not in PICKUP_SLOT_LABELS]
