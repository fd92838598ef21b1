"""Database models"""

from tourism.models.category import Category
from tourism.models.place import Place, PlaceStatus
from tourism.models.reservation import Reservation, ReservationStatus, ACTIVE_STATUSES
from tourism.models.alert import Alert, AlertType
from tourism.models.user import User, UserRole, Capability

__all__ = [
    "Category",
    "Place",
    "PlaceStatus",
    "Reservation",
    "ReservationStatus",
    "ACTIVE_STATUSES",
    "Alert",
    "AlertType",
    "User",
    "UserRole",
    "Capability",
]
