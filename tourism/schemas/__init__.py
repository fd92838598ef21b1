"""Pydantic schemas for request/response validation"""

from tourism.schemas.auth import (
    Token,
    RefreshRequest,
    UserRegister,
    UserResponse,
)
from tourism.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryStatsResponse,
)
from tourism.schemas.place import (
    PlaceCreate,
    PlaceUpdate,
    PlaceStatusUpdate,
    PlaceResponse,
    PlaceListResponse,
    PlaceAvailabilityResponse,
    AdmissionResponse,
)
from tourism.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
    CancelRequest,
    ReservationResponse,
    ReservationListResponse,
)
from tourism.schemas.alert import (
    AlertCreate,
    AlertResponse,
    AlertStatsResponse,
    ReminderSweepResponse,
)

__all__ = [
    "Token",
    "RefreshRequest",
    "UserRegister",
    "UserResponse",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "CategoryStatsResponse",
    "PlaceCreate",
    "PlaceUpdate",
    "PlaceStatusUpdate",
    "PlaceResponse",
    "PlaceListResponse",
    "PlaceAvailabilityResponse",
    "AdmissionResponse",
    "ReservationCreate",
    "ReservationUpdate",
    "CancelRequest",
    "ReservationResponse",
    "ReservationListResponse",
    "AlertCreate",
    "AlertResponse",
    "AlertStatsResponse",
    "ReminderSweepResponse",
]
