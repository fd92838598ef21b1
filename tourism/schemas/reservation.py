"""Reservation schemas"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field

from tourism.models.reservation import ReservationStatus


class ReservationCreate(BaseModel):
    """Create reservation request.

    Client name and email are taken from the caller's profile for clients.
    ``status`` may be ``confirmed`` for administrator direct bookings.
    """
    place_id: UUID
    client_name: Optional[str] = Field(default=None, max_length=200)
    client_email: Optional[EmailStr] = None
    client_phone: Optional[str] = Field(default=None, max_length=20)
    start_date: date
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    party_size: int = Field(gt=0)
    notes: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[ReservationStatus] = None


class ReservationUpdate(BaseModel):
    """Update a pending reservation"""
    place_id: Optional[UUID] = None
    client_name: Optional[str] = Field(default=None, max_length=200)
    client_email: Optional[EmailStr] = None
    client_phone: Optional[str] = Field(default=None, max_length=20)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    party_size: Optional[int] = Field(default=None, gt=0)
    notes: Optional[str] = Field(default=None, max_length=1000)


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class PlaceSummary(BaseModel):
    id: UUID
    code: str
    name: str

    class Config:
        from_attributes = True


class ReservationResponse(BaseModel):
    """Reservation response"""
    id: UUID
    reservation_code: str
    place_id: UUID
    place: Optional[PlaceSummary] = None
    client_name: str
    client_email: str
    client_phone: Optional[str]
    start_date: date
    end_date: Optional[date]
    start_time: Optional[time]
    end_time: Optional[time]
    party_size: int
    place_price: Decimal
    total_amount: Decimal
    status: ReservationStatus
    check_in_date: Optional[datetime]
    check_out_date: Optional[datetime]
    notes: Optional[str]
    alert_sent: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReservationListResponse(BaseModel):
    """Paginated reservation list"""
    items: List[ReservationResponse]
    total: int
    page: int
    page_size: int
