"""Place schemas"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from tourism.models.place import PlaceStatus


class PlaceCreate(BaseModel):
    """Create place request"""
    code: str = Field(min_length=1, max_length=10)
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    category_id: UUID
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    capacity: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = Field(default=None, max_length=300)
    status: PlaceStatus = PlaceStatus.AVAILABLE


class PlaceUpdate(BaseModel):
    """Update place request"""
    code: Optional[str] = Field(default=None, min_length=1, max_length=10)
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    category_id: Optional[UUID] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    capacity: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = Field(default=None, max_length=300)
    status: Optional[PlaceStatus] = None


class PlaceStatusUpdate(BaseModel):
    status: PlaceStatus


class PlaceResponse(BaseModel):
    """Place response"""
    id: UUID
    code: str
    name: str
    description: Optional[str]
    category_id: UUID
    price: Decimal
    capacity: Optional[int]
    location: Optional[str]
    status: PlaceStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PlaceListResponse(BaseModel):
    """Paginated place list"""
    items: List[PlaceResponse]
    total: int
    page: int
    page_size: int


class PlaceAvailabilityResponse(BaseModel):
    """Occupancy snapshot of a place for one date"""
    place_id: UUID
    place_code: str
    place_name: str
    on_date: date
    status: PlaceStatus
    capacity: Optional[int]
    occupancy: int
    reserved: int
    remaining: Optional[int]
    occupancy_percentage: Optional[float]
    is_available: bool

    class Config:
        from_attributes = True


class AdmissionResponse(BaseModel):
    """Result of an admission check"""
    place_id: UUID
    start_date: date
    end_date: Optional[date] = None
    party_size: int
    admitted: bool
    reason: Optional[str] = None
