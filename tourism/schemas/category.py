"""Category schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    """Create category request"""
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    icon: Optional[str] = Field(default=None, max_length=50)
    color: Optional[str] = Field(default=None, max_length=20)
    is_active: bool = True


class CategoryUpdate(BaseModel):
    """Update category request"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    icon: Optional[str] = Field(default=None, max_length=50)
    color: Optional[str] = Field(default=None, max_length=20)
    is_active: Optional[bool] = None


class CategoryResponse(BaseModel):
    """Category response"""
    id: UUID
    name: str
    description: Optional[str]
    icon: Optional[str]
    color: Optional[str]
    is_active: bool
    created_at: datetime
    place_count: int = 0

    class Config:
        from_attributes = True


class CategoryStatsResponse(BaseModel):
    """Place and reservation totals for a category"""
    category_id: UUID
    name: str
    total_places: int
    available_places: int
    total_capacity: int
    total_reservations: int
    active_reservations: int
    checked_in_guests: int
    revenue: Decimal
