"""Alert schemas"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from tourism.models.alert import AlertType


class AlertCreate(BaseModel):
    """Create alert request"""
    reservation_id: UUID
    type: AlertType
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=1000)
    alert_date: date


class AlertResponse(BaseModel):
    """Alert response"""
    id: UUID
    reservation_id: UUID
    type: AlertType
    title: str
    message: str
    alert_date: date
    is_sent: bool
    sent_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class AlertStatsResponse(BaseModel):
    pending: int
    sent: int
    due: int


class ReminderSweepResponse(BaseModel):
    """Outcome of a reminder dispatch run"""
    sent: List[str]
    failed: List[str]
