"""Alert management API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tourism.database import get_db
from tourism.models.alert import AlertType
from tourism.models.user import Capability, User
from tourism.schemas.alert import (
    AlertCreate,
    AlertResponse,
    AlertStatsResponse,
    ReminderSweepResponse,
)
from tourism.services import alerts as alert_service
from tourism.services.notifications import Notifier, get_notifier
from tourism.api.auth import require_capability

router = APIRouter()

require_alert_manager = require_capability(Capability.MANAGE_ALERTS)


@router.get("", response_model=List[AlertResponse])
async def list_alerts(
    type: Optional[AlertType] = None,
    is_sent: Optional[bool] = None,
    reservation_id: Optional[UUID] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(require_alert_manager),
    db: AsyncSession = Depends(get_db),
):
    """List alerts, newest alert date first"""
    return await alert_service.list_alerts(
        db,
        type=type,
        is_sent=is_sent,
        reservation_id=reservation_id,
        skip=skip,
        limit=limit,
    )


@router.get("/stats", response_model=AlertStatsResponse)
async def get_alert_stats(
    current_user: User = Depends(require_alert_manager),
    db: AsyncSession = Depends(get_db),
):
    return await alert_service.alert_stats(db)


@router.get("/due", response_model=List[AlertResponse])
async def get_due_alerts(
    current_user: User = Depends(require_alert_manager),
    db: AsyncSession = Depends(get_db),
):
    """Unsent alerts whose date has arrived"""
    return await alert_service.due_alerts(db)


@router.post("/dispatch-reminders", response_model=ReminderSweepResponse)
async def dispatch_reminders(
    current_user: User = Depends(require_alert_manager),
    notifier: Notifier = Depends(get_notifier),
    db: AsyncSession = Depends(get_db),
):
    """Run the reminder sweep now instead of waiting for the scheduler"""
    summary = await alert_service.dispatch_due_reminders(db, notifier)
    return ReminderSweepResponse(sent=summary.sent, failed=summary.failed)


@router.post("", response_model=AlertResponse, status_code=201)
async def create_alert(
    alert_data: AlertCreate,
    current_user: User = Depends(require_alert_manager),
    db: AsyncSession = Depends(get_db),
):
    """Create an alert by hand"""
    return await alert_service.create_alert(db, **alert_data.model_dump())


@router.get("/{alert_id}", response_model=AlertResponse)
async def get_alert(
    alert_id: UUID,
    current_user: User = Depends(require_alert_manager),
    db: AsyncSession = Depends(get_db),
):
    return await alert_service.get_alert(db, alert_id)


@router.post("/{alert_id}/mark-sent", response_model=AlertResponse)
async def mark_alert_sent(
    alert_id: UUID,
    current_user: User = Depends(require_alert_manager),
    db: AsyncSession = Depends(get_db),
):
    return await alert_service.set_alert_sent(db, alert_id, True)


@router.post("/{alert_id}/mark-unsent", response_model=AlertResponse)
async def mark_alert_unsent(
    alert_id: UUID,
    current_user: User = Depends(require_alert_manager),
    db: AsyncSession = Depends(get_db),
):
    return await alert_service.set_alert_sent(db, alert_id, False)


@router.delete("/{alert_id}", status_code=204)
async def delete_alert(
    alert_id: UUID,
    current_user: User = Depends(require_alert_manager),
    db: AsyncSession = Depends(get_db),
):
    await alert_service.delete_alert(db, alert_id)
