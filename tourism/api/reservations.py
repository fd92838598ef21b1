"""Reservation management API endpoints"""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tourism.database import get_db
from tourism.models.reservation import ReservationStatus
from tourism.models.user import User
from tourism.schemas.reservation import (
    CancelRequest,
    ReservationCreate,
    ReservationUpdate,
    ReservationResponse,
    ReservationListResponse,
)
from tourism.services import lifecycle
from tourism.services import reservations as booking
from tourism.api.auth import get_current_active_user

router = APIRouter()


@router.get("", response_model=ReservationListResponse)
async def list_reservations(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[ReservationStatus] = None,
    place_id: Optional[UUID] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List reservations with pagination; clients only see their own"""
    items, total = await booking.list_reservations(
        db,
        current_user,
        status=status,
        place_id=place_id,
        date_from=from_date,
        date_to=to_date,
        page=page,
        page_size=page_size,
    )
    return ReservationListResponse(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("", response_model=ReservationResponse, status_code=201)
async def create_reservation(
    reservation_data: ReservationCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new reservation"""
    return await booking.create_reservation(db, reservation_data, current_user)


@router.get("/code/{code}", response_model=ReservationResponse)
async def get_reservation_by_code(
    code: str,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Look a reservation up by its code"""
    return await booking.get_reservation_by_code(db, code, current_user)


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific reservation"""
    return await booking.get_reservation(db, reservation_id, current_user)


@router.put("/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: UUID,
    reservation_data: ReservationUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a pending reservation"""
    return await booking.update_reservation(db, reservation_id, reservation_data, current_user)


@router.delete("/{reservation_id}", status_code=204)
async def delete_reservation(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a reservation and its alerts"""
    await booking.delete_reservation(db, reservation_id, current_user)


@router.post("/{reservation_id}/confirm", response_model=ReservationResponse)
async def confirm_reservation(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await lifecycle.confirm(db, reservation_id, current_user)


@router.post("/{reservation_id}/check-in", response_model=ReservationResponse)
async def check_in_reservation(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await lifecycle.check_in(db, reservation_id, current_user)


@router.post("/{reservation_id}/check-out", response_model=ReservationResponse)
async def check_out_reservation(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await lifecycle.check_out(db, reservation_id, current_user)


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: UUID,
    cancel_data: Optional[CancelRequest] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a pending or confirmed reservation"""
    reason = cancel_data.reason if cancel_data else None
    return await lifecycle.cancel(db, reservation_id, current_user, reason=reason)


@router.post("/{reservation_id}/complete", response_model=ReservationResponse)
async def complete_reservation(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await lifecycle.complete(db, reservation_id, current_user)
