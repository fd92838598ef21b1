"""Reservation report downloads"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tourism.database import get_db
from tourism.models.reservation import ReservationStatus
from tourism.models.user import Capability, User
from tourism.services.exports import reservations_to_csv, reservations_to_pdf
from tourism.services.reservations import export_rows
from tourism.api.auth import require_capability

router = APIRouter()
logger = structlog.get_logger()


def _filename(extension: str) -> str:
    return f"reservations_{datetime.utcnow():%Y%m%d_%H%M%S}.{extension}"


@router.get("/reservations.csv")
async def export_reservations_csv(
    status: Optional[ReservationStatus] = None,
    place_id: Optional[UUID] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    current_user: User = Depends(require_capability(Capability.EXPORT_REPORTS)),
    db: AsyncSession = Depends(get_db),
):
    """Download the filtered reservation list as CSV"""
    rows = await export_rows(
        db, current_user, status=status, place_id=place_id, date_from=from_date, date_to=to_date
    )
    logger.info("Reservation report exported", format="csv", rows=len(rows))
    return Response(
        content=reservations_to_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{_filename("csv")}"'},
    )


@router.get("/reservations.pdf")
async def export_reservations_pdf(
    status: Optional[ReservationStatus] = None,
    place_id: Optional[UUID] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    current_user: User = Depends(require_capability(Capability.EXPORT_REPORTS)),
    db: AsyncSession = Depends(get_db),
):
    """Download the filtered reservation list as PDF"""
    rows = await export_rows(
        db, current_user, status=status, place_id=place_id, date_from=from_date, date_to=to_date
    )
    logger.info("Reservation report exported", format="pdf", rows=len(rows))
    return Response(
        content=reservations_to_pdf(rows),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{_filename("pdf")}"'},
    )
