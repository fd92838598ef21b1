"""Admission checks for new reservations and check-ins"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tourism.models.place import Place, PlaceStatus
from tourism.models.reservation import ReservationStatus
from tourism.services.capacity import RESERVED_STATUSES, peak_load, signed_remaining
from tourism.services.errors import (
    CapacityExceeded,
    PlaceNotAvailable,
    PlaceNotFound,
    ReservationError,
)

logger = structlog.get_logger()


@dataclass
class Admission:
    """Outcome of an admission check"""
    admitted: bool
    place: Optional[Place] = None
    load: int = 0
    error: Optional[ReservationError] = None

    @property
    def reason(self) -> Optional[str]:
        return self.error.message if self.error else None

    def raise_for_rejection(self) -> "Admission":
        if self.error is not None:
            raise self.error
        return self


async def load_place(db: AsyncSession, place_id: UUID, *, lock: bool = False) -> Optional[Place]:
    """Fetch a place, optionally taking a row lock for the rest of the transaction"""
    query = select(Place).where(Place.id == place_id)
    if lock:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def can_admit(
    db: AsyncSession,
    place_id: UUID,
    start_date: date,
    party_size: int,
    *,
    end_date: Optional[date] = None,
    occupying: Iterable[ReservationStatus] = RESERVED_STATUSES,
    lock: bool = False,
) -> Admission:
    """Decide whether ``party_size`` more people fit the place for a stay.

    Every date from ``start_date`` through ``end_date`` must have room; the
    busiest one decides. ``occupying`` selects which reservation states count
    against capacity. With ``lock`` the place row stays locked until the
    caller's transaction ends, so the check and the write that depends on it
    commit together.
    """
    place = await load_place(db, place_id, lock=lock)
    if place is None:
        return Admission(admitted=False, error=PlaceNotFound(place_id))

    if place.status != PlaceStatus.AVAILABLE:
        return Admission(
            admitted=False,
            place=place,
            error=PlaceNotAvailable(f"Place {place.code} is not available ({place.status.value})"),
        )

    load = 0
    if place.capacity is not None:
        busiest, load = await peak_load(db, place.id, start_date, end_date, occupying)
        remaining = signed_remaining(place.capacity, load + party_size)
        if remaining < 0:
            logger.info(
                "Admission rejected: capacity exceeded",
                place_code=place.code,
                on_date=busiest.isoformat(),
                capacity=place.capacity,
                load=load,
                party_size=party_size,
            )
            return Admission(
                admitted=False,
                place=place,
                load=load,
                error=CapacityExceeded(
                    f"Place {place.code} has {max(0, place.capacity - load)} of "
                    f"{place.capacity} places left on {busiest.isoformat()}, "
                    f"{party_size} requested"
                ),
            )

    return Admission(admitted=True, place=place, load=load)


async def ensure_admissible(
    db: AsyncSession,
    place_id: UUID,
    start_date: date,
    party_size: int,
    **kwargs,
) -> Place:
    """Run :func:`can_admit` and raise its domain error on rejection"""
    admission = await can_admit(db, place_id, start_date, party_size, **kwargs)
    admission.raise_for_rejection()
    return admission.place
