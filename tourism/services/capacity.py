"""Occupancy and remaining capacity, derived from reservation state.

Nothing here is cached or stored: every figure is recomputed from the
reservations table, inside whatever transaction the caller holds.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from tourism.models.place import Place, PlaceStatus
from tourism.models.reservation import Reservation, ReservationStatus
from tourism.services.errors import PlaceNotFound

# People physically at the place
OCCUPYING_STATUSES = (ReservationStatus.CHECKED_IN,)

# People expected at the place; used when admitting new bookings
RESERVED_STATUSES = (ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_IN)


def covers_date(on_date: date):
    """SQL predicate: the reservation's stay includes ``on_date``"""
    return and_(
        Reservation.start_date <= on_date,
        or_(
            and_(Reservation.end_date.is_(None), Reservation.start_date == on_date),
            Reservation.end_date >= on_date,
        ),
    )


async def party_sum(
    db: AsyncSession,
    place_id: UUID,
    on_date: date,
    statuses: Iterable[ReservationStatus],
) -> int:
    """Sum of party sizes for the place's reservations in ``statuses`` on a date"""
    result = await db.execute(
        select(func.coalesce(func.sum(Reservation.party_size), 0)).where(
            Reservation.place_id == place_id,
            Reservation.status.in_(list(statuses)),
            covers_date(on_date),
        )
    )
    return int(result.scalar() or 0)


async def peak_load(
    db: AsyncSession,
    place_id: UUID,
    start_date: date,
    end_date: Optional[date],
    statuses: Iterable[ReservationStatus],
) -> Tuple[date, int]:
    """Busiest date of a stay and the party sum on it.

    The stay runs from ``start_date`` through ``end_date`` inclusive, or is
    the single ``start_date`` when there is no end date.
    """
    last_day = end_date or start_date
    result = await db.execute(
        select(Reservation).where(
            Reservation.place_id == place_id,
            Reservation.status.in_(list(statuses)),
            Reservation.start_date <= last_day,
            func.coalesce(Reservation.end_date, Reservation.start_date) >= start_date,
        )
    )
    overlapping = result.scalars().all()

    busiest, peak = start_date, 0
    day = start_date
    while day <= last_day:
        load = sum(r.party_size for r in overlapping if r.start_date <= day <= r.last_day)
        if load > peak:
            busiest, peak = day, load
        day += timedelta(days=1)
    return busiest, peak


async def current_occupancy(db: AsyncSession, place_id: UUID, on_date: date) -> int:
    """People checked in at the place on ``on_date``"""
    return await party_sum(db, place_id, on_date, OCCUPYING_STATUSES)


async def reserved_load(db: AsyncSession, place_id: UUID, on_date: date) -> int:
    """People confirmed or checked in for the place on ``on_date``"""
    return await party_sum(db, place_id, on_date, RESERVED_STATUSES)


def signed_remaining(capacity: Optional[int], load: int) -> Optional[int]:
    """Capacity minus load, negative when overbooked; None when unlimited"""
    if capacity is None:
        return None
    return capacity - load


def remaining_capacity(capacity: Optional[int], load: int) -> Optional[int]:
    """Display value of remaining capacity, floored at zero"""
    remaining = signed_remaining(capacity, load)
    if remaining is None:
        return None
    return max(0, remaining)


@dataclass
class PlaceAvailability:
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


async def place_availability(db: AsyncSession, place_id: UUID, on_date: date) -> PlaceAvailability:
    """Availability snapshot of a place for one date"""
    place = await db.get(Place, place_id)
    if place is None:
        raise PlaceNotFound(place_id)

    occupancy = await current_occupancy(db, place_id, on_date)
    reserved = await reserved_load(db, place_id, on_date)

    percentage = None
    if place.capacity:
        percentage = round(occupancy / place.capacity * 100, 2)

    has_room = place.capacity is None or reserved < place.capacity

    return PlaceAvailability(
        place_id=place.id,
        place_code=place.code,
        place_name=place.name,
        on_date=on_date,
        status=place.status,
        capacity=place.capacity,
        occupancy=occupancy,
        reserved=reserved,
        remaining=remaining_capacity(place.capacity, reserved),
        occupancy_percentage=percentage,
        is_available=place.status == PlaceStatus.AVAILABLE and has_room,
    )
