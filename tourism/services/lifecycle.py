"""Reservation lifecycle state machine.

Pending -> Confirmed -> CheckedIn -> CheckedOut -> Completed, with Cancelled
reachable from Pending and Confirmed only. These functions are the only code
allowed to change ``Reservation.status`` once a reservation exists.

Guards run before anything is written; a failed guard raises and leaves the
row lock to be released when the caller's transaction ends.
"""

from datetime import date, datetime, timedelta
from typing import FrozenSet, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from tourism.config import settings
from tourism.models.place import PlaceStatus
from tourism.models.reservation import Reservation, ReservationStatus
from tourism.models.user import Capability, User
from tourism.services.alerts import record_cancellation_notice
from tourism.services.availability import can_admit
from tourism.services.capacity import OCCUPYING_STATUSES
from tourism.services.errors import InvalidTransition, NotFound, Unauthorized

logger = structlog.get_logger()

STATUS_LABELS = {
    ReservationStatus.PENDING: "Pending",
    ReservationStatus.CONFIRMED: "Confirmed",
    ReservationStatus.CHECKED_IN: "Checked in",
    ReservationStatus.CHECKED_OUT: "Checked out",
    ReservationStatus.COMPLETED: "Completed",
    ReservationStatus.CANCELLED: "Cancelled",
}

CANCELLABLE: FrozenSet[ReservationStatus] = frozenset(
    {ReservationStatus.PENDING, ReservationStatus.CONFIRMED}
)


async def load_reservation(
    db: AsyncSession,
    reservation_id: UUID,
    *,
    lock: bool = False,
) -> Reservation:
    """Fetch a reservation with its place, refreshing any stale copy"""
    query = (
        select(Reservation)
        .where(Reservation.id == reservation_id)
        .options(selectinload(Reservation.place))
        .execution_options(populate_existing=True)
    )
    if lock:
        query = query.with_for_update()
    result = await db.execute(query)
    reservation = result.scalar_one_or_none()
    if reservation is None:
        raise NotFound("Reservation not found")
    return reservation


def authorize(actor: Optional[User], capability: Capability, reservation: Reservation) -> None:
    """Raise ``Unauthorized`` unless the actor may act on the reservation.

    ``actor=None`` is the system itself (scheduled jobs).
    """
    if actor is None:
        return
    if not actor.can(capability):
        raise Unauthorized(f"Your role is not allowed to {capability.value.replace('_', ' ')}")
    if not actor.can(Capability.VIEW_ALL_RESERVATIONS) and not actor.owns(reservation):
        raise Unauthorized("You can only manage your own reservations")


def _require_status(
    reservation: Reservation,
    allowed: FrozenSet[ReservationStatus],
    action: str,
) -> None:
    if reservation.status in allowed:
        return
    expected = " or ".join(STATUS_LABELS[s] for s in ReservationStatus if s in allowed)
    raise InvalidTransition(
        f"Reservation must be {expected} to {action} "
        f"(reservation {reservation.reservation_code} is {STATUS_LABELS[reservation.status]})"
    )


async def _commit_transition(
    db: AsyncSession,
    reservation: Reservation,
    previous: ReservationStatus,
    actor: Optional[User],
) -> Reservation:
    reservation.updated_at = datetime.utcnow()
    await db.commit()
    logger.info(
        "Reservation transition",
        reservation_code=reservation.reservation_code,
        from_status=previous.value,
        to_status=reservation.status.value,
        actor=str(actor.id) if actor else "system",
    )
    return await load_reservation(db, reservation.id)


async def confirm(
    db: AsyncSession,
    reservation_id: UUID,
    actor: Optional[User] = None,
) -> Reservation:
    """Pending -> Confirmed, while the place is still Available"""
    reservation = await load_reservation(db, reservation_id, lock=True)
    authorize(actor, Capability.CONFIRM_RESERVATION, reservation)
    _require_status(reservation, frozenset({ReservationStatus.PENDING}), "confirm")
    if reservation.place.status != PlaceStatus.AVAILABLE:
        raise InvalidTransition(
            f"Cannot confirm: place {reservation.place.code} is not available "
            f"({reservation.place.status.value})"
        )

    previous = reservation.status
    reservation.status = ReservationStatus.CONFIRMED
    return await _commit_transition(db, reservation, previous, actor)


async def check_in(
    db: AsyncSession,
    reservation_id: UUID,
    actor: Optional[User] = None,
    *,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Reservation:
    """Confirmed -> CheckedIn, on the start date and only if the party fits.

    The place row lock taken by the occupancy re-check is held until the
    transition commits.
    """
    today = today or date.today()
    reservation = await load_reservation(db, reservation_id, lock=True)
    authorize(actor, Capability.CHECK_IN, reservation)
    _require_status(reservation, frozenset({ReservationStatus.CONFIRMED}), "check in")
    if reservation.start_date != today:
        raise InvalidTransition(
            f"Check-in is only allowed on the start date "
            f"({reservation.start_date.isoformat()}), today is {today.isoformat()}"
        )

    admission = await can_admit(
        db,
        reservation.place_id,
        today,
        reservation.party_size,
        occupying=OCCUPYING_STATUSES,
        lock=True,
    )
    if not admission.admitted:
        raise InvalidTransition(f"Cannot check in: {admission.reason}")

    previous = reservation.status
    reservation.status = ReservationStatus.CHECKED_IN
    reservation.check_in_date = now or datetime.utcnow()
    return await _commit_transition(db, reservation, previous, actor)


async def check_out(
    db: AsyncSession,
    reservation_id: UUID,
    actor: Optional[User] = None,
    *,
    now: Optional[datetime] = None,
) -> Reservation:
    """CheckedIn -> CheckedOut"""
    reservation = await load_reservation(db, reservation_id, lock=True)
    authorize(actor, Capability.CHECK_OUT, reservation)
    _require_status(reservation, frozenset({ReservationStatus.CHECKED_IN}), "check out")

    previous = reservation.status
    reservation.status = ReservationStatus.CHECKED_OUT
    reservation.check_out_date = now or datetime.utcnow()
    return await _commit_transition(db, reservation, previous, actor)


async def cancel(
    db: AsyncSession,
    reservation_id: UUID,
    actor: Optional[User] = None,
    *,
    reason: Optional[str] = None,
    today: Optional[date] = None,
) -> Reservation:
    """Pending/Confirmed -> Cancelled; checked-in stays can never be cancelled"""
    reservation = await load_reservation(db, reservation_id, lock=True)
    authorize(actor, Capability.CANCEL_RESERVATION, reservation)
    _require_status(reservation, CANCELLABLE, "cancel")

    if not reason:
        reason = "cancelled by administrator" if actor is None or actor.is_admin else "cancelled by client"

    note = f"Cancelled: {reason}"
    reservation.notes = f"{reservation.notes}\n{note}" if reservation.notes else note

    previous = reservation.status
    reservation.status = ReservationStatus.CANCELLED
    record_cancellation_notice(db, reservation, reason, today=today)
    return await _commit_transition(db, reservation, previous, actor)


async def complete(
    db: AsyncSession,
    reservation_id: UUID,
    actor: Optional[User] = None,
) -> Reservation:
    """CheckedOut -> Completed"""
    reservation = await load_reservation(db, reservation_id, lock=True)
    authorize(actor, Capability.COMPLETE_RESERVATION, reservation)
    _require_status(reservation, frozenset({ReservationStatus.CHECKED_OUT}), "complete")

    previous = reservation.status
    reservation.status = ReservationStatus.COMPLETED
    return await _commit_transition(db, reservation, previous, actor)


async def complete_checked_out(
    db: AsyncSession,
    *,
    now: Optional[datetime] = None,
    after_days: Optional[int] = None,
) -> List[str]:
    """Complete reservations checked out at least ``after_days`` ago"""
    now = now or datetime.utcnow()
    if after_days is None:
        after_days = settings.auto_complete_after_days
    cutoff = now - timedelta(days=after_days)

    result = await db.execute(
        select(Reservation.id).where(
            Reservation.status == ReservationStatus.CHECKED_OUT,
            Reservation.check_out_date <= cutoff,
        )
    )
    completed = []
    for reservation_id in result.scalars().all():
        try:
            reservation = await complete(db, reservation_id)
        except InvalidTransition as e:
            # Raced with another writer; the next run will look again
            logger.warning("Skipped auto-completion", reservation_id=str(reservation_id), error=e.message)
            continue
        completed.append(reservation.reservation_code)

    logger.info("Auto-completed checked-out reservations", count=len(completed))
    return completed
