"""Booking flow: creating, editing, listing and deleting reservations"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, func, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from tourism.config import settings
from tourism.models.alert import Alert, AlertType
from tourism.models.reservation import Reservation, ReservationStatus
from tourism.models.user import Capability, User
from tourism.schemas.reservation import ReservationCreate, ReservationUpdate
from tourism.services.alerts import schedule_reservation_reminder
from tourism.services.availability import ensure_admissible
from tourism.services.codes import generate_unique_code
from tourism.services.errors import (
    CodeGenerationExhausted,
    InvalidTransition,
    NotFound,
    Unauthorized,
    ValidationFailed,
)
from tourism.services.lifecycle import authorize, load_reservation

logger = structlog.get_logger()

INITIAL_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)


def calculate_total(price: Decimal, party_size: int, start_date: date, end_date: Optional[date]) -> Decimal:
    """Price per person per night, at least one night"""
    nights = 1
    if end_date is not None:
        nights = max(1, (end_date - start_date).days)
    return Decimal(price) * party_size * nights


def validate_dates(start_date: date, end_date: Optional[date], today: date) -> None:
    if start_date < today:
        raise ValidationFailed("Start date cannot be earlier than today")
    if end_date is not None and end_date < start_date:
        raise ValidationFailed("End date cannot be earlier than the start date")


async def create_reservation(
    db: AsyncSession,
    data: ReservationCreate,
    actor: User,
    *,
    today: Optional[date] = None,
) -> Reservation:
    """Admit and store a new reservation together with its reminder alert.

    The place row stays locked from the admission check until commit. A
    unique-code clash with a concurrent insert rolls back and retries the
    whole admission with a fresh code.
    """
    today = today or date.today()

    if not actor.can(Capability.CREATE_RESERVATION):
        raise Unauthorized("Your role is not allowed to create reservations")

    initial_status = data.status or ReservationStatus.PENDING
    if initial_status not in INITIAL_STATUSES:
        raise ValidationFailed("New reservations must start as pending or confirmed")
    if initial_status == ReservationStatus.CONFIRMED and not actor.can(Capability.BOOK_CONFIRMED):
        raise Unauthorized("Only administrators can create confirmed reservations")

    client_name = data.client_name
    client_email = str(data.client_email) if data.client_email else None
    if not actor.is_admin:
        client_name = actor.full_name or client_name
        client_email = actor.email
    if not client_name or not client_email:
        raise ValidationFailed("Client name and email are required")

    validate_dates(data.start_date, data.end_date, today)

    for attempt in range(1, settings.code_generation_max_attempts + 1):
        try:
            place = await ensure_admissible(
                db, data.place_id, data.start_date, data.party_size,
                end_date=data.end_date, lock=True,
            )
            code = await generate_unique_code(db)

            reservation = Reservation(
                reservation_code=code,
                place_id=place.id,
                client_name=client_name,
                client_email=client_email,
                client_phone=data.client_phone,
                start_date=data.start_date,
                end_date=data.end_date,
                start_time=data.start_time,
                end_time=data.end_time,
                party_size=data.party_size,
                place_price=place.price,
                total_amount=calculate_total(place.price, data.party_size, data.start_date, data.end_date),
                status=initial_status,
                notes=data.notes,
                alert_sent=False,
            )
            db.add(reservation)
            await db.flush()

            schedule_reservation_reminder(db, reservation, today=today)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning("Reservation code clash on insert, retrying", attempt=attempt)
            continue

        logger.info(
            "Reservation created",
            reservation_code=reservation.reservation_code,
            place_code=place.code,
            status=initial_status.value,
            party_size=reservation.party_size,
        )
        return await load_reservation(db, reservation.id)

    raise CodeGenerationExhausted("Could not store the reservation under a unique code")


async def get_reservation(db: AsyncSession, reservation_id: UUID, actor: User) -> Reservation:
    reservation = await load_reservation(db, reservation_id)
    if not actor.can(Capability.VIEW_ALL_RESERVATIONS) and not actor.owns(reservation):
        raise Unauthorized("You can only view your own reservations")
    return reservation


async def get_reservation_by_code(db: AsyncSession, code: str, actor: User) -> Reservation:
    result = await db.execute(
        select(Reservation.id).where(Reservation.reservation_code == code.upper())
    )
    reservation_id = result.scalar_one_or_none()
    if reservation_id is None:
        raise NotFound("Reservation not found")
    return await get_reservation(db, reservation_id, actor)


def _filtered(
    query,
    actor: User,
    *,
    status: Optional[ReservationStatus] = None,
    place_id: Optional[UUID] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
):
    if not actor.can(Capability.VIEW_ALL_RESERVATIONS):
        query = query.where(func.lower(Reservation.client_email) == actor.email.lower())
    if status is not None:
        query = query.where(Reservation.status == status)
    if place_id is not None:
        query = query.where(Reservation.place_id == place_id)
    if date_from is not None:
        query = query.where(Reservation.start_date >= date_from)
    if date_to is not None:
        query = query.where(Reservation.start_date <= date_to)
    return query


async def list_reservations(
    db: AsyncSession,
    actor: User,
    *,
    status: Optional[ReservationStatus] = None,
    place_id: Optional[UUID] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[Reservation], int]:
    """Reservations visible to the actor, newest start date first"""
    filters = dict(status=status, place_id=place_id, date_from=date_from, date_to=date_to)

    count_query = _filtered(select(func.count(Reservation.id)), actor, **filters)
    total = (await db.execute(count_query)).scalar() or 0

    query = _filtered(select(Reservation), actor, **filters)
    query = (
        query.options(selectinload(Reservation.place))
        .order_by(Reservation.start_date.desc(), Reservation.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def export_rows(
    db: AsyncSession,
    actor: User,
    **filters,
) -> List[Reservation]:
    """Every reservation matching the filters, for reports"""
    query = _filtered(select(Reservation), actor, **filters)
    query = query.options(selectinload(Reservation.place)).order_by(Reservation.start_date)
    result = await db.execute(query)
    return list(result.scalars().all())


async def update_reservation(
    db: AsyncSession,
    reservation_id: UUID,
    data: ReservationUpdate,
    actor: User,
    *,
    today: Optional[date] = None,
) -> Reservation:
    """Edit a pending reservation; status only changes through the lifecycle"""
    today = today or date.today()
    reservation = await load_reservation(db, reservation_id, lock=True)
    authorize(actor, Capability.EDIT_RESERVATION, reservation)
    if reservation.status != ReservationStatus.PENDING:
        raise InvalidTransition(
            f"Only pending reservations can be edited "
            f"(reservation {reservation.reservation_code} is {reservation.status.value})"
        )

    changes = data.model_dump(exclude_unset=True)
    for required in ("place_id", "client_name", "client_email", "start_date", "party_size"):
        if required in changes and changes[required] is None:
            del changes[required]
    if "client_email" in changes:
        changes["client_email"] = str(changes["client_email"])

    start_date = changes.get("start_date", reservation.start_date)
    end_date = changes.get("end_date", reservation.end_date)
    if "start_date" in changes or "end_date" in changes:
        validate_dates(start_date, end_date, today)

    place_id = changes.get("place_id", reservation.place_id)
    party_size = changes.get("party_size", reservation.party_size)
    place = await ensure_admissible(
        db, place_id, start_date, party_size, end_date=end_date, lock=True
    )

    for field, value in changes.items():
        setattr(reservation, field, value)

    reservation.place_price = place.price
    reservation.total_amount = calculate_total(place.price, party_size, start_date, end_date)
    if "start_date" in changes:
        # Reminder follows the new start date
        await db.execute(
            delete(Alert).where(
                Alert.reservation_id == reservation.id,
                Alert.type == AlertType.RESERVATION_REMINDER,
                Alert.is_sent == False,  # noqa: E712
            )
        )
        reservation.alert_sent = False
        schedule_reservation_reminder(db, reservation, today=today)

    reservation.updated_at = datetime.utcnow()
    await db.commit()

    logger.info("Reservation updated", reservation_code=reservation.reservation_code)
    return await load_reservation(db, reservation.id)


async def delete_reservation(db: AsyncSession, reservation_id: UUID, actor: User) -> None:
    reservation = await load_reservation(db, reservation_id)
    if not actor.can(Capability.DELETE_RESERVATION):
        raise Unauthorized("Only administrators can delete reservations")

    code = reservation.reservation_code
    await db.execute(delete(Alert).where(Alert.reservation_id == reservation.id))
    await db.delete(reservation)
    await db.commit()
    logger.info("Reservation deleted", reservation_code=code)
