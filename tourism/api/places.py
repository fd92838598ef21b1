"""Place management API endpoints"""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, or_, delete
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tourism.database import get_db
from tourism.models.alert import Alert
from tourism.models.category import Category
from tourism.models.place import Place, PlaceStatus
from tourism.models.reservation import Reservation, ACTIVE_STATUSES
from tourism.models.user import Capability, User
from tourism.schemas.place import (
    PlaceCreate,
    PlaceUpdate,
    PlaceStatusUpdate,
    PlaceResponse,
    PlaceListResponse,
    PlaceAvailabilityResponse,
    AdmissionResponse,
)
from tourism.services.availability import can_admit
from tourism.services.capacity import place_availability
from tourism.services.errors import DeleteBlocked, NotFound, PlaceNotFound, ValidationFailed
from tourism.api.auth import get_current_active_user, require_capability

router = APIRouter()
logger = structlog.get_logger()

NOT_NULL_FIELDS = ("code", "name", "category_id", "price", "status")


async def _get_place(db: AsyncSession, place_id: UUID) -> Place:
    place = await db.get(Place, place_id)
    if not place:
        raise PlaceNotFound(place_id)
    return place


async def _ensure_category(db: AsyncSession, category_id: UUID) -> None:
    if await db.get(Category, category_id) is None:
        raise NotFound("Category not found")


async def _ensure_unique_code(db: AsyncSession, code: str, exclude_id: Optional[UUID] = None) -> None:
    query = select(Place.id).where(Place.code == code)
    if exclude_id is not None:
        query = query.where(Place.id != exclude_id)
    result = await db.execute(query)
    if result.first() is not None:
        raise ValidationFailed(f"Place code {code} is already in use")


@router.get("", response_model=PlaceListResponse)
async def list_places(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    category_id: Optional[UUID] = None,
    status: Optional[PlaceStatus] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List places with pagination"""
    query = select(Place)
    count_query = select(func.count(Place.id))

    conditions = []
    if search:
        pattern = f"%{search}%"
        conditions.append(
            or_(
                Place.name.ilike(pattern),
                Place.code.ilike(pattern),
                Place.location.ilike(pattern),
            )
        )
    if category_id:
        conditions.append(Place.category_id == category_id)
    if status:
        conditions.append(Place.status == status)

    for condition in conditions:
        query = query.where(condition)
        count_query = count_query.where(condition)

    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(Place.name).offset((page - 1) * page_size).limit(page_size)
    result = await db.execute(query)

    return PlaceListResponse(
        items=result.scalars().all(),
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("", response_model=PlaceResponse, status_code=201)
async def create_place(
    place_data: PlaceCreate,
    current_user: User = Depends(require_capability(Capability.MANAGE_CATALOGUE)),
    db: AsyncSession = Depends(get_db),
):
    """Create a new place"""
    data = place_data.model_dump()
    data["code"] = data["code"].upper()

    await _ensure_category(db, place_data.category_id)
    await _ensure_unique_code(db, data["code"])

    place = Place(**data)
    db.add(place)
    await db.commit()
    await db.refresh(place)

    logger.info("Place created", place_id=str(place.id), place_code=place.code)
    return place


@router.get("/code/{code}", response_model=PlaceResponse)
async def get_place_by_code(
    code: str,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Look a place up by its code"""
    result = await db.execute(select(Place).where(Place.code == code.upper()))
    place = result.scalar_one_or_none()
    if not place:
        raise NotFound(f"Place {code} not found")
    return place


@router.get("/{place_id}", response_model=PlaceResponse)
async def get_place(
    place_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific place"""
    return await _get_place(db, place_id)


@router.put("/{place_id}", response_model=PlaceResponse)
async def update_place(
    place_id: UUID,
    place_data: PlaceUpdate,
    current_user: User = Depends(require_capability(Capability.MANAGE_CATALOGUE)),
    db: AsyncSession = Depends(get_db),
):
    """Update a place"""
    place = await _get_place(db, place_id)

    changes = place_data.model_dump(exclude_unset=True)
    for field in NOT_NULL_FIELDS:
        if field in changes and changes[field] is None:
            raise ValidationFailed(f"Place {field} cannot be null")
    if changes.get("code"):
        changes["code"] = changes["code"].upper()
        await _ensure_unique_code(db, changes["code"], exclude_id=place.id)
    if changes.get("category_id"):
        await _ensure_category(db, changes["category_id"])

    for field, value in changes.items():
        setattr(place, field, value)

    await db.commit()
    await db.refresh(place)
    return place


@router.patch("/{place_id}/status", response_model=PlaceResponse)
async def update_place_status(
    place_id: UUID,
    status_data: PlaceStatusUpdate,
    current_user: User = Depends(require_capability(Capability.MANAGE_CATALOGUE)),
    db: AsyncSession = Depends(get_db),
):
    """Change the operational status of a place"""
    place = await _get_place(db, place_id)
    previous = place.status
    place.status = status_data.status

    await db.commit()
    await db.refresh(place)

    logger.info(
        "Place status changed",
        place_code=place.code,
        from_status=previous.value,
        to_status=place.status.value,
    )
    return place


@router.delete("/{place_id}", status_code=204)
async def delete_place(
    place_id: UUID,
    current_user: User = Depends(require_capability(Capability.MANAGE_CATALOGUE)),
    db: AsyncSession = Depends(get_db),
):
    """Delete a place with no active reservations"""
    place = await _get_place(db, place_id)

    result = await db.execute(
        select(func.count(Reservation.id)).where(
            Reservation.place_id == place.id,
            Reservation.status.in_(ACTIVE_STATUSES),
        )
    )
    active = result.scalar() or 0
    if active:
        raise DeleteBlocked(
            f"Place {place.code} has {active} active reservation(s)"
        )

    # Finished and cancelled history goes with the place
    history = select(Reservation.id).where(Reservation.place_id == place.id)
    await db.execute(delete(Alert).where(Alert.reservation_id.in_(history)))
    await db.execute(delete(Reservation).where(Reservation.place_id == place.id))

    await db.delete(place)
    await db.commit()
    logger.info("Place deleted", place_code=place.code)


@router.get("/{place_id}/availability", response_model=PlaceAvailabilityResponse)
async def get_place_availability(
    place_id: UUID,
    on_date: Optional[date] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Occupancy and remaining capacity of a place on a date"""
    return await place_availability(db, place_id, on_date or date.today())


@router.get("/{place_id}/availability/check", response_model=AdmissionResponse)
async def check_place_availability(
    place_id: UUID,
    start_date: date,
    party_size: int = Query(..., gt=0),
    end_date: Optional[date] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Would a party of ``party_size`` be admitted for the stay?"""
    admission = await can_admit(db, place_id, start_date, party_size, end_date=end_date)
    if isinstance(admission.error, NotFound):
        raise admission.error

    return AdmissionResponse(
        place_id=place_id,
        start_date=start_date,
        end_date=end_date,
        party_size=party_size,
        admitted=admission.admitted,
        reason=admission.reason,
    )
