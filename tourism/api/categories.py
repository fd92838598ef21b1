"""Category management API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tourism.database import get_db
from tourism.models.category import Category
from tourism.models.place import Place, PlaceStatus
from tourism.models.reservation import Reservation, ReservationStatus, ACTIVE_STATUSES
from tourism.models.user import Capability, User
from tourism.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryStatsResponse,
)
from tourism.services.errors import DeleteBlocked, NotFound, ValidationFailed
from tourism.api.auth import get_current_active_user, require_capability

router = APIRouter()
logger = structlog.get_logger()

NOT_NULL_FIELDS = ("name", "is_active")


async def _get_category(db: AsyncSession, category_id: UUID) -> Category:
    category = await db.get(Category, category_id)
    if not category:
        raise NotFound("Category not found")
    return category


async def _place_count(db: AsyncSession, category_id: UUID) -> int:
    result = await db.execute(
        select(func.count(Place.id)).where(Place.category_id == category_id)
    )
    return result.scalar() or 0


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: Optional[UUID] = None) -> None:
    query = select(Category.id).where(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.where(Category.id != exclude_id)
    result = await db.execute(query)
    if result.first() is not None:
        raise ValidationFailed(f"A category named '{name}' already exists")


def _to_response(category: Category, place_count: int) -> CategoryResponse:
    response = CategoryResponse.model_validate(category)
    response.place_count = place_count
    return response


@router.get("", response_model=List[CategoryResponse])
async def list_categories(
    active_only: bool = False,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List categories with their place counts"""
    counts = (
        select(Place.category_id, func.count(Place.id).label("place_count"))
        .group_by(Place.category_id)
        .subquery()
    )
    query = (
        select(Category, func.coalesce(counts.c.place_count, 0))
        .outerjoin(counts, counts.c.category_id == Category.id)
        .order_by(Category.name)
    )
    if active_only:
        query = query.where(Category.is_active == True)  # noqa: E712

    result = await db.execute(query)
    return [_to_response(category, count) for category, count in result.all()]


@router.post("", response_model=CategoryResponse, status_code=201)
async def create_category(
    category_data: CategoryCreate,
    current_user: User = Depends(require_capability(Capability.MANAGE_CATALOGUE)),
    db: AsyncSession = Depends(get_db),
):
    """Create a new category"""
    await _ensure_unique_name(db, category_data.name)

    category = Category(**category_data.model_dump())
    db.add(category)
    await db.commit()
    await db.refresh(category)

    logger.info("Category created", category_id=str(category.id), name=category.name)
    return _to_response(category, 0)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a category with its place count"""
    category = await _get_category(db, category_id)
    return _to_response(category, await _place_count(db, category.id))


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    category_data: CategoryUpdate,
    current_user: User = Depends(require_capability(Capability.MANAGE_CATALOGUE)),
    db: AsyncSession = Depends(get_db),
):
    """Update a category"""
    category = await _get_category(db, category_id)

    changes = category_data.model_dump(exclude_unset=True)
    for field in NOT_NULL_FIELDS:
        if field in changes and changes[field] is None:
            raise ValidationFailed(f"Category {field} cannot be null")
    if changes.get("name"):
        await _ensure_unique_name(db, changes["name"], exclude_id=category.id)

    for field, value in changes.items():
        setattr(category, field, value)

    await db.commit()
    await db.refresh(category)
    return _to_response(category, await _place_count(db, category.id))


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: UUID,
    current_user: User = Depends(require_capability(Capability.MANAGE_CATALOGUE)),
    db: AsyncSession = Depends(get_db),
):
    """Delete a category that no place references"""
    category = await _get_category(db, category_id)

    place_count = await _place_count(db, category.id)
    if place_count:
        raise DeleteBlocked(
            f"Category '{category.name}' still has {place_count} place(s) assigned"
        )

    await db.delete(category)
    await db.commit()
    logger.info("Category deleted", category_id=str(category_id))


@router.get("/{category_id}/stats", response_model=CategoryStatsResponse)
async def get_category_stats(
    category_id: UUID,
    current_user: User = Depends(require_capability(Capability.VIEW_ALL_RESERVATIONS)),
    db: AsyncSession = Depends(get_db),
):
    """Place and reservation totals for one category"""
    category = await _get_category(db, category_id)

    places = await db.execute(
        select(
            func.count(Place.id),
            func.coalesce(func.sum(case((Place.status == PlaceStatus.AVAILABLE, 1), else_=0)), 0),
            func.coalesce(func.sum(Place.capacity), 0),
        ).where(Place.category_id == category.id)
    )
    total_places, available_places, total_capacity = places.one()

    reservations = await db.execute(
        select(
            func.count(Reservation.id),
            func.coalesce(func.sum(case((Reservation.status.in_(ACTIVE_STATUSES), 1), else_=0)), 0),
            func.coalesce(
                func.sum(
                    case((Reservation.status == ReservationStatus.CHECKED_IN, Reservation.party_size), else_=0)
                ),
                0,
            ),
            func.coalesce(
                func.sum(
                    case((Reservation.status != ReservationStatus.CANCELLED, Reservation.total_amount), else_=0)
                ),
                0,
            ),
        )
        .join(Place, Reservation.place_id == Place.id)
        .where(Place.category_id == category.id)
    )
    total_reservations, active_reservations, checked_in_guests, revenue = reservations.one()

    return CategoryStatsResponse(
        category_id=category.id,
        name=category.name,
        total_places=total_places,
        available_places=available_places,
        total_capacity=total_capacity,
        total_reservations=total_reservations,
        active_reservations=active_reservations,
        checked_in_guests=checked_in_guests,
        revenue=revenue,
    )
