"""Occupancy, remaining capacity and admission checks"""

from datetime import date, timedelta

import pytest

from tourism.models import PlaceStatus, ReservationStatus
from tourism.services.availability import can_admit, ensure_admissible
from tourism.services.capacity import (
    current_occupancy,
    place_availability,
    remaining_capacity,
    reserved_load,
    signed_remaining,
)
from tourism.services.errors import CapacityExceeded, PlaceNotAvailable, PlaceNotFound


def test_remaining_capacity_floors_at_zero():
    assert remaining_capacity(10, 4) == 6
    assert remaining_capacity(2, 5) == 0
    assert signed_remaining(2, 5) == -3


def test_unlimited_capacity_has_no_remaining_figure():
    assert remaining_capacity(None, 500) is None
    assert signed_remaining(None, 500) is None


async def test_occupancy_counts_only_checked_in(test_db, place, reservation_factory):
    day = date.today() + timedelta(days=5)
    await reservation_factory(place, status=ReservationStatus.CHECKED_IN, start_date=day, party_size=3)
    await reservation_factory(place, status=ReservationStatus.CONFIRMED, start_date=day, party_size=2)
    await reservation_factory(place, status=ReservationStatus.PENDING, start_date=day, party_size=4)
    await reservation_factory(place, status=ReservationStatus.CANCELLED, start_date=day, party_size=5)

    assert await current_occupancy(test_db, place.id, day) == 3
    assert await reserved_load(test_db, place.id, day) == 5


async def test_multi_day_stay_covers_every_night(test_db, place, reservation_factory):
    start = date.today() + timedelta(days=10)
    await reservation_factory(
        place,
        status=ReservationStatus.CHECKED_IN,
        start_date=start,
        end_date=start + timedelta(days=3),
        party_size=2,
    )

    assert await current_occupancy(test_db, place.id, start + timedelta(days=2)) == 2
    assert await current_occupancy(test_db, place.id, start + timedelta(days=3)) == 2
    assert await current_occupancy(test_db, place.id, start + timedelta(days=4)) == 0
    assert await current_occupancy(test_db, place.id, start - timedelta(days=1)) == 0


async def test_admission_rejects_party_over_capacity(test_db, small_place, reservation_factory):
    day = date.today() + timedelta(days=2)
    place_id = small_place.id
    await reservation_factory(small_place, status=ReservationStatus.CONFIRMED, start_date=day, party_size=1)

    assert (await can_admit(test_db, place_id, day, 1)).admitted

    admission = await can_admit(test_db, place_id, day, 2)
    assert not admission.admitted
    assert isinstance(admission.error, CapacityExceeded)
    assert "1 of 2" in admission.reason

    with pytest.raises(CapacityExceeded):
        await ensure_admissible(test_db, place_id, day, 2)


async def test_admission_checks_every_night_of_a_stay(test_db, small_place, reservation_factory):
    start = date.today() + timedelta(days=8)
    place_id = small_place.id
    # Second night is already full
    await reservation_factory(
        small_place,
        status=ReservationStatus.CONFIRMED,
        start_date=start + timedelta(days=1),
        party_size=2,
    )

    assert (await can_admit(test_db, place_id, start, 2)).admitted

    admission = await can_admit(test_db, place_id, start, 2, end_date=start + timedelta(days=3))
    assert not admission.admitted
    assert isinstance(admission.error, CapacityExceeded)
    assert admission.load == 2
    assert (start + timedelta(days=1)).isoformat() in admission.reason

    with pytest.raises(CapacityExceeded):
        await ensure_admissible(test_db, place_id, start, 1, end_date=start + timedelta(days=1))


async def test_admission_uses_busiest_night(test_db, place, reservation_factory):
    start = date.today() + timedelta(days=12)
    place_id = place.id
    await reservation_factory(
        place,
        status=ReservationStatus.CONFIRMED,
        start_date=start,
        end_date=start + timedelta(days=2),
        party_size=4,
    )
    await reservation_factory(
        place,
        status=ReservationStatus.CONFIRMED,
        start_date=start + timedelta(days=2),
        end_date=start + timedelta(days=4),
        party_size=3,
    )

    # Night three holds both stays: 7 of 10
    admission = await can_admit(test_db, place_id, start, 3, end_date=start + timedelta(days=5))
    assert admission.admitted
    assert admission.load == 7

    admission = await can_admit(test_db, place_id, start, 4, end_date=start + timedelta(days=5))
    assert not admission.admitted

    # A stay that ends before the overlap only sees the first booking
    assert (await can_admit(test_db, place_id, start, 6, end_date=start + timedelta(days=1))).admitted


async def test_admission_requires_available_place(test_db, place):
    place.status = PlaceStatus.MAINTENANCE
    await test_db.commit()

    admission = await can_admit(test_db, place.id, date.today(), 1)
    assert not admission.admitted
    assert isinstance(admission.error, PlaceNotAvailable)


async def test_admission_unknown_place(test_db):
    from uuid import uuid4

    admission = await can_admit(test_db, uuid4(), date.today(), 1)
    assert isinstance(admission.error, PlaceNotFound)


async def test_unlimited_place_admits_any_party(test_db, unlimited_place):
    admission = await can_admit(test_db, unlimited_place.id, date.today(), 1000)
    assert admission.admitted


async def test_place_availability_projection(test_db, place, reservation_factory):
    day = date.today() + timedelta(days=4)
    await reservation_factory(place, status=ReservationStatus.CHECKED_IN, start_date=day, party_size=4)
    await reservation_factory(place, status=ReservationStatus.CONFIRMED, start_date=day, party_size=2)

    availability = await place_availability(test_db, place.id, day)

    assert availability.capacity == 10
    assert availability.occupancy == 4
    assert availability.reserved == 6
    assert availability.remaining == 4
    assert availability.occupancy_percentage == 40.0
    assert availability.is_available is True


async def test_availability_endpoints(client, admin_headers, small_place, reservation_factory):
    day = date.today() + timedelta(days=6)
    place_id = str(small_place.id)
    await reservation_factory(small_place, status=ReservationStatus.CONFIRMED, start_date=day, party_size=2)

    response = await client.get(
        f"/places/{place_id}/availability",
        params={"on_date": day.isoformat()},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["reserved"] == 2
    assert data["remaining"] == 0
    assert data["is_available"] is False

    response = await client.get(
        f"/places/{place_id}/availability/check",
        params={"start_date": day.isoformat(), "party_size": 1},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["admitted"] is False
    assert "places left" in data["reason"]
