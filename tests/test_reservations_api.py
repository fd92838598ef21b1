"""Booking through the HTTP API"""

from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select

from tourism.models import Alert, Reservation, ReservationStatus


def _payload(place, **overrides):
    payload = {
        "place_id": str(place.id),
        "client_name": "Fabio Guest",
        "client_email": "fabio@example.com",
        "client_phone": "+15559876543",
        "start_date": (date.today() + timedelta(days=10)).isoformat(),
        "party_size": 2,
    }
    payload.update(overrides)
    return payload


async def test_admin_books_confirmed_multi_night_stay(client, admin_headers, place):
    start = date.today() + timedelta(days=10)
    response = await client.post(
        "/reservations",
        json=_payload(
            place,
            start_date=start.isoformat(),
            end_date=(start + timedelta(days=3)).isoformat(),
            status="confirmed",
        ),
        headers=admin_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "confirmed"
    assert data["reservation_code"].startswith("RES")
    assert len(data["reservation_code"]) == 15
    assert data["place"]["code"] == "HTL001"
    # 100.00 x 2 guests x 3 nights
    assert Decimal(data["total_amount"]) == Decimal("600.00")
    assert Decimal(data["place_price"]) == Decimal("100.00")


async def test_client_booking_uses_profile(client, client_headers, place):
    response = await client.post(
        "/reservations",
        json=_payload(place, client_name="Someone Else", client_email="else@example.com"),
        headers=client_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["client_email"] == "ana@example.com"
    assert data["client_name"] == "Ana Client"


async def test_client_cannot_book_confirmed(client, client_headers, place):
    response = await client.post(
        "/reservations",
        json=_payload(place, status="confirmed"),
        headers=client_headers,
    )
    assert response.status_code == 403


async def test_start_date_in_past_rejected(client, admin_headers, place):
    response = await client.post(
        "/reservations",
        json=_payload(place, start_date=(date.today() - timedelta(days=1)).isoformat()),
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "validation_failed"


async def test_end_before_start_rejected(client, admin_headers, place):
    start = date.today() + timedelta(days=5)
    response = await client.post(
        "/reservations",
        json=_payload(
            place,
            start_date=start.isoformat(),
            end_date=(start - timedelta(days=1)).isoformat(),
        ),
        headers=admin_headers,
    )
    assert response.status_code == 400


async def test_zero_party_rejected(client, admin_headers, place):
    response = await client.post("/reservations", json=_payload(place, party_size=0), headers=admin_headers)
    assert response.status_code == 422


async def test_booking_over_capacity(client, admin_headers, small_place):
    response = await client.post(
        "/reservations",
        json=_payload(small_place, party_size=3),
        headers=admin_headers,
    )
    assert response.status_code == 409
    assert response.json()["error"] == "capacity_exceeded"


async def test_multi_night_booking_rejected_when_later_night_full(
    client, admin_headers, small_place, reservation_factory, test_db
):
    start = date.today() + timedelta(days=10)
    place_id = small_place.id
    await reservation_factory(
        small_place,
        status=ReservationStatus.CONFIRMED,
        start_date=start + timedelta(days=1),
        party_size=2,
    )

    response = await client.post(
        "/reservations",
        json=_payload(
            small_place,
            start_date=start.isoformat(),
            end_date=(start + timedelta(days=3)).isoformat(),
            status="confirmed",
        ),
        headers=admin_headers,
    )
    assert response.status_code == 409
    assert response.json()["error"] == "capacity_exceeded"

    result = await test_db.execute(select(Reservation).where(Reservation.place_id == place_id))
    assert len(result.scalars().all()) == 1

    # Same party on the free first night alone still fits
    response = await client.post(
        "/reservations",
        json=_payload(small_place, start_date=start.isoformat(), status="confirmed"),
        headers=admin_headers,
    )
    assert response.status_code == 201


async def test_extending_pending_stay_into_full_night_rejected(
    client, admin_headers, small_place, reservation_factory
):
    start = date.today() + timedelta(days=10)
    await reservation_factory(
        small_place,
        status=ReservationStatus.CONFIRMED,
        start_date=start + timedelta(days=2),
        party_size=1,
    )
    response = await client.post(
        "/reservations",
        json=_payload(small_place, start_date=start.isoformat()),
        headers=admin_headers,
    )
    reservation_id = response.json()["id"]

    response = await client.put(
        f"/reservations/{reservation_id}",
        json={"end_date": (start + timedelta(days=2)).isoformat()},
        headers=admin_headers,
    )
    assert response.status_code == 409
    assert response.json()["error"] == "capacity_exceeded"

    response = await client.put(
        f"/reservations/{reservation_id}",
        json={"end_date": (start + timedelta(days=1)).isoformat()},
        headers=admin_headers,
    )
    assert response.status_code == 200


async def test_clients_only_see_their_reservations(
    client, client_headers, other_client_headers, admin_headers, place, reservation_factory
):
    own = await reservation_factory(place, client_email="ana@example.com")
    foreign = await reservation_factory(place, client_email="bruno@example.com")
    own_id, foreign_id = str(own.id), str(foreign.id)

    response = await client.get("/reservations", headers=client_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 1
    assert [r["id"] for r in response.json()["items"]] == [own_id]

    response = await client.get(f"/reservations/{foreign_id}", headers=client_headers)
    assert response.status_code == 403

    response = await client.post(f"/reservations/{own_id}/cancel", headers=other_client_headers)
    assert response.status_code == 403

    response = await client.get("/reservations", headers=admin_headers)
    assert response.json()["total"] == 2


async def test_lookup_by_code(client, admin_headers, place, reservation_factory):
    reservation = await reservation_factory(place)
    code = reservation.reservation_code

    response = await client.get(f"/reservations/code/{code.lower()}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["reservation_code"] == code

    response = await client.get("/reservations/code/RES000000000000", headers=admin_headers)
    assert response.status_code == 404


async def test_update_pending_reservation(client, admin_headers, place):
    response = await client.post("/reservations", json=_payload(place), headers=admin_headers)
    reservation_id = response.json()["id"]

    new_start = date.today() + timedelta(days=20)
    response = await client.put(
        f"/reservations/{reservation_id}",
        json={"party_size": 4, "start_date": new_start.isoformat()},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["party_size"] == 4
    assert Decimal(data["total_amount"]) == Decimal("400.00")
    assert data["status"] == "pending"


async def test_update_moves_reminder(client, admin_headers, place, test_db):
    response = await client.post("/reservations", json=_payload(place), headers=admin_headers)
    reservation_id = response.json()["id"]

    new_start = date.today() + timedelta(days=20)
    await client.put(
        f"/reservations/{reservation_id}",
        json={"start_date": new_start.isoformat()},
        headers=admin_headers,
    )

    result = await test_db.execute(select(Alert.alert_date))
    assert result.scalars().all() == [new_start - timedelta(days=3)]


async def test_confirmed_reservation_cannot_be_edited(client, admin_headers, place, reservation_factory):
    reservation = await reservation_factory(place, status=ReservationStatus.CONFIRMED)

    response = await client.put(
        f"/reservations/{reservation.id}",
        json={"party_size": 1},
        headers=admin_headers,
    )
    assert response.status_code == 409
    assert response.json()["error"] == "invalid_transition"


async def test_status_is_not_editable(client, admin_headers, place, reservation_factory):
    reservation = await reservation_factory(place)

    response = await client.put(
        f"/reservations/{reservation.id}",
        json={"status": "checked_in"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "pending"


async def test_delete_reservation(client, admin_headers, client_headers, place):
    response = await client.post("/reservations", json=_payload(place), headers=admin_headers)
    reservation_id = response.json()["id"]

    response = await client.delete(f"/reservations/{reservation_id}", headers=client_headers)
    assert response.status_code == 403

    response = await client.delete(f"/reservations/{reservation_id}", headers=admin_headers)
    assert response.status_code == 204

    response = await client.get(f"/reservations/{reservation_id}", headers=admin_headers)
    assert response.status_code == 404


async def test_filter_by_status(client, admin_headers, place, reservation_factory):
    await reservation_factory(place, status=ReservationStatus.CONFIRMED)
    await reservation_factory(place, status=ReservationStatus.CANCELLED)

    response = await client.get("/reservations", params={"status": "confirmed"}, headers=admin_headers)
    assert response.json()["total"] == 1
    assert response.json()["items"][0]["status"] == "confirmed"
