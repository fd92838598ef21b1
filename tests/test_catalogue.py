"""Category and place management"""

from datetime import date, timedelta
from decimal import Decimal

from tourism.models import PlaceStatus, ReservationStatus


async def test_category_crud(client, admin_headers):
    response = await client.post(
        "/categories",
        json={"name": "Tours", "description": "Guided excursions", "color": "#2e7d32"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    category_id = response.json()["id"]
    assert response.json()["place_count"] == 0

    response = await client.post("/categories", json={"name": "tours"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "validation_failed"

    response = await client.put(
        f"/categories/{category_id}",
        json={"description": "Day trips"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["description"] == "Day trips"
    assert response.json()["name"] == "Tours"


async def test_delete_empty_category(client, admin_headers, category):
    category_id = str(category.id)

    response = await client.delete(f"/categories/{category_id}", headers=admin_headers)
    assert response.status_code == 204

    response = await client.get(f"/categories/{category_id}", headers=admin_headers)
    assert response.status_code == 404


async def test_delete_category_with_places_is_blocked(client, admin_headers, category, place):
    category_id = str(category.id)

    response = await client.delete(f"/categories/{category_id}", headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "delete_blocked"

    response = await client.get(f"/categories/{category_id}", headers=admin_headers)
    assert response.json()["place_count"] == 1


async def test_clients_cannot_manage_catalogue(client, client_headers, category):
    response = await client.post("/categories", json={"name": "Spas"}, headers=client_headers)
    assert response.status_code == 403

    response = await client.get("/categories", headers=client_headers)
    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["Hotels"]


async def test_place_create_and_lookup(client, admin_headers, category):
    payload = {
        "code": "hst010",
        "name": "Hostel Central",
        "category_id": str(category.id),
        "price": "35.00",
        "capacity": 30,
        "location": "Old Town",
    }
    response = await client.post("/places", json=payload, headers=admin_headers)
    assert response.status_code == 201
    place = response.json()
    assert place["code"] == "HST010"
    assert place["status"] == "available"

    response = await client.post("/places", json=payload, headers=admin_headers)
    assert response.status_code == 400

    response = await client.get("/places/code/hst010", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["id"] == place["id"]

    response = await client.get("/places", params={"search": "central"}, headers=admin_headers)
    assert response.json()["total"] == 1

    response = await client.patch(
        f"/places/{place['id']}/status",
        json={"status": "maintenance"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "maintenance"

    response = await client.get("/places", params={"status": "available"}, headers=admin_headers)
    assert response.json()["total"] == 0


async def test_place_with_unknown_category(client, admin_headers):
    response = await client.post(
        "/places",
        json={
            "code": "X1",
            "name": "Nowhere",
            "category_id": "00000000-0000-0000-0000-000000000000",
            "price": "10.00",
        },
        headers=admin_headers,
    )
    assert response.status_code == 404


async def test_delete_place_blocked_by_active_reservation(
    client, admin_headers, place, reservation_factory
):
    place_id = str(place.id)
    await reservation_factory(place, status=ReservationStatus.CONFIRMED)

    response = await client.delete(f"/places/{place_id}", headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "delete_blocked"


async def test_delete_place_with_only_history(client, admin_headers, place, reservation_factory):
    place_id = str(place.id)
    await reservation_factory(
        place,
        status=ReservationStatus.COMPLETED,
        start_date=date.today() - timedelta(days=30),
    )
    await reservation_factory(place, status=ReservationStatus.CANCELLED)

    response = await client.delete(f"/places/{place_id}", headers=admin_headers)
    assert response.status_code == 204

    response = await client.get(f"/places/{place_id}", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "place_not_found"


async def test_update_rejects_null_required_fields(client, admin_headers, category, place):
    place_id = str(place.id)
    category_id = str(category.id)

    for field in ("status", "code", "name", "price", "category_id"):
        response = await client.put(f"/places/{place_id}", json={field: None}, headers=admin_headers)
        assert response.status_code == 400, field
        assert response.json()["error"] == "validation_failed"

    for field in ("name", "is_active"):
        response = await client.put(f"/categories/{category_id}", json={field: None}, headers=admin_headers)
        assert response.status_code == 400, field
        assert response.json()["error"] == "validation_failed"

    # Nullable columns can still be cleared
    response = await client.put(f"/places/{place_id}", json={"capacity": None}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["capacity"] is None
    assert response.json()["status"] == "available"

    response = await client.put(f"/categories/{category_id}", json={"icon": None}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Hotels"


async def test_category_stats(
    client, admin_headers, client_headers, test_db, category, place, small_place, unlimited_place,
    reservation_factory,
):
    category_id = str(category.id)
    small_place.status = PlaceStatus.MAINTENANCE
    await test_db.commit()

    day = date.today() + timedelta(days=3)
    await reservation_factory(place, status=ReservationStatus.CHECKED_IN, start_date=day, party_size=3)
    await reservation_factory(place, status=ReservationStatus.CONFIRMED, start_date=day, party_size=2)
    await reservation_factory(place, status=ReservationStatus.CANCELLED, start_date=day, party_size=1)
    await reservation_factory(place, status=ReservationStatus.COMPLETED, start_date=day, party_size=1)

    response = await client.get(f"/categories/{category_id}/stats", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Hotels"
    assert data["total_places"] == 3
    assert data["available_places"] == 2
    # Unlimited places add nothing to the capacity total
    assert data["total_capacity"] == 12
    assert data["total_reservations"] == 4
    assert data["active_reservations"] == 2
    assert data["checked_in_guests"] == 3
    # 300 + 200 + 100, cancelled excluded
    assert Decimal(str(data["revenue"])) == Decimal("600")

    response = await client.get(f"/categories/{category_id}/stats", headers=client_headers)
    assert response.status_code == 403
