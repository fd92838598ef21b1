"""CSV and PDF reservation reports"""

import csv
import io
from datetime import date, timedelta

from tourism.models import ReservationStatus
from tourism.services.exports import reservations_to_csv


async def test_csv_export(client, admin_headers, place, reservation_factory):
    start = date.today() + timedelta(days=4)
    await reservation_factory(
        place,
        status=ReservationStatus.CONFIRMED,
        start_date=start,
        party_size=3,
        client_name="Gina Guest",
        client_email="gina@example.com",
    )
    await reservation_factory(place, status=ReservationStatus.CANCELLED)

    response = await client.get(
        "/reports/reservations.csv",
        params={"status": "confirmed"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]

    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert len(rows) == 1
    assert rows[0]["client_name"] == "Gina Guest"
    assert rows[0]["place_code"] == "HTL001"
    assert rows[0]["start_date"] == start.isoformat()
    assert rows[0]["party_size"] == "3"
    assert rows[0]["status"] == "confirmed"
    assert rows[0]["total_amount"] == "300.00"


def test_csv_of_nothing_is_header_only():
    lines = reservations_to_csv([]).splitlines()
    assert lines == [
        "reservation_code,place_code,place_name,client_name,client_email,client_phone,"
        "start_date,end_date,party_size,status,total_amount,created_at"
    ]


async def test_pdf_export(client, admin_headers, place, reservation_factory):
    await reservation_factory(place, status=ReservationStatus.CONFIRMED)

    response = await client.get("/reports/reservations.pdf", headers=admin_headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


async def test_reports_are_admin_only(client, client_headers):
    response = await client.get("/reports/reservations.csv", headers=client_headers)
    assert response.status_code == 403
    assert response.json()["error"] == "unauthorized"
