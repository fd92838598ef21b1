"""CSV and PDF renderings of reservation lists"""

import csv
import io
from datetime import datetime
from typing import Iterable, List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from tourism.models.reservation import Reservation
from tourism.services.lifecycle import STATUS_LABELS

CSV_COLUMNS = [
    "reservation_code",
    "place_code",
    "place_name",
    "client_name",
    "client_email",
    "client_phone",
    "start_date",
    "end_date",
    "party_size",
    "status",
    "total_amount",
    "created_at",
]

PDF_COLUMNS = ["Code", "Client", "Place", "Date", "Status", "Total"]


def _row(reservation: Reservation) -> dict:
    place = reservation.place
    return {
        "reservation_code": reservation.reservation_code,
        "place_code": place.code if place else "",
        "place_name": place.name if place else "",
        "client_name": reservation.client_name,
        "client_email": reservation.client_email,
        "client_phone": reservation.client_phone or "",
        "start_date": reservation.start_date.isoformat(),
        "end_date": reservation.end_date.isoformat() if reservation.end_date else "",
        "party_size": reservation.party_size,
        "status": reservation.status.value,
        "total_amount": f"{reservation.total_amount:.2f}",
        "created_at": reservation.created_at.isoformat() if reservation.created_at else "",
    }


def reservations_to_csv(reservations: Iterable[Reservation]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS)
    writer.writeheader()
    for reservation in reservations:
        writer.writerow(_row(reservation))
    return buffer.getvalue()


def reservations_to_pdf(
    reservations: List[Reservation],
    title: str = "Reservations report",
    generated_at: Optional[datetime] = None,
) -> bytes:
    """Tabular PDF report with a revenue total"""
    generated_at = generated_at or datetime.utcnow()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=30,
        leftMargin=30,
        topMargin=30,
        bottomMargin=30,
    )
    styles = getSampleStyleSheet()

    story = [
        Paragraph(f"<b>{title}</b>", styles["Title"]),
        Paragraph(f"Generated {generated_at:%d/%m/%Y %H:%M} UTC", styles["Normal"]),
        Spacer(1, 12),
    ]

    data = [PDF_COLUMNS]
    total = 0
    for reservation in reservations:
        data.append([
            reservation.reservation_code,
            reservation.client_name,
            reservation.place.name if reservation.place else "",
            f"{reservation.start_date:%d/%m/%Y}",
            STATUS_LABELS[reservation.status],
            f"{reservation.total_amount:,.2f}",
        ])
        total += reservation.total_amount
    data.append(["", "", "", "", "Total", f"{total:,.2f}"])

    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#00695c")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("ALIGN", (-1, 0), (-1, -1), "RIGHT"),
        ("GRID", (0, 0), (-1, -2), 0.25, colors.grey),
        ("ROWBACKGROUNDS", (0, 1), (-1, -2), [colors.white, colors.HexColor("#f8f9fa")]),
    ]))
    story.append(table)

    story.append(Spacer(1, 12))
    story.append(Paragraph(f"{len(reservations)} reservation(s)", styles["Normal"]))

    doc.build(story)
    return buffer.getvalue()
