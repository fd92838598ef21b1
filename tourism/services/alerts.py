"""Reservation alerts: automatic reminders, manual alerts and the reminder sweep"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from tourism.config import settings
from tourism.models.alert import Alert, AlertType
from tourism.models.reservation import Reservation, ReservationStatus
from tourism.services.errors import NotFound
from tourism.services.notifications import Notifier, render_reminder_email, reminder_subject

logger = structlog.get_logger()


def reminder_date(start_date: date) -> date:
    return start_date - timedelta(days=settings.reminder_days_before)


def schedule_reservation_reminder(
    db: AsyncSession,
    reservation: Reservation,
    today: Optional[date] = None,
) -> Optional[Alert]:
    """Attach the automatic reminder to a new reservation.

    Nothing is scheduled when the reminder date has already passed. The alert
    is added to the session; the caller commits it with the reservation,
    which must already be flushed.
    """
    today = today or date.today()
    alert_date = reminder_date(reservation.start_date)
    if alert_date < today:
        return None

    alert = Alert(
        reservation_id=reservation.id,
        type=AlertType.RESERVATION_REMINDER,
        title="Reservation reminder",
        message=(
            f"Your reservation {reservation.reservation_code} is scheduled for "
            f"{reservation.start_date:%d/%m/%Y}"
        ),
        alert_date=alert_date,
        is_sent=False,
    )
    db.add(alert)
    return alert


def record_cancellation_notice(
    db: AsyncSession,
    reservation: Reservation,
    reason: str,
    today: Optional[date] = None,
) -> Alert:
    alert = Alert(
        reservation_id=reservation.id,
        type=AlertType.CANCELLATION_NOTICE,
        title="Reservation cancelled",
        message=f"Reservation {reservation.reservation_code} was cancelled: {reason}",
        alert_date=today or date.today(),
        is_sent=False,
    )
    db.add(alert)
    return alert


async def get_alert(db: AsyncSession, alert_id: UUID) -> Alert:
    alert = await db.get(Alert, alert_id)
    if alert is None:
        raise NotFound("Alert not found")
    return alert


async def create_alert(
    db: AsyncSession,
    *,
    reservation_id: UUID,
    type: AlertType,
    title: str,
    message: str,
    alert_date: date,
) -> Alert:
    """Create an alert by hand for an existing reservation"""
    reservation = await db.get(Reservation, reservation_id)
    if reservation is None:
        raise NotFound("Reservation not found")

    alert = Alert(
        reservation_id=reservation.id,
        type=type,
        title=title,
        message=message,
        alert_date=alert_date,
        is_sent=False,
    )
    db.add(alert)
    await db.commit()
    await db.refresh(alert)

    logger.info(
        "Alert created",
        alert_id=str(alert.id),
        reservation_code=reservation.reservation_code,
        type=type.value,
    )
    return alert


async def list_alerts(
    db: AsyncSession,
    *,
    type: Optional[AlertType] = None,
    is_sent: Optional[bool] = None,
    reservation_id: Optional[UUID] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Alert]:
    query = select(Alert)
    if type is not None:
        query = query.where(Alert.type == type)
    if is_sent is not None:
        query = query.where(Alert.is_sent == is_sent)
    if reservation_id is not None:
        query = query.where(Alert.reservation_id == reservation_id)

    query = query.order_by(Alert.alert_date.desc(), Alert.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def due_alerts(db: AsyncSession, today: Optional[date] = None) -> List[Alert]:
    """Unsent alerts whose date has arrived"""
    today = today or date.today()
    result = await db.execute(
        select(Alert)
        .where(Alert.is_sent == False, Alert.alert_date <= today)  # noqa: E712
        .order_by(Alert.created_at.desc())
    )
    return list(result.scalars().all())


async def alert_stats(db: AsyncSession, today: Optional[date] = None) -> dict:
    today = today or date.today()
    pending = await db.execute(select(func.count(Alert.id)).where(Alert.is_sent == False))  # noqa: E712
    sent = await db.execute(select(func.count(Alert.id)).where(Alert.is_sent == True))  # noqa: E712
    due = await db.execute(
        select(func.count(Alert.id)).where(Alert.is_sent == False, Alert.alert_date <= today)  # noqa: E712
    )
    return {
        "pending": pending.scalar() or 0,
        "sent": sent.scalar() or 0,
        "due": due.scalar() or 0,
    }


async def set_alert_sent(db: AsyncSession, alert_id: UUID, sent: bool) -> Alert:
    """Flip an alert between sent and unsent"""
    alert = await get_alert(db, alert_id)
    alert.is_sent = sent
    alert.sent_at = datetime.utcnow() if sent else None
    await db.commit()
    await db.refresh(alert)
    return alert


async def delete_alert(db: AsyncSession, alert_id: UUID) -> None:
    alert = await get_alert(db, alert_id)
    await db.delete(alert)
    await db.commit()


@dataclass
class DispatchSummary:
    sent: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.sent) + len(self.failed)


async def dispatch_due_reminders(
    db: AsyncSession,
    notifier: Notifier,
    today: Optional[date] = None,
) -> DispatchSummary:
    """Email clients whose reservation starts in ``reminder_days_before`` days.

    A reservation is only flagged ``alert_sent`` after a successful dispatch,
    so failures are picked up again by the next sweep.
    """
    today = today or date.today()
    target_date = today + timedelta(days=settings.reminder_days_before)

    result = await db.execute(
        select(Reservation)
        .where(
            Reservation.start_date == target_date,
            Reservation.alert_sent == False,  # noqa: E712
            Reservation.status != ReservationStatus.CANCELLED,
        )
        .options(selectinload(Reservation.place))
    )
    reservations = result.scalars().all()

    summary = DispatchSummary()
    for reservation in reservations:
        code = reservation.reservation_code
        try:
            delivered = await notifier.send(
                reservation.client_email,
                reminder_subject(reservation),
                render_reminder_email(reservation),
            )
        except Exception as e:
            logger.error("Failed to send reservation reminder", reservation_code=code, error=str(e))
            delivered = False

        if not delivered:
            summary.failed.append(code)
            continue

        sent_at = datetime.utcnow()
        reservation.alert_sent = True
        await db.execute(
            update(Alert)
            .where(
                Alert.reservation_id == reservation.id,
                Alert.type == AlertType.RESERVATION_REMINDER,
                Alert.is_sent == False,  # noqa: E712
            )
            .values(is_sent=True, sent_at=sent_at)
        )
        await db.commit()

        summary.sent.append(code)
        logger.info("Sent reservation reminder", reservation_code=code)

    logger.info(
        "Reservation reminder sweep finished",
        target_date=target_date.isoformat(),
        sent=len(summary.sent),
        failed=len(summary.failed),
    )
    return summary
