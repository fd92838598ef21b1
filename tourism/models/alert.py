"""Alert model"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Date, DateTime, ForeignKey, Enum, Uuid
from sqlalchemy.orm import relationship

from tourism.database import Base


class AlertType(str, enum.Enum):
    """Kinds of reservation alerts"""
    RESERVATION_REMINDER = "reservation_reminder"
    CHECK_IN_REMINDER = "check_in_reminder"
    CHECK_OUT_REMINDER = "check_out_reminder"
    PAYMENT_REMINDER = "payment_reminder"
    CANCELLATION_NOTICE = "cancellation_notice"


class Alert(Base):
    """Reminder notification tied to a reservation"""
    __tablename__ = "alerts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    reservation_id = Column(
        Uuid, ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False, index=True
    )

    type = Column(Enum(AlertType), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(String(1000), nullable=False)
    alert_date = Column(Date, nullable=False)

    is_sent = Column(Boolean, default=False, nullable=False)
    sent_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    reservation = relationship("Reservation", back_populates="alerts")
