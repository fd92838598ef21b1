"""Reservation model"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, Integer, Date, DateTime, Time, ForeignKey, Text, Numeric,
    Boolean, Enum, Uuid, CheckConstraint,
)
from sqlalchemy.orm import relationship

from tourism.database import Base


class ReservationStatus(str, enum.Enum):
    """Reservation lifecycle states"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Reservations that still hold (or will hold) a place
ACTIVE_STATUSES = (
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
    ReservationStatus.CHECKED_IN,
)


class Reservation(Base):
    """Booking of a place by a client"""
    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("party_size > 0", name="ck_reservations_party_size_positive"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    reservation_code = Column(String(15), unique=True, nullable=False)
    place_id = Column(Uuid, ForeignKey("places.id"), nullable=False)

    # Client information
    client_name = Column(String(200), nullable=False)
    client_email = Column(String(200), nullable=False, index=True)
    client_phone = Column(String(20))

    # Stay
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date)
    start_time = Column(Time)
    end_time = Column(Time)
    party_size = Column(Integer, nullable=False)

    # Pricing (price snapshot taken at booking time)
    place_price = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)

    # Status
    status = Column(Enum(ReservationStatus), default=ReservationStatus.PENDING, nullable=False)
    check_in_date = Column(DateTime)
    check_out_date = Column(DateTime)

    notes = Column(Text)
    alert_sent = Column(Boolean, default=False, nullable=False)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    place = relationship("Place", back_populates="reservations")
    alerts = relationship(
        "Alert",
        back_populates="reservation",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def last_day(self):
        """Last date covered by the stay"""
        return self.end_date or self.start_date
