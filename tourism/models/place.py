"""Place model"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Numeric, Enum, Uuid
from sqlalchemy.orm import relationship

from tourism.database import Base


class PlaceStatus(str, enum.Enum):
    """Operational status of a place"""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"


class Place(Base):
    """Bookable tourism entity"""
    __tablename__ = "places"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String(10), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(String(1000))
    category_id = Column(Uuid, ForeignKey("categories.id"), nullable=False)

    price = Column(Numeric(10, 2), nullable=False)
    capacity = Column(Integer)  # NULL means no ceiling
    location = Column(String(300))

    status = Column(Enum(PlaceStatus), default=PlaceStatus.AVAILABLE, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    category = relationship("Category", back_populates="places")
    reservations = relationship("Reservation", back_populates="place")
