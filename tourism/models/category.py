"""Category model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.orm import relationship

from tourism.database import Base


class Category(Base):
    """Grouping label for places (hotels, tours, restaurants)"""
    __tablename__ = "categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(String(500))

    # Presentation only
    icon = Column(String(50))
    color = Column(String(20))

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    places = relationship("Place", back_populates="category")
