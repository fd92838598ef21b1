"""User model for API authentication"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Enum, Uuid
import enum

from tourism.database import Base


class UserRole(str, enum.Enum):
    """User roles"""
    ADMINISTRATOR = "administrator"
    CLIENT = "client"


class Capability(str, enum.Enum):
    """Actions gated by role"""
    MANAGE_CATALOGUE = "manage_catalogue"
    MANAGE_ALERTS = "manage_alerts"
    CREATE_RESERVATION = "create_reservation"
    BOOK_CONFIRMED = "book_confirmed"
    EDIT_RESERVATION = "edit_reservation"
    DELETE_RESERVATION = "delete_reservation"
    VIEW_ALL_RESERVATIONS = "view_all_reservations"
    CONFIRM_RESERVATION = "confirm_reservation"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    COMPLETE_RESERVATION = "complete_reservation"
    CANCEL_RESERVATION = "cancel_reservation"
    EXPORT_REPORTS = "export_reports"


ROLE_CAPABILITIES = {
    UserRole.ADMINISTRATOR: frozenset(Capability),
    UserRole.CLIENT: frozenset({
        Capability.CREATE_RESERVATION,
        Capability.CANCEL_RESERVATION,
    }),
}


class User(Base):
    """API users: administrators and clients"""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Authentication
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    # Profile
    full_name = Column(String(255))
    phone = Column(String(20))

    # Role
    role = Column(Enum(UserRole), default=UserRole.CLIENT, nullable=False)

    # Status
    is_active = Column(Boolean, default=True)

    # Tokens
    refresh_token = Column(String(500))

    # Timestamps
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def can(self, capability: Capability) -> bool:
        """Check whether the user's role grants a capability"""
        return capability in ROLE_CAPABILITIES.get(self.role, frozenset())

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMINISTRATOR

    def owns(self, reservation) -> bool:
        """Clients own reservations booked under their email"""
        return (reservation.client_email or "").lower() == (self.email or "").lower()
