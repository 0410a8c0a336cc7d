import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum as SAEnum
from sqlalchemy.sql import func

from pharmatrace.db.base import Base


class UserRole(str, enum.Enum):
    MANUFACTURER = "manufacturer"
    PHARMACIST = "pharmacist"


class Profile(Base):
    """An account known to the identity provider. Role decides what it may do."""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    organization_name = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=False, unique=True)
    phone_number = Column(String(64), nullable=True)
    role = Column(
        SAEnum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
