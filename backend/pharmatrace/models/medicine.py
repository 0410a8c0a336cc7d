from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pharmatrace.db.base import Base


class Medicine(Base):
    """
    A product line owned by one manufacturer.

    No delete path: once batches reference a medicine it is treated as fixed.
    """
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, index=True)
    manufacturer_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    generic_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    dosage_form = Column(String(64), nullable=False)  # Tablet, Syrup, Injection...
    strength = Column(String(64), nullable=False)  # 500mg, 5ml...
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    manufacturer = relationship("Profile")
