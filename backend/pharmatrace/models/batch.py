"""
Batch: one manufactured lot of a medicine, tracked by its qr_code.
Status flow: created -> in_transit -> delivered -> received (pharmacist scan).
"""
import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pharmatrace.db.base import Base


class BatchStatus(str, enum.Enum):
    CREATED = "created"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    RECEIVED = "received"

    @property
    def label(self) -> str:
        """Display label: in_transit -> "In Transit"."""
        return " ".join(word[:1].upper() + word[1:] for word in self.value.split("_"))


batch_status_type = SAEnum(
    BatchStatus, name="batch_status", values_callable=lambda e: [m.value for m in e]
)


class Batch(Base):
    __tablename__ = "batches"
    __table_args__ = (CheckConstraint("quantity > 0", name="ck_batches_quantity_positive"),)

    id = Column(Integer, primary_key=True, index=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False, index=True)
    manufacturer_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    batch_number = Column(String(128), nullable=False)
    quantity = Column(Integer, nullable=False)
    qr_code = Column(String(64), nullable=False, unique=True, index=True)  # immutable after insert
    manufacturing_date = Column(Date, nullable=False)
    expiry_date = Column(Date, nullable=False)
    status = Column(batch_status_type, nullable=False, default=BatchStatus.CREATED, index=True)
    current_location = Column(String(255), nullable=True)
    # Unset until a pharmacist confirms delivery
    pharmacist_id = Column(Integer, ForeignKey("profiles.id"), nullable=True, index=True)
    delivery_confirmed_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    medicine = relationship("Medicine", backref="batches")
    manufacturer = relationship("Profile", foreign_keys=[manufacturer_id])
    pharmacist = relationship("Profile", foreign_keys=[pharmacist_id])
