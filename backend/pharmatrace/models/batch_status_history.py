"""Append-only custody log. One row per applied status change, creation included."""
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pharmatrace.db.base import Base
from pharmatrace.models.batch import batch_status_type


class BatchStatusHistory(Base):
    __tablename__ = "batch_status_history"

    id = Column(Integer, primary_key=True, index=True)
    batch_id = Column(Integer, ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(batch_status_type, nullable=False)
    changed_by = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    location = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    batch = relationship("Batch", backref="history")
