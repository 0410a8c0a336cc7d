from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional
from datetime import date, datetime

from pharmatrace.models.batch import Batch, BatchStatus
from pharmatrace.services.lifecycle import ScanOutcome


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class BatchCreate(BaseModel):
    """Batch input from a manufacturer. qr_code and status are never client-supplied."""
    medicine_id: Optional[int] = None
    batch_number: str = ""
    quantity: int
    manufacturing_date: date
    expiry_date: date
    current_location: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("batch_number")
    @classmethod
    def strip_batch_number(cls, v: str) -> str:
        return v.strip()

    @field_validator("current_location", "notes")
    @classmethod
    def optional_text(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class BatchStatusUpdate(BaseModel):
    status: BatchStatus
    current_location: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("current_location", "notes")
    @classmethod
    def optional_text(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class BatchResponse(BaseModel):
    id: int
    medicine_id: int
    manufacturer_id: int
    batch_number: str
    quantity: int
    qr_code: str
    manufacturing_date: date
    expiry_date: date
    status: BatchStatus
    status_label: str
    current_location: Optional[str] = None
    pharmacist_id: Optional[int] = None
    delivery_confirmed_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    # Joined medicine details for list and scan views
    medicine_name: Optional[str] = None
    dosage_form: Optional[str] = None
    strength: Optional[str] = None

    @classmethod
    def from_batch(cls, batch: Batch) -> "BatchResponse":
        medicine = batch.medicine
        return cls(
            id=batch.id,
            medicine_id=batch.medicine_id,
            manufacturer_id=batch.manufacturer_id,
            batch_number=batch.batch_number,
            quantity=batch.quantity,
            qr_code=batch.qr_code,
            manufacturing_date=batch.manufacturing_date,
            expiry_date=batch.expiry_date,
            status=batch.status,
            status_label=BatchStatus(batch.status).label,
            current_location=batch.current_location,
            pharmacist_id=batch.pharmacist_id,
            delivery_confirmed_at=batch.delivery_confirmed_at,
            notes=batch.notes,
            created_at=batch.created_at,
            medicine_name=medicine.name if medicine else None,
            dosage_form=medicine.dosage_form if medicine else None,
            strength=medicine.strength if medicine else None,
        )


class BatchHistoryEntry(BaseModel):
    id: int
    batch_id: int
    status: BatchStatus
    changed_by: int
    location: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ScanResponse(BaseModel):
    """Result of a scan-confirm. ALREADY_RECEIVED is a normal outcome, not an error."""
    outcome: ScanOutcome
    message: str
    batch: BatchResponse
