from pydantic import BaseModel
from typing import Optional
from datetime import date

from pharmatrace.services.expiry import ExpiryStatus


class BatchStock(BaseModel):
    batch_number: str
    quantity: int
    expiry_date: date
    manufacturing_date: date


class MedicineStock(BaseModel):
    """
    One row of a pharmacist's inventory: every received batch of a medicine.
    Derived on demand, never stored.
    """
    medicine_id: int
    medicine_name: str
    generic_name: Optional[str] = None
    strength: str
    dosage_form: str
    total_quantity: int
    batches: list[BatchStock]
    nearest_expiry: date
    expiry_status: Optional[ExpiryStatus] = None
