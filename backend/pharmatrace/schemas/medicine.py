from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional
from datetime import datetime


class MedicineCreate(BaseModel):
    name: str
    dosage_form: str  # Tablet, Capsule, Syrup...
    strength: str  # 500mg
    generic_name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name", "dosage_form", "strength")
    @classmethod
    def strip_required(cls, v: str) -> str:
        # Emptiness is reported by the service with the offending field
        return v.strip()

    @field_validator("generic_name", "description")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class MedicineResponse(BaseModel):
    id: int
    manufacturer_id: int
    name: str
    generic_name: Optional[str] = None
    description: Optional[str] = None
    dosage_form: str
    strength: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
