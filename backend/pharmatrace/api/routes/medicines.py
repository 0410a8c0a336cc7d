"""Medicines: a manufacturer's product catalogue."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pharmatrace.api.deps import get_db, get_current_identity
from pharmatrace.core.identity import Identity
from pharmatrace.schemas.medicine import MedicineCreate, MedicineResponse
from pharmatrace.services import medicine_service

router = APIRouter()


@router.get("", response_model=list[MedicineResponse])
def list_medicines(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return medicine_service.list_medicines(db, identity)


@router.post("", response_model=MedicineResponse, status_code=201)
def create_medicine(
    data: MedicineCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return medicine_service.create_medicine(db, identity, data)
