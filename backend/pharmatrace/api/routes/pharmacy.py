"""Pharmacy: scan, confirm receipt, received batches and the inventory view."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pharmatrace.api.deps import get_db, get_current_identity
from pharmatrace.core.identity import Identity
from pharmatrace.schemas.batch import BatchResponse, ScanResponse
from pharmatrace.schemas.inventory import MedicineStock
from pharmatrace.services import batch_service, inventory_service

router = APIRouter()


@router.get("/scan/{qr_code}", response_model=BatchResponse)
def scan(qr_code: str, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    """Preview the scanned batch before confirming delivery."""
    return BatchResponse.from_batch(batch_service.scan_batch(db, identity, qr_code))


@router.post("/scan/{qr_code}/confirm", response_model=ScanResponse)
def confirm(qr_code: str, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    """Confirm delivery. A repeat scan answers 200 with outcome already_received."""
    result = batch_service.confirm_delivery(db, identity, qr_code)
    return ScanResponse(
        outcome=result.outcome,
        message=result.message,
        batch=BatchResponse.from_batch(result.batch),
    )


@router.get("/received", response_model=list[BatchResponse])
def received(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return [BatchResponse.from_batch(b) for b in batch_service.list_received_batches(db, identity)]


@router.get("/inventory", response_model=list[MedicineStock])
def inventory(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    """Aggregated stock per medicine, recomputed on every call."""
    return inventory_service.get_pharmacist_inventory(db, identity)
