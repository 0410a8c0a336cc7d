"""
Batches: creation and manufacturer status updates.
Pharmacist receipt lives under /pharmacy.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pharmatrace.api.deps import get_db, get_current_identity
from pharmatrace.core.identity import Identity
from pharmatrace.schemas.batch import BatchCreate, BatchHistoryEntry, BatchResponse, BatchStatusUpdate
from pharmatrace.services import batch_service

router = APIRouter()


@router.get("", response_model=list[BatchResponse])
def list_batches(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    """The manufacturer's batches, newest first."""
    return [BatchResponse.from_batch(b) for b in batch_service.list_manufacturer_batches(db, identity)]


@router.post("", response_model=BatchResponse, status_code=201)
def create_batch(
    data: BatchCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Create a batch; the qr_code is generated server-side. 409 means retry."""
    return BatchResponse.from_batch(batch_service.create_batch(db, identity, data))


@router.patch("/{batch_id}/status", response_model=BatchResponse)
def update_batch_status(
    batch_id: int,
    data: BatchStatusUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return BatchResponse.from_batch(batch_service.update_status(db, identity, batch_id, data))


@router.get("/{batch_id}/history", response_model=list[BatchHistoryEntry])
def batch_history(
    batch_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return batch_service.get_batch_history(db, identity, batch_id)
