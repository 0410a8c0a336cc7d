"""
Batch creation and custody transitions.

Every write here is one transaction: the batch columns and the matching
BatchStatusHistory row commit together or not at all. Transitions are
applied with a conditional UPDATE guarded by the status that was
validated, so two concurrent requests cannot both win.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from pharmatrace.core.audit import AuditLog
from pharmatrace.core.exceptions import NotFound, PermissionDenied, PersistenceFailure, ValidationError
from pharmatrace.core.identity import Identity
from pharmatrace.db.guard import storage_errors
from pharmatrace.models.batch import Batch, BatchStatus
from pharmatrace.models.batch_status_history import BatchStatusHistory
from pharmatrace.models.medicine import Medicine
from pharmatrace.schemas.batch import BatchCreate, BatchStatusUpdate
from pharmatrace.services.identifiers import generate_qr_code
from pharmatrace.services.lifecycle import (
    ScanOutcome,
    Transition,
    plan_delivery_confirmation,
    validate_manufacturer_transition,
)
from pharmatrace.services.medicine_service import require_manufacturer
from pharmatrace.services.notifications import BatchChange, ChangeNotifier, inventory_notifier

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    outcome: ScanOutcome
    batch: Batch

    @property
    def message(self) -> str:
        if self.outcome == ScanOutcome.ALREADY_RECEIVED:
            return "Batch already received"
        return "Delivery confirmed successfully"


def validate_batch_input(data: BatchCreate):
    """Reject malformed input before anything is written."""
    if data.medicine_id is None:
        raise ValidationError("medicine_id", "Medicine is required")
    if not data.batch_number:
        raise ValidationError("batch_number", "Batch number is required")
    if data.quantity is None or data.quantity <= 0:
        raise ValidationError("quantity", "Quantity must be positive")
    if data.expiry_date < data.manufacturing_date:
        raise ValidationError("expiry_date", "Expiry date cannot be before manufacturing date")


def _load_batch(db: Session, **filters) -> Optional[Batch]:
    with storage_errors(db, "load batch"):
        return (
            db.query(Batch)
            .options(joinedload(Batch.medicine))
            .filter_by(**filters)
            .first()
        )


def _history_row(transition: Transition) -> BatchStatusHistory:
    return BatchStatusHistory(
        batch_id=transition.batch_id,
        status=transition.status,
        changed_by=transition.actor.user_id,
        location=transition.location,
        notes=transition.notes,
    )


def _apply(db: Session, transition: Transition, guard) -> bool:
    """
    Write transition + history row if `guard` still holds. Returns False
    (and rolls back) when another writer got there first.
    """
    result = db.execute(
        update(Batch)
        .where(Batch.id == transition.batch_id, guard)
        .values(**transition.column_values())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        return False
    db.add(_history_row(transition))
    db.commit()
    return True


def _notify(notifier: ChangeNotifier, batch: Batch, transition: Transition):
    if batch.pharmacist_id is None:
        return
    notifier.publish(
        BatchChange(
            batch_id=batch.id,
            pharmacist_id=batch.pharmacist_id,
            previous_status=transition.previous_status,
            status=transition.status,
        )
    )


def create_batch(
    db: Session,
    actor: Identity,
    data: BatchCreate,
    qr_factory: Callable[[], str] = generate_qr_code,
) -> Batch:
    """
    Create a batch in status `created` with a freshly generated qr_code.

    A qr_code collision surfaces as PersistenceFailure(conflict=True);
    calling again draws a new code. No retry happens here.
    """
    require_manufacturer(actor, "create batches")
    validate_batch_input(data)

    with storage_errors(db, "load medicine"):
        medicine = (
            db.query(Medicine)
            .filter(Medicine.id == data.medicine_id, Medicine.manufacturer_id == actor.user_id)
            .first()
        )
    if not medicine:
        raise ValidationError("medicine_id", "Medicine not found")

    batch = Batch(
        medicine_id=medicine.id,
        manufacturer_id=actor.user_id,
        batch_number=data.batch_number,
        quantity=data.quantity,
        qr_code=qr_factory(),
        manufacturing_date=data.manufacturing_date,
        expiry_date=data.expiry_date,
        status=BatchStatus.CREATED,
        current_location=data.current_location,
        notes=data.notes,
    )
    with storage_errors(db, "create batch"):
        db.add(batch)
        db.flush()
        db.add(
            BatchStatusHistory(
                batch_id=batch.id,
                status=BatchStatus.CREATED,
                changed_by=actor.user_id,
                location=data.current_location,
                notes=data.notes,
            )
        )
        db.commit()
    db.refresh(batch)

    logger.info(f"Batch {batch.id} ({batch.batch_number}) created with qr_code {batch.qr_code}")
    AuditLog.log_action(
        "create", "batch", batch.id, actor,
        changes={"qr_code": batch.qr_code, "medicine_id": batch.medicine_id, "quantity": batch.quantity},
    )
    return batch


def list_manufacturer_batches(db: Session, actor: Identity) -> list[Batch]:
    """A manufacturer's batches with their medicine, newest first."""
    require_manufacturer(actor, "list batches")
    with storage_errors(db, "list batches"):
        return (
            db.query(Batch)
            .options(joinedload(Batch.medicine))
            .filter(Batch.manufacturer_id == actor.user_id)
            .order_by(Batch.created_at.desc(), Batch.id.desc())
            .all()
        )


def update_status(
    db: Session,
    actor: Identity,
    batch_id: int,
    data: BatchStatusUpdate,
    notifier: ChangeNotifier = inventory_notifier,
    allow_backward: Optional[bool] = None,
) -> Batch:
    """
    Manufacturer-initiated status change. See lifecycle for the rules.

    Re-selecting the current status writes nothing: current_location and
    notes sent with it are ignored and no history row is added. Location
    only changes together with a status.
    """
    batch = _load_batch(db, id=batch_id)
    if not batch:
        raise NotFound("Batch")

    try:
        transition = validate_manufacturer_transition(
            actor, batch, data.status,
            location=data.current_location, notes=data.notes, allow_backward=allow_backward,
        )
    except (PermissionDenied, NotFound) as e:
        AuditLog.log_access_denied("transition", "batch", batch_id, actor.user_id, e.message)
        raise

    if not transition.changed:
        logger.info(
            f"Batch {batch_id} already {batch.status.value}; location/notes ignored, nothing to do"
        )
        return batch

    with storage_errors(db, "update batch status"):
        applied = _apply(db, transition, Batch.status == transition.previous_status)
    if not applied:
        raise PersistenceFailure(
            "Batch was changed by someone else. Reload and try again.", conflict=True
        )

    db.refresh(batch)
    logger.info(
        f"Batch {batch_id} moved {transition.previous_status.value} -> {transition.status.value} "
        f"by manufacturer {actor.user_id}"
    )
    AuditLog.log_transition(
        batch_id, actor, transition.previous_status.value, transition.status.value,
        location=transition.location, notes=transition.notes,
    )
    _notify(notifier, batch, transition)
    return batch


def scan_batch(db: Session, actor: Identity, qr_code: str) -> Batch:
    """Pharmacist preview of a batch by its qr_code, before confirming."""
    if not actor.is_pharmacist:
        raise PermissionDenied("Only pharmacists can scan batches")
    batch = _load_batch(db, qr_code=qr_code.strip())
    if not batch:
        raise NotFound("Batch")
    return batch


def confirm_delivery(
    db: Session,
    actor: Identity,
    qr_code: str,
    now: Optional[datetime] = None,
    notifier: ChangeNotifier = inventory_notifier,
) -> ScanResult:
    """
    Scan-confirm: move the batch with this qr_code to `received`.

    Confirming twice never rebinds the pharmacist or the timestamp; the
    second call reports ALREADY_RECEIVED.
    """
    if not actor.is_pharmacist:
        raise PermissionDenied("Only pharmacists can confirm deliveries")

    qr_code = qr_code.strip()
    batch = _load_batch(db, qr_code=qr_code)
    if not batch:
        AuditLog.log_scan(qr_code, actor, "not_found")
        raise NotFound("Batch")

    outcome, transition = plan_delivery_confirmation(actor, batch, now=now)
    if transition is not None:
        with storage_errors(db, "confirm delivery"):
            applied = _apply(db, transition, Batch.status != BatchStatus.RECEIVED)
        if not applied:
            # Lost the race: someone received it between our read and write
            outcome = ScanOutcome.ALREADY_RECEIVED
        db.refresh(batch)

    AuditLog.log_scan(qr_code, actor, outcome.value, batch_id=batch.id)
    if outcome == ScanOutcome.RECEIVED:
        logger.info(f"Batch {batch.id} received by pharmacist {actor.user_id}")
        AuditLog.log_transition(
            batch.id, actor, transition.previous_status.value, transition.status.value,
            location=transition.location,
        )
        _notify(notifier, batch, transition)
    else:
        logger.info(f"Batch {batch.id} already received; scan by pharmacist {actor.user_id} ignored")

    return ScanResult(outcome=outcome, batch=batch)


def list_received_batches(db: Session, actor: Identity) -> list[Batch]:
    """Batches this pharmacist has confirmed, most recent first."""
    if not actor.is_pharmacist:
        raise PermissionDenied("Only pharmacists have received batches")
    with storage_errors(db, "list received batches"):
        return (
            db.query(Batch)
            .options(joinedload(Batch.medicine))
            .filter(Batch.pharmacist_id == actor.user_id)
            .order_by(Batch.delivery_confirmed_at.desc(), Batch.id.desc())
            .all()
        )


def get_batch_history(db: Session, actor: Identity, batch_id: int) -> list[BatchStatusHistory]:
    """Custody log, oldest first. Visible to the manufacturer and the receiving pharmacist."""
    batch = _load_batch(db, id=batch_id)
    if not batch or actor.user_id not in (batch.manufacturer_id, batch.pharmacist_id):
        if batch:
            AuditLog.log_access_denied("read", "batch_history", batch_id, actor.user_id, "Not a custodian")
        raise NotFound("Batch")
    with storage_errors(db, "load batch history"):
        return (
            db.query(BatchStatusHistory)
            .filter(BatchStatusHistory.batch_id == batch_id)
            .order_by(BatchStatusHistory.created_at.asc(), BatchStatusHistory.id.asc())
            .all()
        )
