"""
Batch lifecycle state machine.

================================================================================
TRANSITION RULES
================================================================================

    created -> in_transit -> delivered -> received

Manufacturer moves (status dropdown on the manufacturer's batch list):
- only on batches the manufacturer owns
- forward only, skipping allowed (created -> delivered is fine)
- "received" is reserved for the pharmacist's scan-confirm
- re-selecting the current status is a no-op
With settings.ALLOW_BACKWARD_TRANSITIONS the forward-only and reserved
"received" rules are lifted and any of the four values may be set.

Pharmacist scan-confirm:
- any status -> received
- binds pharmacist_id, delivery_confirmed_at and the pharmacy location
- on an already received batch it is reported as ALREADY_RECEIVED, not an error

Functions here only decide. They never touch the database; the batch
service applies the resulting Transition with a conditional UPDATE so a
stale read cannot double-apply it.
================================================================================
"""
import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from pharmatrace.core.config import settings
from pharmatrace.core.exceptions import NotFound, PermissionDenied, TransitionNotAllowed
from pharmatrace.core.identity import Identity
from pharmatrace.models.batch import BatchStatus

LIFECYCLE_ORDER = (
    BatchStatus.CREATED,
    BatchStatus.IN_TRANSIT,
    BatchStatus.DELIVERED,
    BatchStatus.RECEIVED,
)


class ScanOutcome(str, enum.Enum):
    RECEIVED = "received"
    ALREADY_RECEIVED = "already_received"


@dataclass(frozen=True)
class Transition:
    """A validated status change, ready to be persisted."""
    batch_id: int
    actor: Identity
    previous_status: BatchStatus
    status: BatchStatus
    location: Optional[str] = None
    notes: Optional[str] = None
    pharmacist_id: Optional[int] = None
    delivery_confirmed_at: Optional[datetime] = None

    @property
    def changed(self) -> bool:
        return self.previous_status != self.status

    def column_values(self) -> dict:
        """Batch columns this transition writes. Unset fields are left untouched."""
        values = {"status": self.status}
        if self.location:
            values["current_location"] = self.location
        if self.pharmacist_id is not None:
            values["pharmacist_id"] = self.pharmacist_id
        if self.delivery_confirmed_at is not None:
            values["delivery_confirmed_at"] = self.delivery_confirmed_at
        return values


def status_label(status) -> str:
    """in_transit -> "In Transit". Accepts a BatchStatus or its raw value."""
    return BatchStatus(status).label


def rank(status: BatchStatus) -> int:
    return LIFECYCLE_ORDER.index(status)


def validate_manufacturer_transition(
    actor: Identity,
    batch,
    requested: BatchStatus,
    location: Optional[str] = None,
    notes: Optional[str] = None,
    allow_backward: Optional[bool] = None,
) -> Transition:
    """
    Check a manufacturer-initiated status change against the rules above.

    Raises PermissionDenied for non-manufacturers, NotFound when the batch
    belongs to another manufacturer, TransitionNotAllowed for backward or
    reserved moves. Returns a Transition (possibly a no-op).
    """
    if not actor.is_manufacturer:
        raise PermissionDenied("Only manufacturers can update batch status")
    if batch.manufacturer_id != actor.user_id:
        raise NotFound("Batch")

    requested = BatchStatus(requested)
    current = BatchStatus(batch.status)
    if allow_backward is None:
        allow_backward = settings.ALLOW_BACKWARD_TRANSITIONS

    if requested != current and not allow_backward:
        if requested == BatchStatus.RECEIVED:
            raise TransitionNotAllowed(
                current, requested, "receipt is confirmed by the pharmacist's scan"
            )
        if rank(requested) < rank(current):
            raise TransitionNotAllowed(current, requested, "batches only move forward")

    return Transition(
        batch_id=batch.id,
        actor=actor,
        previous_status=current,
        status=requested,
        location=location,
        notes=notes,
    )


def plan_delivery_confirmation(
    actor: Identity,
    batch,
    now: Optional[datetime] = None,
    location: Optional[str] = None,
) -> tuple[ScanOutcome, Optional[Transition]]:
    """
    Decide the scan-confirm for a batch found by its qr_code.

    Returns (ALREADY_RECEIVED, None) when nothing should change, otherwise
    (RECEIVED, transition). The database's conditional update has the
    final say, since `batch` may be a stale read.
    """
    if not actor.is_pharmacist:
        raise PermissionDenied("Only pharmacists can confirm deliveries")

    current = BatchStatus(batch.status)
    if current == BatchStatus.RECEIVED:
        return ScanOutcome.ALREADY_RECEIVED, None

    transition = Transition(
        batch_id=batch.id,
        actor=actor,
        previous_status=current,
        status=BatchStatus.RECEIVED,
        location=location or settings.PHARMACY_LOCATION,
        pharmacist_id=actor.user_id,
        delivery_confirmed_at=now or datetime.now(timezone.utc),
    )
    return ScanOutcome.RECEIVED, transition
