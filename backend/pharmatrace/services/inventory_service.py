"""
Pharmacist inventory: received batches folded into per-medicine stock rows.

The view is never stored. It is recomputed from a fresh read of the
pharmacist's received batches whenever the caller asks, typically on page
load and again whenever the change notifier reports a new receipt.
"""
import logging
from datetime import date
from typing import Callable, Iterable, Optional

from sqlalchemy.orm import Session, joinedload

from pharmatrace.core.exceptions import PermissionDenied
from pharmatrace.core.identity import Identity
from pharmatrace.db.guard import storage_errors
from pharmatrace.models.batch import Batch, BatchStatus
from pharmatrace.schemas.inventory import BatchStock, MedicineStock
from pharmatrace.services.expiry import classify
from pharmatrace.services.notifications import BatchChange, ChangeNotifier, inventory_notifier

logger = logging.getLogger(__name__)


def aggregate_received_batches(batches: Iterable[Batch], today: Optional[date] = None) -> list[MedicineStock]:
    """
    Group received batches by medicine.

    - total_quantity is the sum of the group's batch quantities
    - batches keep input order
    - nearest_expiry is the earliest expiry; ties keep the first seen
    - medicines without a received batch produce no row
    Batches that are not `received`, or whose medicine is missing, are skipped.
    """
    stock_by_medicine: dict[int, MedicineStock] = {}

    for batch in batches:
        if BatchStatus(batch.status) != BatchStatus.RECEIVED:
            continue
        medicine = batch.medicine
        if medicine is None:
            continue

        batch_info = BatchStock(
            batch_number=batch.batch_number,
            quantity=batch.quantity,
            expiry_date=batch.expiry_date,
            manufacturing_date=batch.manufacturing_date,
        )

        existing = stock_by_medicine.get(medicine.id)
        if existing:
            existing.total_quantity += batch.quantity
            existing.batches.append(batch_info)
            if batch.expiry_date < existing.nearest_expiry:
                existing.nearest_expiry = batch.expiry_date
        else:
            stock_by_medicine[medicine.id] = MedicineStock(
                medicine_id=medicine.id,
                medicine_name=medicine.name,
                generic_name=medicine.generic_name,
                strength=medicine.strength,
                dosage_form=medicine.dosage_form,
                total_quantity=batch.quantity,
                batches=[batch_info],
                nearest_expiry=batch.expiry_date,
            )

    stocks = list(stock_by_medicine.values())
    for stock in stocks:
        stock.expiry_status = classify(stock.nearest_expiry, today)
    return stocks


def fetch_received_batches(db: Session, pharmacist_id: int) -> list[Batch]:
    with storage_errors(db, "load inventory"):
        return (
            db.query(Batch)
            .options(joinedload(Batch.medicine))
            .filter(Batch.pharmacist_id == pharmacist_id, Batch.status == BatchStatus.RECEIVED)
            .order_by(Batch.id.asc())
            .all()
        )


def get_pharmacist_inventory(db: Session, actor: Identity, today: Optional[date] = None) -> list[MedicineStock]:
    """Full refetch-and-fold of the calling pharmacist's stock."""
    if not actor.is_pharmacist:
        raise PermissionDenied("Only pharmacists have an inventory")
    stocks = aggregate_received_batches(fetch_received_batches(db, actor.user_id), today)
    logger.debug(f"Inventory for pharmacist {actor.user_id}: {len(stocks)} medicines")
    return stocks


def watch_inventory(
    actor: Identity,
    session_factory: Callable[[], Session],
    on_update: Callable[[list[MedicineStock]], None],
    notifier: ChangeNotifier = inventory_notifier,
    today: Optional[date] = None,
) -> Callable[[], None]:
    """
    Recompute the pharmacist's inventory whenever one of their batches
    changes, and hand the result to on_update. Returns an unsubscribe callable.
    """
    if not actor.is_pharmacist:
        raise PermissionDenied("Only pharmacists have an inventory")

    def handle(change: BatchChange):
        if not change.affects_received_set:
            return
        db = session_factory()
        try:
            on_update(get_pharmacist_inventory(db, actor, today))
        finally:
            db.close()

    return notifier.subscribe(handle, pharmacist_id=actor.user_id)
