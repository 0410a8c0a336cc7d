"""Medicine catalogue of a manufacturer."""
import logging

from sqlalchemy.orm import Session

from pharmatrace.core.audit import AuditLog
from pharmatrace.core.exceptions import PermissionDenied, ValidationError
from pharmatrace.core.identity import Identity
from pharmatrace.db.guard import storage_errors
from pharmatrace.models.medicine import Medicine
from pharmatrace.schemas.medicine import MedicineCreate

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "dosage_form", "strength")


def require_manufacturer(actor: Identity, action: str):
    if not actor.is_manufacturer:
        AuditLog.log_access_denied(action, "medicine", None, actor.user_id, f"Role {actor.role.value}")
        raise PermissionDenied(f"Only manufacturers can {action}")


def create_medicine(db: Session, actor: Identity, data: MedicineCreate) -> Medicine:
    require_manufacturer(actor, "create medicines")
    for field in REQUIRED_FIELDS:
        if not (getattr(data, field) or "").strip():
            raise ValidationError(field, f"{field.replace('_', ' ').capitalize()} is required")

    medicine = Medicine(
        manufacturer_id=actor.user_id,
        name=data.name.strip(),
        generic_name=data.generic_name,
        description=data.description,
        dosage_form=data.dosage_form.strip(),
        strength=data.strength.strip(),
    )
    with storage_errors(db, "create medicine"):
        db.add(medicine)
        db.commit()
    db.refresh(medicine)

    logger.info(f"Medicine {medicine.id} '{medicine.name}' created by manufacturer {actor.user_id}")
    AuditLog.log_action("create", "medicine", medicine.id, actor, changes={"name": medicine.name})
    return medicine


def list_medicines(db: Session, actor: Identity) -> list[Medicine]:
    """A manufacturer's medicines, newest first."""
    require_manufacturer(actor, "list medicines")
    with storage_errors(db, "list medicines"):
        return (
            db.query(Medicine)
            .filter(Medicine.manufacturer_id == actor.user_id)
            .order_by(Medicine.created_at.desc(), Medicine.id.desc())
            .all()
        )
