"""
Audit logging for batch custody events.

Every status change, delivery confirmation and denied attempt is written
as one JSON line to the "audit" logger, so the custody chain of a batch
can be reconstructed from logs independently of the history table.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Any, Optional, Dict

from pharmatrace.core.identity import Identity

# Separate logger for audit events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for custody events."""

    @staticmethod
    def log_action(
        action: str,  # "create", "transition", "confirm"
        resource_type: str,  # "medicine", "batch"
        resource_id: int,
        actor: Identity,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log a state-changing action.

        Usage:
            AuditLog.log_action("create", "medicine", 12, identity)
            AuditLog.log_action("create", "batch", 7, identity, changes={"qr_code": "PHARM-..."})
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"{resource_type}.{action}",
            "user_id": actor.user_id,
            "role": actor.role.value,
            "resource_id": resource_id,
        }

        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_transition(
        batch_id: int,
        actor: Identity,
        previous_status: str,
        status: str,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ):
        """
        Log an applied batch status transition.

        Usage:
            AuditLog.log_transition(7, identity, "created", "in_transit", location="Depot 4")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": "batch.transition",
            "user_id": actor.user_id,
            "role": actor.role.value,
            "batch_id": batch_id,
            "from": previous_status,
            "to": status,
        }
        if location:
            log_entry["location"] = location
        if notes:
            log_entry["notes"] = notes

        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_scan(
        qr_code: str,
        actor: Identity,
        outcome: str,  # "received", "already_received", "not_found"
        batch_id: Optional[int] = None,
    ):
        """
        Log a scan-confirm attempt, whatever its outcome.

        Usage:
            AuditLog.log_scan("PHARM-...", identity, "already_received", batch_id=7)
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"scan.{outcome}",
            "user_id": actor.user_id,
            "qr_code": qr_code,
        }
        if batch_id is not None:
            log_entry["batch_id"] = batch_id

        if outcome == "not_found":
            audit_logger.warning(json.dumps(log_entry))
        else:
            audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_access_denied(
        action: str,  # "transition", "confirm", "read"
        resource_type: str,
        resource_id: Optional[int],
        user_id: int,
        reason: str,
    ):
        """
        Log denied attempts (wrong role, someone else's batch, backward move).

        Usage:
            AuditLog.log_access_denied("transition", "batch", 7, 3, "Not batch manufacturer")
        """
        log_entry = {
            "timestamp": _now(),
            "event_severity": "WARNING",
            "event_type": "access_denied",
            "action": action,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "user_id": user_id,
            "reason": reason,
        }

        audit_logger.warning(json.dumps(log_entry))

    @staticmethod
    def log_identity_failure(reason: str, subject: Optional[str] = None):
        """Log a bearer token that could not be resolved to a profile."""
        log_entry = {
            "timestamp": _now(),
            "event_type": "identity.rejected",
            "reason": reason,
        }
        if subject:
            log_entry["subject"] = subject

        audit_logger.warning(json.dumps(log_entry))
