"""Lifecycle rules, decided without a database."""
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from pharmatrace.core.exceptions import NotFound, PermissionDenied, TransitionNotAllowed
from pharmatrace.core.identity import Identity
from pharmatrace.models.batch import BatchStatus
from pharmatrace.models.profile import UserRole
from pharmatrace.services.lifecycle import (
    ScanOutcome,
    plan_delivery_confirmation,
    status_label,
    validate_manufacturer_transition,
)

MAKER = Identity(user_id=1, role=UserRole.MANUFACTURER)
OTHER_MAKER = Identity(user_id=2, role=UserRole.MANUFACTURER)
CHEMIST = Identity(user_id=3, role=UserRole.PHARMACIST)


def batch(status=BatchStatus.CREATED, manufacturer_id=1, **extra):
    return SimpleNamespace(id=7, status=status, manufacturer_id=manufacturer_id, **extra)


def test_status_labels():
    assert status_label(BatchStatus.CREATED) == "Created"
    assert status_label(BatchStatus.IN_TRANSIT) == "In Transit"
    assert status_label("delivered") == "Delivered"
    assert BatchStatus.RECEIVED.label == "Received"


@pytest.mark.parametrize(
    "current, requested",
    [
        (BatchStatus.CREATED, BatchStatus.IN_TRANSIT),
        (BatchStatus.IN_TRANSIT, BatchStatus.DELIVERED),
        (BatchStatus.CREATED, BatchStatus.DELIVERED),
    ],
)
def test_forward_moves_are_allowed(current, requested):
    transition = validate_manufacturer_transition(MAKER, batch(current), requested, allow_backward=False)
    assert transition.changed
    assert transition.previous_status == current
    assert transition.status == requested


def test_backward_move_is_rejected():
    with pytest.raises(TransitionNotAllowed):
        validate_manufacturer_transition(
            MAKER, batch(BatchStatus.DELIVERED), BatchStatus.CREATED, allow_backward=False
        )


def test_manufacturer_cannot_mark_received():
    with pytest.raises(TransitionNotAllowed) as exc:
        validate_manufacturer_transition(
            MAKER, batch(BatchStatus.DELIVERED), BatchStatus.RECEIVED, allow_backward=False
        )
    assert "pharmacist" in exc.value.message


def test_permissive_mode_allows_any_value():
    back = validate_manufacturer_transition(
        MAKER, batch(BatchStatus.RECEIVED), BatchStatus.CREATED, allow_backward=True
    )
    assert back.status == BatchStatus.CREATED
    received = validate_manufacturer_transition(
        MAKER, batch(BatchStatus.CREATED), BatchStatus.RECEIVED, allow_backward=True
    )
    assert received.status == BatchStatus.RECEIVED
    # Only the scan binds a pharmacist
    assert "pharmacist_id" not in received.column_values()


def test_same_status_is_a_no_op():
    transition = validate_manufacturer_transition(
        MAKER, batch(BatchStatus.IN_TRANSIT), BatchStatus.IN_TRANSIT, allow_backward=False
    )
    assert not transition.changed


def test_pharmacist_cannot_use_manufacturer_transitions():
    with pytest.raises(PermissionDenied):
        validate_manufacturer_transition(CHEMIST, batch(), BatchStatus.IN_TRANSIT)


def test_other_manufacturers_batch_is_not_found():
    with pytest.raises(NotFound):
        validate_manufacturer_transition(OTHER_MAKER, batch(), BatchStatus.IN_TRANSIT)


def test_location_is_written_only_when_given():
    with_location = validate_manufacturer_transition(
        MAKER, batch(), BatchStatus.IN_TRANSIT, location="Depot 4", notes="Truck 12"
    )
    assert with_location.column_values() == {
        "status": BatchStatus.IN_TRANSIT,
        "current_location": "Depot 4",
    }
    without = validate_manufacturer_transition(MAKER, batch(), BatchStatus.IN_TRANSIT)
    assert without.column_values() == {"status": BatchStatus.IN_TRANSIT}


def test_scan_confirm_binds_pharmacist_timestamp_and_location():
    now = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)
    outcome, transition = plan_delivery_confirmation(CHEMIST, batch(BatchStatus.DELIVERED), now=now)
    assert outcome == ScanOutcome.RECEIVED
    assert transition.column_values() == {
        "status": BatchStatus.RECEIVED,
        "current_location": "Pharmacy Inventory",
        "pharmacist_id": CHEMIST.user_id,
        "delivery_confirmed_at": now,
    }


def test_scan_confirm_works_from_any_earlier_status():
    outcome, transition = plan_delivery_confirmation(CHEMIST, batch(BatchStatus.CREATED))
    assert outcome == ScanOutcome.RECEIVED
    assert transition.previous_status == BatchStatus.CREATED
    assert transition.delivery_confirmed_at is not None


def test_scan_confirm_on_received_batch_is_reported_not_raised():
    outcome, transition = plan_delivery_confirmation(CHEMIST, batch(BatchStatus.RECEIVED))
    assert outcome == ScanOutcome.ALREADY_RECEIVED
    assert transition is None


def test_manufacturer_cannot_scan_confirm():
    with pytest.raises(PermissionDenied):
        plan_delivery_confirmation(MAKER, batch(BatchStatus.DELIVERED))
