"""Request/response models outside the HTTP layer."""
from types import SimpleNamespace

import pytest
from pydantic import ValidationError as SchemaError

from pharmatrace.models.profile import UserRole
from pharmatrace.schemas.batch import BatchHistoryEntry
from pharmatrace.schemas.medicine import MedicineResponse
from pharmatrace.schemas.profile import ProfileCreate, ProfileResponse
from seed_demo_data import MANUFACTURER_EMAIL, PHARMACIST_EMAIL


@pytest.mark.parametrize("email", [MANUFACTURER_EMAIL, PHARMACIST_EMAIL, "ops@acme.example.com"])
def test_demo_and_fixture_addresses_are_accepted(email):
    profile = ProfileCreate(full_name="Demo", organization_name="Demo", contact_email=email, role=UserRole.PHARMACIST)
    assert profile.contact_email == email


def test_reserved_domains_are_rejected():
    with pytest.raises(SchemaError):
        ProfileCreate(full_name="Demo", organization_name="Demo", contact_email="ops@acme.test", role=UserRole.MANUFACTURER)


def test_blank_names_are_rejected():
    with pytest.raises(SchemaError):
        ProfileCreate(full_name="  ", organization_name="Demo", contact_email=MANUFACTURER_EMAIL, role=UserRole.MANUFACTURER)


@pytest.mark.parametrize("model", [MedicineResponse, ProfileResponse, BatchHistoryEntry])
def test_responses_read_orm_attributes(model):
    assert model.model_config.get("from_attributes") is True


def test_medicine_response_from_object():
    row = SimpleNamespace(
        id=3, manufacturer_id=1, name="Amoxil", generic_name=None, description=None,
        dosage_form="Capsule", strength="250mg", created_at=None,
    )
    response = MedicineResponse.model_validate(row)
    assert response.name == "Amoxil"
    assert response.strength == "250mg"
