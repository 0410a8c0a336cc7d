"""
Pytest fixtures: a fresh in-memory database per test, two manufacturers,
two pharmacists, and a TestClient wired to the same database.
"""
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pharmatrace.api.deps import get_db
from pharmatrace.core.security import create_access_token
from pharmatrace.db.init_db import init_db
from pharmatrace.db.session import build_engine
from pharmatrace.main import app
from pharmatrace.models.profile import UserRole
from pharmatrace.schemas.batch import BatchCreate
from pharmatrace.schemas.medicine import MedicineCreate
from pharmatrace.schemas.profile import ProfileCreate
from pharmatrace.services import batch_service, medicine_service
from pharmatrace.services.notifications import ChangeNotifier
from pharmatrace.services.profile_service import create_profile, identity_for

TODAY = date(2026, 1, 15)


@pytest.fixture
def engine():
    # One shared connection so every session sees the same in-memory database
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def _profile(db, name, email, role):
    return create_profile(
        db,
        ProfileCreate(full_name=name, organization_name=f"{name} Org", contact_email=email, role=role),
    )


@pytest.fixture
def manufacturer(db):
    return _profile(db, "Acme Pharma", "ops@acme.example.com", UserRole.MANUFACTURER)


@pytest.fixture
def other_manufacturer(db):
    return _profile(db, "Globex Labs", "ops@globex.example.com", UserRole.MANUFACTURER)


@pytest.fixture
def pharmacist(db):
    return _profile(db, "Corner Pharmacy", "desk@corner.example.com", UserRole.PHARMACIST)


@pytest.fixture
def other_pharmacist(db):
    return _profile(db, "Town Pharmacy", "desk@town.example.com", UserRole.PHARMACIST)


@pytest.fixture
def maker(manufacturer):
    return identity_for(manufacturer)


@pytest.fixture
def chemist(pharmacist):
    return identity_for(pharmacist)


@pytest.fixture
def notifier():
    return ChangeNotifier()


@pytest.fixture
def medicine(db, maker):
    return medicine_service.create_medicine(
        db, maker, MedicineCreate(name="Paracetamol", generic_name="Acetaminophen", dosage_form="Tablet", strength="500mg")
    )


@pytest.fixture
def make_batch(db, maker, medicine):
    """Factory: make_batch(quantity=100, expires_in=10, **overrides)."""
    counter = {"n": 0}

    def _make(quantity=100, expires_in=10, actor=None, medicine_id=None, **overrides):
        counter["n"] += 1
        fields = dict(
            medicine_id=medicine_id or medicine.id,
            batch_number=f"LOT-{counter['n']:03d}",
            quantity=quantity,
            manufacturing_date=TODAY - timedelta(days=60),
            expiry_date=TODAY + timedelta(days=expires_in),
        )
        fields.update(overrides)
        return batch_service.create_batch(db, actor or maker, BatchCreate(**fields))

    return _make


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: lifespan (init_db on the configured database) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_header(profile) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(profile.id))}"}
