#!/usr/bin/env python
"""
Seed a demo manufacturer, pharmacist, medicines and batches, and print
bearer tokens for both accounts.

Run from backend/: python seed_demo_data.py
"""
from datetime import date, timedelta

from pharmatrace.core.security import create_access_token
from pharmatrace.db.init_db import init_db
from pharmatrace.db.session import SessionLocal
from pharmatrace.models.batch import BatchStatus
from pharmatrace.models.profile import Profile, UserRole
from pharmatrace.schemas.batch import BatchCreate, BatchStatusUpdate
from pharmatrace.schemas.medicine import MedicineCreate
from pharmatrace.schemas.profile import ProfileCreate
from pharmatrace.services import batch_service, medicine_service
from pharmatrace.services.profile_service import create_profile, identity_for

MANUFACTURER_EMAIL = "ops@demo-pharma.example.com"
PHARMACIST_EMAIL = "desk@demo-pharmacy.example.com"

MEDICINES = [
    {"name": "Paracetamol", "generic_name": "Acetaminophen", "dosage_form": "Tablet", "strength": "500mg", "units": 200, "expires_in": 20},
    {"name": "Amoxil", "generic_name": "Amoxicillin", "dosage_form": "Capsule", "strength": "250mg", "units": 120, "expires_in": 75},
    {"name": "Cetirizine", "generic_name": None, "dosage_form": "Tablet", "strength": "10mg", "units": 300, "expires_in": 400},
]


def _get_or_create(db, email, name, role):
    profile = db.query(Profile).filter(Profile.contact_email == email).first()
    if profile:
        print(f"✓ {role.value} already exists: {email}")
        return profile
    profile = create_profile(
        db, ProfileCreate(full_name=name, organization_name=name, contact_email=email, role=role)
    )
    print(f"✅ Created {role.value}: {email}")
    return profile


def seed():
    init_db()
    db = SessionLocal()
    try:
        manufacturer = _get_or_create(db, MANUFACTURER_EMAIL, "Demo Pharma Ltd", UserRole.MANUFACTURER)
        pharmacist = _get_or_create(db, PHARMACIST_EMAIL, "Demo Pharmacy", UserRole.PHARMACIST)
        maker, chemist = identity_for(manufacturer), identity_for(pharmacist)

        if medicine_service.list_medicines(db, maker):
            print("✓ Medicines already seeded")
        else:
            today = date.today()
            for i, item in enumerate(MEDICINES, start=1):
                medicine = medicine_service.create_medicine(
                    db, maker,
                    MedicineCreate(**{k: item[k] for k in ("name", "generic_name", "dosage_form", "strength")}),
                )
                batch = batch_service.create_batch(
                    db, maker,
                    BatchCreate(
                        medicine_id=medicine.id,
                        batch_number=f"DEMO-{today:%Y%m}-{i:02d}",
                        quantity=item["units"],
                        manufacturing_date=today - timedelta(days=90),
                        expiry_date=today + timedelta(days=item["expires_in"]),
                        current_location="Demo Plant",
                    ),
                )
                batch_service.update_status(
                    db, maker, batch.id, BatchStatusUpdate(status=BatchStatus.DELIVERED)
                )
                # Leave the last batch waiting for a scan
                if i < len(MEDICINES):
                    batch_service.confirm_delivery(db, chemist, batch.qr_code)
                print(f"  {medicine.name}: batch {batch.batch_number} qr={batch.qr_code}")

        print("\nManufacturer token:")
        print(create_access_token(str(manufacturer.id)))
        print("\nPharmacist token:")
        print(create_access_token(str(pharmacist.id)))
    finally:
        db.close()


if __name__ == "__main__":
    seed()
