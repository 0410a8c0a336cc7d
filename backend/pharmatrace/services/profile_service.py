"""Profiles mirror accounts of the external identity provider."""
from typing import Optional

from sqlalchemy.orm import Session

from pharmatrace.core.identity import Identity
from pharmatrace.db.guard import storage_errors
from pharmatrace.models.profile import Profile
from pharmatrace.schemas.profile import ProfileCreate


def create_profile(db: Session, data: ProfileCreate) -> Profile:
    profile = Profile(
        full_name=data.full_name,
        organization_name=data.organization_name,
        contact_email=str(data.contact_email).lower(),
        phone_number=data.phone_number,
        role=data.role,
    )
    with storage_errors(db, "create profile"):
        db.add(profile)
        db.commit()
    db.refresh(profile)
    return profile


def get_profile(db: Session, profile_id: int) -> Optional[Profile]:
    with storage_errors(db, "load profile"):
        return db.query(Profile).filter(Profile.id == profile_id).first()


def identity_for(profile: Profile) -> Identity:
    return Identity(user_id=profile.id, role=profile.role)
