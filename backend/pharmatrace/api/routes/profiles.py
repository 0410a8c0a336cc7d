from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pharmatrace.api.deps import get_db, get_current_identity
from pharmatrace.core.exceptions import NotFound
from pharmatrace.core.identity import Identity
from pharmatrace.schemas.profile import ProfileResponse
from pharmatrace.services.profile_service import get_profile

router = APIRouter()


@router.get("/me", response_model=ProfileResponse)
def me(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """Profile behind the current token."""
    profile = get_profile(db, identity.user_id)
    if not profile:
        raise NotFound("Profile")
    return profile
