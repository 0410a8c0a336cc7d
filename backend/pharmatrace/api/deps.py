"""FastAPI dependencies: DB session and caller identity from the bearer token.

The identity provider issues the token; we only verify it and resolve its
subject to a stored Profile, whose role is authoritative.
"""
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from pharmatrace.core.audit import AuditLog
from pharmatrace.core.exceptions import BusinessError
from pharmatrace.core.identity import Identity
from pharmatrace.core.security import decode_access_token
from pharmatrace.db.session import SessionLocal
from pharmatrace.services.profile_service import get_profile, identity_for

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Identity:
    if not credentials:
        AuditLog.log_identity_failure("missing bearer token")
        raise BusinessError.unauthorized("Missing bearer token")

    sub = decode_access_token(credentials.credentials)
    if not sub:
        AuditLog.log_identity_failure("invalid or expired token")
        raise BusinessError.unauthorized("Invalid or expired token")

    try:
        profile_id = int(sub)
    except ValueError:
        AuditLog.log_identity_failure("non-numeric subject", subject=sub)
        raise BusinessError.unauthorized("Invalid token subject")

    profile = get_profile(db, profile_id)
    if not profile:
        AuditLog.log_identity_failure("unknown profile", subject=sub)
        raise BusinessError.unauthorized("Profile not found")
    return identity_for(profile)
