"""Caller identity. Passed explicitly into every service operation."""
from dataclasses import dataclass

from pharmatrace.models.profile import UserRole


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: UserRole

    @property
    def is_manufacturer(self) -> bool:
        return self.role == UserRole.MANUFACTURER

    @property
    def is_pharmacist(self) -> bool:
        return self.role == UserRole.PHARMACIST
