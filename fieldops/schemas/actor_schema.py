"""User profiles and the per-request actor context."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Role(str, Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"
    CLIENT = "client"


class UserProfile(BaseModel):
    """User record from the identity collaborator."""
    id: str
    name: str
    email: str
    role: Role = Role.CLIENT
    language: str = "en"
    phone: Optional[str] = None


@dataclass(frozen=True)
class Actor:
    """
    The caller of a lifecycle operation.

    Passed explicitly into every handler instead of being read from
    ambient session state, so each request carries its own identity.
    """
    user_id: str
    role: Role
    language: str = "en"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
