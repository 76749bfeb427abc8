"""
Identity collaborator: resolves users and their roles.

In production, this would query the auth provider's user table. The
in-memory directory is used by tests and the console demo.
"""

import logging
from typing import Optional, Protocol

from fieldops.schemas.actor_schema import Actor, Role, UserProfile
from fieldops.utils import normalize_phone

logger = logging.getLogger(__name__)


class IdentityDirectory(Protocol):
    def get_user(self, user_id: str) -> Optional[UserProfile]: ...
    def list_admins(self) -> list[UserProfile]: ...


class InMemoryDirectory:
    """Dictionary-backed user directory."""

    def __init__(self) -> None:
        self._users: dict[str, UserProfile] = {}

    def register(
        self,
        user_id: str,
        name: str,
        email: str,
        role: Role = Role.CLIENT,
        language: str = "en",
        phone: Optional[str] = None,
    ) -> UserProfile:
        """Create or replace a user record."""
        user = UserProfile(
            id=user_id,
            name=name,
            email=email,
            role=role,
            language=language,
            phone=normalize_phone(phone) if phone else None,
        )
        self._users[user_id] = user
        logger.debug("User registered: %s (%s)", user_id, role.value)
        return user

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        return self._users.get(user_id)

    def list_admins(self) -> list[UserProfile]:
        return [u for u in self._users.values() if u.role == Role.ADMIN]

    def actor_for(self, user_id: str) -> Actor:
        """Build the request actor for a registered user.

        Raises:
            KeyError: If the user is unknown.
        """
        user = self._users.get(user_id)
        if user is None:
            raise KeyError(f"User '{user_id}' not found")
        return Actor(user_id=user.id, role=user.role, language=user.language)
