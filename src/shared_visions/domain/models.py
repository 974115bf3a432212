"""Domain models for users and their reference photos."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class UserProfile:
    """Represents a row in the profiles table."""

    id: UUID
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None

    @property
    def first_name(self) -> str | None:
        """First whitespace-separated token of the full name."""
        if not self.full_name or not self.full_name.strip():
            return None
        return self.full_name.split()[0]


@dataclass(frozen=True)
class UserPhoto:
    """Reference photo uploaded by a user."""

    id: UUID
    user_id: UUID
    photo_url: str
    is_primary: bool = False
    created_at: datetime | None = None


@dataclass(frozen=True)
class AuthUser:
    """Identity returned by the authentication provider."""

    id: UUID
    email: str | None = None
    full_name: str | None = None
