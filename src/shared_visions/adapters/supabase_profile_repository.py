"""Supabase-backed profile repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from shared_visions.adapters.supabase_rows import profile_from_row
from shared_visions.domain.models import UserProfile
from shared_visions.services.auth import ProfileRepository
from shared_visions.services.storage import ProfileAvatarRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository, ProfileAvatarRepository):
    """Supabase implementation for the profiles table."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return a profile by user id, if present."""
        response = (
            self.client.table("profiles")
            .select("*")
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return profile_from_row(response.data[0])

    def create_profile(self, profile: UserProfile) -> UserProfile:
        """Insert a profile row and return it."""
        response = (
            self.client.table("profiles")
            .insert(
                {
                    "id": str(profile.id),
                    "username": profile.username,
                    "full_name": profile.full_name,
                    "avatar_url": profile.avatar_url,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create profile")
        return profile_from_row(response.data[0])

    def upsert_profile(self, profile: UserProfile) -> None:
        """Insert or update a profile, keeping columns that are not provided."""
        payload: dict[str, object] = {"id": str(profile.id)}
        if profile.full_name is not None:
            payload["full_name"] = profile.full_name
        if profile.username is not None:
            payload["username"] = profile.username
        self.client.table("profiles").upsert(payload).execute()

    def update_profile(self, user_id: UUID, updates: dict[str, object]) -> None:
        """Update profile columns."""
        self.client.table("profiles").update(updates).eq("id", str(user_id)).execute()

    def set_avatar_url(self, user_id: UUID, avatar_url: str) -> None:
        """Store the avatar URL on the profile."""
        self.update_profile(user_id, {"avatar_url": avatar_url})
